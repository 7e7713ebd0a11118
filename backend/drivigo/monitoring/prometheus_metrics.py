"""
Prometheus metrics for Drivigo.

Service timings are fed by ``@BaseService.measure_operation``; HTTP timings by
the request middleware.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Dedicated registry so repeated app imports in tests do not collide
REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "drivigo_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

service_operation_duration_seconds = Histogram(
    "drivigo_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "drivigo_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "drivigo_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

notification_deliveries_total = Counter(
    "drivigo_notification_deliveries_total",
    "Notification delivery attempts by channel and outcome",
    ["channel", "outcome"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade over the module-level collectors."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_http_request(method: str, status_code: int, duration: float) -> None:
        http_request_duration_seconds.labels(method=method, status_code=str(status_code)).observe(
            duration
        )

    @staticmethod
    def record_notification_delivery(channel: str, success: bool) -> None:
        notification_deliveries_total.labels(
            channel=channel, outcome="sent" if success else "failed"
        ).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    content_type = CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
