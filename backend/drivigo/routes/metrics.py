"""
Prometheus metrics endpoint.

Public by convention for scrapers; exposes the service and HTTP metrics
collected on the application registry.
"""

from fastapi import APIRouter, Response
from prometheus_client import Counter

from ..monitoring.prometheus_metrics import REGISTRY, prometheus_metrics

router = APIRouter(tags=["monitoring"])

_scrape_counter = Counter(
    "drivigo_prometheus_scrapes_total",
    "Total number of Prometheus metrics scrapes",
    registry=REGISTRY,
)


@router.get("/internal/metrics", include_in_schema=False)
def get_metrics() -> Response:
    _scrape_counter.inc()
    return Response(
        content=prometheus_metrics.get_metrics(), media_type=prometheus_metrics.content_type
    )
