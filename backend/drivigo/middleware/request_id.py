"""
Pure ASGI request-id and timing middleware.

Takes ``X-Request-ID`` from the client or generates a ULID, exposes it to
log records through a context variable and echoes it on the response.
Request duration is recorded in the HTTP Prometheus histogram.
"""

import logging
import time

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.request_context import reset_request_id, set_request_id
from ..core.ulid_helper import generate_ulid
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestIdMiddlewareASGI:
    """
    Pure ASGI middleware; avoids BaseHTTPMiddleware so WebSockets and
    streaming responses pass through untouched.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or generate_ulid()
        token = set_request_id(request_id)
        path = scope.get("path", "")
        method = scope.get("method", "")
        start_time = time.perf_counter()
        status_holder = {"code": 500}

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status_holder["code"] = message["status"]
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            if path != "/internal/metrics":
                prometheus_metrics.record_http_request(method, status_holder["code"], duration)
            if duration * 1000 > SLOW_REQUEST_MS:
                logger.warning(
                    "Slow request: %s %s took %.2fms", method, path, duration * 1000
                )
            reset_request_id(token)
