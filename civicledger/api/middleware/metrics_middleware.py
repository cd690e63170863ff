"""Metrics middleware for request instrumentation.

Records request latency and error counts to Prometheus. Complaint and
admin paths carry the complaint id, so the endpoint label uses the route
template rather than the raw path to keep label cardinality bounded.
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from civicledger.infrastructure.monitoring.metrics import get_metrics_collector


def _classify_error_type(status_code: int) -> str:
    """Classify an HTTP error status code into an error type label."""
    if 400 <= status_code < 500:
        if status_code == 400:
            return "bad_request"
        elif status_code == 401:
            return "unauthorized"
        elif status_code == 403:
            return "forbidden"
        elif status_code == 404:
            return "not_found"
        elif status_code == 409:
            return "conflict"
        elif status_code == 422:
            return "unprocessable"
        else:
            return "client_error"
    elif status_code >= 500:
        if status_code == 500:
            return "internal_error"
        elif status_code == 503:
            return "service_unavailable"
        elif status_code == 504:
            return "gateway_timeout"
        else:
            return "server_error"
    return "unknown"


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    path_format = getattr(route, "path_format", None)
    return path_format or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records duration, totals and failures per method/endpoint/status."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        method = request.method
        endpoint = _endpoint_label(request)
        status = str(response.status_code)
        collector = get_metrics_collector()

        collector.observe_request_duration(method=method, endpoint=endpoint, duration=duration)
        collector.increment_requests(method=method, endpoint=endpoint, status=status)
        if response.status_code >= 400:
            collector.increment_failed_requests(
                method=method,
                endpoint=endpoint,
                status=status,
                error_type=_classify_error_type(response.status_code),
            )
        return response
