"""API middleware components."""

from civicledger.api.middleware.logging_middleware import LoggingMiddleware
from civicledger.api.middleware.metrics_middleware import MetricsMiddleware

__all__: list[str] = [
    "LoggingMiddleware",
    "MetricsMiddleware",
]
