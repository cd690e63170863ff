"""Prometheus metrics.

Operational metrics only: HTTP traffic, ledger call latency and outcome,
and the result of the latest reconciliation audit.

Every metric carries service and environment labels.
"""

import os
import threading
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_collector_lock = threading.Lock()

# 10ms to 10s for HTTP
DEFAULT_HISTOGRAM_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

# Ledger confirmations take seconds to minutes
LEDGER_HISTOGRAM_BUCKETS = (0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0)


class MetricsCollector:
    """Collects operational Prometheus metrics.

    Attributes:
        http_request_duration_seconds: Request latency histogram.
        http_requests_total: All HTTP requests.
        http_requests_failed_total: 4xx and 5xx responses.
        ledger_operation_duration_seconds: Ledger call latency per operation.
        ledger_operations_total: Ledger calls per operation and outcome.
        reconciliation_anomalies: Anomalies found by the latest audit.
        reconciliation_runs_total: Audit runs per outcome.
        persistence_gaps_total: Ledger writes whose off-chain write failed.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for test isolation.
        """
        self._registry = registry or CollectorRegistry()
        self.startup_times: dict[str, float] = {}

        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "civicledger-api")

        self.uptime_seconds = Gauge(
            name="uptime_seconds",
            documentation="Seconds since service start",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.http_request_duration_seconds = Histogram(
            name="http_request_duration_seconds",
            documentation="HTTP request duration in seconds",
            labelnames=["service", "environment", "method", "endpoint"],
            buckets=DEFAULT_HISTOGRAM_BUCKETS,
            registry=self._registry,
        )

        self.http_requests_total = Counter(
            name="http_requests_total",
            documentation="Total HTTP requests",
            labelnames=["service", "environment", "method", "endpoint", "status"],
            registry=self._registry,
        )

        self.http_requests_failed_total = Counter(
            name="http_requests_failed_total",
            documentation="Total failed HTTP requests (4xx, 5xx)",
            labelnames=[
                "service",
                "environment",
                "method",
                "endpoint",
                "status",
                "error_type",
            ],
            registry=self._registry,
        )

        self.ledger_operation_duration_seconds = Histogram(
            name="ledger_operation_duration_seconds",
            documentation="Ledger gateway call duration in seconds",
            labelnames=["service", "environment", "operation"],
            buckets=LEDGER_HISTOGRAM_BUCKETS,
            registry=self._registry,
        )

        self.ledger_operations_total = Counter(
            name="ledger_operations_total",
            documentation="Ledger gateway calls by outcome",
            labelnames=["service", "environment", "operation", "outcome"],
            registry=self._registry,
        )

        self.reconciliation_anomalies = Gauge(
            name="reconciliation_anomalies",
            documentation="Anomalies found by the latest reconciliation audit",
            labelnames=["service", "environment", "kind"],
            registry=self._registry,
        )

        self.reconciliation_runs_total = Counter(
            name="reconciliation_runs_total",
            documentation="Reconciliation audit runs by outcome",
            labelnames=["service", "environment", "outcome"],
            registry=self._registry,
        )

        self.persistence_gaps_total = Counter(
            name="persistence_gaps_total",
            documentation="Confirmed ledger writes whose off-chain write failed",
            labelnames=["service", "environment", "operation"],
            registry=self._registry,
        )

    def observe_request_duration(
        self, method: str, endpoint: str, duration: float
    ) -> None:
        self.http_request_duration_seconds.labels(
            service=self._service_name,
            environment=self._environment,
            method=method,
            endpoint=endpoint,
        ).observe(duration)

    def increment_requests(self, method: str, endpoint: str, status: str) -> None:
        self.http_requests_total.labels(
            service=self._service_name,
            environment=self._environment,
            method=method,
            endpoint=endpoint,
            status=status,
        ).inc()

    def increment_failed_requests(
        self, method: str, endpoint: str, status: str, error_type: str = "http_error"
    ) -> None:
        """Count a failed request.

        Args:
            method: HTTP method.
            endpoint: Request path.
            status: Status code as string.
            error_type: client_error, server_error, ledger_unavailable, ...
        """
        self.http_requests_failed_total.labels(
            service=self._service_name,
            environment=self._environment,
            method=method,
            endpoint=endpoint,
            status=status,
            error_type=error_type,
        ).inc()

    def observe_ledger_operation(
        self, operation: str, outcome: str, duration: float
    ) -> None:
        """Record one ledger gateway call.

        Args:
            operation: Gateway operation (submit_registration, exists, ...).
            outcome: success, timeout or failure.
            duration: Wall time in seconds.
        """
        self.ledger_operation_duration_seconds.labels(
            service=self._service_name,
            environment=self._environment,
            operation=operation,
        ).observe(duration)
        self.ledger_operations_total.labels(
            service=self._service_name,
            environment=self._environment,
            operation=operation,
            outcome=outcome,
        ).inc()

    def set_reconciliation_anomalies(self, counts: dict[str, int]) -> None:
        """Publish per-kind anomaly counts from the latest audit."""
        for kind, count in counts.items():
            self.reconciliation_anomalies.labels(
                service=self._service_name,
                environment=self._environment,
                kind=kind,
            ).set(count)

    def increment_reconciliation_runs(self, outcome: str) -> None:
        self.reconciliation_runs_total.labels(
            service=self._service_name,
            environment=self._environment,
            outcome=outcome,
        ).inc()

    def increment_persistence_gaps(self, operation: str) -> None:
        self.persistence_gaps_total.labels(
            service=self._service_name,
            environment=self._environment,
            operation=operation,
        ).inc()

    def record_startup(self, service: str) -> None:
        self.startup_times[service] = time.time()

    def update_uptime_gauges(self) -> None:
        now = time.time()
        for service, started in self.startup_times.items():
            self.uptime_seconds.labels(
                service=service, environment=self._environment
            ).set(now - started)

    def get_registry(self) -> CollectorRegistry:
        return self._registry


_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the process-wide collector, creating it on first use."""
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def generate_metrics() -> bytes:
    """Render all metrics in Prometheus exposition format."""
    collector = get_metrics_collector()
    collector.update_uptime_gauges()
    return generate_latest(collector.get_registry())


def reset_metrics_collector() -> None:
    """Drop the singleton collector (tests only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
