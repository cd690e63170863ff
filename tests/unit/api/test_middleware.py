"""Tests for the logging and metrics middleware."""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from civicledger.api.middleware.logging_middleware import (
    CORRELATION_HEADER,
    LoggingMiddleware,
)
from civicledger.api.middleware.metrics_middleware import (
    MetricsMiddleware,
    _classify_error_type,
)
from civicledger.infrastructure.monitoring.metrics import (
    get_metrics_collector,
    reset_metrics_collector,
)
from tests.helpers import sample_value


@pytest.fixture(autouse=True)
def reset_collector() -> None:
    """Reset metrics collector before each test."""
    reset_metrics_collector()


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)

    @app.get("/items/{item_id}")
    async def get_item(item_id: str) -> dict[str, str]:
        if item_id == "missing":
            raise HTTPException(status_code=404, detail="Not found")
        if item_id == "down":
            raise HTTPException(status_code=503, detail="Ledger unavailable")
        return {"id": item_id}

    return app


class TestLoggingMiddleware:
    def test_correlation_id_echoed(self) -> None:
        client = TestClient(_app())

        response = client.get("/items/a", headers={CORRELATION_HEADER: "req-42"})

        assert response.headers[CORRELATION_HEADER] == "req-42"

    def test_correlation_id_generated(self) -> None:
        client = TestClient(_app())

        first = client.get("/items/a").headers[CORRELATION_HEADER]
        second = client.get("/items/a").headers[CORRELATION_HEADER]

        assert first and second and first != second


class TestMetricsMiddleware:
    def test_counts_by_route_template(self) -> None:
        client = TestClient(_app())

        client.get("/items/a")
        client.get("/items/b")

        registry = get_metrics_collector().get_registry()
        assert (
            sample_value(
                registry, "http_requests_total", endpoint="/items/{item_id}", status="200"
            )
            == 2
        )

    def test_failures_classified(self) -> None:
        client = TestClient(_app())

        client.get("/items/missing")
        client.get("/items/down")

        registry = get_metrics_collector().get_registry()
        assert sample_value(registry, "http_requests_failed_total", error_type="not_found") == 1
        assert (
            sample_value(
                registry, "http_requests_failed_total", error_type="service_unavailable"
            )
            == 1
        )


class TestClassifyErrorType:
    @pytest.mark.parametrize(
        "status, expected",
        [
            (400, "bad_request"),
            (401, "unauthorized"),
            (403, "forbidden"),
            (404, "not_found"),
            (409, "conflict"),
            (429, "client_error"),
            (500, "internal_error"),
            (503, "service_unavailable"),
            (502, "server_error"),
            (302, "unknown"),
        ],
    )
    def test_classification(self, status: int, expected: str) -> None:
        assert _classify_error_type(status) == expected
