"""Metrics endpoint for Prometheus scraping.

Exposes HTTP request metrics, ledger operation latency and outcomes,
reconciliation anomaly gauges and persistence-gap counts.
"""

from fastapi import APIRouter, Response

from civicledger.infrastructure.monitoring.metrics import (
    METRICS_CONTENT_TYPE,
    generate_metrics,
)

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns operational metrics in Prometheus exposition format for scraping.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    return Response(content=generate_metrics(), media_type=METRICS_CONTENT_TYPE)
