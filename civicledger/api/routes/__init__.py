"""
API routes for CivicLedger.

Available routers:
- complaints: Public complaint reporting, listing, voting, integrity
- admin: Verification, status changes, resolution, deletion, audits
- health: Health check endpoint
- metrics: Prometheus scrape endpoint
"""

from civicledger.api.routes.admin import router as admin_router
from civicledger.api.routes.complaints import router as complaints_router
from civicledger.api.routes.health import router as health_router
from civicledger.api.routes.metrics import router as metrics_router

__all__: list[str] = [
    "admin_router",
    "complaints_router",
    "health_router",
    "metrics_router",
]
