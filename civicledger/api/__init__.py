"""
API layer - FastAPI routes and HTTP concerns for CivicLedger.

This layer contains:
- FastAPI route definitions
- Request/Response DTOs
- HTTP middleware
- Actor header authentication

IMPORT RULES:
- CAN import from: application, domain, bootstrap
- CANNOT import adapters directly; services come from bootstrap
"""

__all__: list[str] = []
