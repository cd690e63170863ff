"""Test helpers shared across unit and integration tests.

Usage:
    from tests.helpers import create_complaint, sample_value
"""

from tests.helpers.api import ADMIN_HEADERS, CITIZEN_HEADERS, complaint_payload
from tests.helpers.complaints import build_complaint, complaint_fields, create_complaint
from tests.helpers.metrics import sample_value

__all__ = [
    "ADMIN_HEADERS",
    "CITIZEN_HEADERS",
    "build_complaint",
    "complaint_fields",
    "complaint_payload",
    "create_complaint",
    "sample_value",
]
