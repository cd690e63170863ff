"""BLAKE3 hashing of canonical JSON payloads.

Payloads registered on the ledger are hashed from their canonical JSON
form: keys sorted at every level, compact separators, UTF-8. Two payloads
with the same content therefore hash equally regardless of the order in
which their keys were inserted.

Usage:
    service = Blake3ContentHashService()
    digest = service.hash_payload({"title": "Pothole", "category": "pothole"})
"""

from __future__ import annotations

import hmac
import json
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

import blake3

from civicledger.application.services.base import LoggingMixin


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not canonicalizable")


class Blake3ContentHashService(LoggingMixin):
    """Canonical JSON + BLAKE3 implementation of ContentHashServiceProtocol.

    Attributes:
        HASH_SIZE: Digest size in bytes (32); hex digests are 64 characters.
    """

    HASH_SIZE: int = 32

    def __init__(self) -> None:
        self._init_logger(component="ledger")

    def canonicalize(self, payload: Mapping[str, Any]) -> bytes:
        """Render payload as canonical UTF-8 JSON.

        Raises:
            TypeError: If the payload holds a value with no canonical form.
        """
        return json.dumps(
            payload,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=_json_default,
        ).encode("utf-8")

    def hash_payload(self, payload: Mapping[str, Any]) -> str:
        return blake3.blake3(self.canonicalize(payload)).hexdigest()

    def verify_payload(self, payload: Mapping[str, Any], expected_hash: str) -> bool:
        """Constant-time comparison of the payload hash with expected_hash.

        Raises:
            ValueError: If expected_hash is not a 64-character hex digest.
        """
        if len(expected_hash) != self.HASH_SIZE * 2:
            raise ValueError(
                f"Expected hash must be {self.HASH_SIZE * 2} hex characters, "
                f"got {len(expected_hash)}"
            )
        return hmac.compare_digest(self.hash_payload(payload), expected_hash.lower())
