"""Content hash service port.

Developer Golden Rules:
1. DETERMINISM - Equal payloads hash equally regardless of key order
2. 64 HEX CHARS - Digests are 32-byte BLAKE3 values rendered as hex
3. UTF-8 - Canonical JSON is encoded as UTF-8 before hashing
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class ContentHashServiceProtocol(Protocol):
    """Protocol for hashing complaint payloads before they go on the ledger.

    Methods:
        canonicalize: Render a payload as canonical JSON bytes
        hash_payload: Hash a payload to a hex digest
        verify_payload: Check a payload against an expected digest
    """

    def canonicalize(self, payload: Mapping[str, Any]) -> bytes:
        """Render a payload as canonical JSON.

        Keys are sorted at every level, separators are compact, datetimes
        are ISO-8601, UUIDs are strings and enums are their values.

        Args:
            payload: Mapping to serialize.

        Returns:
            UTF-8 encoded canonical JSON.
        """
        ...

    def hash_payload(self, payload: Mapping[str, Any]) -> str:
        """Hash a payload to a 64-character hex digest.

        Args:
            payload: Mapping to hash.

        Returns:
            Lowercase hex BLAKE3 digest.
        """
        ...

    def verify_payload(self, payload: Mapping[str, Any], expected_hash: str) -> bool:
        """Check that a payload hashes to expected_hash."""
        ...
