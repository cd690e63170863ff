"""Ledger connection configuration.

Environment Variables:
- LEDGER_MODE: "web3" for a real chain, "stub" for the in-memory ledger
  (default: web3)
- LEDGER_RPC_URL: JSON-RPC endpoint of the network
- LEDGER_CONTRACT_ADDRESS: Deployed complaint registry contract
- LEDGER_SIGNER_KEY: Hex private key of the transaction signer
- LEDGER_CONFIRMATION_TIMEOUT_SECONDS: Deadline for send + confirm (default: 120)
- LEDGER_READ_TIMEOUT_SECONDS: Deadline for read-only calls (default: 15)

Numeric values are checked in __post_init__. Endpoint, address and key are
checked by validate(), which the ledger gateway runs as the first step of
its startup connection check so a bad value fails startup with a
LedgerConfigurationError rather than at import time.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

from civicledger.domain.errors.ledger import LedgerConfigurationError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

LEDGER_MODE_WEB3 = "web3"
LEDGER_MODE_STUB = "stub"
LEDGER_MODES: frozenset[str] = frozenset({LEDGER_MODE_WEB3, LEDGER_MODE_STUB})

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _is_placeholder_key(key_hex: str) -> bool:
    # Keys like 0x000...001 are sample values, not real signers
    return key_hex.replace("0", "") in ("", "1")


@dataclass(frozen=True)
class LedgerConfig:
    """Configuration for reaching the complaint registry contract.

    Attributes:
        rpc_url: JSON-RPC endpoint.
        contract_address: Contract address (0x-prefixed, 20 bytes).
        signer_key: Hex private key (never logged or shown in repr).
        confirmation_timeout_seconds: Deadline for mutating calls.
        read_timeout_seconds: Deadline for read-only calls.
        mode: "web3" or "stub".
    """

    rpc_url: str = ""
    contract_address: str = ""
    signer_key: str = field(default="", repr=False)
    confirmation_timeout_seconds: float = 120.0
    read_timeout_seconds: float = 15.0
    mode: str = LEDGER_MODE_WEB3

    def __post_init__(self) -> None:
        """Validate numeric settings and mode."""
        if self.confirmation_timeout_seconds <= 0:
            raise ValueError(
                "confirmation_timeout_seconds must be positive, got "
                f"{self.confirmation_timeout_seconds}"
            )
        if self.read_timeout_seconds <= 0:
            raise ValueError(
                f"read_timeout_seconds must be positive, got {self.read_timeout_seconds}"
            )
        if self.mode not in LEDGER_MODES:
            raise ValueError(f"mode must be one of {sorted(LEDGER_MODES)}, got {self.mode!r}")

    @property
    def is_stub(self) -> bool:
        return self.mode == LEDGER_MODE_STUB

    def validate(self) -> None:
        """Check that endpoint, contract address and signer key are usable.

        The in-memory ledger needs none of them, so stub mode always passes.

        Raises:
            LedgerConfigurationError: With check="config" on any problem.
        """
        if self.is_stub:
            return

        missing = [
            name
            for name, value in (
                ("LEDGER_RPC_URL", self.rpc_url),
                ("LEDGER_CONTRACT_ADDRESS", self.contract_address),
                ("LEDGER_SIGNER_KEY", self.signer_key),
            )
            if not value.strip()
        ]
        if missing:
            raise LedgerConfigurationError("config", f"missing {', '.join(missing)}")

        if not self.rpc_url.startswith(("http://", "https://")):
            raise LedgerConfigurationError(
                "config", "LEDGER_RPC_URL must be an http(s) URL"
            )

        if self.contract_address.lower() == ZERO_ADDRESS:
            raise LedgerConfigurationError(
                "config", "LEDGER_CONTRACT_ADDRESS is the zero address; deploy the contract first"
            )
        if not _ADDRESS_RE.match(self.contract_address):
            raise LedgerConfigurationError(
                "config", "LEDGER_CONTRACT_ADDRESS is not a 20-byte hex address"
            )

        key_hex = self.signer_key.removeprefix("0x")
        if len(key_hex) != 64 or not _HEX_RE.match(key_hex):
            raise LedgerConfigurationError(
                "config", "LEDGER_SIGNER_KEY must be 32 bytes of hex"
            )
        if _is_placeholder_key(key_hex):
            raise LedgerConfigurationError(
                "config", "LEDGER_SIGNER_KEY is a placeholder, not a funded signer"
            )

    @classmethod
    def from_environment(cls) -> LedgerConfig:
        """Create config from environment variables with defaults."""
        return cls(
            rpc_url=os.environ.get("LEDGER_RPC_URL", ""),
            contract_address=os.environ.get("LEDGER_CONTRACT_ADDRESS", ""),
            signer_key=os.environ.get("LEDGER_SIGNER_KEY", ""),
            confirmation_timeout_seconds=_get_float_env(
                "LEDGER_CONFIRMATION_TIMEOUT_SECONDS", 120.0
            ),
            read_timeout_seconds=_get_float_env("LEDGER_READ_TIMEOUT_SECONDS", 15.0),
            mode=os.environ.get("LEDGER_MODE", LEDGER_MODE_WEB3).strip().lower(),
        )


# In-memory ledger with short deadlines for unit tests
TEST_LEDGER_CONFIG = LedgerConfig(
    confirmation_timeout_seconds=1.0,
    read_timeout_seconds=1.0,
    mode=LEDGER_MODE_STUB,
)
