"""Ledger gateway service.

The only component that talks to the complaint registry contract. Every
other service reaches the ledger through this gateway, which owns the
deadlines, the startup gate, error translation, logging and metrics.

Developer Golden Rules:
1. VERIFY FIRST - Ledger I/O before verify_connection() raises
   LedgerConnectionNotVerifiedError
2. ONE DEADLINE - Send and confirmation share a single timeout
3. TIMEOUT IS FAILURE - Even if the transaction may still be mined later
4. NO RETRY - Failures surface as LedgerUnavailableError to the caller
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar
from uuid import UUID

from civicledger.application.ports.content_hash_service import (
    ContentHashServiceProtocol,
)
from civicledger.application.ports.ledger_contract import LedgerContractProtocol
from civicledger.application.services.base import LoggingMixin
from civicledger.application.services.content_hash_service import (
    Blake3ContentHashService,
)
from civicledger.config.ledger_config import LedgerConfig
from civicledger.domain.errors.ledger import (
    LedgerConfigurationError,
    LedgerConnectionNotVerifiedError,
    LedgerTransactionError,
    LedgerUnavailableError,
)
from civicledger.domain.models.complaint import ComplaintStatus
from civicledger.domain.models.ledger import LedgerConnectionReport, LedgerReceipt
from civicledger.infrastructure.monitoring.metrics import (
    MetricsCollector,
    get_metrics_collector,
)

T = TypeVar("T")

# Transport failures that do not come wrapped by the contract adapter
_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (LedgerTransactionError, OSError)


def _deadline(timeout_seconds: float | None, default: float) -> float:
    if timeout_seconds is None:
        return default
    if timeout_seconds <= 0:
        raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
    return timeout_seconds


class LedgerGatewayService(LoggingMixin):
    """Bounded, logged access to the complaint registry contract.

    Constructed once at bootstrap and injected into the services that need
    it.

    Attributes:
        is_connected: True once verify_connection() succeeded.
    """

    def __init__(
        self,
        contract: LedgerContractProtocol,
        config: LedgerConfig,
        hash_service: ContentHashServiceProtocol | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            contract: Contract adapter (web3 or in-memory stub).
            config: Ledger configuration with deadlines.
            hash_service: Payload hasher (default: canonical JSON + BLAKE3).
            metrics: Metrics collector (default: process-wide collector).
        """
        self._contract = contract
        self._config = config
        self._hash_service = hash_service or Blake3ContentHashService()
        self._metrics = metrics or get_metrics_collector()
        self._connected = False
        self._init_logger(component="ledger")

    @property
    def is_connected(self) -> bool:
        return self._connected

    def compute_content_hash(self, payload: Mapping[str, Any]) -> str:
        """Hash a payload from its canonical JSON form.

        Pure computation, available before the connection is verified.
        """
        return self._hash_service.hash_payload(payload)

    async def verify_connection(self) -> LedgerConnectionReport:
        """Run the startup gate.

        Checks, in order: configuration, network reachability, contract
        responsiveness and a positive signer balance.

        Returns:
            Connection report describing the verified ledger.

        Raises:
            LedgerConfigurationError: On the first failing check.
        """
        log = self._log_operation("verify_connection", mode=self._config.mode)
        log.info("ledger_connection_check_started")

        try:
            self._config.validate()
            chain_id = await self._startup_step("network", self._contract.get_chain_id)
            total = await self._startup_step(
                "contract", self._contract.get_total_complaints
            )
            signer = await self._startup_step("signer", self._contract.get_signer_address)
            balance = await self._startup_step("balance", self._contract.get_signer_balance)
            if balance <= 0:
                raise LedgerConfigurationError(
                    "balance", f"signer {signer} has zero balance; transactions would fail"
                )
        except LedgerConfigurationError as e:
            log.error("ledger_connection_check_failed", check=e.check, reason=e.reason)
            raise

        report = LedgerConnectionReport(
            chain_id=chain_id,
            total_complaints=total,
            signer_address=signer,
            signer_balance_wei=balance,
        )
        self._connected = True
        log.info("ledger_connection_verified", **report.to_dict())
        return report

    async def submit_registration(
        self,
        complaint_id: UUID,
        content_hash: str,
        timeout_seconds: float | None = None,
    ) -> LedgerReceipt:
        """Register a complaint and wait for its confirmation."""
        key = str(complaint_id)
        return await self._submit(
            "submit_registration",
            key,
            lambda: self._contract.send_register_complaint(key, content_hash),
            timeout_seconds,
        )

    async def submit_status_transition(
        self,
        complaint_id: UUID,
        status: ComplaintStatus,
        timeout_seconds: float | None = None,
    ) -> LedgerReceipt:
        """Record a status change (sent as its ledger code)."""
        key = str(complaint_id)
        return await self._submit(
            "submit_status_transition",
            key,
            lambda: self._contract.send_update_complaint_status(key, status.ledger_code),
            timeout_seconds,
            status=status.value,
        )

    async def submit_resolution(
        self,
        complaint_id: UUID,
        resolution_hash: str,
        timeout_seconds: float | None = None,
    ) -> LedgerReceipt:
        """Record a resolution hash and wait for confirmation."""
        key = str(complaint_id)
        return await self._submit(
            "submit_resolution",
            key,
            lambda: self._contract.send_resolve_complaint(key, resolution_hash),
            timeout_seconds,
        )

    async def exists(self, complaint_id: UUID, timeout_seconds: float | None = None) -> bool:
        key = str(complaint_id)
        return await self._read(
            "exists",
            key,
            lambda: self._contract.complaint_exists(key),
            timeout_seconds,
        )

    async def verify_integrity(
        self,
        complaint_id: UUID,
        content_hash: str,
        timeout_seconds: float | None = None,
    ) -> bool:
        key = str(complaint_id)
        return await self._read(
            "verify_integrity",
            key,
            lambda: self._contract.verify_complaint(key, content_hash),
            timeout_seconds,
        )

    def _require_connection(self, operation: str) -> None:
        if not self._connected:
            raise LedgerConnectionNotVerifiedError(operation)

    async def _startup_step(self, check: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(call(), timeout=self._config.read_timeout_seconds)
        except TimeoutError:
            raise LedgerConfigurationError(check, "no response before deadline") from None
        except _TRANSPORT_ERRORS as e:
            raise LedgerConfigurationError(check, str(e)) from e

    async def _submit(
        self,
        operation: str,
        complaint_id: str,
        send: Callable[[], Awaitable[str]],
        timeout_seconds: float | None,
        **context: object,
    ) -> LedgerReceipt:
        self._require_connection(operation)
        deadline = _deadline(timeout_seconds, self._config.confirmation_timeout_seconds)
        log = self._log_operation(operation, complaint_id=complaint_id, **context)
        loop = asyncio.get_running_loop()
        started = loop.time()

        async def send_and_confirm() -> LedgerReceipt:
            transaction_id = await send()
            log.info("ledger_tx_sent", transaction_id=transaction_id)
            remaining = max(deadline - (loop.time() - started), 0.001)
            return await self._contract.wait_for_receipt(transaction_id, remaining)

        wall_started = time.perf_counter()
        try:
            receipt = await asyncio.wait_for(send_and_confirm(), timeout=deadline)
        except TimeoutError:
            self._record(operation, "timeout", wall_started)
            log.warning(
                "ledger_call_failed", reason="confirmation_timeout", timeout_seconds=deadline
            )
            raise LedgerUnavailableError(
                operation, complaint_id, "confirmation_timeout"
            ) from None
        except _TRANSPORT_ERRORS as e:
            self._record(operation, "failure", wall_started)
            reason = e.reason if isinstance(e, LedgerTransactionError) else str(e)
            log.warning("ledger_call_failed", reason=reason)
            raise LedgerUnavailableError(operation, complaint_id, reason) from e

        self._record(operation, "success", wall_started)
        log.info(
            "ledger_tx_confirmed",
            transaction_id=receipt.transaction_id,
            block_number=receipt.block_number,
        )
        return receipt

    async def _read(
        self,
        operation: str,
        complaint_id: str,
        call: Callable[[], Awaitable[bool]],
        timeout_seconds: float | None,
    ) -> bool:
        self._require_connection(operation)
        deadline = _deadline(timeout_seconds, self._config.read_timeout_seconds)
        wall_started = time.perf_counter()
        try:
            result = await asyncio.wait_for(call(), timeout=deadline)
        except TimeoutError:
            self._record(operation, "timeout", wall_started)
            self._log_operation(operation, complaint_id=complaint_id).warning(
                "ledger_call_failed", reason="read_timeout", timeout_seconds=deadline
            )
            raise LedgerUnavailableError(operation, complaint_id, "read_timeout") from None
        except _TRANSPORT_ERRORS as e:
            self._record(operation, "failure", wall_started)
            reason = e.reason if isinstance(e, LedgerTransactionError) else str(e)
            self._log_operation(operation, complaint_id=complaint_id).warning(
                "ledger_call_failed", reason=reason
            )
            raise LedgerUnavailableError(operation, complaint_id, reason) from e

        self._record(operation, "success", wall_started)
        return bool(result)

    def _record(self, operation: str, outcome: str, started: float) -> None:
        self._metrics.observe_ledger_operation(
            operation, outcome, time.perf_counter() - started
        )
