"""Unit tests for LedgerGatewayService.

Covers the startup gate, deadline handling (a timeout is a failure) and
the translation of adapter errors into LedgerUnavailableError.
"""

import asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from civicledger.application.services.ledger_gateway_service import (
    LedgerGatewayService,
)
from civicledger.config.ledger_config import TEST_LEDGER_CONFIG, LedgerConfig
from civicledger.domain.errors import (
    LedgerConfigurationError,
    LedgerConnectionNotVerifiedError,
    LedgerTransactionError,
    LedgerUnavailableError,
)
from civicledger.domain.models.complaint import ComplaintStatus
from civicledger.infrastructure.monitoring.metrics import MetricsCollector
from civicledger.infrastructure.stubs.ledger_contract_stub import LedgerContractStub
from tests.helpers import sample_value

HASH = "ab" * 32


def _mock_contract() -> AsyncMock:
    contract = AsyncMock()
    contract.get_chain_id = AsyncMock(return_value=1)
    contract.get_total_complaints = AsyncMock(return_value=0)
    contract.get_signer_address = AsyncMock(return_value="0xsigner")
    contract.get_signer_balance = AsyncMock(return_value=10**18)
    return contract


class TestVerifyConnection:
    """Tests for the startup gate."""

    @pytest.mark.asyncio
    async def test_success_reports_chain(
        self, ledger_contract: LedgerContractStub, metrics: MetricsCollector
    ) -> None:
        gateway = LedgerGatewayService(ledger_contract, TEST_LEDGER_CONFIG, metrics=metrics)
        assert not gateway.is_connected

        report = await gateway.verify_connection()

        assert gateway.is_connected
        assert report.chain_id == 31337
        assert report.total_complaints == 0
        assert report.signer_balance_wei > 0

    @pytest.mark.asyncio
    async def test_zero_balance_blocks_startup(
        self, ledger_contract: LedgerContractStub, metrics: MetricsCollector
    ) -> None:
        ledger_contract.set_balance(0)
        gateway = LedgerGatewayService(ledger_contract, TEST_LEDGER_CONFIG, metrics=metrics)

        with pytest.raises(LedgerConfigurationError) as exc_info:
            await gateway.verify_connection()

        assert exc_info.value.check == "balance"
        assert not gateway.is_connected

    @pytest.mark.asyncio
    async def test_unreachable_network(
        self, ledger_contract: LedgerContractStub, metrics: MetricsCollector
    ) -> None:
        ledger_contract.set_unavailable()
        gateway = LedgerGatewayService(ledger_contract, TEST_LEDGER_CONFIG, metrics=metrics)

        with pytest.raises(LedgerConfigurationError) as exc_info:
            await gateway.verify_connection()

        assert exc_info.value.check == "network"

    @pytest.mark.asyncio
    async def test_contract_not_responding(self, metrics: MetricsCollector) -> None:
        contract = _mock_contract()
        contract.get_total_complaints.side_effect = LedgerTransactionError("no code at address")
        gateway = LedgerGatewayService(contract, TEST_LEDGER_CONFIG, metrics=metrics)

        with pytest.raises(LedgerConfigurationError) as exc_info:
            await gateway.verify_connection()

        assert exc_info.value.check == "contract"

    @pytest.mark.asyncio
    async def test_network_deadline(self, metrics: MetricsCollector) -> None:
        contract = _mock_contract()

        async def hang() -> int:
            await asyncio.sleep(1.0)
            return 1

        contract.get_chain_id = hang
        config = LedgerConfig(read_timeout_seconds=0.05, mode="stub")
        gateway = LedgerGatewayService(contract, config, metrics=metrics)

        with pytest.raises(LedgerConfigurationError) as exc_info:
            await gateway.verify_connection()

        assert exc_info.value.check == "network"
        assert "deadline" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_bad_config_fails_before_any_call(self, metrics: MetricsCollector) -> None:
        contract = _mock_contract()
        gateway = LedgerGatewayService(contract, LedgerConfig(), metrics=metrics)

        with pytest.raises(LedgerConfigurationError) as exc_info:
            await gateway.verify_connection()

        assert exc_info.value.check == "config"
        contract.get_chain_id.assert_not_called()


class TestSubmit:
    """Tests for mutating ledger calls."""

    @pytest.mark.asyncio
    async def test_calls_before_verification_rejected(
        self, ledger_contract: LedgerContractStub, metrics: MetricsCollector
    ) -> None:
        gateway = LedgerGatewayService(ledger_contract, TEST_LEDGER_CONFIG, metrics=metrics)

        with pytest.raises(LedgerConnectionNotVerifiedError):
            await gateway.submit_registration(uuid4(), HASH)

        assert ledger_contract.sent_transactions == []

    @pytest.mark.asyncio
    async def test_registration_confirmed(
        self,
        gateway: LedgerGatewayService,
        ledger_contract: LedgerContractStub,
        metrics: MetricsCollector,
    ) -> None:
        complaint_id = uuid4()

        receipt = await gateway.submit_registration(complaint_id, HASH)

        entry = ledger_contract.get_entry(str(complaint_id))
        assert entry is not None
        assert entry.content_hash == HASH
        assert receipt.block_number == ledger_contract.block_number
        assert receipt.transaction_id.startswith("0x")
        assert (
            sample_value(
                metrics.get_registry(),
                "ledger_operations_total",
                operation="submit_registration",
                outcome="success",
            )
            == 1
        )

    @pytest.mark.asyncio
    async def test_status_sent_as_ledger_code(
        self, gateway: LedgerGatewayService, ledger_contract: LedgerContractStub
    ) -> None:
        complaint_id = uuid4()
        await gateway.submit_registration(complaint_id, HASH)

        await gateway.submit_status_transition(complaint_id, ComplaintStatus.IN_PROGRESS)

        assert ledger_contract.get_entry(str(complaint_id)).status_code == 2

    @pytest.mark.asyncio
    async def test_rejected_send_is_unavailable(
        self, gateway: LedgerGatewayService, ledger_contract: LedgerContractStub
    ) -> None:
        ledger_contract.fail_next_submission("nonce too low")
        complaint_id = uuid4()

        with pytest.raises(LedgerUnavailableError) as exc_info:
            await gateway.submit_registration(complaint_id, HASH)

        assert exc_info.value.reason == "nonce too low"
        assert exc_info.value.operation == "submit_registration"
        assert exc_info.value.complaint_id == str(complaint_id)
        assert "State not changed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_reverted_transaction_is_unavailable(
        self, gateway: LedgerGatewayService, ledger_contract: LedgerContractStub
    ) -> None:
        ledger_contract.revert_next_transaction()

        with pytest.raises(LedgerUnavailableError) as exc_info:
            await gateway.submit_registration(uuid4(), HASH)

        assert exc_info.value.reason == "transaction reverted"

    @pytest.mark.asyncio
    async def test_timeout_is_failure(
        self,
        gateway: LedgerGatewayService,
        ledger_contract: LedgerContractStub,
        metrics: MetricsCollector,
    ) -> None:
        ledger_contract.confirmation_delay_seconds = 0.5

        with pytest.raises(LedgerUnavailableError) as exc_info:
            await gateway.submit_registration(uuid4(), HASH, timeout_seconds=0.05)

        assert exc_info.value.reason == "confirmation_timeout"
        assert (
            sample_value(
                metrics.get_registry(),
                "ledger_operations_total",
                operation="submit_registration",
                outcome="timeout",
            )
            == 1
        )

    @pytest.mark.parametrize("timeout", [0, -0.5])
    @pytest.mark.asyncio
    async def test_non_positive_timeout_rejected_before_send(
        self,
        gateway: LedgerGatewayService,
        ledger_contract: LedgerContractStub,
        timeout: float,
    ) -> None:
        with pytest.raises(ValueError, match="timeout_seconds must be positive"):
            await gateway.submit_registration(uuid4(), HASH, timeout_seconds=timeout)

        assert ledger_contract.sent_transactions == []

    @pytest.mark.asyncio
    async def test_os_error_is_unavailable(self, metrics: MetricsCollector) -> None:
        contract = _mock_contract()
        contract.send_register_complaint.side_effect = ConnectionResetError("reset by peer")
        gateway = LedgerGatewayService(contract, TEST_LEDGER_CONFIG, metrics=metrics)
        await gateway.verify_connection()

        with pytest.raises(LedgerUnavailableError, match="reset by peer"):
            await gateway.submit_registration(uuid4(), HASH)

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(
        self, gateway: LedgerGatewayService, ledger_contract: LedgerContractStub
    ) -> None:
        ledger_contract.confirmation_delay_seconds = 0.5
        task = asyncio.create_task(gateway.submit_registration(uuid4(), HASH))
        await asyncio.sleep(0.01)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestReads:
    @pytest.mark.asyncio
    async def test_exists(self, gateway: LedgerGatewayService) -> None:
        complaint_id = uuid4()
        assert not await gateway.exists(complaint_id)

        await gateway.submit_registration(complaint_id, HASH)

        assert await gateway.exists(complaint_id)

    @pytest.mark.asyncio
    async def test_verify_integrity(self, gateway: LedgerGatewayService) -> None:
        complaint_id = uuid4()
        await gateway.submit_registration(complaint_id, HASH)

        assert await gateway.verify_integrity(complaint_id, HASH)
        assert not await gateway.verify_integrity(complaint_id, "cd" * 32)

    @pytest.mark.asyncio
    async def test_read_timeout(
        self, gateway: LedgerGatewayService, ledger_contract: LedgerContractStub
    ) -> None:
        ledger_contract.read_delay_seconds = 0.5

        with pytest.raises(LedgerUnavailableError) as exc_info:
            await gateway.exists(uuid4(), timeout_seconds=0.05)

        assert exc_info.value.reason == "read_timeout"

    @pytest.mark.parametrize("timeout", [0, -1.0])
    @pytest.mark.asyncio
    async def test_non_positive_read_timeout_rejected(
        self, gateway: LedgerGatewayService, timeout: float
    ) -> None:
        with pytest.raises(ValueError, match="timeout_seconds must be positive"):
            await gateway.exists(uuid4(), timeout_seconds=timeout)

    def test_compute_hash_needs_no_connection(
        self, ledger_contract: LedgerContractStub, metrics: MetricsCollector
    ) -> None:
        gateway = LedgerGatewayService(ledger_contract, TEST_LEDGER_CONFIG, metrics=metrics)
        assert len(gateway.compute_content_hash({"a": 1})) == 64
