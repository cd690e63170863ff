"""Unit tests for the in-memory ledger contract."""

import pytest

from civicledger.domain.errors.ledger import LedgerTransactionError
from civicledger.infrastructure.stubs.ledger_contract_stub import LedgerContractStub


class TestSubmissions:
    @pytest.mark.asyncio
    async def test_register_and_read(self, ledger_contract: LedgerContractStub) -> None:
        tx_id = await ledger_contract.send_register_complaint("c1", "hash-1")
        receipt = await ledger_contract.wait_for_receipt(tx_id, 1.0)

        assert receipt.transaction_id == tx_id
        assert receipt.block_number == 1
        assert await ledger_contract.complaint_exists("c1")
        assert await ledger_contract.verify_complaint("c1", "hash-1")
        assert not await ledger_contract.verify_complaint("c1", "hash-2")
        assert await ledger_contract.get_total_complaints() == 1

    @pytest.mark.asyncio
    async def test_register_twice_rejected(self, ledger_contract: LedgerContractStub) -> None:
        await ledger_contract.send_register_complaint("c1", "hash-1")
        with pytest.raises(LedgerTransactionError):
            await ledger_contract.send_register_complaint("c1", "hash-2")
        assert ledger_contract.get_entry("c1").content_hash == "hash-1"

    @pytest.mark.asyncio
    async def test_blocks_increase_and_history_appends(
        self, ledger_contract: LedgerContractStub
    ) -> None:
        await ledger_contract.send_register_complaint("c1", "hash-1")
        await ledger_contract.send_update_complaint_status("c1", 1)
        await ledger_contract.send_resolve_complaint("c1", "res-1")

        entry = ledger_contract.get_entry("c1")
        blocks = [tx.block_number for tx in ledger_contract.sent_transactions]
        assert blocks == [1, 2, 3]
        assert [code for _, code in entry.history] == [0, 1, 3]
        assert entry.status_code == 3
        assert entry.resolution_hash == "res-1"

    @pytest.mark.asyncio
    async def test_unknown_complaint_and_bad_code(
        self, ledger_contract: LedgerContractStub
    ) -> None:
        with pytest.raises(LedgerTransactionError):
            await ledger_contract.send_update_complaint_status("missing", 1)
        await ledger_contract.send_register_complaint("c1", "hash-1")
        with pytest.raises(LedgerTransactionError):
            await ledger_contract.send_update_complaint_status("c1", 9)


class TestFailureInjection:
    @pytest.mark.asyncio
    async def test_fail_next_submission_is_one_shot(
        self, ledger_contract: LedgerContractStub
    ) -> None:
        ledger_contract.fail_next_submission("nonce too low")

        with pytest.raises(LedgerTransactionError, match="nonce too low"):
            await ledger_contract.send_register_complaint("c1", "hash-1")

        assert ledger_contract.sent_transactions == []
        await ledger_contract.send_register_complaint("c1", "hash-1")

    @pytest.mark.asyncio
    async def test_reverted_transaction_leaves_no_entry(
        self, ledger_contract: LedgerContractStub
    ) -> None:
        ledger_contract.revert_next_transaction()
        tx_id = await ledger_contract.send_register_complaint("c1", "hash-1")

        with pytest.raises(LedgerTransactionError) as exc_info:
            await ledger_contract.wait_for_receipt(tx_id, 1.0)

        assert exc_info.value.transaction_id == tx_id
        assert ledger_contract.get_entry("c1") is None

    @pytest.mark.asyncio
    async def test_unavailable(self, ledger_contract: LedgerContractStub) -> None:
        ledger_contract.set_unavailable(True)
        with pytest.raises(LedgerTransactionError):
            await ledger_contract.get_chain_id()
        ledger_contract.set_unavailable(False)
        assert await ledger_contract.get_chain_id() == 31337

    @pytest.mark.asyncio
    async def test_forget(self, ledger_contract: LedgerContractStub) -> None:
        await ledger_contract.send_register_complaint("c1", "hash-1")
        ledger_contract.forget("c1")
        assert not await ledger_contract.complaint_exists("c1")
