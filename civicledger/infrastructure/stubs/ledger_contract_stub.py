"""In-memory complaint registry contract.

Behaves like the deployed contract for development and tests: entries are
append-only, block numbers only grow and transaction ids are deterministic.
Failure injection hooks let tests exercise every ledger failure path.

It is NOT suitable for production use.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import blake3

from civicledger.domain.errors.ledger import LedgerTransactionError
from civicledger.domain.models.ledger import LedgerReceipt

STUB_CHAIN_ID = 31337
STUB_SIGNER_ADDRESS = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
DEFAULT_STUB_BALANCE_WEI = 10**18


@dataclass
class LedgerEntry:
    """State the contract keeps for one complaint."""

    content_hash: str
    status_code: int = 0
    resolution_hash: str | None = None
    registered_block: int = 0
    history: list[tuple[str, int]] = field(default_factory=list)


@dataclass(frozen=True)
class SentTransaction:
    """A transaction accepted by the stub, in send order."""

    transaction_id: str
    function: str
    complaint_id: str
    argument: str | int
    block_number: int
    reverted: bool = False


class LedgerContractStub:
    """In-memory implementation of LedgerContractProtocol.

    Failure injection:
        fail_next_submission(): next send raises (nothing recorded)
        revert_next_transaction(): next send succeeds but its receipt reverts
        set_unavailable(True): every call raises until switched back
        confirmation_delay_seconds: receipts take this long to arrive
        set_balance(): change the signer balance seen at startup
        forget(): drop a complaint so audits see it as missing
    """

    def __init__(
        self,
        chain_id: int = STUB_CHAIN_ID,
        signer_address: str = STUB_SIGNER_ADDRESS,
        balance_wei: int = DEFAULT_STUB_BALANCE_WEI,
    ) -> None:
        self._chain_id = chain_id
        self._signer_address = signer_address
        self._balance_wei = balance_wei
        self._entries: dict[str, LedgerEntry] = {}
        self._transactions: dict[str, SentTransaction] = {}
        self._sent: list[SentTransaction] = []
        self._block_number = 0
        self._lock = asyncio.Lock()
        self._unavailable = False
        self._fail_next: str | None = None
        self._revert_next: str | None = None
        self.confirmation_delay_seconds: float = 0.0
        self.read_delay_seconds: float = 0.0

    # Failure injection

    def fail_next_submission(self, reason: str = "transaction rejected by node") -> None:
        self._fail_next = reason

    def revert_next_transaction(self, reason: str = "execution reverted") -> None:
        self._revert_next = reason

    def set_unavailable(self, unavailable: bool = True) -> None:
        self._unavailable = unavailable

    def set_balance(self, balance_wei: int) -> None:
        self._balance_wei = balance_wei

    def forget(self, complaint_id: str) -> None:
        """Remove a complaint from the ledger (audit test helper only)."""
        self._entries.pop(complaint_id, None)

    # Inspection

    def get_entry(self, complaint_id: str) -> LedgerEntry | None:
        return self._entries.get(complaint_id)

    @property
    def sent_transactions(self) -> list[SentTransaction]:
        return list(self._sent)

    @property
    def block_number(self) -> int:
        return self._block_number

    # Contract surface

    async def send_register_complaint(self, complaint_id: str, content_hash: str) -> str:
        async with self._lock:
            self._check_send()
            if complaint_id in self._entries:
                raise LedgerTransactionError(f"complaint {complaint_id} already registered")
            tx = self._record("registerComplaint", complaint_id, content_hash)
            if not tx.reverted:
                self._entries[complaint_id] = LedgerEntry(
                    content_hash=content_hash,
                    registered_block=tx.block_number,
                    history=[(tx.transaction_id, 0)],
                )
            return tx.transaction_id

    async def send_update_complaint_status(self, complaint_id: str, status_code: int) -> str:
        async with self._lock:
            self._check_send()
            entry = self._require_entry(complaint_id)
            if not 0 <= status_code <= 3:
                raise LedgerTransactionError(f"invalid status code {status_code}")
            tx = self._record("updateComplaintStatus", complaint_id, status_code)
            if not tx.reverted:
                entry.status_code = status_code
                entry.history.append((tx.transaction_id, status_code))
            return tx.transaction_id

    async def send_resolve_complaint(self, complaint_id: str, resolution_hash: str) -> str:
        async with self._lock:
            self._check_send()
            entry = self._require_entry(complaint_id)
            tx = self._record("resolveComplaint", complaint_id, resolution_hash)
            if not tx.reverted:
                entry.status_code = 3
                entry.resolution_hash = resolution_hash
                entry.history.append((tx.transaction_id, 3))
            return tx.transaction_id

    async def wait_for_receipt(self, transaction_id: str, timeout_seconds: float) -> LedgerReceipt:
        if self.confirmation_delay_seconds > 0:
            await asyncio.sleep(self.confirmation_delay_seconds)
        self._check_available()
        tx = self._transactions.get(transaction_id)
        if tx is None:
            raise LedgerTransactionError("unknown transaction", transaction_id)
        if tx.reverted:
            raise LedgerTransactionError("transaction reverted", transaction_id)
        return LedgerReceipt(transaction_id=transaction_id, block_number=tx.block_number)

    async def verify_complaint(self, complaint_id: str, content_hash: str) -> bool:
        await self._before_read()
        entry = self._entries.get(complaint_id)
        return entry is not None and entry.content_hash == content_hash

    async def complaint_exists(self, complaint_id: str) -> bool:
        await self._before_read()
        return complaint_id in self._entries

    async def get_total_complaints(self) -> int:
        await self._before_read()
        return len(self._entries)

    async def get_chain_id(self) -> int:
        await self._before_read()
        return self._chain_id

    async def get_signer_address(self) -> str:
        return self._signer_address

    async def get_signer_balance(self) -> int:
        await self._before_read()
        return self._balance_wei

    # Internals

    def _check_available(self) -> None:
        if self._unavailable:
            raise LedgerTransactionError("ledger node unreachable")

    def _check_send(self) -> None:
        self._check_available()
        if self._fail_next is not None:
            reason, self._fail_next = self._fail_next, None
            raise LedgerTransactionError(reason)

    async def _before_read(self) -> None:
        if self.read_delay_seconds > 0:
            await asyncio.sleep(self.read_delay_seconds)
        self._check_available()

    def _require_entry(self, complaint_id: str) -> LedgerEntry:
        entry = self._entries.get(complaint_id)
        if entry is None:
            raise LedgerTransactionError(f"complaint {complaint_id} does not exist")
        return entry

    def _record(self, function: str, complaint_id: str, argument: str | int) -> SentTransaction:
        self._block_number += 1
        digest = blake3.blake3(
            f"{self._block_number}:{function}:{complaint_id}:{argument}".encode()
        ).hexdigest()
        reverted = self._revert_next is not None
        self._revert_next = None
        tx = SentTransaction(
            transaction_id=f"0x{digest}",
            function=function,
            complaint_id=complaint_id,
            argument=argument,
            block_number=self._block_number,
            reverted=reverted,
        )
        self._transactions[tx.transaction_id] = tx
        self._sent.append(tx)
        return tx
