"""Complaint registry contract over JSON-RPC with web3.py.

Signs transactions locally with eth_account and sends them raw, so the
node never holds the key. Nonces are taken and used under one lock, so
concurrent submissions from this process never reuse a nonce.

The signer and the contract binding are created on first use. The
gateway validates the configuration before the first call, so a malformed
address or key is reported as a startup failure rather than an import
error.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3Exception

from civicledger.config.ledger_config import LedgerConfig
from civicledger.domain.errors.ledger import LedgerTransactionError
from civicledger.domain.models.ledger import LedgerReceipt

logger = structlog.get_logger()

T = TypeVar("T")

RECEIPT_POLL_LATENCY_SECONDS = 1.0

# Errors web3.py surfaces for RPC, ABI, signing and transport failures
_WEB3_ERRORS: tuple[type[Exception], ...] = (Web3Exception, ValueError, OSError)


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list[str], view: bool) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": "view" if view else "nonpayable",
    }


COMPLAINT_REGISTRY_ABI: list[dict[str, Any]] = [
    _fn("registerComplaint", [("_complaintId", "string"), ("_complaintHash", "string")], [], False),
    _fn("updateComplaintStatus", [("_complaintId", "string"), ("_status", "uint8")], [], False),
    _fn("resolveComplaint", [("_complaintId", "string"), ("_resolutionHash", "string")], [], False),
    _fn(
        "verifyComplaint",
        [("_complaintId", "string"), ("_complaintHash", "string")],
        ["bool"],
        True,
    ),
    _fn(
        "getComplaint",
        [("_complaintId", "string")],
        ["string", "uint256", "uint8", "address"],
        True,
    ),
    _fn("complaintExists", [("_complaintId", "string")], ["bool"], True),
    _fn("getTotalComplaints", [], ["uint256"], True),
]


class Web3LedgerContract:
    """LedgerContractProtocol implementation backed by an EVM chain."""

    def __init__(self, config: LedgerConfig, w3: AsyncWeb3 | None = None) -> None:
        """Initialize the adapter.

        Args:
            config: Ledger configuration (RPC URL, address, signer key).
            w3: Optional pre-built client (tests inject a mocked provider).
        """
        self._config = config
        self._w3 = w3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                config.rpc_url,
                request_kwargs={"timeout": config.read_timeout_seconds},
            )
        )
        self._account: LocalAccount | None = None
        self._contract: Any = None
        self._chain_id: int | None = None
        self._nonce_lock = asyncio.Lock()

    @property
    def account(self) -> LocalAccount:
        if self._account is None:
            try:
                self._account = Account.from_key(self._config.signer_key)
            except _WEB3_ERRORS as e:
                raise LedgerTransactionError(f"invalid signer key: {type(e).__name__}") from None
        return self._account

    @property
    def contract(self) -> Any:
        if self._contract is None:
            try:
                address = Web3.to_checksum_address(self._config.contract_address)
            except _WEB3_ERRORS as e:
                raise LedgerTransactionError(f"invalid contract address: {e}") from e
            self._contract = self._w3.eth.contract(address=address, abi=COMPLAINT_REGISTRY_ABI)
        return self._contract

    async def send_register_complaint(self, complaint_id: str, content_hash: str) -> str:
        return await self._send("registerComplaint", complaint_id, content_hash)

    async def send_update_complaint_status(self, complaint_id: str, status_code: int) -> str:
        return await self._send("updateComplaintStatus", complaint_id, status_code)

    async def send_resolve_complaint(self, complaint_id: str, resolution_hash: str) -> str:
        return await self._send("resolveComplaint", complaint_id, resolution_hash)

    async def wait_for_receipt(self, transaction_id: str, timeout_seconds: float) -> LedgerReceipt:
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                transaction_id,
                timeout=timeout_seconds,
                poll_latency=RECEIPT_POLL_LATENCY_SECONDS,
            )
        except TimeExhausted:
            raise LedgerTransactionError("receipt not available", transaction_id) from None
        except _WEB3_ERRORS as e:
            raise LedgerTransactionError(f"receipt lookup failed: {e}", transaction_id) from e

        if receipt["status"] != 1:
            raise LedgerTransactionError("transaction reverted", transaction_id)
        return LedgerReceipt(
            transaction_id=Web3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
        )

    async def verify_complaint(self, complaint_id: str, content_hash: str) -> bool:
        return bool(
            await self._call(
                "verifyComplaint",
                self.contract.functions.verifyComplaint(complaint_id, content_hash).call(),
            )
        )

    async def complaint_exists(self, complaint_id: str) -> bool:
        return bool(
            await self._call(
                "complaintExists",
                self.contract.functions.complaintExists(complaint_id).call(),
            )
        )

    async def get_total_complaints(self) -> int:
        return int(
            await self._call(
                "getTotalComplaints", self.contract.functions.getTotalComplaints().call()
            )
        )

    async def get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(await self._call("chain_id", self._w3.eth.chain_id))
        return self._chain_id

    async def get_signer_address(self) -> str:
        return self.account.address

    async def get_signer_balance(self) -> int:
        return int(
            await self._call("get_balance", self._w3.eth.get_balance(self.account.address))
        )

    async def _call(self, name: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except _WEB3_ERRORS as e:
            raise LedgerTransactionError(f"{name} call failed: {e}") from e

    async def _send(self, function_name: str, *args: Any) -> str:
        account = self.account
        chain_id = await self.get_chain_id()
        function = getattr(self.contract.functions, function_name)(*args)
        async with self._nonce_lock:
            try:
                nonce = await self._w3.eth.get_transaction_count(account.address, "pending")
                tx = await function.build_transaction(
                    {"from": account.address, "nonce": nonce, "chainId": chain_id}
                )
                signed = account.sign_transaction(tx)
                tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
            except _WEB3_ERRORS as e:
                logger.warning(
                    "ledger_send_failed", function=function_name, error=str(e)
                )
                raise LedgerTransactionError(f"{function_name} rejected: {e}") from e
        return Web3.to_hex(tx_hash)
