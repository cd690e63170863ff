"""Bootstrap wiring for the ledger gateway.

LEDGER_MODE=stub selects the in-memory contract; otherwise the web3
adapter is built from LEDGER_* settings. Either way the gateway is
unusable until verify_connection() has passed at startup.
"""

from __future__ import annotations

from structlog import get_logger

from civicledger.application.ports.ledger_contract import LedgerContractProtocol
from civicledger.application.services.ledger_gateway_service import (
    LedgerGatewayService,
)
from civicledger.config.ledger_config import LedgerConfig
from civicledger.infrastructure.stubs.ledger_contract_stub import LedgerContractStub

logger = get_logger()

_ledger_config: LedgerConfig | None = None
_ledger_contract: LedgerContractProtocol | None = None
_ledger_gateway: LedgerGatewayService | None = None


def get_ledger_config() -> LedgerConfig:
    global _ledger_config
    if _ledger_config is None:
        _ledger_config = LedgerConfig.from_environment()
    return _ledger_config


def get_ledger_contract() -> LedgerContractProtocol:
    """Return the contract adapter selected by LEDGER_MODE."""
    global _ledger_contract
    if _ledger_contract is None:
        config = get_ledger_config()
        if config.is_stub:
            logger.warning(
                "ledger_contract_initialized",
                contract_type="InMemoryStub",
                message="LEDGER_MODE=stub - ledger entries will not persist",
            )
            _ledger_contract = LedgerContractStub()
        else:
            from civicledger.infrastructure.adapters.ledger.web3_ledger_contract import (
                Web3LedgerContract,
            )

            logger.info("ledger_contract_initialized", contract_type="Web3")
            _ledger_contract = Web3LedgerContract(config)
    return _ledger_contract


def get_ledger_gateway() -> LedgerGatewayService:
    global _ledger_gateway
    if _ledger_gateway is None:
        _ledger_gateway = LedgerGatewayService(
            contract=get_ledger_contract(),
            config=get_ledger_config(),
        )
    return _ledger_gateway


def reset_ledger_bootstrap() -> None:
    """Reset ledger singletons (tests only)."""
    global _ledger_config, _ledger_contract, _ledger_gateway
    _ledger_config = None
    _ledger_contract = None
    _ledger_gateway = None
