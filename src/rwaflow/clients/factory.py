"""
Production wiring of the collaborator clients.

Builds one shared handle per external system from ``AppConfig`` and
injects them into an ``OrchestrationService``.  Tests bypass this module
and construct the service with doubles.
"""
from loguru import logger

from src.rwaflow.clients.adapters.commitment_prover import CommitmentProver
from src.rwaflow.clients.adapters.pyth_oracle import PythHermesClient
from src.rwaflow.clients.adapters.web3_ledger import Web3LedgerClient
from src.rwaflow.core.service import OrchestrationService
from src.rwaflow.utils.config import AppConfig


def build_service(config: AppConfig) -> OrchestrationService:
    """Create the ledger, oracle and prover clients and the service."""
    logger.info(f"Connecting to ledger at {config.rpc_url} (chain {config.chain_id})")

    ledger = Web3LedgerClient.from_rpc(
        config.rpc_url,
        private_key=config.private_key,
        factory_address=config.contracts.rwa_factory,
        oracle_reader_address=config.contracts.pyth_oracle_reader,
        chain_id=config.chain_id,
    )
    oracle = PythHermesClient(
        config.pyth.api_url,
        onchain_reader=ledger.read_latest_price,
        timeout=config.pyth.timeout_seconds,
    )
    prover = CommitmentProver(private_key=config.private_key)

    if not config.is_testnet:
        logger.warning(
            f"Chain {config.chain_id} is not a known testnet; the purchase "
            "payment conversion is a testnet placeholder."
        )

    return OrchestrationService(
        prover=prover,
        oracle=oracle,
        ledger=ledger,
        default_feed_id=config.pyth.default_feed_id,
        payment=config.payment,
        testnet=config.is_testnet,
    )
