"""
Abstract contracts for the external collaborators.

The orchestration service only talks to the proof subsystem, the price
oracle, and the ledger through the interfaces defined here.  Concrete
adapters (Pyth Hermes, web3 contracts, the commitment prover) live in
``clients.adapters``; tests substitute in-memory doubles.

Handles are shared across requests, so implementations must be safe for
concurrent use and must not keep per-request state.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Union

from src.rwaflow.core.types import (
    AssetMetadata,
    EligibilityProofResult,
    PriceQuote,
    ProofInput,
    ProofType,
    RangeProofInput,
    TransactionReceipt,
)


class EligibilityProofClient(ABC):
    """Produces zero-knowledge proofs of eligibility for a subject address."""

    @abstractmethod
    def generate_proof(
        self,
        proof_type: ProofType,
        subject_address: str,
        inputs: Union[ProofInput, RangeProofInput],
    ) -> EligibilityProofResult:
        """Generate a proof for *subject_address*.

        Implementations report failure through the returned result
        (``success=False`` with ``error`` set) rather than raising.
        """


class PriceOracleClient(ABC):
    """Signed price updates and price reads for oracle feeds."""

    @abstractmethod
    def get_price_update_data(self, feed_ids: List[str]) -> List[str]:
        """Return 0x-prefixed hex update payloads ready for on-chain posting."""

    @abstractmethod
    def get_latest_price(self, feed_id: str) -> PriceQuote:
        """Return the latest price already posted on-chain for *feed_id*."""

    @abstractmethod
    def fetch_latest_prices(self, feed_ids: List[str]) -> List[PriceQuote]:
        """Return the latest off-chain prices published for *feed_ids*."""


class LedgerClient(ABC):
    """Asset lifecycle operations on the settlement ledger.

    Mutating calls block until the transaction is mined and return its
    receipt.  Reverts surface as ``web3.exceptions.ContractLogicError``
    carrying the revert reason.
    """

    @abstractmethod
    def get_update_fee(self, update_data: List[str]) -> int:
        """Fee (smallest native unit) required to post *update_data*."""

    @abstractmethod
    def mint_asset(
        self,
        document_hash: str,
        total_value: int,
        fraction_count: int,
        min_fraction_size: int,
        feed_id: str,
        update_data: List[str],
        lockup_period: int,
        payment: int,
    ) -> TransactionReceipt:
        """Mint a new asset token and return the confirmed receipt."""

    @abstractmethod
    def purchase_fraction(
        self,
        asset_id: int,
        amount: int,
        secret: bytes,
        nullifier: bytes,
        payment: int,
    ) -> TransactionReceipt:
        """Buy *amount* fractions of *asset_id* and return the receipt."""

    @abstractmethod
    def is_supported_feed(self, feed_id: str) -> bool:
        """Whether the oracle reader accepts updates for *feed_id*."""

    @abstractmethod
    def post_price_update(
        self,
        feed_id: str,
        update_data: List[str],
        payment: int,
    ) -> TransactionReceipt:
        """Post signed price updates for *feed_id*, paying the update fee."""

    @abstractmethod
    def get_asset_metadata(self, asset_id: int) -> AssetMetadata:
        """Read asset metadata.  Unknown ids may raise or return a null issuer."""

    @abstractmethod
    def get_price_at_mint(self, asset_id: int) -> int:
        """Fixed-point oracle price recorded when *asset_id* was minted."""

    def get_chain_id(self) -> Optional[int]:
        return None
