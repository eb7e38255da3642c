"""
Data contracts for the asset issuance and fractional-sale workflows.

Pydantic models defined here describe every value that crosses a
workflow boundary: inbound requests, ledger-owned asset metadata, proof
results, oracle quotes, transaction receipts, and the caller-facing
responses.  Request models are deliberately permissive carriers (types
only); semantic checks such as "total value must be positive" belong to
the ``RequestValidator`` so that a bad request is reported as a
``ValidationError`` instead of failing at construction time.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

NULL_ADDRESS = "0x" + "0" * 40

# Prices posted by the oracle use an implicit 8-decimal exponent.
DEFAULT_PRICE_EXPO = -8


class AssetType(str, Enum):
    """Closed set of real-world asset categories accepted for issuance."""

    INVOICE = "invoice"
    BOND = "bond"
    REAL_ESTATE = "real-estate"


class ProofType(str, Enum):
    ELIGIBILITY = "eligibility"
    RANGE = "range"


class ProofInput(BaseModel):
    """Caller-supplied eligibility witness.  Never generated by the core."""

    commitment: str = Field(..., description="Commitment registered on-chain")
    secret: str = Field(..., description="Secret whose hash is the commitment")
    nullifier: str = Field(..., description="One-time nullifier for the proof")


class RangeProofInput(BaseModel):
    """Inputs for a range proof over a holder's fraction balance."""

    token_id: int
    actual_amount: int
    min_range: int
    max_range: int


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class CreateAssetRequest(BaseModel):
    """Issuer request to tokenize a real-world asset."""

    issuer_address: str
    document_hash: str = Field(..., description="Content identifier of the legal document")
    total_value: int = Field(..., description="Asset value in fiat minor units (cents)")
    fraction_count: int
    min_fraction_size: int
    lockup_period: int = Field(0, description="Lockup duration in weeks")
    asset_type: AssetType
    proof_input: ProofInput


class PurchaseRequest(BaseModel):
    """Buyer request to purchase fractions of an existing asset."""

    asset_id: int
    amount: int
    buyer_address: str
    proof_input: ProofInput


class ProofRequest(BaseModel):
    """Standalone proof generation request (eligibility or range)."""

    proof_type: ProofType
    subject_address: str
    inputs: Union[ProofInput, RangeProofInput]


# ---------------------------------------------------------------------------
# Ledger / oracle / prover values
# ---------------------------------------------------------------------------

class AssetMetadata(BaseModel):
    """Asset state as recorded by the ledger.  Read-only to the core."""

    issuer: str
    document_hash: str
    total_value: int
    fraction_count: int
    min_fraction_size: int
    mint_timestamp: int
    oracle_price_at_mint: int
    price_id: str
    verified: bool

    @property
    def exists(self) -> bool:
        """The ledger returns a zeroed struct for unknown identifiers."""
        return self.issuer.lower() != NULL_ADDRESS


class EligibilityProofResult(BaseModel):
    success: bool
    proof: Optional[str] = None
    public_signals: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class PriceQuote(BaseModel):
    """A single oracle price expressed as a fixed-point integer."""

    feed_id: str
    price: int = Field(..., description="Fixed-point price (scaled by 10**-expo)")
    expo: int = Field(DEFAULT_PRICE_EXPO, description="Decimal exponent of price")
    timestamp: int = Field(0, description="Publish time (Unix epoch seconds)")
    confidence: int = Field(0, description="Confidence interval, same scale as price")

    def as_decimal(self) -> Decimal:
        return Decimal(self.price).scaleb(self.expo)


class LedgerEvent(BaseModel):
    """Decoded contract event emitted in a transaction receipt."""

    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class TransactionReceipt(BaseModel):
    """Confirmation data for a mined ledger transaction."""

    tx_hash: str
    block_number: int
    status: int = 1
    events: List[LedgerEvent] = Field(default_factory=list)

    def find_event(self, name: str) -> Optional[LedgerEvent]:
        for event in self.events:
            if event.name == name:
                return event
        return None


class TransactionOutcome(BaseModel):
    """Summary of a ledger call after receipt decoding."""

    success: bool
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def from_receipt(cls, receipt: TransactionReceipt, event_name: str) -> "TransactionOutcome":
        event = receipt.find_event(event_name)
        return cls(
            success=receipt.status == 1,
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number,
            payload=dict(event.args) if event else {},
        )


# ---------------------------------------------------------------------------
# Caller-facing responses
# ---------------------------------------------------------------------------

class CreateAssetResponse(BaseModel):
    success: bool
    asset_id: Optional[int] = None
    tx_hash: Optional[str] = None
    oracle_price: Optional[float] = None
    proof: Optional[str] = None
    error: Optional[str] = None
    status_code: int = Field(201, description="HTTP-style status convention")
    details: Optional[Any] = None


class PurchaseResponse(BaseModel):
    success: bool
    tx_hash: Optional[str] = None
    total_cost: Optional[float] = None
    price_per_fraction: Optional[float] = None
    error: Optional[str] = None
    status_code: int = Field(200, description="HTTP-style status convention")
    details: Optional[Any] = None


class AssetView(BaseModel):
    """Read-side projection of an asset for display."""

    asset_id: int
    metadata: AssetMetadata
    price_per_fraction: float
    oracle_price_at_mint: float


class ProofResponse(BaseModel):
    success: bool
    proof: Optional[str] = None
    public_signals: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    status_code: int = Field(200, description="HTTP-style status convention")
    details: Optional[Any] = None


class OracleUpdateResponse(BaseModel):
    """Outcome of posting price updates on-chain, one transaction per feed.

    A run succeeds when at least one feed was updated; feeds that failed
    are listed with their error text.
    """

    success: bool
    tx_hashes: List[str] = Field(default_factory=list)
    updated_feeds: List[str] = Field(default_factory=list)
    failed_feeds: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None
    status_code: int = Field(200, description="HTTP-style status convention")
