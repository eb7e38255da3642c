"""
In-memory collaborator doubles and shared sample values.

The doubles record every call in ``calls`` so tests can assert which
collaborators a workflow reached and with what arguments.
"""
from typing import Dict, List, Optional

from src.rwaflow.clients.base import EligibilityProofClient, LedgerClient, PriceOracleClient
from src.rwaflow.core.types import (
    AssetMetadata,
    EligibilityProofResult,
    LedgerEvent,
    PriceQuote,
    TransactionReceipt,
)

ISSUER = "0x52908400098527886E0F7030069857D2E4169EE7"
BUYER = "0x8617E340B3D01FA5F11F306F4090FD50E238070D"
FEED_ID = "0x" + "ff" * 32
TX_HASH = "0x" + "ab" * 32


class FakeProver(EligibilityProofClient):
    def __init__(self, result: Optional[EligibilityProofResult] = None, exc: Exception = None):
        self.result = result or EligibilityProofResult(
            success=True, proof="0xproof", public_signals=["0xc0ffee"]
        )
        self.exc = exc
        self.calls: List[tuple] = []

    def generate_proof(self, proof_type, subject_address, inputs):
        self.calls.append((proof_type, subject_address, inputs))
        if self.exc:
            raise self.exc
        return self.result


class FakeOracle(PriceOracleClient):
    def __init__(self, latest_price: int = 250_000_000_000, latest_exc: Exception = None):
        self.latest_price = latest_price
        self.latest_exc = latest_exc
        self.update_exc: Optional[Exception] = None
        self.calls: List[tuple] = []

    def get_price_update_data(self, feed_ids):
        self.calls.append(("get_price_update_data", list(feed_ids)))
        if self.update_exc:
            raise self.update_exc
        return ["0xdeadbeef"]

    def get_latest_price(self, feed_id):
        self.calls.append(("get_latest_price", feed_id))
        if self.latest_exc:
            raise self.latest_exc
        return PriceQuote(feed_id=feed_id, price=self.latest_price, timestamp=1_700_000_000)

    def fetch_latest_prices(self, feed_ids):
        self.calls.append(("fetch_latest_prices", list(feed_ids)))
        return [PriceQuote(feed_id=f, price=self.latest_price) for f in feed_ids]


def make_metadata(**overrides) -> AssetMetadata:
    fields = dict(
        issuer=ISSUER,
        document_hash="h1",
        total_value=100_000,
        fraction_count=1_000,
        min_fraction_size=1,
        mint_timestamp=1_700_000_000,
        oracle_price_at_mint=250_000_000_000,
        price_id=FEED_ID,
        verified=True,
    )
    fields.update(overrides)
    return AssetMetadata(**fields)


class FakeLedger(LedgerClient):
    def __init__(self):
        self.fee = 10
        self.minted_id: Optional[int] = 7
        self.price_at_mint = 250_000_000_000
        self.metadata = make_metadata()
        self.metadata_exc: Optional[Exception] = None
        self.mint_exc: Optional[Exception] = None
        self.purchase_exc: Optional[Exception] = None
        self.unsupported_feeds: List[str] = []
        self.post_exc: Dict[str, Exception] = {}
        self.calls: List[tuple] = []

    def get_update_fee(self, update_data):
        self.calls.append(("get_update_fee", list(update_data)))
        return self.fee

    def mint_asset(self, **kwargs):
        self.calls.append(("mint_asset", kwargs))
        if self.mint_exc:
            raise self.mint_exc
        events = []
        if self.minted_id is not None:
            events.append(LedgerEvent(name="AssetMinted", args={"tokenId": self.minted_id}))
        return TransactionReceipt(tx_hash=TX_HASH, block_number=100, events=events)

    def purchase_fraction(self, **kwargs):
        self.calls.append(("purchase_fraction", kwargs))
        if self.purchase_exc:
            raise self.purchase_exc
        return TransactionReceipt(tx_hash=TX_HASH, block_number=101)

    def is_supported_feed(self, feed_id):
        self.calls.append(("is_supported_feed", feed_id))
        return feed_id not in self.unsupported_feeds

    def post_price_update(self, feed_id, update_data, payment):
        self.calls.append(
            ("post_price_update", {"feed_id": feed_id, "update_data": list(update_data), "payment": payment})
        )
        if feed_id in self.post_exc:
            raise self.post_exc[feed_id]
        return TransactionReceipt(tx_hash="0x" + feed_id[-4:].rjust(64, "0"), block_number=102)

    def get_asset_metadata(self, asset_id):
        self.calls.append(("get_asset_metadata", asset_id))
        if self.metadata_exc:
            raise self.metadata_exc
        return self.metadata

    def get_price_at_mint(self, asset_id):
        self.calls.append(("get_price_at_mint", asset_id))
        return self.price_at_mint

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


