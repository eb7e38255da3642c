"""Shared fixtures built from the doubles in ``doubles.py``."""
import pytest

from doubles import BUYER, FEED_ID, ISSUER, FakeLedger, FakeOracle, FakeProver
from src.rwaflow.core.service import OrchestrationService
from src.rwaflow.core.types import AssetType, CreateAssetRequest, ProofInput, PurchaseRequest
from src.rwaflow.utils.config import PaymentConfig


@pytest.fixture
def prover():
    return FakeProver()


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def service(prover, oracle, ledger):
    return OrchestrationService(
        prover=prover,
        oracle=oracle,
        ledger=ledger,
        default_feed_id=FEED_ID,
        payment=PaymentConfig(scale_factor=1_000_000, precision=6),
    )


@pytest.fixture
def proof_input():
    return ProofInput(commitment="0x" + "11" * 32, secret="issuer_secret", nullifier="n-1")


@pytest.fixture
def create_request(proof_input):
    return CreateAssetRequest(
        issuer_address=ISSUER,
        document_hash="h1",
        total_value=1_000_000,
        fraction_count=100,
        min_fraction_size=1,
        lockup_period=4,
        asset_type=AssetType.INVOICE,
        proof_input=proof_input,
    )


@pytest.fixture
def purchase_request(proof_input):
    return PurchaseRequest(
        asset_id=7,
        amount=5,
        buyer_address=BUYER,
        proof_input=proof_input,
    )
