"""Tests for the commitment prover adapter."""
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from src.rwaflow.clients.adapters.commitment_prover import CommitmentProver, compute_commitment
from src.rwaflow.clients.schemas import ProofStatement
from src.rwaflow.core.types import ProofInput, ProofType, RangeProofInput
from doubles import ISSUER

# Well-known development key (Hardhat account #0).
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def prover():
    return CommitmentProver(private_key=DEV_KEY)


def eligibility_input(secret="issuer_secret_12345", commitment=None):
    return ProofInput(
        commitment=commitment or compute_commitment(secret),
        secret=secret,
        nullifier="nullifier-1",
    )


def test_requires_private_key():
    with pytest.raises(ValueError):
        CommitmentProver(private_key="")


def test_key_without_prefix_is_accepted():
    assert CommitmentProver(private_key=DEV_KEY[2:]).attester == DEV_ADDRESS


def test_commitment_is_keccak_of_secret():
    commitment = compute_commitment("buyer_secret_98765")

    assert commitment.startswith("0x")
    assert len(commitment) == 66


def test_eligibility_proof_succeeds_for_matching_secret(prover):
    inputs = eligibility_input()

    result = prover.generate_proof(ProofType.ELIGIBILITY, ISSUER, inputs)

    assert result.success is True
    assert result.proof.startswith("0x")
    assert result.public_signals[0] == inputs.commitment
    assert result.error is None


def test_secret_never_appears_in_public_signals(prover):
    result = prover.generate_proof(ProofType.ELIGIBILITY, ISSUER, eligibility_input())

    assert all("issuer_secret" not in s for s in result.public_signals)


def test_wrong_secret_fails_without_raising(prover):
    inputs = eligibility_input(commitment=compute_commitment("something else"))

    result = prover.generate_proof(ProofType.ELIGIBILITY, ISSUER, inputs)

    assert result.success is False
    assert result.proof is None
    assert "commitment" in result.error


def test_signature_recovers_to_attester(prover):
    statement = ProofStatement(
        proof_type=ProofType.ELIGIBILITY,
        subject=ISSUER,
        public_signals=["0x01"],
        timestamp=1_700_000_000,
    )

    signed = prover.sign(statement)

    message = encode_defunct(text=statement.model_dump_json())
    assert Account.recover_message(message, signature=signed.signature) == DEV_ADDRESS
    assert signed.signer_address == DEV_ADDRESS


class TestRangeProof:
    def test_amount_inside_bounds(self, prover):
        inputs = RangeProofInput(token_id=7, actual_amount=50, min_range=10, max_range=100)

        result = prover.generate_proof(ProofType.RANGE, ISSUER, inputs)

        assert result.success is True
        assert result.public_signals == ["7", "10", "100"]

    def test_amount_outside_bounds(self, prover):
        inputs = RangeProofInput(token_id=7, actual_amount=500, min_range=10, max_range=100)

        result = prover.generate_proof(ProofType.RANGE, ISSUER, inputs)

        assert result.success is False
        assert "within" in result.error

    def test_range_proof_needs_range_inputs(self, prover):
        result = prover.generate_proof(ProofType.RANGE, ISSUER, eligibility_input())

        assert result.success is False


def test_unknown_proof_type(prover):
    result = prover.generate_proof("membership", ISSUER, eligibility_input())

    assert result.success is False
    assert "Invalid proof type" in result.error
