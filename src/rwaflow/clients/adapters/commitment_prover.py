"""
Commitment-based eligibility prover with EIP-191 attestation.

Stands in for a Groth16 proving backend.  For an eligibility proof the
prover checks that ``keccak256(secret)`` equals the caller's commitment,
derives a nullifier hash, and signs a statement over the public values
with an Ethereum key.  The signature is the proof blob; the statement's
public values are returned as public signals.

Range proofs check that the actual amount lies inside the requested
bounds and attest only to the bounds.

Failures are reported through ``EligibilityProofResult`` and never raised.
"""
from typing import Union

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak
from loguru import logger

from src.rwaflow.clients.base import EligibilityProofClient
from src.rwaflow.clients.schemas import ProofStatement, SignedProof
from src.rwaflow.core.types import (
    EligibilityProofResult,
    ProofInput,
    ProofType,
    RangeProofInput,
)


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def compute_commitment(secret: str) -> str:
    """keccak256 of the UTF-8 secret, as registered on the verifier."""
    return _hex(keccak(text=secret))


class CommitmentProver(EligibilityProofClient):
    """Signs eligibility statements after checking the commitment opening."""

    def __init__(self, private_key: str):
        """
        Args:
            private_key: Hex-encoded attester key (with or without ``0x``).

        Raises:
            ValueError: If *private_key* is empty or ``None``.
        """
        if not private_key:
            raise ValueError("Private key is required for CommitmentProver.")

        if not private_key.startswith("0x"):
            private_key = "0x" + private_key

        self._account = Account.from_key(private_key)
        logger.info(f"CommitmentProver initialised. Attester: {self._account.address}")

    @property
    def attester(self) -> str:
        return self._account.address

    def generate_proof(
        self,
        proof_type: ProofType,
        subject_address: str,
        inputs: Union[ProofInput, RangeProofInput],
    ) -> EligibilityProofResult:
        label = getattr(proof_type, "value", proof_type)
        logger.info(f"Generating {label} proof for {subject_address}")
        try:
            if proof_type == ProofType.ELIGIBILITY:
                statement = self._eligibility_statement(subject_address, inputs)
            elif proof_type == ProofType.RANGE:
                statement = self._range_statement(subject_address, inputs)
            else:
                raise ValueError(f"Invalid proof type: {proof_type}")
        except ValueError as e:
            logger.error(f"Proof generation failed: {e}")
            return EligibilityProofResult(success=False, error=str(e))

        signed = self.sign(statement)
        logger.success(f"Proof attested by {self._account.address[:10]}...")

        return EligibilityProofResult(
            success=True,
            proof=signed.signature,
            public_signals=statement.public_signals,
        )

    def sign(self, statement: ProofStatement) -> SignedProof:
        """EIP-191 personal-sign over the canonical JSON statement."""
        message = encode_defunct(text=statement.model_dump_json())
        signed_message = self._account.sign_message(message)
        return SignedProof(
            statement=statement,
            signature=_hex(signed_message.signature),
            signer_address=self._account.address,
        )

    @staticmethod
    def _eligibility_statement(subject: str, inputs) -> ProofStatement:
        if not isinstance(inputs, ProofInput):
            raise ValueError("Eligibility proof requires commitment, secret and nullifier")
        if not inputs.commitment or not inputs.secret:
            raise ValueError("Commitment and secret are required for eligibility proof")

        if compute_commitment(inputs.secret) != inputs.commitment.lower():
            raise ValueError("Secret does not open the supplied commitment")

        nullifier_hash = _hex(keccak(text=f"{inputs.nullifier}:{subject.lower()}"))
        return ProofStatement(
            proof_type=ProofType.ELIGIBILITY,
            subject=subject,
            public_signals=[inputs.commitment.lower(), nullifier_hash],
        )

    @staticmethod
    def _range_statement(subject: str, inputs) -> ProofStatement:
        if not isinstance(inputs, RangeProofInput):
            raise ValueError(
                "token_id, actual_amount, min_range and max_range are required "
                "for range proof"
            )
        if not inputs.min_range <= inputs.actual_amount <= inputs.max_range:
            raise ValueError("actual_amount must be within [min_range, max_range]")

        return ProofStatement(
            proof_type=ProofType.RANGE,
            subject=subject,
            public_signals=[
                str(inputs.token_id),
                str(inputs.min_range),
                str(inputs.max_range),
            ],
        )
