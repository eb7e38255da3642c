"""
Pydantic schemas for signed eligibility attestations.

The commitment prover serializes a ``ProofStatement`` to canonical JSON,
signs it with EIP-191 personal-sign, and returns the signature as the
proof blob.  Strict typing ensures a malformed statement can never reach
the signing step.
"""
import time
from typing import List

from pydantic import BaseModel, Field

from src.rwaflow.core.types import ProofType


class ProofStatement(BaseModel):
    """Unsigned statement attesting that a subject satisfies a predicate.

    Only public values appear here; the secret itself never does.
    """

    proof_type: ProofType
    subject: str = Field(..., description="Checksummed subject address")
    public_signals: List[str] = Field(
        ...,
        description="Public inputs (commitment, nullifier hash or range bounds)",
    )
    timestamp: int = Field(
        default_factory=lambda: int(time.time()),
        description="Statement creation time (Unix epoch seconds)",
    )


class SignedProof(BaseModel):
    """Statement plus its EIP-191 signature and the attesting address."""

    statement: ProofStatement
    signature: str = Field(
        ...,
        description="0x-prefixed EIP-191 signature over the JSON statement",
    )
    signer_address: str
