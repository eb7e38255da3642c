"""
Maps low-level failure signals onto the caller-facing error taxonomy.

Classification is a pure function of the raised exception.  Errors that
are already classified pass through untouched, so an error is classified
exactly once, at the first catch point that observes it.

Revert reasons are free text.  The substring table below is the only
place that knows about them; extend it rather than adding string checks
to the workflows.
"""
from typing import Optional, Tuple, Type

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from src.rwaflow.core.errors import (
    AssetNotFoundError,
    ContractRevertedError,
    InsufficientAvailabilityError,
    InsufficientFundsError,
    InternalError,
    InvalidProofError,
    PaymentMismatchError,
    ProofGenerationError,
    RWAOrchestrationError,
)

# (revert substring, error class, user-facing message); first match wins.
REVERT_REASON_TABLE: Tuple[Tuple[str, Type[RWAOrchestrationError], str], ...] = (
    (
        "InsufficientFractionsAvailable",
        InsufficientAvailabilityError,
        "Not enough fractions are available for this purchase.",
    ),
    (
        "InvalidProof",
        InvalidProofError,
        "Eligibility proof was rejected by the contract.",
    ),
    (
        "PaymentMismatch",
        PaymentMismatchError,
        "Payment does not match the required cost.",
    ),
)

INSUFFICIENT_FUNDS_MARKERS = ("insufficient funds",)

# Call-level failures produced when the target asset does not exist.
MISSING_TARGET_MARKERS = (
    "could not decode",
    "call_exception",
    "asset not found",
    "assetnotfound",
    "nonexistent",
)


def error_text(exc: BaseException) -> str:
    """Best-effort human-readable text for any exception."""
    if isinstance(exc, RWAOrchestrationError):
        return exc.message
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    if exc.args and isinstance(exc.args[0], dict):
        # JSON-RPC error payloads arrive as {"code": ..., "message": ...}.
        return str(exc.args[0].get("message", exc.args[0]))
    return str(exc) or exc.__class__.__name__


def is_insufficient_funds(exc: BaseException) -> bool:
    text = error_text(exc).lower()
    return any(marker in text for marker in INSUFFICIENT_FUNDS_MARKERS)


def is_revert(exc: BaseException) -> bool:
    return isinstance(exc, ContractLogicError) or "revert" in error_text(exc).lower()


def classify_revert(reason: str) -> RWAOrchestrationError:
    """Map a revert reason onto a specific error, else ``ContractRevertedError``."""
    for needle, error_cls, message in REVERT_REASON_TABLE:
        if needle in reason:
            return error_cls(message, detail=reason)
    return ContractRevertedError(f"Transaction reverted: {reason}", detail=reason)


def is_missing_target(exc: BaseException) -> bool:
    """Whether a metadata lookup failure means the asset does not exist."""
    if isinstance(exc, BadFunctionCallOutput):
        return True
    text = error_text(exc).lower()
    if any(marker in text for marker in MISSING_TARGET_MARKERS):
        return True
    # A bare revert with no reason data is how the factory rejects unknown ids.
    if isinstance(exc, ContractLogicError):
        data = getattr(exc, "data", None)
        return not data or data == "0x"
    return False


def classify_create_failure(exc: Exception) -> RWAOrchestrationError:
    """Classification for the mint path.

    The mint path only distinguishes funding problems and reverts; it
    does not interpret revert reasons.
    """
    if isinstance(exc, RWAOrchestrationError):
        return exc
    text = error_text(exc)
    if is_insufficient_funds(exc):
        return InsufficientFundsError(
            "Insufficient funds to pay the oracle update fee.", detail=text
        )
    if is_revert(exc):
        return ContractRevertedError(f"Transaction reverted: {text}", detail=text)
    return InternalError(text, detail=text)


def classify_purchase_failure(exc: Exception) -> RWAOrchestrationError:
    """Classification for the purchase path, including revert reasons."""
    if isinstance(exc, RWAOrchestrationError):
        return exc
    text = error_text(exc)
    if is_insufficient_funds(exc):
        return InsufficientFundsError(
            "Insufficient funds to cover the purchase cost.", detail=text
        )
    if is_revert(exc):
        return classify_revert(text)
    return InternalError(text, detail=text)


def classify_lookup_failure(asset_id: int):
    """Build the classifier for the metadata lookup of *asset_id*.

    A lookup is a read, so revert reasons are not interpreted: anything
    other than a missing target keeps its original text.
    """

    def classify(exc: Exception) -> RWAOrchestrationError:
        if isinstance(exc, RWAOrchestrationError):
            return exc
        text = error_text(exc)
        if is_missing_target(exc):
            return AssetNotFoundError(asset_id, detail=text)
        return InternalError(text, detail=text)

    return classify


def classify_proof_failure(exc: Exception) -> RWAOrchestrationError:
    if isinstance(exc, RWAOrchestrationError):
        return exc
    return ProofGenerationError("Eligibility proof generation failed", detail=error_text(exc))


def proof_failure(detail: Optional[str]) -> ProofGenerationError:
    """Error for a prover that reported failure or returned no proof blob."""
    return ProofGenerationError(
        "Eligibility proof generation failed",
        detail=detail or "Proof subsystem returned no proof",
    )
