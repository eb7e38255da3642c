"""
Caller-facing error taxonomy.

Every failure surfaced by the orchestration workflows is one of the
classes below.  Each carries a stable ``kind``, an HTTP-style status
code, a single human-readable message, and the original low-level
detail so classification never loses information.
"""
from typing import Any, Dict, Optional


class RWAOrchestrationError(Exception):
    """Base class for all classified workflow failures."""

    kind = "InternalError"
    status_code = 500
    # Only validation and proof failures expose structured detail to callers.
    exposes_detail = False

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_response_fields(self) -> Dict[str, Any]:
        """Fields merged into a failed response envelope."""
        fields: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "status_code": self.status_code,
        }
        if self.exposes_detail and self.detail is not None:
            fields["details"] = self.detail
        return fields

    def __repr__(self) -> str:
        return f"{self.kind}({self.message!r})"


class ValidationError(RWAOrchestrationError):
    kind = "ValidationError"
    status_code = 400
    exposes_detail = True

    def __init__(self, field: str, message: str, detail: Optional[Any] = None):
        super().__init__(message, detail if detail is not None else {"field": field})
        self.field = field


class ProofGenerationError(RWAOrchestrationError):
    kind = "ProofGenerationError"
    status_code = 400
    exposes_detail = True


class AssetNotFoundError(RWAOrchestrationError):
    kind = "AssetNotFoundError"
    status_code = 404

    def __init__(self, asset_id: int, detail: Optional[Any] = None):
        super().__init__(f"Asset {asset_id} not found", detail)
        self.asset_id = asset_id


class InsufficientFundsError(RWAOrchestrationError):
    kind = "InsufficientFundsError"
    status_code = 400


class InvalidProofError(RWAOrchestrationError):
    kind = "InvalidProofError"
    status_code = 400


class InsufficientAvailabilityError(RWAOrchestrationError):
    kind = "InsufficientAvailabilityError"
    status_code = 400


class PaymentMismatchError(RWAOrchestrationError):
    kind = "PaymentMismatchError"
    status_code = 400


class ContractRevertedError(RWAOrchestrationError):
    kind = "ContractRevertedError"
    status_code = 400


class InternalError(RWAOrchestrationError):
    kind = "InternalError"
    status_code = 500


class ConfigError(ValueError):
    """Raised at startup when required configuration is missing or invalid."""
