"""
Structural and semantic validation of inbound requests.

Runs synchronously before any network call.  Validation is pure: it never
mutates the request and calling it twice yields the same outcome.  The
first violation found is raised as a ``ValidationError`` naming the
offending field.
"""
from typing import Any, Type, TypeVar

from eth_utils import is_address, to_checksum_address
from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.rwaflow.core.errors import ValidationError
from src.rwaflow.core.result import Result
from src.rwaflow.core.types import CreateAssetRequest, PurchaseRequest

MAX_DOCUMENT_HASH_LENGTH = 256
MAX_LOCKUP_WEEKS = 520

M = TypeVar("M", bound=BaseModel)


def normalize_address(field: str, address: str) -> str:
    """Return the checksummed form of *address*.

    Acceptance is case-insensitive: the address is lowercased before the
    format check so that a non-checksummed mixed-case input is not
    rejected merely for its casing.

    Raises:
        ValidationError: If *address* is not a 20-byte hex address.
    """
    if not isinstance(address, str) or not address.startswith(("0x", "0X")):
        raise ValidationError(field, f"Invalid {field}: expected 0x-prefixed hex address")

    lowered = "0x" + address[2:].lower()
    if not is_address(lowered):
        raise ValidationError(field, f"Invalid {field}: {address}")
    return to_checksum_address(lowered)


def parse_request(model: Type[M], data: Any) -> M:
    """Build a request model from raw JSON-like *data*.

    Raises:
        ValidationError: With one ``{field, message}`` entry per schema
                         violation when *data* does not fit *model*.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        field = details[0]["field"] if details else "request"
        raise ValidationError(field, "Validation failed", detail=details) from e


def _require_positive(field: str, value: int, label: str) -> None:
    if value is None or value <= 0:
        raise ValidationError(field, f"{label} must be greater than 0")


class RequestValidator:
    """Stateless validator for create and purchase requests."""

    def validate_create(self, request: CreateAssetRequest) -> None:
        """Check a create request.

        Raises:
            ValidationError: On the first invalid field.
        """
        normalize_address("issuer_address", request.issuer_address)

        if not request.document_hash:
            raise ValidationError("document_hash", "Document hash is required")
        if len(request.document_hash) > MAX_DOCUMENT_HASH_LENGTH:
            raise ValidationError("document_hash", "Document hash too long")

        _require_positive("total_value", request.total_value, "Total value")
        _require_positive("fraction_count", request.fraction_count, "Fraction count")
        _require_positive(
            "min_fraction_size", request.min_fraction_size, "Min fraction size"
        )

        if request.min_fraction_size > request.fraction_count:
            raise ValidationError(
                "min_fraction_size",
                "Minimum fraction size cannot exceed total fraction count",
            )

        if not 0 <= request.lockup_period <= MAX_LOCKUP_WEEKS:
            raise ValidationError(
                "lockup_period",
                f"Lockup period must be between 0 and {MAX_LOCKUP_WEEKS} weeks",
            )

    def validate_purchase(self, request: PurchaseRequest) -> None:
        """Check a purchase request.

        Raises:
            ValidationError: On the first invalid field.
        """
        if request.asset_id is None or request.asset_id < 0:
            raise ValidationError("asset_id", "Asset ID cannot be negative")
        _require_positive("amount", request.amount, "Amount")
        normalize_address("buyer_address", request.buyer_address)

    def check_create(self, request: CreateAssetRequest) -> Result[None]:
        return self._check(self.validate_create, request)

    def check_purchase(self, request: PurchaseRequest) -> Result[None]:
        return self._check(self.validate_purchase, request)

    @staticmethod
    def _check(validate, request) -> Result[None]:
        try:
            validate(request)
        except ValidationError as e:
            logger.warning(f"Request rejected: {e.message}")
            return Result.failure(e)
        return Result.success(None)
