"""Tests for request validation."""
import pytest

from src.rwaflow.core.errors import ValidationError
from src.rwaflow.core.types import CreateAssetRequest, PurchaseRequest
from src.rwaflow.core.validator import RequestValidator, normalize_address, parse_request
from doubles import BUYER, ISSUER


@pytest.fixture
def validator():
    return RequestValidator()


class TestCreateValidation:
    def test_valid_request_passes(self, validator, create_request):
        validator.validate_create(create_request)

    @pytest.mark.parametrize("field", ["total_value", "fraction_count", "min_fraction_size"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_amounts_rejected(self, validator, create_request, field, value):
        bad = create_request.model_copy(update={field: value})

        with pytest.raises(ValidationError) as exc_info:
            validator.validate_create(bad)

        assert exc_info.value.field == field
        assert exc_info.value.status_code == 400

    def test_empty_document_hash_rejected(self, validator, create_request):
        bad = create_request.model_copy(update={"document_hash": ""})

        with pytest.raises(ValidationError, match="Document hash is required"):
            validator.validate_create(bad)

    def test_invalid_address_rejected(self, validator, create_request):
        bad = create_request.model_copy(update={"issuer_address": "0x1234"})

        with pytest.raises(ValidationError) as exc_info:
            validator.validate_create(bad)

        assert exc_info.value.field == "issuer_address"

    def test_address_case_does_not_matter(self, validator, create_request):
        for variant in (ISSUER.lower(), "0x" + ISSUER[2:].upper(), "0x52908400098527886e0F7030069857D2E4169ee7"):
            validator.validate_create(create_request.model_copy(update={"issuer_address": variant}))

    def test_min_fraction_size_cannot_exceed_count(self, validator, create_request):
        bad = create_request.model_copy(update={"min_fraction_size": 101})

        with pytest.raises(ValidationError) as exc_info:
            validator.validate_create(bad)

        assert exc_info.value.field == "min_fraction_size"

    def test_lockup_period_bounds(self, validator, create_request):
        validator.validate_create(create_request.model_copy(update={"lockup_period": 520}))
        with pytest.raises(ValidationError):
            validator.validate_create(create_request.model_copy(update={"lockup_period": 521}))
        with pytest.raises(ValidationError):
            validator.validate_create(create_request.model_copy(update={"lockup_period": -1}))

    def test_validation_is_idempotent(self, validator, create_request):
        bad = create_request.model_copy(update={"fraction_count": 0})
        before = bad.model_dump()

        first = validator.check_create(bad)
        second = validator.check_create(bad)

        assert not first.ok and not second.ok
        assert first.error.kind == second.error.kind == "ValidationError"
        assert first.error.message == second.error.message
        assert bad.model_dump() == before


class TestPurchaseValidation:
    def test_valid_purchase(self, validator, purchase_request):
        assert validator.check_purchase(purchase_request).ok

    def test_zero_amount_rejected(self, validator, purchase_request):
        result = validator.check_purchase(purchase_request.model_copy(update={"amount": 0}))

        assert result.error.field == "amount"

    def test_asset_zero_is_allowed(self, validator, purchase_request):
        assert validator.check_purchase(purchase_request.model_copy(update={"asset_id": 0})).ok

    def test_negative_asset_id_rejected(self, validator, purchase_request):
        result = validator.check_purchase(purchase_request.model_copy(update={"asset_id": -3}))

        assert result.error.field == "asset_id"


def test_normalize_address_returns_checksum():
    assert normalize_address("buyer_address", BUYER.lower()) == BUYER


def test_parse_request_reports_every_schema_violation():
    with pytest.raises(ValidationError) as exc_info:
        parse_request(PurchaseRequest, {"asset_id": "abc", "buyer_address": BUYER})

    fields = {d["field"] for d in exc_info.value.detail}
    assert {"asset_id", "amount", "proof_input"} <= fields
    assert exc_info.value.to_response_fields()["details"] == exc_info.value.detail


def test_parse_request_accepts_json_shape(create_request):
    parsed = parse_request(CreateAssetRequest, create_request.model_dump(mode="json"))

    assert parsed == create_request
