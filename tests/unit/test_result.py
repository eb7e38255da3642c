"""Tests for the Result wrapper and the error envelope."""
import pytest

from src.rwaflow.core.errors import (
    AssetNotFoundError,
    InternalError,
    ProofGenerationError,
    ValidationError,
)
from src.rwaflow.core.result import Result


def test_capture_success():
    result = Result.capture(lambda: 42, lambda e: InternalError(str(e)))

    assert result.ok
    assert result.unwrap() == 42


def test_capture_classifies_exception():
    def boom():
        raise TimeoutError("rpc timeout")

    result = Result.capture(boom, lambda e: InternalError(str(e)))

    assert not result.ok
    assert isinstance(result.error, InternalError)
    assert result.error.message == "rpc timeout"
    with pytest.raises(InternalError):
        result.unwrap()


def test_validation_error_exposes_field():
    fields = ValidationError("amount", "amount must be positive").to_response_fields()

    assert fields == {
        "success": False,
        "error": "amount must be positive",
        "status_code": 400,
        "details": {"field": "amount"},
    }


def test_proof_error_exposes_detail():
    fields = ProofGenerationError("Eligibility proof generation failed", detail="bad secret").to_response_fields()

    assert fields["details"] == "bad secret"


def test_internal_detail_is_hidden():
    fields = InternalError("boom", detail={"trace": "..."}).to_response_fields()

    assert "details" not in fields
    assert fields["status_code"] == 500


def test_not_found_message():
    err = AssetNotFoundError(12)

    assert err.message == "Asset 12 not found"
    assert err.status_code == 404
