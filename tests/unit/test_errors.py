"""
Module 01 - Error Taxonomy Unit Tests
Tests for core/schemas/errors.py
"""
import pytest
from pydantic import ValidationError

from core.schemas.errors import (
    AirdropError,
    AirdropException,
    CampaignNotFoundError,
    CanonicalizationException,
    DistributionFormatError,
    ErrorCodes,
    IndexOutOfRangeError,
    InvalidInputError,
    TreeAlreadyBuiltError,
    TreeNotBuiltError,
)


class TestExceptionHierarchy:
    """Concrete errors are also the matching builtin exceptions."""

    @pytest.mark.parametrize(
        "exc,builtin",
        [
            (InvalidInputError("bad"), ValueError),
            (IndexOutOfRangeError(5, 3), IndexError),
            (CampaignNotFoundError("c"), KeyError),
            (TreeNotBuiltError("get_root"), RuntimeError),
            (TreeAlreadyBuiltError(), RuntimeError),
        ],
    )
    def test_builtin_bases(self, exc, builtin):
        assert isinstance(exc, builtin)
        assert isinstance(exc, AirdropException)

    def test_codes(self):
        assert InvalidInputError("x").code == ErrorCodes.INVALID_INPUT
        assert IndexOutOfRangeError(1, 1).code == ErrorCodes.INDEX_OUT_OF_RANGE
        assert TreeNotBuiltError("x").code == ErrorCodes.TREE_NOT_BUILT
        assert TreeAlreadyBuiltError().code == ErrorCodes.TREE_ALREADY_BUILT
        assert CampaignNotFoundError("c").code == ErrorCodes.CAMPAIGN_NOT_FOUND
        assert CanonicalizationException("x").code == ErrorCodes.CANONICALIZATION_ERROR
        assert DistributionFormatError("x").code == ErrorCodes.DISTRIBUTION_FORMAT_ERROR


class TestExceptionDetails:
    """Messages and structured details."""

    def test_str_is_message(self):
        # KeyError would otherwise repr-quote the message
        assert str(CampaignNotFoundError("spring")) == "Campaign not found: spring"

    def test_index_details(self):
        exc = IndexOutOfRangeError(7, 3)

        assert exc.details == {"index": 7, "leaf_count": 3}
        assert "7" in exc.message and "3" in exc.message

    def test_field_path(self):
        assert InvalidInputError("bad", field_path="records[2]").details == {"field_path": "records[2]"}

    def test_distribution_path(self):
        assert DistributionFormatError("bad", path="m.json").details["path"] == "m.json"

    def test_repr(self):
        assert repr(TreeAlreadyBuiltError()).startswith("TreeAlreadyBuiltError(code='TREE_ALREADY_BUILT'")


class TestErrorModel:
    """Pydantic error model conversion."""

    def test_exception_to_model(self):
        model = InvalidInputError("bad row", field_path="line 4").to_error_model()

        assert model.code == ErrorCodes.INVALID_INPUT
        assert model.details == {"field_path": "line 4"}
        assert model.retryable is False

    def test_model_to_exception(self):
        exc = AirdropError(code="X", message="boom", retryable=True).to_exception()

        assert isinstance(exc, AirdropException)
        assert exc.code == "X"
        assert exc.retryable is True

    def test_model_forbids_extra(self):
        with pytest.raises(ValidationError):
            AirdropError(code="X", message="m", severity="high")

    def test_model_json(self):
        data = TreeNotBuiltError("get_proof").to_error_model().model_dump()
        assert data["details"] == {"operation": "get_proof"}
