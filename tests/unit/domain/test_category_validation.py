"""Unit tests for magazenn/domain/categories/validation.py module."""

import pytest

from magazenn.core.exceptions import ErrorCode, ValidationError
from magazenn.domain.categories.validation import CategoryData, validate_category


@pytest.mark.unit
class TestValidateCategory:
    """Tests for the category field constraints."""

    @pytest.mark.parametrize("name", ["abc", "x" * 50, "Home Appliances"])
    def test_valid_names(self, name: str) -> None:
        result = validate_category({"name": name})

        assert isinstance(result, CategoryData)
        assert result.name == name
        assert result.description is None

    @pytest.mark.parametrize("name", ["", "ab", "x" * 51])
    def test_name_length_violations(self, name: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_category({"name": name})

        error = exc_info.value
        assert error.error_code == ErrorCode.VALIDATION_ERROR.value
        assert list(error.context["validation_errors"]) == ["name"]

    def test_missing_name(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_category({"description": "No name"})

        assert "name" in exc_info.value.context["validation_errors"]

    def test_null_name(self) -> None:
        with pytest.raises(ValidationError):
            validate_category({"name": None})

    def test_description_limit(self) -> None:
        assert validate_category({"name": "Books", "description": "d" * 300})

        with pytest.raises(ValidationError) as exc_info:
            validate_category({"name": "Books", "description": "d" * 301})

        assert list(exc_info.value.context["validation_errors"]) == ["description"]

    def test_unknown_keys_ignored(self) -> None:
        result = validate_category({"id": "whatever", "name": "Books", "extra": 1})
        assert result.model_dump() == {"name": "Books", "description": None}

    def test_all_violations_reported(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_category({"name": "x", "description": "d" * 301})

        assert set(exc_info.value.context["validation_errors"]) == {
            "name",
            "description",
        }

    def test_cause_is_pydantic_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_category({"name": "x"})

        assert type(exc_info.value.cause).__name__ == "ValidationError"
        assert exc_info.value.cause is not exc_info.value
