"""
Unit tests for request validation error rendering.
"""

import pytest
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.api.errors import field_errors
from src.api.models import UserParams


def _error(loc: tuple, msg: str) -> dict:
    return {"loc": loc, "msg": msg, "type": "value_error"}


class TestFieldErrors:
    def test_nested_user_field_reported_by_name(self) -> None:
        exc = RequestValidationError([_error(("body", "user", "email"), "bad email")])
        assert field_errors(exc) == {"email": ["bad email"]}

    def test_missing_envelope_reported_as_user(self) -> None:
        exc = RequestValidationError([_error(("body", "user"), "Field required")])
        assert field_errors(exc) == {"user": ["Field required"]}

    def test_list_item_errors_grouped_under_field(self) -> None:
        exc = RequestValidationError(
            [
                _error(("body", "user", "interests", 0), "not a string"),
                _error(("body", "user", "interests", 2), "not a string"),
            ]
        )
        assert field_errors(exc) == {"interests": ["not a string", "not a string"]}

    def test_query_param_errors(self) -> None:
        exc = RequestValidationError([_error(("query", "zip"), "bad zip")])
        assert field_errors(exc) == {"zip": ["bad zip"]}

    def test_body_level_error_reported_as_base(self) -> None:
        exc = RequestValidationError([_error(("body",), "invalid JSON")])
        assert field_errors(exc) == {"base": ["invalid JSON"]}

    def test_model_validation_error_reported_by_field(self) -> None:
        """Errors from validating user params directly have no envelope."""
        with pytest.raises(ValidationError) as exc_info:
            UserParams.model_validate({"email": "not-an-email", "mentor": "maybe"})

        errors = field_errors(exc_info.value)

        assert set(errors) == {"email", "mentor"}
        assert errors["email"][0].startswith("value is not a valid email address")
