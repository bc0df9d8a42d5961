"""Tests for the request validation message builder."""

import pytest

from subscription_api.app.api.errors import describe_validation_errors
from subscription_api.app.core.errors import (
    InvalidDataError,
    MissingRequiredFieldError,
    NotFoundError,
    StorageError,
)


@pytest.mark.parametrize(
    "errors, expected",
    [
        ([{"type": "json_invalid", "loc": ("body", 1), "msg": "JSON decode error"}], "invalid JSON format"),
        ([{"type": "model_attributes_type", "loc": ("body",), "msg": "bad"}], "invalid JSON format"),
        ([{"type": "int_type", "loc": ("body", "price"), "msg": "Input should be a valid integer"}], "invalid JSON format"),
        ([{"type": "string_type", "loc": ("body", "user_id"), "msg": "Input should be a valid string"}], "invalid JSON format"),
        ([{"type": "less_than_equal", "loc": ("path", "subscription_id"), "msg": "too big"}], "invalid subscription ID"),
        ([{"type": "int_parsing", "loc": ("path", "subscription_id"), "msg": "bad"}], "invalid subscription ID"),
        ([{"type": "missing", "loc": ("body", "price"), "msg": "Field required"}], "price is required"),
        (
            [{"type": "int_parsing", "loc": ("query", "limit"), "msg": "Input should be a valid integer"}],
            "invalid value for limit: Input should be a valid integer",
        ),
        ([], "invalid request"),
    ],
)
def test_describe_validation_errors(errors: list, expected: str) -> None:
    assert describe_validation_errors(errors) == expected


def test_error_defaults() -> None:
    assert NotFoundError().status_code == 404
    assert InvalidDataError().message == "invalid data provided"
    assert InvalidDataError("custom").message == "custom"
    assert MissingRequiredFieldError("user_id").message == "user_id is required"
    assert StorageError().status_code == 500
