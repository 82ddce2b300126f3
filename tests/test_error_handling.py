"""
Tests for status code classification and APIError.

Tests cover the classification table, message formatting, and the
kind predicates.
"""

import pytest

from musickitkat.enums import ErrorType
from musickitkat.error_handling import classify_status, format_error_message
from musickitkat.exceptions import (
    APIError,
    DecodeError,
    TransportError,
    is_authentication_error,
    is_invalid_request_error,
    is_rate_limit_error,
    is_server_error,
    is_unknown_error,
)
from musickitkat.enums import DecodeFailure
from musickitkat.schemas import ErrorDetail


class TestClassifyStatus:
    """Tests for classify_status."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_authentication(self, status):
        assert classify_status(status) == ErrorType.AUTHENTICATION

    def test_429_is_rate_limit_not_invalid_request(self):
        """429 sits inside 400-499 but must classify as rate limit."""
        assert classify_status(429) == ErrorType.RATE_LIMIT

    def test_rest_of_4xx_is_invalid_request(self):
        for status in range(400, 500):
            if status in (401, 403, 429):
                continue
            assert classify_status(status) == ErrorType.INVALID_REQUEST, status

    def test_5xx_is_server(self):
        for status in range(500, 600):
            assert classify_status(status) == ErrorType.SERVER, status

    @pytest.mark.parametrize("status", [0, -1, 100, 200, 204, 302, 399, 600, 999])
    def test_everything_else_is_unknown(self, status):
        assert classify_status(status) == ErrorType.UNKNOWN


class TestFormatErrorMessage:
    """Tests for format_error_message."""

    def test_joins_title_and_detail(self):
        errors = [
            ErrorDetail(title="Forbidden", detail="no access"),
            ErrorDetail(title="Invalid", detail="bad storefront"),
        ]
        assert format_error_message(403, errors) == (
            "Forbidden: no access; Invalid: bad storefront"
        )

    def test_falls_back_to_status_code(self):
        assert format_error_message(500, []) == "API error (status code: 500)"


class TestAPIError:
    """Tests for APIError."""

    def test_forbidden_scenario(self):
        """Structured 403 body produces the joined message and auth kind."""
        err = APIError(403, [ErrorDetail(
            id="1", title="Forbidden", detail="no access",
            status="403", code="40300",
        )])

        assert err.message == "Forbidden: no access"
        assert err.error_type == ErrorType.AUTHENTICATION
        assert str(err) == "API error (status code: 403): Forbidden: no access"

    def test_error_type_follows_status_code(self):
        """Kind is recomputed from the status code on every read."""
        err = APIError(400)
        assert err.error_type == ErrorType.INVALID_REQUEST

        err.status_code = 429
        assert err.error_type == ErrorType.RATE_LIMIT

    def test_body_does_not_affect_kind(self):
        with_body = APIError(503, [ErrorDetail(title="Unauthorized", detail="x", status="401")])
        without_body = APIError(503)
        assert with_body.error_type == without_body.error_type == ErrorType.SERVER

    def test_str_without_errors(self):
        assert str(APIError(502)) == "API error (status code: 502)"

    def test_str_includes_hint(self):
        err = APIError(401, hint="Developer token is missing")
        assert str(err).endswith("Developer token is missing")

    def test_keeps_body_diagnostic(self):
        diagnostic = DecodeError(DecodeFailure.EMPTY, "empty response body")
        err = APIError(500, body_diagnostic=diagnostic)
        assert err.body_diagnostic.kind == DecodeFailure.EMPTY


class TestPredicates:
    """Tests for the is_*_error predicates."""

    @pytest.mark.parametrize("predicate,status", [
        (is_authentication_error, 401),
        (is_authentication_error, 403),
        (is_invalid_request_error, 404),
        (is_rate_limit_error, 429),
        (is_server_error, 503),
        (is_unknown_error, 302),
    ])
    def test_true_for_matching_kind(self, predicate, status):
        assert predicate(APIError(status)) is True

    def test_rate_limit_is_not_invalid_request(self):
        assert is_invalid_request_error(APIError(429)) is False

    @pytest.mark.parametrize("value", [
        None,
        ValueError("boom"),
        TransportError("down"),
        "401",
        401,
    ])
    def test_false_for_non_api_errors(self, value):
        for predicate in (
            is_authentication_error,
            is_invalid_request_error,
            is_rate_limit_error,
            is_server_error,
            is_unknown_error,
        ):
            assert predicate(value) is False
