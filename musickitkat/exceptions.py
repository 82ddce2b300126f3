"""
MusicKitKat exceptions.

Provides a clean exception hierarchy for token issuance, OAuth
operations, response decoding, and Apple Music API calls.
"""

from typing import TYPE_CHECKING, List, Optional

from .enums import DecodeFailure, ErrorType
from .error_handling import classify_status, format_error_message

if TYPE_CHECKING:
    from .schemas import ErrorDetail


class MusicKitError(Exception):
    """Base exception for all MusicKitKat errors."""
    pass


# =============================================================================
# Developer token
# =============================================================================

class DeveloperTokenError(MusicKitError):
    """Raised when developer token operations fail."""
    pass


class KeyParseError(DeveloperTokenError):
    """Raised when the private key material cannot be parsed."""
    pass


class SigningError(DeveloperTokenError):
    """Raised when the token cannot be signed."""
    pass


class TokenParseError(DeveloperTokenError):
    """Raised when a token is not a structurally valid JWT."""
    pass


class ClaimError(DeveloperTokenError):
    """Raised when a required claim is missing or malformed."""
    pass


# =============================================================================
# User token
# =============================================================================

class UserTokenError(MusicKitError):
    """Raised when user token operations fail."""
    pass


class ExchangeError(UserTokenError):
    """Raised when an authorization code cannot be exchanged."""
    pass


class RefreshError(UserTokenError):
    """Raised when a refresh token is invalid, expired, or revoked."""
    pass


class ServerTokenError(UserTokenError):
    """Raised when the server-side token endpoint rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TokenCacheError(UserTokenError):
    """Raised when a token cache operation fails."""
    pass


class TokenNotFoundError(TokenCacheError):
    """Raised when no token is cached for a user."""

    def __init__(self, user_id: str):
        super().__init__(f"Token not found for user {user_id}")
        self.user_id = user_id


# =============================================================================
# Transport
# =============================================================================

class TransportError(MusicKitError):
    """Raised when a request cannot be sent or no response arrives."""
    pass


class EncodeError(MusicKitError):
    """Raised when a request body cannot be serialized to JSON."""
    pass


class DecodeError(MusicKitError):
    """
    Raised when a response body cannot be decoded.

    Attributes:
        kind: The pipeline stage that rejected the body.
        preview: Truncated body content, for non-JSON bodies.
        offset: Byte offset of a JSON syntax error in the raw body.
        context: Body text surrounding the syntax error.
    """

    def __init__(
        self,
        kind: DecodeFailure,
        message: str,
        preview: Optional[str] = None,
        offset: Optional[int] = None,
        context: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.preview = preview
        self.offset = offset
        self.context = context


class APIError(MusicKitError):
    """
    Raised when the Apple Music API returns a non-2xx response.

    The error kind is derived from the status code on every read.

    Attributes:
        status_code: HTTP status code of the response.
        errors: Structured error objects from the response body.
        body_diagnostic: DecodeError describing why the body could
            not be read as an error document, if it could not.
        hint: Extra guidance for common authentication mistakes.
    """

    def __init__(
        self,
        status_code: int,
        errors: Optional[List["ErrorDetail"]] = None,
        body_diagnostic: Optional[DecodeError] = None,
        hint: Optional[str] = None,
    ):
        self.status_code = status_code
        self.errors = list(errors or [])
        self.body_diagnostic = body_diagnostic
        self.hint = hint
        super().__init__(str(self))

    @property
    def error_type(self) -> ErrorType:
        return classify_status(self.status_code)

    @property
    def message(self) -> str:
        return format_error_message(self.status_code, self.errors)

    def __str__(self) -> str:
        if self.errors:
            text = f"API error (status code: {self.status_code}): {self.message}"
        else:
            text = self.message
        if self.hint:
            text = f"{text}. {self.hint}"
        return text


def is_authentication_error(err: object) -> bool:
    """Return True if err is an APIError of the authentication kind."""
    return isinstance(err, APIError) and err.error_type == ErrorType.AUTHENTICATION


def is_invalid_request_error(err: object) -> bool:
    """Return True if err is an APIError of the invalid-request kind."""
    return isinstance(err, APIError) and err.error_type == ErrorType.INVALID_REQUEST


def is_rate_limit_error(err: object) -> bool:
    """Return True if err is an APIError of the rate-limit kind."""
    return isinstance(err, APIError) and err.error_type == ErrorType.RATE_LIMIT


def is_server_error(err: object) -> bool:
    """Return True if err is an APIError of the server kind."""
    return isinstance(err, APIError) and err.error_type == ErrorType.SERVER


def is_unknown_error(err: object) -> bool:
    """Return True if err is an APIError that could not be classified."""
    return isinstance(err, APIError) and err.error_type == ErrorType.UNKNOWN
