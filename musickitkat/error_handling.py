"""
Apple Music API error classification.

Maps HTTP status codes to error kinds and formats the human-readable
message carried by APIError. Both functions are pure: the same status
code always classifies the same way, whatever the response body holds.
"""

from typing import Iterable, Protocol

from .enums import ErrorType


class _ErrorEntry(Protocol):
    title: str
    detail: str


def classify_status(status_code: int) -> ErrorType:
    """
    Classify an HTTP status code into an error category.

    429 is tested before the generic 4xx range, which also contains it.

    Args:
        status_code: The HTTP status code of the failed response.

    Returns:
        The ErrorType for the status code.
    """
    if status_code in (401, 403):
        return ErrorType.AUTHENTICATION
    if status_code == 429:
        return ErrorType.RATE_LIMIT
    if 400 <= status_code <= 499:
        return ErrorType.INVALID_REQUEST
    if 500 <= status_code <= 599:
        return ErrorType.SERVER
    return ErrorType.UNKNOWN


def format_error_message(status_code: int, errors: Iterable[_ErrorEntry]) -> str:
    """Join "<title>: <detail>" entries, or fall back to the status code."""
    messages = [f"{err.title}: {err.detail}" for err in errors]
    if not messages:
        return f"API error (status code: {status_code})"
    return "; ".join(messages)
