"""
Enums for error kinds, decode failure stages, and log levels.

Single source of truth for string constants used across the
classifier, the decode pipeline, and the HTTP transport.
"""

from enum import IntEnum, StrEnum


class ErrorType(StrEnum):
    """Classified kinds of API failures."""
    AUTHENTICATION = "authentication"
    INVALID_REQUEST = "invalid_request"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    UNKNOWN = "unknown"


class DecodeFailure(StrEnum):
    """Stages of the response decode pipeline that can fail."""
    EMPTY = "empty"
    WHITESPACE = "whitespace"
    NON_JSON = "non_json"
    SCHEMA_MISMATCH = "schema_mismatch"


class LogLevel(IntEnum):
    """Verbosity of the HTTP client's diagnostic logging."""
    NONE = 0
    ERROR = 1
    INFO = 2
    DEBUG = 3
