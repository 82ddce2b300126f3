"""
MusicKitKat: a client SDK for the Apple Music API.

Architecture:
    - developer_token.py: ES256 developer token issuance and expiry checks
    - credentials.py: OAuthCredentials for the user authorization flow
    - auth.py: UserTokenManager for OAuth and user token management
    - cache.py: TokenCache interface and in-memory caches
    - config.py: ClientConfig settings
    - http_client.py: MusicKitHTTPClient for signed requests
    - decoding.py: Ordered response body decode pipeline
    - error_handling.py: Status code classification
    - client.py: MusicKitClient facade
    - exceptions.py: Exception hierarchy

Usage:
    from musickitkat import (
        MusicKitClient,
        OAuthCredentials,
        issue_developer_token,
    )

    token = issue_developer_token(team_id, key_id, pem_bytes, music_id)
    client = MusicKitClient(developer_token=token)
    results = client.get("catalog/us/search", params={"term": "miles davis"})
"""

import logging

from .config import (
    __version__,
    ClientConfig,
    DEFAULT_API_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from .enums import DecodeFailure, ErrorType, LogLevel

# Developer tokens
from .developer_token import (
    DEFAULT_TOKEN_EXPIRATION,
    DeveloperToken,
    DeveloperTokenIssuer,
    is_token_expired,
    issue_developer_token,
)

# User tokens
from .credentials import OAuthCredentials
from .cache import LockingMemoryTokenCache, MemoryTokenCache, TokenCache
from .auth import UserToken, UserTokenManager
from .schemas import ErrorDetail, ErrorResponse, UserTokenResponse

# Transport
from .http_client import MusicKitHTTPClient
from .client import MusicKitClient
from .error_handling import classify_status, format_error_message

# Exceptions
from .exceptions import (
    MusicKitError,
    DeveloperTokenError,
    KeyParseError,
    SigningError,
    TokenParseError,
    ClaimError,
    UserTokenError,
    ExchangeError,
    RefreshError,
    ServerTokenError,
    TokenCacheError,
    TokenNotFoundError,
    TransportError,
    EncodeError,
    DecodeError,
    APIError,
    is_authentication_error,
    is_invalid_request_error,
    is_rate_limit_error,
    is_server_error,
    is_unknown_error,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    '__version__',

    # Config
    'ClientConfig',
    'DEFAULT_API_VERSION',
    'DEFAULT_BASE_URL',
    'DEFAULT_TIMEOUT',
    'DEFAULT_USER_AGENT',
    'DecodeFailure',
    'ErrorType',
    'LogLevel',

    # Developer tokens
    'DEFAULT_TOKEN_EXPIRATION',
    'DeveloperToken',
    'DeveloperTokenIssuer',
    'is_token_expired',
    'issue_developer_token',

    # User tokens
    'OAuthCredentials',
    'TokenCache',
    'MemoryTokenCache',
    'LockingMemoryTokenCache',
    'UserToken',
    'UserTokenManager',
    'ErrorDetail',
    'ErrorResponse',
    'UserTokenResponse',

    # Transport
    'MusicKitHTTPClient',
    'MusicKitClient',
    'classify_status',
    'format_error_message',

    # Exceptions
    'MusicKitError',
    'DeveloperTokenError',
    'KeyParseError',
    'SigningError',
    'TokenParseError',
    'ClaimError',
    'UserTokenError',
    'ExchangeError',
    'RefreshError',
    'ServerTokenError',
    'TokenCacheError',
    'TokenNotFoundError',
    'TransportError',
    'EncodeError',
    'DecodeError',
    'APIError',
    'is_authentication_error',
    'is_invalid_request_error',
    'is_rate_limit_error',
    'is_server_error',
    'is_unknown_error',
]
