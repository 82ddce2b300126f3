"""
OAuth client credentials.

Provides a clean dataclass for the Sign in with Apple OAuth client
used to obtain user tokens.
"""

from dataclasses import dataclass
from typing import Optional

APPLE_AUTH_URL = "https://appleid.apple.com/auth/authorize"
APPLE_TOKEN_URL = "https://appleid.apple.com/auth/token"


@dataclass(frozen=True)
class OAuthCredentials:
    """
    Immutable container for OAuth client credentials.

    Attributes:
        client_id: The OAuth client (services) ID.
        redirect_uri: The OAuth callback URL.
        client_secret: Optional client secret. When set, the client
            authenticates to the token endpoint with HTTP basic auth;
            otherwise client_id is sent in the form body.
        auth_url: Authorization endpoint.
        token_url: Token endpoint.

    Example:
        credentials = OAuthCredentials(
            client_id='com.example.music',
            redirect_uri='https://example.com/callback'
        )
    """

    client_id: str
    redirect_uri: str
    client_secret: Optional[str] = None
    auth_url: str = APPLE_AUTH_URL
    token_url: str = APPLE_TOKEN_URL

    def __post_init__(self):
        """Validate credentials on creation."""
        if not self.client_id:
            raise ValueError("client_id is required")
        if not self.redirect_uri:
            raise ValueError("redirect_uri is required")
        if not self.auth_url or not self.token_url:
            raise ValueError("auth_url and token_url are required")

    @classmethod
    def from_dict(cls, data: dict) -> 'OAuthCredentials':
        """
        Create credentials from a plain dictionary.

        Raises:
            ValueError: If required keys are missing or empty.
        """
        return cls(
            client_id=data.get('client_id', ''),
            redirect_uri=data.get('redirect_uri', ''),
            client_secret=data.get('client_secret'),
            auth_url=data.get('auth_url', APPLE_AUTH_URL),
            token_url=data.get('token_url', APPLE_TOKEN_URL),
        )
