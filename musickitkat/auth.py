"""
Apple Music user token management.

Handles the OAuth authorization-code flow, token exchange, refresh,
cache-through retrieval, and the server-side exchange of a
Music-User-Token obtained through a platform SDK.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import urlencode

import requests

from .cache import MemoryTokenCache, TokenCache
from .credentials import OAuthCredentials
from .decoding import decode_body, preview
from .developer_token import DeveloperToken
from .exceptions import (
    DecodeError,
    ExchangeError,
    RefreshError,
    ServerTokenError,
    TokenCacheError,
    UserTokenError,
)
from .schemas import UserTokenResponse

logger = logging.getLogger(__name__)

MUSICKIT_SCOPE = "musickit"
SERVER_TOKEN_URL = "https://api.music.apple.com/v1/me/tokens"
DEFAULT_TIMEOUT = 10

# Tokens are treated as expired this many seconds before expires_at
EXPIRY_DELTA = 10


@dataclass
class UserToken:
    """
    Per-user OAuth token record.

    ``expires_at`` is unix seconds; None means the token does not expire.
    """

    access_token: str
    token_type: str = "Bearer"
    expires_at: Optional[float] = None
    refresh_token: Optional[str] = None

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        clock: Callable[[], float] = time.time,
    ) -> "UserToken":
        """
        Create a UserToken from a token endpoint response or stored dict.

        Raises:
            UserTokenError: If the data is not a dict or has no access_token.
        """
        if not isinstance(data, dict):
            raise UserTokenError(
                f"Token data must be a dictionary, got {type(data)}"
            )
        if not data.get("access_token"):
            raise UserTokenError("Token missing required field: access_token")

        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in"):
            try:
                expires_at = clock() + float(data["expires_in"])
            except (TypeError, ValueError) as e:
                raise UserTokenError(
                    f"Invalid expires_in: {data['expires_in']!r}"
                ) from e

        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            expires_at=expires_at,
            refresh_token=data.get("refresh_token"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        result = {
            "access_token": self.access_token,
            "token_type": self.token_type,
        }
        if self.expires_at is not None:
            result["expires_at"] = self.expires_at
        if self.refresh_token:
            result["refresh_token"] = self.refresh_token
        return result

    def is_expired(self, clock: Callable[[], float] = time.time) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at - EXPIRY_DELTA <= clock()

    def expires_in_seconds(self, clock: Callable[[], float] = time.time) -> Optional[int]:
        """Seconds until expiration (negative if expired), None if it never expires."""
        if self.expires_at is None:
            return None
        return int(self.expires_at - clock())


def _error_description(response: requests.Response) -> str:
    """Best-effort reason from an OAuth error response."""
    try:
        body = decode_body(response.content)
    except DecodeError:
        return preview(response.text) or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("error_description") or body.get("error") or preview(response.text)
    return preview(response.text)


class UserTokenManager:
    """
    Manages Apple Music user tokens.

    All collaborators are passed in: the token cache, the developer
    token used for server-side exchange, and the HTTP session.

    Example:
        credentials = OAuthCredentials(client_id, redirect_uri)
        manager = UserTokenManager(credentials, developer_token, cache)

        # Redirect the user
        url = manager.get_auth_url(state)

        # In the callback, after checking state
        token = manager.exchange_code(code)
        cache.save(user_id, token)

        # Later
        token = manager.get_user_token(user_id)
    """

    def __init__(
        self,
        credentials: OAuthCredentials,
        developer_token: Optional[Union[DeveloperToken, str]] = None,
        cache: Optional[TokenCache] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        server_token_url: str = SERVER_TOKEN_URL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the manager.

        Args:
            credentials: OAuth client credentials and endpoints.
            developer_token: Developer token for request_user_token.
            cache: Token cache. Defaults to a new MemoryTokenCache.
            session: HTTP session. Defaults to a new requests.Session.
            timeout: Timeout in seconds for each token endpoint call.
            server_token_url: Endpoint for Music-User-Token exchange.
            clock: Source of the current unix time.
        """
        self._credentials = credentials
        self._developer_token = developer_token
        self._cache = cache if cache is not None else MemoryTokenCache()
        self._session = session or requests.Session()
        self._timeout = timeout
        self._server_token_url = server_token_url
        self._clock = clock

    @property
    def cache(self) -> TokenCache:
        return self._cache

    def set_developer_token(self, developer_token: Union[DeveloperToken, str]) -> None:
        self._developer_token = developer_token

    # =========================================================================
    # Authorization code flow
    # =========================================================================

    def get_auth_url(self, state: str) -> str:
        """
        Generate the authorization URL to redirect the user to.

        The state value is passed through unchecked; the caller must
        compare it with the value returned to the redirect endpoint.
        """
        params = {
            "client_id": self._credentials.client_id,
            "redirect_uri": self._credentials.redirect_uri,
            "response_type": "code",
            "scope": MUSICKIT_SCOPE,
            "access_type": "offline",
            "state": state,
        }
        return f"{self._credentials.auth_url}?{urlencode(params)}"

    def _post_token_endpoint(self, form: Dict[str, str]) -> requests.Response:
        auth = None
        if self._credentials.client_secret:
            auth = (self._credentials.client_id, self._credentials.client_secret)
        else:
            form = {**form, "client_id": self._credentials.client_id}

        return self._session.post(
            self._credentials.token_url,
            data=form,
            auth=auth,
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )

    def _token_from_response(self, response: requests.Response) -> UserToken:
        data = decode_body(response.content)
        return UserToken.from_dict(data, clock=self._clock)

    def exchange_code(self, code: str) -> UserToken:
        """
        Exchange an authorization code for a user token.

        Raises:
            ExchangeError: If the code is empty, the endpoint rejects it,
                the request fails, or the response is malformed.
        """
        if not code:
            raise ExchangeError("Authorization code is required")

        try:
            response = self._post_token_endpoint({
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._credentials.redirect_uri,
            })
            if not 200 <= response.status_code < 300:
                raise ExchangeError(
                    f"Token exchange failed ({response.status_code}): "
                    f"{_error_description(response)}"
                )

            token = self._token_from_response(response)
            logger.info("Successfully exchanged code for token")
            return token

        except ExchangeError:
            raise
        except (requests.RequestException, DecodeError, UserTokenError) as e:
            logger.error("Token exchange failed: %s", e)
            raise ExchangeError(f"Token exchange failed: {e}") from e

    def refresh_token(self, token: UserToken) -> UserToken:
        """
        Refresh a user token.

        The previous refresh token is kept when the response omits one.

        Raises:
            RefreshError: If there is no refresh token, the endpoint
                rejects it, the request fails, or the response is malformed.
        """
        if not token.refresh_token:
            raise RefreshError("Cannot refresh: no refresh_token available")

        try:
            response = self._post_token_endpoint({
                "grant_type": "refresh_token",
                "refresh_token": token.refresh_token,
            })
            if not 200 <= response.status_code < 300:
                raise RefreshError(
                    f"Token refresh failed ({response.status_code}): "
                    f"{_error_description(response)}"
                )

            new_token = self._token_from_response(response)
            if not new_token.refresh_token:
                new_token.refresh_token = token.refresh_token
            logger.info("Successfully refreshed token")
            return new_token

        except RefreshError:
            raise
        except (requests.RequestException, DecodeError, UserTokenError) as e:
            logger.error("Token refresh failed: %s", e)
            raise RefreshError(f"Token refresh failed: {e}") from e

    def get_user_token(self, user_id: str) -> UserToken:
        """
        Return the cached token for a user, refreshing it if expired.

        Raises:
            TokenNotFoundError: If nothing is cached for user_id.
            RefreshError: If an expired token cannot be refreshed.
            TokenCacheError: If the refreshed token cannot be saved.
        """
        token = self._cache.get(user_id)

        if not token.is_expired(clock=self._clock):
            return token

        logger.info("Token for user %s expired, attempting refresh", user_id)
        new_token = self.refresh_token(token)

        try:
            self._cache.save(user_id, new_token)
        except TokenCacheError:
            raise
        except Exception as e:
            raise TokenCacheError(f"Failed to save refreshed token: {e}") from e

        return new_token

    # =========================================================================
    # Server-side Music-User-Token exchange
    # =========================================================================

    def request_user_token(self, music_user_token: str) -> UserTokenResponse:
        """
        Exchange a Music-User-Token for a bearer user token.

        Raises:
            ServerTokenError: If no developer token is configured, the
                request fails, or the endpoint returns non-200.
            DecodeError: If the response body is malformed.
        """
        if not self._developer_token:
            raise ServerTokenError("A developer token is required to request a user token")

        try:
            response = self._session.post(
                self._server_token_url,
                data={"music-user-token": music_user_token},
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Authorization": f"Bearer {self._developer_token}",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise ServerTokenError(f"Failed to send request: {e}") from e

        if response.status_code != 200:
            raise ServerTokenError(
                f"Failed to get user token: {preview(response.text)}, "
                f"status code: {response.status_code}",
                status_code=response.status_code,
            )

        return decode_body(response.content, UserTokenResponse)
