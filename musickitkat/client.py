"""
MusicKitKat client facade.

Wires a ClientConfig, the HTTP client, and the authentication tokens
together. Resource-specific wrappers build paths and call the HTTP
methods exposed here.
"""

import weakref
from typing import Any, Optional, Union

import requests

from .auth import UserTokenManager
from .cache import TokenCache
from .config import ClientConfig
from .credentials import OAuthCredentials
from .developer_token import DeveloperToken
from .enums import LogLevel
from .http_client import MusicKitHTTPClient


class MusicKitClient:
    """
    Entry point for calling the Apple Music API.

    Example:
        token = issue_developer_token(team_id, key_id, pem, music_id)
        client = MusicKitClient(developer_token=token)
        song = client.get("catalog/us/songs/203709340")

        # User-scoped calls
        manager = client.user_token_manager(credentials, cache)
        client.set_user_token(manager.get_user_token(user_id).access_token)
        playlists = client.get("me/library/playlists")
    """

    def __init__(
        self,
        developer_token: Optional[Union[DeveloperToken, str]] = None,
        user_token: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        log_level: Optional[LogLevel] = None,
    ):
        """
        Initialize the client.

        Args:
            developer_token: Developer token for every request.
            user_token: Music-User-Token for personal library requests.
            config: Base settings. Defaults to ClientConfig().
            session: HTTP session shared by the client and any
                UserTokenManager it creates.
            timeout: Request timeout in seconds, overriding config.
            log_level: Diagnostic verbosity, overriding config.
        """
        self._session = session or requests.Session()
        self._http = MusicKitHTTPClient(config or ClientConfig(), session=self._session)
        self._developer_token = None
        self._managers = weakref.WeakSet()

        if developer_token:
            self.set_developer_token(developer_token)
        if user_token:
            self.set_user_token(user_token)
        if timeout is not None:
            self._http.set_timeout(timeout)
        if log_level is not None:
            self._http.set_log_level(log_level)

    @property
    def http(self) -> MusicKitHTTPClient:
        return self._http

    @property
    def developer_token(self) -> Optional[Union[DeveloperToken, str]]:
        return self._developer_token

    @property
    def user_token(self) -> Optional[str]:
        return self._http.config.user_token

    def set_developer_token(self, token: Union[DeveloperToken, str]) -> None:
        """
        Replace the developer token used for every request.

        Managers created by user_token_manager pick up the new token too.
        """
        self._developer_token = token
        self._http.set_developer_token(token)
        for manager in self._managers:
            manager.set_developer_token(token)

    def set_user_token(self, token: Optional[str]) -> None:
        self._http.set_user_token(token)

    def user_token_manager(
        self,
        credentials: OAuthCredentials,
        cache: Optional[TokenCache] = None,
    ) -> UserTokenManager:
        """
        Create a UserTokenManager sharing this client's session.

        The manager follows later set_developer_token calls on this client.
        """
        manager = UserTokenManager(
            credentials,
            developer_token=self._developer_token,
            cache=cache,
            session=self._session,
        )
        self._managers.add(manager)
        return manager

    def get(self, path: str, result=None, params=None, timeout=None) -> Any:
        return self._http.get(path, result=result, params=params, timeout=timeout)

    def post(self, path: str, body: Any = None, result=None, params=None, timeout=None) -> Any:
        return self._http.post(path, body, result=result, params=params, timeout=timeout)

    def put(self, path: str, body: Any = None, result=None, params=None, timeout=None) -> Any:
        return self._http.put(path, body, result=result, params=params, timeout=timeout)

    def delete(self, path: str, result=None, params=None, timeout=None) -> Any:
        return self._http.delete(path, result=result, params=params, timeout=timeout)

    def close(self) -> None:
        self._http.close()
