"""
HTTP client for the Apple Music API.

Wraps requests.Session with authentication headers, JSON encoding,
layered response decoding, and status-code error classification.
Every request is attempted exactly once: there is no retry or backoff,
and 429/5xx responses are classified and raised to the caller.
"""

import json
import logging
from typing import Any, Dict, Optional, Type, Union
from urllib.parse import urlparse

import requests
from pydantic import BaseModel
from requests.structures import CaseInsensitiveDict

from .config import ClientConfig
from .decoding import decode_body
from .developer_token import DeveloperToken
from .enums import LogLevel
from .exceptions import APIError, DecodeError, EncodeError, TransportError
from .schemas import ErrorResponse

USER_TOKEN_HEADER = "Music-User-Token"

_LOGGING_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

_MASKED_HEADERS = {"authorization", USER_TOKEN_HEADER.lower()}


def _mask(name: str, value: str) -> str:
    if name.lower() not in _MASKED_HEADERS:
        return value
    if len(value) <= 16:
        return "***"
    return f"{value[:12]}...{value[-4:]}"


class MusicKitHTTPClient:
    """
    HTTP client for Apple Music API requests.

    Builds authenticated JSON requests, sends each one once, and turns
    non-2xx responses into APIError.

    Example:
        config = ClientConfig(developer_token=str(developer_token))
        http = MusicKitHTTPClient(config)
        data = http.get("catalog/us/songs/203709340")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Client settings. Defaults to ClientConfig().
            session: HTTP session. Defaults to a new requests.Session.
            logger: Logger for diagnostics, gated by config.log_level.
        """
        self._config = config or ClientConfig()
        self._session = session or requests.Session()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config(self) -> ClientConfig:
        return self._config

    # -----------------------------------------------------------------
    # Setters
    # -----------------------------------------------------------------

    def set_developer_token(self, token: Optional[Union[DeveloperToken, str]]) -> None:
        self._config.developer_token = str(token) if token else None

    def set_user_token(self, token: Optional[str]) -> None:
        self._config.user_token = token or None

    def set_timeout(self, timeout: float) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._config.timeout = timeout

    def set_log_level(self, level: LogLevel) -> None:
        self._config.log_level = LogLevel(level)

    def set_logger(self, logger: logging.Logger) -> None:
        self._logger = logger

    def set_session(self, session: requests.Session) -> None:
        self._session = session

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # -----------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------

    def _log(self, level: LogLevel, msg: str, *args: Any) -> None:
        if level == LogLevel.NONE or self._config.log_level < level:
            return
        self._logger.log(_LOGGING_LEVELS[level], msg, *args)

    def _log_request(self, request: requests.PreparedRequest) -> None:
        self._log(LogLevel.INFO, "REQUEST: %s %s", request.method, request.url)
        if self._config.log_level >= LogLevel.DEBUG:
            for name, value in request.headers.items():
                self._log(LogLevel.DEBUG, "  %s: %s", name, _mask(name, value))

    def _log_response(self, response: requests.Response) -> None:
        self._log(
            LogLevel.INFO, "RESPONSE: %d %s",
            response.status_code, response.reason,
        )
        if self._config.log_level >= LogLevel.DEBUG:
            for name, value in (response.headers or {}).items():
                self._log(LogLevel.DEBUG, "  %s: %s", name, value)

    # -----------------------------------------------------------------
    # Request building and execution
    # -----------------------------------------------------------------

    def build_url(self, path: str) -> str:
        return self._config.build_url(path)

    def _encode_body(self, body: Any) -> str:
        if isinstance(body, BaseModel):
            body = body.model_dump(by_alias=True, exclude_none=True)
        try:
            data = json.dumps(body)
        except (TypeError, ValueError) as e:
            self._log(LogLevel.ERROR, "Failed to encode request body: %s", e)
            raise EncodeError(f"Failed to encode request body: {e}") from e
        self._log(LogLevel.DEBUG, "REQUEST BODY: %s", data)
        return data

    def new_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.PreparedRequest:
        """
        Build an authenticated request.

        Static headers from the config are applied before the
        authentication headers, so they cannot replace them.

        Raises:
            EncodeError: If body cannot be serialized to JSON.
        """
        url = self.build_url(path)
        self._log(LogLevel.INFO, "Creating new request: %s %s", method, url)

        data = self._encode_body(body) if body is not None else None

        headers = CaseInsensitiveDict({
            "User-Agent": self._config.user_agent,
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        headers.update(self._config.headers)
        if self._config.developer_token:
            headers["Authorization"] = f"Bearer {self._config.developer_token}"
        if self._config.user_token:
            headers[USER_TOKEN_HEADER] = self._config.user_token

        request = requests.Request(
            method, url, headers=dict(headers), data=data, params=params,
        ).prepare()
        self._log_request(request)
        return request

    def do(
        self,
        request: requests.PreparedRequest,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """
        Send a request once.

        Args:
            request: A request from new_request.
            timeout: Per-call timeout, overriding the config.

        Returns:
            The 2xx response.

        Raises:
            TransportError: If the request could not be sent.
            APIError: If the response status is not 2xx.
        """
        self._log(LogLevel.INFO, "Sending request: %s %s", request.method, request.url)

        try:
            response = self._session.send(
                request, timeout=timeout or self._config.timeout,
            )
        except requests.RequestException as e:
            self._log(LogLevel.ERROR, "Failed to send request: %s", e)
            raise TransportError(f"Failed to send request: {e}") from e

        self._log_response(response)

        if not 200 <= response.status_code < 300:
            raise self._build_api_error(request, response)

        return response

    def _auth_hint(
        self,
        request: requests.PreparedRequest,
        response: requests.Response,
    ) -> Optional[str]:
        """Explain a 401 caused by a missing credential, if one is missing."""
        if response.status_code != 401:
            return None

        auth_header = request.headers.get("Authorization", "")
        if not auth_header or auth_header.strip() == "Bearer":
            return (
                "Developer token is missing or invalid. Check the team ID, "
                "key ID, music ID, and private key used to issue it"
            )

        path = urlparse(request.url).path
        if ("/me/" in path or "/library/" in path) and not request.headers.get(USER_TOKEN_HEADER):
            return f"{USER_TOKEN_HEADER} is required for {path} but is missing"

        return None

    def _build_api_error(
        self,
        request: requests.PreparedRequest,
        response: requests.Response,
    ) -> APIError:
        raw = response.content or b""
        self._log(
            LogLevel.ERROR, "API returned error status: %d %s",
            response.status_code, response.reason,
        )
        self._log(LogLevel.DEBUG, "Error response body: %r", raw)

        errors = []
        diagnostic = None
        try:
            errors = decode_body(raw, ErrorResponse).errors
        except DecodeError as e:
            diagnostic = e
            self._log(
                LogLevel.ERROR, "Failed to decode error response (%s): %s",
                e.kind, e,
            )

        hint = self._auth_hint(request, response)
        if hint:
            self._log(LogLevel.ERROR, "%s", hint)

        api_error = APIError(
            response.status_code, errors, body_diagnostic=diagnostic, hint=hint,
        )
        self._log(LogLevel.INFO, "Parsed API error (%s): %s", api_error.error_type, api_error)
        return api_error

    def decode_response(
        self,
        response: requests.Response,
        result: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """
        Decode a successful response body.

        Returns:
            None for 204, a result instance when result is given,
            otherwise the parsed JSON.

        Raises:
            DecodeError: If the body fails a decode stage.
        """
        if response.status_code == 204:
            return None

        raw = response.content or b""
        self._log(LogLevel.DEBUG, "Response body: %r", raw)

        try:
            return decode_body(raw, result)
        except DecodeError as e:
            self._log(LogLevel.ERROR, "Failed to decode response (%s): %s", e.kind, e)
            if e.offset is not None:
                self._log(LogLevel.ERROR, "Error context: ...%s...", e.context)
            if result is not None:
                self._log(LogLevel.DEBUG, "Expected to decode into: %s", result.__name__)
            raise

    # -----------------------------------------------------------------
    # Public HTTP methods
    # -----------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        result: Optional[Type[BaseModel]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        self._log(LogLevel.INFO, "Making %s request to %s", method, path)
        request = self.new_request(method, path, body=body, params=params)
        response = self.do(request, timeout=timeout)
        return self.decode_response(response, result)

    def get(self, path: str, result=None, params=None, timeout=None) -> Any:
        """Send a GET request."""
        return self._request("GET", path, result=result, params=params, timeout=timeout)

    def post(self, path: str, body: Any = None, result=None, params=None, timeout=None) -> Any:
        """Send a POST request."""
        return self._request("POST", path, body, result, params, timeout)

    def put(self, path: str, body: Any = None, result=None, params=None, timeout=None) -> Any:
        """Send a PUT request."""
        return self._request("PUT", path, body, result, params, timeout)

    def delete(self, path: str, result=None, params=None, timeout=None) -> Any:
        """Send a DELETE request."""
        return self._request("DELETE", path, result=result, params=params, timeout=timeout)
