"""
HTTP client configuration.

ClientConfig is built once and handed to MusicKitHTTPClient, which reads
it on every request. The client's setters mutate it in place.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .enums import LogLevel

__version__ = "0.1.0"

DEFAULT_BASE_URL = "https://api.music.apple.com"
DEFAULT_API_VERSION = "v1"
DEFAULT_USER_AGENT = f"MusicKitKat/{__version__}"
DEFAULT_TIMEOUT = 30  # seconds


@dataclass
class ClientConfig:
    """
    Settings consumed by every request.

    Attributes:
        base_url: Scheme and host of the API.
        api_version: Version path segment.
        user_agent: User-Agent header value.
        timeout: Request timeout in seconds.
        headers: Static headers added to every request. They cannot
            override the authentication headers.
        developer_token: Developer token sent as a bearer credential.
        user_token: Music-User-Token for personal library endpoints.
        log_level: Verbosity of request/response diagnostics.
    """

    base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    headers: Dict[str, str] = field(default_factory=dict)
    developer_token: Optional[str] = None
    user_token: Optional[str] = None
    log_level: LogLevel = LogLevel.NONE

    def __post_init__(self):
        """Validate and normalize settings."""
        if not self.base_url:
            raise ValueError("base_url is required")
        if not self.api_version:
            raise ValueError("api_version is required")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        self.base_url = self.base_url.rstrip("/")
        self.api_version = self.api_version.strip("/")
        self.log_level = LogLevel(self.log_level)

    @classmethod
    def from_dict(cls, data: dict) -> 'ClientConfig':
        """
        Create a config from a plain dictionary, using defaults for
        missing keys.
        """
        return cls(
            base_url=data.get('base_url', DEFAULT_BASE_URL),
            api_version=data.get('api_version', DEFAULT_API_VERSION),
            user_agent=data.get('user_agent', DEFAULT_USER_AGENT),
            timeout=data.get('timeout', DEFAULT_TIMEOUT),
            headers=dict(data.get('headers') or {}),
            developer_token=data.get('developer_token'),
            user_token=data.get('user_token'),
            log_level=data.get('log_level', LogLevel.NONE),
        )

    def build_url(self, path: str) -> str:
        """Join base URL, API version, and a relative path."""
        return f"{self.base_url}/{self.api_version}/{path.lstrip('/')}"
