"""
User token caches.

TokenCache is the storage capability UserTokenManager depends on. The
in-memory variants here are non-durable; durable storage is supplied by
the caller as another TokenCache implementation.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict

from .exceptions import TokenNotFoundError

if TYPE_CHECKING:
    from .auth import UserToken

logger = logging.getLogger(__name__)


class TokenCache(ABC):
    """
    Storage for per-user OAuth tokens.

    Holds at most one token per user ID. ``save`` overwrites any
    existing token unconditionally.
    """

    @abstractmethod
    def get(self, user_id: str) -> "UserToken":
        """
        Return the cached token for a user.

        Raises:
            TokenNotFoundError: If no token is cached for user_id.
        """

    @abstractmethod
    def save(self, user_id: str, token: "UserToken") -> None:
        """Store the token for a user, replacing any previous one."""


class MemoryTokenCache(TokenCache):
    """
    Dictionary-backed token cache.

    Not safe for concurrent use: concurrent get/save calls from several
    threads may lose updates. Use LockingMemoryTokenCache, or a durable
    implementation, when tokens are shared across threads.
    """

    def __init__(self):
        self._tokens: Dict[str, "UserToken"] = {}

    def get(self, user_id: str) -> "UserToken":
        token = self._tokens.get(user_id)
        if token is None:
            logger.debug("Token cache miss for user: %s", user_id)
            raise TokenNotFoundError(user_id)
        return token

    def save(self, user_id: str, token: "UserToken") -> None:
        self._tokens[user_id] = token
        logger.debug("Cached token for user: %s", user_id)

    def __len__(self) -> int:
        return len(self._tokens)


class LockingMemoryTokenCache(MemoryTokenCache):
    """MemoryTokenCache guarded by a lock, for use across threads."""

    def __init__(self):
        super().__init__()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> "UserToken":
        with self._lock:
            return super().get(user_id)

    def save(self, user_id: str, token: "UserToken") -> None:
        with self._lock:
            super().save(user_id, token)
