"""
Apple Music developer token issuance.

Developer tokens are ES256-signed JWTs that authorize the application
itself to call the Apple Music API. They are issued locally from the
team's long-lived MusicKit private key and are never refreshed in
place: renewal means issuing a new token.

Expiry introspection here does NOT verify the signature. It exists so
clients can schedule renewal; it is not an authorization decision.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .exceptions import ClaimError, KeyParseError, SigningError, TokenParseError

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"

# Six months, counted as 30-day months
DEFAULT_TOKEN_EXPIRATION = 6 * 30 * 24 * 60 * 60

Clock = Callable[[], float]
Expiry = Union[int, float, datetime]


@dataclass(frozen=True)
class DeveloperToken:
    """
    Immutable signed developer token.

    Attributes:
        token: The compact serialized JWT.
        team_id: Apple Developer team identifier (``iss``).
        key_id: MusicKit private key identifier (``kid``).
        music_id: Music/service identifier (``sub``).
        issued_at: Issue time in unix seconds (``iat``).
        expires_at: Expiry time in unix seconds (``exp``).
    """

    token: str
    team_id: str
    key_id: str
    music_id: str
    issued_at: int
    expires_at: int

    def __str__(self) -> str:
        return self.token

    def is_expired(self, clock: Clock = time.time) -> bool:
        """Check the token's own ``exp`` claim against the clock."""
        return is_token_expired(self.token, clock=clock)


def _to_unix(value: Expiry) -> int:
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value)


def load_private_key(private_key: Union[bytes, str]) -> ec.EllipticCurvePrivateKey:
    """
    Parse PEM-encoded EC private key material (e.g. a ``.p8`` file).

    Raises:
        KeyParseError: If the material is malformed or not an EC key.
    """
    if isinstance(private_key, str):
        private_key = private_key.encode("utf-8")

    try:
        key = serialization.load_pem_private_key(private_key, password=None)
    except (ValueError, TypeError) as e:
        raise KeyParseError(f"Failed to parse private key: {e}") from e

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise KeyParseError(
            f"Private key must be an EC key, got {type(key).__name__}"
        )
    return key


def issue_developer_token(
    team_id: str,
    key_id: str,
    private_key: Union[bytes, str],
    music_id: str,
    expires_at: Optional[Expiry] = None,
    clock: Clock = time.time,
) -> DeveloperToken:
    """
    Issue a signed developer token.

    Args:
        team_id: Apple Developer team ID, used as ``iss``.
        key_id: MusicKit key ID, placed in the JWT header as ``kid``.
        private_key: PEM-encoded EC private key.
        music_id: Music/service ID, used as ``sub``.
        expires_at: Expiry as unix seconds or datetime. Defaults to
            now + DEFAULT_TOKEN_EXPIRATION.
        clock: Source of the current unix time.

    Returns:
        A new DeveloperToken.

    Raises:
        KeyParseError: If the private key cannot be parsed.
        SigningError: If signing fails.
        ValueError: If the expiry is not later than the issue time.
    """
    key = load_private_key(private_key)

    issued_at = int(clock())
    if expires_at is None:
        exp = issued_at + DEFAULT_TOKEN_EXPIRATION
    else:
        exp = _to_unix(expires_at)
    if exp <= issued_at:
        raise ValueError(
            f"Token expiry ({exp}) must be later than issue time ({issued_at})"
        )

    claims = {
        "iss": team_id,
        "iat": issued_at,
        "exp": exp,
        "sub": music_id,
    }

    try:
        signed = jwt.encode(
            claims, key, algorithm=ALGORITHM, headers={"kid": key_id}
        )
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        raise SigningError(f"Failed to sign token: {e}") from e

    logger.debug("Issued developer token kid=%s expiring at %d", key_id, exp)
    return DeveloperToken(
        token=signed,
        team_id=team_id,
        key_id=key_id,
        music_id=music_id,
        issued_at=issued_at,
        expires_at=exp,
    )


def is_token_expired(token: Union[DeveloperToken, str], clock: Clock = time.time) -> bool:
    """
    Decode a token without verifying it and compare ``exp`` to now.

    Args:
        token: A DeveloperToken or compact JWT string.
        clock: Source of the current unix time.

    Returns:
        True once the current time is past ``exp``.

    Raises:
        TokenParseError: If the token is not a structurally valid JWT.
        ClaimError: If ``exp`` is missing or not numeric.
    """
    try:
        claims = jwt.decode(
            str(token),
            options={"verify_signature": False},
        )
    except jwt.PyJWTError as e:
        raise TokenParseError(f"Failed to parse token: {e}") from e

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise ClaimError("Invalid expiration claim")

    return clock() > exp


class DeveloperTokenIssuer:
    """
    Issues developer tokens from a fixed set of credentials.

    Example:
        issuer = DeveloperTokenIssuer(team_id, key_id, pem_bytes, music_id)
        token = issuer.issue()

        # Later, before a batch of requests
        token = issuer.ensure_fresh(token)
    """

    def __init__(
        self,
        team_id: str,
        key_id: str,
        private_key: Union[bytes, str],
        music_id: str,
        clock: Clock = time.time,
    ):
        self._team_id = team_id
        self._key_id = key_id
        self._private_key = private_key
        self._music_id = music_id
        self._clock = clock

    def issue(self, expires_at: Optional[Expiry] = None) -> DeveloperToken:
        return issue_developer_token(
            self._team_id,
            self._key_id,
            self._private_key,
            self._music_id,
            expires_at=expires_at,
            clock=self._clock,
        )

    def ensure_fresh(self, token: Optional[DeveloperToken]) -> DeveloperToken:
        """
        Return the token unchanged if it is still valid, else a new one.

        Args:
            token: The current token, or None to issue the first one.
        """
        if token is not None and not token.is_expired(clock=self._clock):
            return token

        logger.info("Developer token missing or expired, issuing a new one")
        return self.issue()
