"""
Pytest configuration and shared fixtures for MusicKitKat tests.

This module provides common fixtures used across all test modules,
including signing keys, sample tokens, and mock HTTP responses.
"""

import json
import time
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from musickitkat.auth import UserToken
from musickitkat.credentials import OAuthCredentials


# =============================================================================
# Keys
# =============================================================================

@pytest.fixture(scope="session")
def ec_private_key():
    """A P-256 private key, the curve ES256 requires."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_private_key_pem(ec_private_key):
    """PKCS#8 PEM bytes, the format of a MusicKit .p8 file."""
    return ec_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def ec_public_key(ec_private_key):
    return ec_private_key.public_key()


@pytest.fixture(scope="session")
def rsa_private_key_pem():
    """A valid PEM key of the wrong type."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


# =============================================================================
# User tokens
# =============================================================================

@pytest.fixture
def credentials():
    """OAuth credentials without a client secret."""
    return OAuthCredentials(
        client_id='com.example.music',
        redirect_uri='https://example.com/callback',
    )


@pytest.fixture
def valid_user_token():
    """A user token that expires in an hour."""
    return UserToken(
        access_token='test_access_token',
        token_type='Bearer',
        expires_at=time.time() + 3600,
        refresh_token='test_refresh_token',
    )


@pytest.fixture
def expired_user_token():
    """A user token that expired a minute ago."""
    return UserToken(
        access_token='expired_access_token',
        token_type='Bearer',
        expires_at=time.time() - 60,
        refresh_token='test_refresh_token',
    )


# =============================================================================
# HTTP
# =============================================================================

def make_response(status_code=200, json_data=None, body=None, headers=None, reason="OK"):
    """
    Create a mock requests.Response.

    Pass json_data for a JSON document, or body for raw bytes.
    """
    if body is None:
        body = json.dumps(json_data).encode("utf-8") if json_data is not None else b""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.reason = reason
    resp.content = body
    resp.text = body.decode("utf-8", errors="replace")
    resp.headers = headers or {}
    return resp


@pytest.fixture
def mock_session():
    """A mock requests.Session."""
    return MagicMock()


@pytest.fixture
def response_factory():
    """Factory for mock responses, see make_response."""
    return make_response
