"""Tests for the MusicKitClient facade."""

import pytest

from musickitkat import MusicKitClient, UserTokenManager, issue_developer_token
from musickitkat.cache import MemoryTokenCache
from musickitkat.config import ClientConfig
from musickitkat.enums import LogLevel
from musickitkat.exceptions import APIError, is_authentication_error
from musickitkat.http_client import USER_TOKEN_HEADER


@pytest.fixture
def developer_token(ec_private_key_pem):
    return issue_developer_token("T1", "K1", ec_private_key_pem, "M1")


class TestMusicKitClientInit:
    """Tests for client construction."""

    def test_defaults(self, mock_session):
        client = MusicKitClient(session=mock_session)

        assert client.developer_token is None
        assert client.user_token is None
        assert client.http.config.base_url == "https://api.music.apple.com"

    def test_tokens(self, mock_session, developer_token):
        client = MusicKitClient(
            developer_token=developer_token, user_token="user-token", session=mock_session,
        )

        assert client.developer_token is developer_token
        assert client.http.config.developer_token == developer_token.token
        assert client.user_token == "user-token"

    def test_overrides(self, mock_session):
        client = MusicKitClient(
            config=ClientConfig(timeout=60),
            session=mock_session,
            timeout=5,
            log_level=LogLevel.INFO,
        )

        assert client.http.config.timeout == 5
        assert client.http.config.log_level == LogLevel.INFO

    def test_invalid_timeout(self, mock_session):
        with pytest.raises(ValueError):
            MusicKitClient(session=mock_session, timeout=0)


class TestMusicKitClientRequests:
    """Tests for the HTTP passthroughs."""

    def test_get_sends_auth_headers(self, mock_session, response_factory, developer_token):
        mock_session.send.return_value = response_factory(200, {"data": []})
        client = MusicKitClient(
            developer_token=developer_token, user_token="user-token", session=mock_session,
        )

        result = client.get("me/library/songs", params={"limit": 5})

        request = mock_session.send.call_args[0][0]
        assert result == {"data": []}
        assert request.headers["Authorization"] == f"Bearer {developer_token.token}"
        assert request.headers[USER_TOKEN_HEADER] == "user-token"
        assert request.url.endswith("/v1/me/library/songs?limit=5")

    def test_replaced_token_used_for_next_request(self, mock_session, response_factory):
        mock_session.send.return_value = response_factory(200, {})
        client = MusicKitClient(developer_token="old", session=mock_session)

        client.set_developer_token("new")
        client.get("x")

        assert mock_session.send.call_args[0][0].headers["Authorization"] == "Bearer new"

    @pytest.mark.parametrize("method", ["post", "put"])
    def test_body_methods(self, mock_session, response_factory, method):
        mock_session.send.return_value = response_factory(202, {"accepted": True})
        client = MusicKitClient(developer_token="dev", session=mock_session)

        result = getattr(client, method)("me/library", {"ids": ["1"]})

        assert result == {"accepted": True}
        assert mock_session.send.call_args[0][0].method == method.upper()

    def test_delete(self, mock_session, response_factory):
        mock_session.send.return_value = response_factory(204)
        client = MusicKitClient(developer_token="dev", session=mock_session)

        assert client.delete("me/library/playlists/p.1") is None

    def test_api_error_propagates(self, mock_session, response_factory):
        mock_session.send.return_value = response_factory(
            403, {"errors": [{"title": "Forbidden", "detail": "no access"}]},
        )
        client = MusicKitClient(developer_token="dev", session=mock_session)

        with pytest.raises(APIError) as exc_info:
            client.get("catalog/us/songs/1")

        assert is_authentication_error(exc_info.value)
        assert "Forbidden: no access" in str(exc_info.value)

    def test_close(self, mock_session):
        MusicKitClient(session=mock_session).close()
        mock_session.close.assert_called_once()


class TestUserTokenManagerFactory:
    """Tests for MusicKitClient.user_token_manager."""

    def test_shares_session_and_developer_token(self, mock_session, response_factory, credentials):
        mock_session.post.return_value = response_factory(
            200, {"access_token": "a", "token_type": "Bearer", "expires_in": 3600},
        )
        client = MusicKitClient(developer_token="dev", session=mock_session)

        manager = client.user_token_manager(credentials)
        manager.request_user_token("opaque")

        assert isinstance(manager, UserTokenManager)
        headers = mock_session.post.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer dev"

    def test_uses_given_cache(self, mock_session, credentials):
        cache = MemoryTokenCache()
        client = MusicKitClient(session=mock_session)

        assert client.user_token_manager(credentials, cache).cache is cache

    def test_manager_follows_replaced_developer_token(
        self, mock_session, response_factory, credentials,
    ):
        mock_session.post.return_value = response_factory(
            200, {"access_token": "a", "token_type": "Bearer", "expires_in": 3600},
        )
        client = MusicKitClient(developer_token="old", session=mock_session)
        manager = client.user_token_manager(credentials)

        client.set_developer_token("new")
        manager.request_user_token("opaque")

        headers = mock_session.post.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer new"

    def test_manager_created_without_token_receives_later_token(
        self, mock_session, response_factory, credentials,
    ):
        mock_session.post.return_value = response_factory(
            200, {"access_token": "a", "token_type": "Bearer", "expires_in": 3600},
        )
        client = MusicKitClient(session=mock_session)
        manager = client.user_token_manager(credentials)

        client.set_developer_token("dev")
        manager.request_user_token("opaque")

        assert mock_session.post.call_args[1]["headers"]["Authorization"] == "Bearer dev"
