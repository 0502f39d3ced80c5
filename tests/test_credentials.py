"""Tests for gossip_world.credentials - OAuthRefresher and StoredCredentials."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from gossip_world.credentials import (
    CredentialError,
    OAuthRefresher,
    StoredCredentials,
    TokenPair,
)
from gossip_world.models import Human, utcnow


def _mock_response(body, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.raise_for_status = MagicMock(
        side_effect=None if status < 400 else httpx.HTTPStatusError(
            "", request=MagicMock(), response=resp
        )
    )
    return resp


class FakeRefresher:
    def __init__(self, pair: TokenPair | None = None, error: Exception | None = None) -> None:
        self.pair = pair
        self.error = error
        self.calls: list[str] = []

    async def refresh(self, refresh_token: str) -> TokenPair:
        self.calls.append(refresh_token)
        if self.error:
            raise self.error
        return self.pair


# ---------------------------------------------------------------------------
# OAuthRefresher
# ---------------------------------------------------------------------------

class TestOAuthRefresher:
    @pytest.fixture
    def refresher(self) -> OAuthRefresher:
        return OAuthRefresher(api_url="http://provider.test", client_id="id", client_secret="s")

    async def test_happy_path(self, refresher: OAuthRefresher) -> None:
        body = {"code": 0, "data": {
            "accessToken": "new", "refreshToken": "r2", "expiresIn": 3600,
        }}
        mock_post = AsyncMock(return_value=_mock_response(body))
        with patch("httpx.AsyncClient.post", mock_post):
            pair = await refresher.refresh("r1")
        assert pair == TokenPair(access_token="new", refresh_token="r2", expires_in=3600)
        assert mock_post.call_args[0][0] == "http://provider.test/api/oauth/token/refresh"
        form = mock_post.call_args.kwargs["data"]
        assert form["grant_type"] == "refresh_token"
        assert form["refresh_token"] == "r1"
        assert form["client_id"] == "id"

    async def test_rejected_code(self, refresher: OAuthRefresher) -> None:
        mock_post = AsyncMock(return_value=_mock_response({"code": 1, "message": "expired"}))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(CredentialError, match="rejected"):
                await refresher.refresh("r1")

    async def test_http_error(self, refresher: OAuthRefresher) -> None:
        mock_post = AsyncMock(return_value=_mock_response({}, status=500))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(CredentialError, match="HTTP 500"):
                await refresher.refresh("r1")

    async def test_connect_error(self, refresher: OAuthRefresher) -> None:
        mock_post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient.post", mock_post):
            with pytest.raises(CredentialError, match="unreachable"):
                await refresher.refresh("r1")

    async def test_non_json_body(self, refresher: OAuthRefresher) -> None:
        resp = _mock_response(None)
        resp.json.side_effect = ValueError("no json")
        with patch("httpx.AsyncClient.post", AsyncMock(return_value=resp)):
            with pytest.raises(CredentialError, match="non-JSON"):
                await refresher.refresh("r1")


# ---------------------------------------------------------------------------
# StoredCredentials
# ---------------------------------------------------------------------------

class TestStoredCredentials:
    async def test_valid_token_returned(self, storage) -> None:
        human = storage.save_human(Human(
            name="A", token="tok", token_expiry=utcnow() + timedelta(hours=1)
        ))
        refresher = FakeRefresher()
        creds = StoredCredentials(storage, refresher)
        assert await creds.for_human(human.id) == "tok"
        assert refresher.calls == []

    async def test_missing_human_or_token(self, storage) -> None:
        human = storage.save_human(Human(name="A"))
        creds = StoredCredentials(storage, FakeRefresher())
        assert await creds.for_human(None) is None
        assert await creds.for_human("ghost") is None
        assert await creds.for_human(human.id) is None

    async def test_expiring_token_is_refreshed_and_stored(self, storage) -> None:
        human = storage.save_human(Human(
            name="A", token="old", refresh_token="r1",
            token_expiry=utcnow() + timedelta(minutes=2),
        ))
        refresher = FakeRefresher(TokenPair(access_token="new", refresh_token="r2", expires_in=7200))
        creds = StoredCredentials(storage, refresher)

        assert await creds.for_human(human.id) == "new"
        assert refresher.calls == ["r1"]
        stored = storage.get_human(human.id)
        assert stored.token == "new"
        assert stored.refresh_token == "r2"
        assert stored.token_expiry > utcnow() + timedelta(hours=1)

    async def test_expiring_token_without_refresh_token(self, storage) -> None:
        human = storage.save_human(Human(
            name="A", token="old", token_expiry=utcnow() - timedelta(minutes=1)
        ))
        creds = StoredCredentials(storage, FakeRefresher())
        assert await creds.for_human(human.id) is None

    async def test_failed_refresh_yields_none(self, storage) -> None:
        human = storage.save_human(Human(
            name="A", token="old", refresh_token="r1", token_expiry=utcnow()
        ))
        creds = StoredCredentials(storage, FakeRefresher(error=CredentialError("nope")))
        assert await creds.for_human(human.id) is None
        assert storage.get_human(human.id).token == "old"

    async def test_any_prefers_most_recently_updated(self, storage) -> None:
        storage.save_human(Human(name="Older", token="older"))
        storage.save_human(Human(name="NoToken"))
        storage.save_human(Human(name="Newer", token="newer"))
        creds = StoredCredentials(storage, FakeRefresher())
        assert await creds.any() == "newer"

    async def test_any_skips_unusable_holders(self, storage) -> None:
        storage.save_human(Human(name="Good", token="good"))
        storage.save_human(Human(
            name="Expired", token="x", token_expiry=utcnow() - timedelta(days=1)
        ))
        creds = StoredCredentials(storage, FakeRefresher())
        assert await creds.any() == "good"

    async def test_any_with_nobody(self, storage) -> None:
        assert await StoredCredentials(storage, FakeRefresher()).any() is None
