"""Access credentials for generation calls.

The pipeline never reads tokens out of storage directly; it asks a
CredentialSource:

    for_human(human_id) -> token | None   the human's own credential
    any()               -> token | None   any usable credential at all

StoredCredentials is the production source. Tokens expiring within the
refresh horizon are exchanged through OAuthRefresher and written back;
concurrent refreshes are not coordinated (last writer wins).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

import httpx
from pydantic import BaseModel

from gossip_world.llm import DEFAULT_API_URL
from gossip_world.models import utcnow
from gossip_world.storage import Storage

logger = logging.getLogger(__name__)

REFRESH_HORIZON = timedelta(minutes=5)


class CredentialSource(Protocol):
    async def for_human(self, human_id: str | None) -> str | None: ...

    async def any(self) -> str | None: ...


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int


class CredentialError(RuntimeError):
    """Raised when the token endpoint cannot refresh a credential."""


class OAuthRefresher:
    """Exchanges a refresh token for a new token pair.

    POST {api_url}/api/oauth/token/refresh, form-encoded. The provider
    answers {"code": 0, "data": {"accessToken", "refreshToken", "expiresIn"}};
    the old refresh token is invalid afterwards.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        client_id: str = "",
        client_secret: str = "",
        timeout: float = 30.0,
    ) -> None:
        self._base_url = api_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout

    async def refresh(self, refresh_token: str) -> TokenPair:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    f"{self._base_url}/api/oauth/token/refresh", data=form
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CredentialError(
                f"Token endpoint returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise CredentialError(f"Token endpoint unreachable: {e}") from e

        try:
            result = resp.json()
        except ValueError as e:
            raise CredentialError("Token endpoint returned non-JSON body") from e
        if not isinstance(result, dict) or result.get("code") != 0 or not result.get("data"):
            raise CredentialError(f"Token refresh rejected: {result!r}")
        data = result["data"]
        return TokenPair(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken"),
            expires_in=int(data["expiresIn"]),
        )


class StoredCredentials:
    """CredentialSource backed by the tokens stored on Human records."""

    def __init__(self, storage: Storage, refresher: OAuthRefresher) -> None:
        self._storage = storage
        self._refresher = refresher

    async def for_human(self, human_id: str | None) -> str | None:
        if not human_id:
            return None
        human = self._storage.get_human(human_id)
        if human is None or not human.token:
            return None

        if human.token_expiry and human.token_expiry < utcnow() + REFRESH_HORIZON:
            if not human.refresh_token:
                return None
            try:
                pair = await self._refresher.refresh(human.refresh_token)
            except CredentialError as e:
                logger.warning("Token refresh failed for human %s: %s", human_id, e)
                return None
            self._storage.update_credential(
                human_id,
                pair.access_token,
                pair.refresh_token,
                _expiry(pair.expires_in),
            )
            return pair.access_token

        return human.token

    async def any(self) -> str | None:
        holders = [h for h in self._storage.list_humans() if h.token]
        holders.sort(key=lambda h: h.updated_at, reverse=True)
        for human in holders:
            token = await self.for_human(human.id)
            if token:
                return token
        return None


def _expiry(expires_in: int) -> datetime:
    return utcnow() + timedelta(seconds=expires_in)
