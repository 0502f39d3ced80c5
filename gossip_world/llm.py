"""Model gateway - HTTP connection to the conversational-AI provider.

The pipeline injects a gateway callable matching the protocol:

    async def __call__(self, stage, credential, prompt, *,
                       system_prompt=None, session_id=None) -> Reply: ...

`stage` identifies which pipeline step is calling (e.g. "speaker",
"miner", "gossip"). Implementations may use it for logging or routing;
the real one ignores it.

Two implementations are provided:

    SecondMeGateway - real HTTP client. Posts to the chat/stream endpoint
                      and consumes the server-sent event stream, returning
                      only the joined text.
    EchoGateway     - returns the prompt back unchanged. Useful for
                      smoke-testing the pipeline wiring without a provider.

Tests use StubGateway (defined in conftest.py) instead.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://app.mindos.com/gate/lab"


class Reply(BaseModel):
    text: str
    session_id: str | None = None


# ---------------------------------------------------------------------------
# Protocol - every gateway implementation must match this signature
# ---------------------------------------------------------------------------

class Gateway(Protocol):
    async def __call__(
        self,
        stage: str,
        credential: str,
        prompt: str,
        *,
        system_prompt: str | None = None,
        session_id: str | None = None,
    ) -> Reply: ...


# ---------------------------------------------------------------------------
# SecondMeGateway - connects to the real provider
# ---------------------------------------------------------------------------

class SecondMeGateway:
    """Async streaming client for the SecondMe chat endpoint.

    Request:   POST {api_url}/api/secondme/chat/stream
               {"message": ..., "systemPrompt"?: ..., "sessionId"?: ...}
    Response:  text/event-stream. Each `data:` line carries JSON; a payload
               with "sessionId" names the session, a payload with
               choices[0].delta.content carries a text delta. `[DONE]` ends
               the stream. Anything else is ignored.

    Args:
        api_url: Base URL of the provider.
        app_id:  Application id, sent as X-App-Id.
        timeout: HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        app_id: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = api_url.rstrip("/")
        self._app_id = app_id
        self._timeout = timeout

    def _headers(self, credential: str) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }
        if self._app_id:
            headers["X-App-Id"] = self._app_id
        return headers

    def _build_body(
        self, prompt: str, system_prompt: str | None, session_id: str | None
    ) -> dict:
        body: dict = {"message": prompt}
        if session_id:
            body["sessionId"] = session_id
        if system_prompt:
            body["systemPrompt"] = system_prompt
        return body

    async def __call__(
        self,
        stage: str,
        credential: str,
        prompt: str,
        *,
        system_prompt: str | None = None,
        session_id: str | None = None,
    ) -> Reply:
        url = f"{self._base_url}/api/secondme/chat/stream"
        body = self._build_body(prompt, system_prompt, session_id)
        logger.debug("gateway call stage=%s prompt_len=%d", stage, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                async with client.stream(
                    "POST", url, json=body, headers=self._headers(credential)
                ) as resp:
                    if resp.status_code >= 400:
                        await resp.aread()
                        raise GatewayError(
                            f"Provider returned HTTP {resp.status_code}"
                        )
                    reply = await parse_event_stream(resp.aiter_lines())
        except httpx.ConnectError as e:
            raise GatewayError(f"Cannot connect to provider at {self._base_url}") from e
        except httpx.TimeoutException as e:
            raise GatewayError(f"Provider timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise GatewayError(f"Provider transport error: {e}") from e

        logger.debug("gateway response stage=%s len=%d", stage, len(reply.text))
        return reply


async def parse_event_stream(lines) -> Reply:
    """Join the text deltas of a server-sent event stream into one Reply."""
    parts: list[str] = []
    session_id: str | None = None
    async for line in lines:
        if not line.startswith("data: "):
            continue
        data = line[6:].strip()
        if data == "[DONE]":
            break
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            continue
        if not isinstance(payload, dict):
            continue
        if payload.get("sessionId"):
            session_id = payload["sessionId"]
            continue
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            continue
        delta = choices[0].get("delta")
        if not isinstance(delta, dict):
            continue
        content = delta.get("content")
        if isinstance(content, str) and content:
            parts.append(content)
    return Reply(text="".join(parts), session_id=session_id)


# ---------------------------------------------------------------------------
# EchoGateway - returns the prompt unchanged; useful for wiring smoke tests
# ---------------------------------------------------------------------------

class EchoGateway:
    """Returns the prompt text as-is. No network calls.

    Lets you verify that the pipeline wiring (context building, speaker
    loop, storage writes) works end-to-end without a provider. The output
    won't be valid JSON for structured stages, so mining yields nothing and
    publishing falls back to templates.
    """

    async def __call__(
        self,
        stage: str,
        credential: str,
        prompt: str,
        *,
        system_prompt: str | None = None,
        session_id: str | None = None,
    ) -> Reply:
        logger.debug("EchoGateway stage=%s prompt_len=%d", stage, len(prompt))
        return Reply(text=prompt, session_id=session_id)


# ---------------------------------------------------------------------------
# GatewayError - raised by SecondMeGateway for all transport failures
# ---------------------------------------------------------------------------

class GatewayError(RuntimeError):
    """Raised when the provider cannot be reached or returns an error."""
