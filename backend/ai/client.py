# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Thin async client for an OpenAI-compatible ``/chat/completions`` endpoint
(GitHub Models by default).

A short-lived ``httpx.AsyncClient`` is opened per call so the client is safe
to share across event loops; every call carries an explicit timeout.  Any
failure – transport, HTTP status or an unexpected body – surfaces as
:class:`CompletionError` whose message is for the log only.
"""

from dataclasses import dataclass, field

import httpx


class CompletionError(Exception):
    """The completion endpoint could not produce an answer."""


@dataclass
class Completion:
    content: str
    usage: dict = field(default_factory=dict)


class CompletionClient:
    def __init__(
        self,
        endpoint: str,
        model: str,
        token: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self._token = token
        self._timeout = timeout
        self._transport = transport

    async def complete(self, messages: list[dict], temperature: float, max_tokens: int) -> Completion:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Authorization": f"Bearer {self._token}"}

        try:
            async with httpx.AsyncClient(
                base_url=self.endpoint,
                timeout=self._timeout,
                transport=self._transport,
                headers=headers,
            ) as client:
                resp = await client.post("/chat/completions", json=payload)
        except httpx.HTTPError as exc:
            raise CompletionError(f"{type(exc).__name__}: {exc}") from exc

        if resp.is_error:
            raise CompletionError(f"HTTP {resp.status_code}: {_error_message(resp)}")

        try:
            body = resp.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"Malformed completion response: {exc!r}") from exc

        if not isinstance(content, str):
            raise CompletionError("Malformed completion response: content is not text")
        return Completion(content=content, usage=body.get("usage") or {})


def _error_message(resp: httpx.Response) -> str:
    try:
        error = resp.json().get("error")
    except ValueError:
        return resp.text[:500]
    if isinstance(error, dict):
        return error.get("message") or str(error)
    return str(error or resp.text[:500])
