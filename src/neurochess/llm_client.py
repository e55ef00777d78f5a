"""
HTTP transport for provider requests.

The rest of the code should not care how bytes move. This module sends a
WireRequest with httpx and returns the decoded JSON body, turning network
failures and non-2xx statuses into TransportError. Provider error payloads
that arrive with a 2xx status are left for the adapter's parse_response().
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from .config import SETTINGS
from .errors import TransportError
from .providers.base import WireRequest

log = logging.getLogger("llm_client")


def _error_message(rsp: httpx.Response) -> str:
    message = f"HTTP {rsp.status_code}: {rsp.reason_phrase}"
    text = rsp.text
    if not text:
        return message
    try:
        data = json.loads(text)
    except ValueError:
        return text[:200]
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if data.get("message"):
            return str(data["message"])
    return message


class HttpTransport:
    """Async JSON-over-HTTP sender shared by every provider adapter."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout_s: float | None = None):
        self.timeout_s = timeout_s if timeout_s is not None else SETTINGS.responses_timeout_s
        self._client = client or httpx.AsyncClient(timeout=self.timeout_s)
        self._owns_client = client is None

    async def send(self, request: WireRequest) -> Any:
        try:
            rsp = await self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                json=request.body,
                timeout=self.timeout_s,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        if rsp.is_error:
            raise TransportError(_error_message(rsp), status_code=rsp.status_code)
        try:
            return rsp.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON in response: {rsp.text[:200]}", status_code=rsp.status_code) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["HttpTransport"]
