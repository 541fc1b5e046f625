"""Async HTTP client for the plugin API.

One shared httpx.AsyncClient per panel; every non-2xx response, transport
failure or undecodable success body becomes an ApiError.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from vaultwarden_panel.errors import ApiError
from vaultwarden_panel.models import Slot
from vaultwarden_panel.settings import Settings

logger = logging.getLogger(__name__)

ENV_PATH = "/api/env"
SSL_STATUS_PATH = "/api/ssl/status"
SSL_UPLOAD_PATH = "/api/ssl/upload"
SSL_DELETE_PATH = "/api/ssl/delete"


def _safe_json(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _success_body(response: httpx.Response) -> dict:
    """Decode a 2xx body. An empty body is {}, a body that is not JSON is an error."""
    if not response.content.strip():
        return {}
    try:
        data = response.json()
    except ValueError:
        raise ApiError("Invalid JSON response", status_code=response.status_code) from None
    return data if isinstance(data, dict) else {}


def error_reason(response: httpx.Response) -> str:
    """Best message for a failed response.

    The backend answers errors with plain text, but a JSON `message` or
    `error` field is preferred when present.
    """
    data = _safe_json(response)
    for field_name in ("message", "error"):
        if isinstance(data.get(field_name), str) and data[field_name].strip():
            return data[field_name].strip()
    if not data:
        text = response.text.strip()
        if text:
            return text
    return f"HTTP {response.status_code}"


class PanelClient:
    """Thin async wrapper over the plugin's JSON endpoints."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=f"{settings.api_url}{settings.prefix}",
            headers=settings.auth_headers(),
            timeout=settings.timeout,
            transport=transport,
        )

    @property
    def has_api_url(self) -> bool:
        return self.settings.has_api_url

    @property
    def has_auth(self) -> bool:
        return self.settings.has_auth

    async def request(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict:
        if not self.has_api_url:
            raise ApiError("API base URL is not configured")
        try:
            response = await self._client.request(method, path, json=payload, params=params)
        except httpx.HTTPError as exc:
            raise ApiError(f"{type(exc).__name__}: {exc}") from exc
        if response.is_error:
            reason = error_reason(response)
            logger.debug("%s %s -> %s: %s", method, path, response.status_code, reason)
            raise ApiError(reason, status_code=response.status_code)
        return _success_body(response)

    async def fetch_env(self) -> dict:
        return await self.request("GET", ENV_PATH)

    async def save_env(self, variables: list[dict]) -> dict:
        return await self.request("PUT", ENV_PATH, payload={"variables": variables})

    async def fetch_ssl_status(self) -> dict:
        return await self.request("GET", SSL_STATUS_PATH)

    async def upload_ssl(self, slot: Slot, payload: dict) -> dict:
        return await self.request("PUT", SSL_UPLOAD_PATH, payload=payload, params={"type": slot})

    async def delete_ssl(self, slot: Slot) -> dict:
        return await self.request("DELETE", SSL_DELETE_PATH, params={"type": slot})

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "PanelClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
