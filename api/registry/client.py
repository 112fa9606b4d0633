"""
Registry HTTP client.

Used endpoints (relative to CORE_API_URL):
- GET  /modules/name/{name}  -> 200 + descriptor, anything else = not registered
- POST /modules              -> 201
- PUT  /modules/{id}         -> 200

Every call is bounded by the client timeout. Transport failures and
unexpected statuses raise `RegistryProtocolError`.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from core.errors import RegistryProtocolError

from . import schemas

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise RegistryProtocolError("CORE_API_URL is empty.")
    return base_url.rstrip("/")


class RegistryClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = _normalize_base_url(base_url)
        self.timeout_s = timeout_s
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_s,
            headers=JSON_HEADERS,
            transport=transport,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def _send(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        try:
            return await self._http.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise RegistryProtocolError(f"Registry {method} {path} failed: {exc!r}") from exc

    async def lookup(self, name: str) -> schemas.RegistryDescriptor | None:
        """
        Fetch the descriptor registered under `name`, or None when it is not there.
        """
        resp = await self._send("GET", f"/modules/name/{name}")
        if resp.status_code != 200:
            return None

        try:
            return schemas.RegistryDescriptor.model_validate_json(resp.content)
        except ValidationError as exc:
            raise RegistryProtocolError(f"Registry returned an unparsable descriptor for {name!r}.") from exc

    async def create(self, payload: schemas.NewDescriptorRequest) -> None:
        resp = await self._send("POST", "/modules", json=payload.model_dump())
        if resp.status_code != 201:
            body = resp.text[:300]
            raise RegistryProtocolError(f"Error creating module: {resp.status_code} {body}")

    async def update(self, payload: schemas.UpdateDescriptorRequest) -> None:
        resp = await self._send("PUT", f"/modules/{payload.id}", json=payload.model_dump())
        if resp.status_code != 200:
            body = resp.text[:300]
            raise RegistryProtocolError(f"Error updating module: {resp.status_code} {body}")
