"""HTTP transport over httpx."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from optisync.errors import TransportError
from optisync.types import Entity, Fields

logger = logging.getLogger(__name__)


class AsyncHttpTransport:
    """Async transport speaking the entity server's JSON API.

    Routes:
        GET  /ids                 -> list of ids
        GET  /entities?ids=[...]  -> list of entities
        POST /entity/create       -> created entity
        POST /entities/update     -> updated entities, in request order
        POST /entities/delete     -> empty body
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        id_key: str = "id",
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._id_key = id_key
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=timeout,
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
        allow_empty: bool = False,
    ) -> Any:
        """Send a request and decode its JSON body."""
        try:
            response = await self._client.request(
                method, endpoint, params=params, json=body
            )
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, endpoint, e)
            raise TransportError(f"{method} {endpoint} failed: {e}") from e

        if not response.is_success:
            try:
                error = response.json().get("error", "Request failed")
            except Exception:
                error = f"HTTP {response.status_code}"
            raise TransportError(
                f"[status: {response.status_code}] {error}",
                status_code=response.status_code,
            )

        if not response.content:
            if allow_empty:
                return None
            raise TransportError("Responses from server must be JSON")
        try:
            return response.json()
        except ValueError as e:
            raise TransportError("Responses from server must be JSON") from e

    def _entity(self, raw: Any) -> Entity:
        if not isinstance(raw, dict):
            raise TransportError(f"Expected an entity object, got {raw!r}")
        try:
            return Entity.from_dict(raw, id_key=self._id_key)
        except ValueError as e:
            raise TransportError(str(e)) from e

    def _entities(self, raw: Any) -> list[Entity]:
        if not isinstance(raw, list):
            raise TransportError(f"Expected a list of entities, got {raw!r}")
        return [self._entity(item) for item in raw]

    async def list_ids(self) -> list[str]:
        data = await self._request("GET", "/ids")
        if not isinstance(data, list):
            raise TransportError(f"Expected a list of ids, got {data!r}")
        return [str(id) for id in data]

    async def load_entities(self, ids: Sequence[str]) -> list[Entity]:
        data = await self._request(
            "GET", "/entities", params={"ids": json.dumps(list(ids))}
        )
        return self._entities(data)

    async def create_entity(self, fields: Fields) -> Entity:
        data = await self._request("POST", "/entity/create", body=dict(fields))
        return self._entity(data)

    async def update_entities(
        self, ids: Sequence[str], fields: Sequence[Fields]
    ) -> list[Entity]:
        data = await self._request(
            "POST",
            "/entities/update",
            body={"ids": list(ids), "fields": [dict(f) for f in fields]},
        )
        return self._entities(data)

    async def delete_entities(self, ids: Sequence[str]) -> None:
        await self._request(
            "POST", "/entities/delete", body={"ids": list(ids)}, allow_empty=True
        )

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
