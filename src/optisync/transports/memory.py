"""In-memory transport (async only)."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Iterable, Sequence
from typing import Any

from optisync.errors import TransportError
from optisync.types import Entity, Fields


class AsyncMemoryTransport:
    """An in-process stand-in for the server.

    Assigns ids from a counter and validates batches the way the HTTP
    server does. Every call is recorded in ``calls`` as ``(name, args)``.
    """

    def __init__(
        self,
        entities: Iterable[Entity] = (),
        *,
        required_fields: Iterable[str] = (),
        latency: float = 0.0,
    ) -> None:
        self._entities: dict[str, Entity] = {e.id: e for e in entities}
        self._required = tuple(required_fields)
        self._latency = latency
        start = max((int(i) for i in self._entities if i.isdigit()), default=0) + 1
        self._ids = itertools.count(start)
        self._failures: list[BaseException] = []
        self._lock = asyncio.Lock()
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def entities(self) -> dict[str, Entity]:
        return dict(self._entities)

    def fail_next(self, count: int = 1, error: BaseException | None = None) -> None:
        """Make the next count calls raise error (a TransportError by default)."""
        for _ in range(count):
            self._failures.append(error or TransportError("Simulated failure"))

    async def _enter(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._failures:
            raise self._failures.pop(0)

    def _check_known(self, ids: Sequence[str]) -> None:
        if len(set(ids)) != len(ids):
            raise TransportError("ids contains duplicates", status_code=400)
        for id in ids:
            if id not in self._entities:
                raise TransportError(f"No entity with id {id!r}", status_code=404)

    async def list_ids(self) -> list[str]:
        await self._enter("list_ids")
        async with self._lock:
            return list(self._entities)

    async def load_entities(self, ids: Sequence[str]) -> list[Entity]:
        await self._enter("load_entities", tuple(ids))
        async with self._lock:
            return [self._entities[id] for id in ids if id in self._entities]

    async def create_entity(self, fields: Fields) -> Entity:
        await self._enter("create_entity", dict(fields))
        for name in self._required:
            if name not in fields:
                raise TransportError(f"Missing field {name!r}", status_code=400)
        async with self._lock:
            entity = Entity(id=str(next(self._ids)), fields=dict(fields))
            self._entities[entity.id] = entity
            return entity

    async def update_entities(
        self, ids: Sequence[str], fields: Sequence[Fields]
    ) -> list[Entity]:
        await self._enter("update_entities", tuple(ids), tuple(dict(f) for f in fields))
        if len(ids) != len(fields):
            raise TransportError("ids and fields differ in length", status_code=400)
        async with self._lock:
            self._check_known(ids)
            updated = [
                self._entities[id].with_fields(f) for id, f in zip(ids, fields)
            ]
            for entity in updated:
                self._entities[entity.id] = entity
            return updated

    async def delete_entities(self, ids: Sequence[str]) -> None:
        await self._enter("delete_entities", tuple(ids))
        async with self._lock:
            self._check_known(ids)
            for id in ids:
                del self._entities[id]

    async def disconnect(self) -> None:
        """Disconnect (no-op for memory)."""
        pass
