"""Redis transport: entities kept as JSON in a Redis hash."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from optisync.errors import TransportError
from optisync.types import Entity, Fields


def _serialize_entity(entity: Entity) -> str:
    return json.dumps(entity.to_dict(), sort_keys=True)


def _deserialize_entity(data: bytes | str) -> Entity:
    """Deserialize a stored hash field back to an entity."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return Entity.from_dict(json.loads(data))


class AsyncRedisTransport:
    """Async transport that reads and writes entities directly in Redis.

    Layout:
        {prefix}:entities  hash of id -> JSON document in wire shape
        {prefix}:next-id   counter used to assign ids on create
    """

    def __init__(
        self,
        client: Any,  # redis.asyncio.Redis
        *,
        prefix: str = "optisync",
    ) -> None:
        self._client = client
        self._prefix = prefix

    @property
    def _hash_key(self) -> str:
        return f"{self._prefix}:entities"

    @property
    def _counter_key(self) -> str:
        return f"{self._prefix}:next-id"

    async def _check_known(self, ids: Sequence[str]) -> None:
        if len(set(ids)) != len(ids):
            raise TransportError("ids contains duplicates", status_code=400)
        if not ids:
            return
        exists = await self._client.hmget(self._hash_key, list(ids))
        for id, data in zip(ids, exists):
            if data is None:
                raise TransportError(f"No entity with id {id!r}", status_code=404)

    async def list_ids(self) -> list[str]:
        keys = await self._client.hkeys(self._hash_key)
        ids = [k.decode("utf-8") if isinstance(k, bytes) else k for k in keys]
        return sorted(ids, key=lambda i: (len(i), i))

    async def load_entities(self, ids: Sequence[str]) -> list[Entity]:
        if not ids:
            return []
        values = await self._client.hmget(self._hash_key, list(ids))
        return [_deserialize_entity(data) for data in values if data is not None]

    async def create_entity(self, fields: Fields) -> Entity:
        id = str(await self._client.incr(self._counter_key))
        entity = Entity(id=id, fields=dict(fields))
        await self._client.hset(self._hash_key, id, _serialize_entity(entity))
        return entity

    async def update_entities(
        self, ids: Sequence[str], fields: Sequence[Fields]
    ) -> list[Entity]:
        if len(ids) != len(fields):
            raise TransportError("ids and fields differ in length", status_code=400)
        await self._check_known(ids)
        if not ids:
            return []
        entities = [Entity(id=id, fields=dict(f)) for id, f in zip(ids, fields)]
        mapping = {e.id: _serialize_entity(e) for e in entities}
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(self._hash_key, mapping=mapping)
            await pipe.execute()
        return entities

    async def delete_entities(self, ids: Sequence[str]) -> None:
        await self._check_known(ids)
        if not ids:
            return
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hdel(self._hash_key, *ids)
            await pipe.execute()

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
