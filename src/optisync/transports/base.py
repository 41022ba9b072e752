"""Transport protocol: the remote calls the store issues."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from optisync.types import Entity, Fields


@runtime_checkable
class AsyncTransport(Protocol):
    """Async interface to the server holding the entities.

    Every call either returns its payload or raises. A batch call fails as a
    whole; partial per-item failures are not representable.
    """

    async def list_ids(self) -> list[str]:
        """Ids of every entity on the server."""
        ...

    async def load_entities(self, ids: Sequence[str]) -> list[Entity]:
        """Entities for ids. Unknown ids are left out of the result."""
        ...

    async def create_entity(self, fields: Fields) -> Entity:
        """Create an entity; the server assigns its id."""
        ...

    async def update_entities(
        self, ids: Sequence[str], fields: Sequence[Fields]
    ) -> list[Entity]:
        """Replace fields for each id. Parallel sequences, same order."""
        ...

    async def delete_entities(self, ids: Sequence[str]) -> None:
        """Delete every id."""
        ...

    async def disconnect(self) -> None:
        """Release connections."""
        ...
