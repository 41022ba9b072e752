"""Commands - remote calls requested by the coordinator, as plain data.

The coordinator never talks to the transport itself. It returns at most one
command per intent and the store decides how to run it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from optisync.types import Entity


@dataclass(frozen=True, slots=True)
class ListIds:
    """Fetch every known id."""


@dataclass(frozen=True, slots=True)
class LoadEntities:
    ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CreateEntity:
    """Create from fields. The temporary id stays local to the client."""

    fields: dict[str, Any]
    temporary_id: str


@dataclass(frozen=True, slots=True)
class UpdateEntities:
    ids: tuple[str, ...]
    fields: tuple[dict[str, Any], ...]
    originals: tuple[Entity, ...]  # rollback snapshot, never sent


@dataclass(frozen=True, slots=True)
class DeleteEntities:
    ids: tuple[str, ...]


Command = ListIds | LoadEntities | CreateEntity | UpdateEntities | DeleteEntities
