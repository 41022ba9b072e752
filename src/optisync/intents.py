"""Intents - every event the coordinator reacts to.

One frozen dataclass per event. User intents start an operation; the
completion events (loaded, created, ...-error) are dispatched by the store
when the transport call it issued for that operation settles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from optisync.types import Entity


@dataclass(frozen=True, slots=True)
class StartLoadList:
    kind: ClassVar[str] = "ids/start-load"


@dataclass(frozen=True, slots=True)
class ListLoaded:
    ids: tuple[str, ...]
    kind: ClassVar[str] = "ids/loaded"


@dataclass(frozen=True, slots=True)
class ListLoadError:
    error: BaseException
    kind: ClassVar[str] = "ids/load-error"


@dataclass(frozen=True, slots=True)
class StartCreate:
    fields: dict[str, Any]
    temporary_id: str
    kind: ClassVar[str] = "entity/start-create"


@dataclass(frozen=True, slots=True)
class Created:
    entity: Entity
    temporary_id: str
    kind: ClassVar[str] = "entity/created"


@dataclass(frozen=True, slots=True)
class CreateError:
    error: BaseException
    temporary_id: str
    kind: ClassVar[str] = "entity/create-error"


@dataclass(frozen=True, slots=True)
class StartLoad:
    ids: tuple[str, ...]
    kind: ClassVar[str] = "entities/start-load"


@dataclass(frozen=True, slots=True)
class Loaded:
    entities: tuple[Entity, ...]
    kind: ClassVar[str] = "entities/loaded"


@dataclass(frozen=True, slots=True)
class LoadError:
    ids: tuple[str, ...]
    error: BaseException
    kind: ClassVar[str] = "entities/load-error"


@dataclass(frozen=True, slots=True)
class StartUpdate:
    """Replace the fields of each id; ids and fields are parallel."""

    ids: tuple[str, ...]
    fields: tuple[dict[str, Any], ...]
    kind: ClassVar[str] = "entities/start-update"


@dataclass(frozen=True, slots=True)
class Updated:
    entities: tuple[Entity, ...]
    kind: ClassVar[str] = "entities/updated"


@dataclass(frozen=True, slots=True)
class UpdateError:
    """Carries the pre-update snapshot the entries roll back to."""

    originals: tuple[Entity, ...]
    error: BaseException
    kind: ClassVar[str] = "entities/update-error"


@dataclass(frozen=True, slots=True)
class StartDelete:
    ids: tuple[str, ...]
    kind: ClassVar[str] = "entities/start-delete"


@dataclass(frozen=True, slots=True)
class Deleted:
    ids: tuple[str, ...]
    kind: ClassVar[str] = "entities/deleted"


@dataclass(frozen=True, slots=True)
class DeleteError:
    ids: tuple[str, ...]
    error: BaseException
    kind: ClassVar[str] = "entities/delete-error"


@dataclass(frozen=True, slots=True)
class Retry:
    entity: Entity
    kind: ClassVar[str] = "entity/retry"


Intent = (
    StartLoadList
    | ListLoaded
    | ListLoadError
    | StartCreate
    | Created
    | CreateError
    | StartLoad
    | Loaded
    | LoadError
    | StartUpdate
    | Updated
    | UpdateError
    | StartDelete
    | Deleted
    | DeleteError
    | Retry
)

INTENT_TYPES: tuple[type, ...] = (
    StartLoadList,
    ListLoaded,
    ListLoadError,
    StartCreate,
    Created,
    CreateError,
    StartLoad,
    Loaded,
    LoadError,
    StartUpdate,
    Updated,
    UpdateError,
    StartDelete,
    Deleted,
    DeleteError,
    Retry,
)
