"""optisync - Optimistic entity synchronization for Python."""

from contextlib import suppress

# Cache building blocks
from optisync.cache import EntityCache, MissBatcher
from optisync.commands import (
    Command,
    CreateEntity,
    DeleteEntities,
    ListIds,
    LoadEntities,
    UpdateEntities,
)

# Configuration
from optisync.config import SyncConfig, parse_duration

# Coordinator
from optisync.coordinator import SyncState, Transition, reduce
from optisync.errors import ContractViolation, OptisyncError, TransportError
from optisync.id_list import IdListLifecycle
from optisync.intents import (
    Created,
    CreateError,
    DeleteError,
    Deleted,
    Intent,
    ListLoaded,
    ListLoadError,
    LoadError,
    Loaded,
    Retry,
    StartCreate,
    StartDelete,
    StartLoad,
    StartLoadList,
    StartUpdate,
    Updated,
    UpdateError,
)
from optisync.lifecycle import EntityLifecycle

# Store
from optisync.store import SyncStore, create_store
from optisync.temporary_id import (
    TemporaryIdAllocator,
    is_temporary_id,
    next_temporary_id,
)

# Transports (async only)
from optisync.transports import AsyncMemoryTransport, AsyncTransport

# Core types
from optisync.types import Duration, Entity, Fields, Operation

# Optional transport imports - only available when dependencies are installed
with suppress(ImportError):
    from optisync.transports import AsyncHttpTransport

with suppress(ImportError):
    from optisync.transports import AsyncRedisTransport

__version__ = "0.1.0"

__all__ = [
    "AsyncHttpTransport",
    "AsyncMemoryTransport",
    "AsyncRedisTransport",
    "AsyncTransport",
    "Command",
    "ContractViolation",
    "CreateEntity",
    "CreateError",
    "Created",
    "DeleteEntities",
    "DeleteError",
    "Deleted",
    "Duration",
    "Entity",
    "EntityCache",
    "EntityLifecycle",
    "Fields",
    "IdListLifecycle",
    "Intent",
    "ListIds",
    "ListLoadError",
    "ListLoaded",
    "LoadEntities",
    "LoadError",
    "Loaded",
    "MissBatcher",
    "Operation",
    "OptisyncError",
    "Retry",
    "StartCreate",
    "StartDelete",
    "StartLoad",
    "StartLoadList",
    "StartUpdate",
    "SyncConfig",
    "SyncState",
    "SyncStore",
    "TemporaryIdAllocator",
    "Transition",
    "TransportError",
    "UpdateEntities",
    "UpdateError",
    "Updated",
    "create_store",
    "is_temporary_id",
    "next_temporary_id",
    "parse_duration",
    "reduce",
]
