"""SyncCoordinator - the reducer behind optimistic synchronization.

``reduce(state, intent)`` computes the next SyncState synchronously, applying
the optimistic effect of the intent right away, and returns at most one
Command describing the remote call that confirms it. Completion intents
reconcile the result back into the cache:

- a create swaps the temporary id for the server id
- a failed update rolls back to the snapshot taken when it started
- a failed delete brings the hidden entry back, flagged with the error

Nothing in here performs I/O or mutates its inputs.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from optisync.cache import EntityCache
from optisync.commands import (
    Command,
    CreateEntity,
    DeleteEntities,
    ListIds,
    LoadEntities,
    UpdateEntities,
)
from optisync.errors import ContractViolation
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
from optisync.temporary_id import is_temporary_id
from optisync.types import Entity

IsTemporary = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class SyncState:
    """Entity cache plus the list of all ids, replaced as a unit."""

    entities: EntityCache[Entity] = field(default_factory=EntityCache)
    ids: IdListLifecycle = field(default_factory=IdListLifecycle.unrequested)


@dataclass(frozen=True, slots=True)
class Transition:
    state: SyncState
    command: Command | None = None


def _require_unique(ids: Sequence[str], kind: str) -> None:
    if len(set(ids)) != len(ids):
        raise ContractViolation(f"{kind}: ids contain duplicates: {list(ids)!r}")


def _resolved_value(entity: Entity) -> EntityLifecycle[Entity]:
    return EntityLifecycle.with_value(entity)


def _as_values(
    entities: Sequence[Entity],
) -> list[tuple[str, EntityLifecycle[Entity]]]:
    return [(e.id, _resolved_value(e)) for e in entities]


def _merge_present(
    cache: EntityCache[Entity],
    pairs: Sequence[tuple[str, EntityLifecycle[Entity]]],
) -> EntityCache[Entity]:
    """Merge only ids still in the cache; late completions for gone ids drop."""
    return cache.merge((id, lo) for id, lo in pairs if id in cache)


def reduce(
    state: SyncState,
    intent: Intent,
    *,
    is_temporary: IsTemporary = is_temporary_id,
) -> Transition:
    """Apply one intent. Raises ContractViolation without touching state."""
    cache = state.entities
    ids = state.ids

    # ----- Listing -----------------------------------------------------------

    if isinstance(intent, StartLoadList):
        return Transition(SyncState(cache, IdListLifecycle.loading()), ListIds())

    if isinstance(intent, ListLoaded):
        return Transition(SyncState(cache, IdListLifecycle.with_ids(intent.ids)))

    if isinstance(intent, ListLoadError):
        return Transition(SyncState(cache, IdListLifecycle.with_error(intent.error)))

    # ----- Creating ----------------------------------------------------------

    if isinstance(intent, StartCreate):
        if not is_temporary(intent.temporary_id):
            raise ContractViolation(
                f"{intent.kind}: {intent.temporary_id!r} is not a temporary id"
            )
        optimistic = Entity(id=intent.temporary_id, fields=dict(intent.fields))
        return Transition(
            SyncState(
                cache.set(intent.temporary_id, EntityLifecycle.creating(optimistic)),
                ids.append(intent.temporary_id),
            ),
            CreateEntity(fields=dict(intent.fields), temporary_id=intent.temporary_id),
        )

    if isinstance(intent, Created):
        # The server holds the entity now, so it is recorded even when the
        # optimistic row was discarded in the meantime.
        real_id = intent.entity.id
        return Transition(
            SyncState(
                cache.delete(intent.temporary_id).set(
                    real_id, _resolved_value(intent.entity)
                ),
                ids.replace(intent.temporary_id, real_id),
            )
        )

    if isinstance(intent, CreateError):
        # The row stays visible with the error so the user can retry or drop it.
        if intent.temporary_id not in cache:
            return Transition(state)
        return Transition(
            SyncState(
                cache.update(
                    intent.temporary_id, lambda lo: lo.set_error(intent.error)
                ),
                ids,
            )
        )

    # ----- Loading -----------------------------------------------------------

    if isinstance(intent, StartLoad):
        _require_unique(intent.ids, intent.kind)
        if not intent.ids:
            return Transition(state)
        loading = EntityLifecycle.loading()
        return Transition(
            SyncState(cache.merge((id, loading) for id in intent.ids), ids),
            LoadEntities(ids=tuple(intent.ids)),
        )

    if isinstance(intent, Loaded):
        return Transition(
            SyncState(
                _merge_present(cache, _as_values(intent.entities)),
                ids,
            )
        )

    if isinstance(intent, LoadError):
        failed: EntityLifecycle[Entity] = EntityLifecycle.with_error(intent.error)
        return Transition(
            SyncState(_merge_present(cache, [(id, failed) for id in intent.ids]), ids)
        )

    # ----- Updating ----------------------------------------------------------

    if isinstance(intent, StartUpdate):
        _require_unique(intent.ids, intent.kind)
        if len(intent.ids) != len(intent.fields):
            raise ContractViolation(
                f"{intent.kind}: got {len(intent.ids)} ids but "
                f"{len(intent.fields)} field sets"
            )
        next_cache = cache
        sent_ids: list[str] = []
        sent_fields: list[dict] = []
        # Keep the pre-update values to roll back to if the call fails.
        originals: list[Entity] = []
        for id, fields in zip(intent.ids, intent.fields):
            current = cache.peek(id)
            if current is None or not current.has_value() or is_temporary(id):
                continue
            originals.append(current.require_value())
            sent_ids.append(id)
            sent_fields.append(dict(fields))
            next_cache = next_cache.update(
                id,
                lambda lo, f=fields: lo.updating().map(lambda e: e.with_fields(f)),
            )
        if not sent_ids:
            return Transition(state)
        return Transition(
            SyncState(next_cache, ids),
            UpdateEntities(
                ids=tuple(sent_ids),
                fields=tuple(sent_fields),
                originals=tuple(originals),
            ),
        )

    if isinstance(intent, Updated):
        return Transition(
            SyncState(
                _merge_present(cache, _as_values(intent.entities)),
                ids,
            )
        )

    if isinstance(intent, UpdateError):
        # Roll back to the snapshot, not to the in-flight optimistic value.
        return Transition(
            SyncState(
                _merge_present(
                    cache,
                    [
                        (e.id, _resolved_value(e).set_error(intent.error))
                        for e in intent.originals
                    ],
                ),
                ids,
            )
        )

    # ----- Deleting ----------------------------------------------------------

    if isinstance(intent, StartDelete):
        _require_unique(intent.ids, intent.kind)
        next_cache = cache
        real_ids: list[str] = []
        for id in intent.ids:
            if is_temporary(id):
                # Never existed server-side: nothing to roll back to.
                next_cache = next_cache.delete(id)
            else:
                real_ids.append(id)
                # Uncached ids get a valueless placeholder so a failed delete
                # has an entry to report the error on.
                next_cache = next_cache.update(id, lambda lo: lo.deleting())
        return Transition(
            SyncState(next_cache, ids.remove(intent.ids)),
            DeleteEntities(ids=tuple(real_ids)) if real_ids else None,
        )

    if isinstance(intent, Deleted):
        return Transition(
            SyncState(
                cache.filter(lambda _, id: id not in intent.ids),
                ids.remove(intent.ids),
            )
        )

    if isinstance(intent, DeleteError):
        next_cache = cache
        next_ids = ids
        for id in intent.ids:
            if id not in cache:
                continue
            next_cache = next_cache.update(id, lambda lo: lo.set_error(intent.error))
            # Resurrected entries show up in listings again.
            next_ids = next_ids.append(id)
        return Transition(SyncState(next_cache, next_ids))

    # ----- Retrying ----------------------------------------------------------

    if isinstance(intent, Retry):
        entity = intent.entity
        if is_temporary(entity.id):
            retried: Intent = StartCreate(
                fields=dict(entity.fields), temporary_id=entity.id
            )
        else:
            retried = StartLoad(ids=(entity.id,))
        return reduce(state, retried, is_temporary=is_temporary)

    raise TypeError(f"Unknown intent: {intent!r}")


__all__ = ["IsTemporary", "SyncState", "Transition", "reduce"]
