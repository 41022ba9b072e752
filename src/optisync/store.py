"""SyncStore - owns the sync state and runs the coordinator's commands."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any

from optisync.cache import EntityCache
from optisync.commands import (
    Command,
    CreateEntity,
    DeleteEntities,
    ListIds,
    LoadEntities,
    UpdateEntities,
)
from optisync.config import SyncConfig
from optisync.coordinator import SyncState, reduce
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
from optisync.temporary_id import TemporaryIdAllocator
from optisync.transports.base import AsyncTransport
from optisync.types import Entity, Fields

logger = logging.getLogger(__name__)

Listener = Callable[[Intent, SyncState], None]


class SyncStore:
    """Single owner of a SyncState.

    Intents go through ``dispatch``: the coordinator computes the next state
    and the command, the store swaps the state in and runs the command as a
    background task. When the task settles, its success or error intent is
    dispatched like any other, so all state changes happen one at a time on
    the event loop thread.
    """

    def __init__(
        self,
        transport: AsyncTransport,
        *,
        config: SyncConfig | None = None,
        allocator: TemporaryIdAllocator | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or SyncConfig()
        self._allocator = allocator or TemporaryIdAllocator(
            self._config.temporary_prefix
        )
        self._state = SyncState(
            entities=EntityCache(on_miss=self._on_miss),
            ids=IdListLifecycle.unrequested(),
        )
        self._listeners: list[Listener] = []
        self._background_tasks: set[asyncio.Task[None]] = set()

    # -------------------------------------------------------------------------
    # Read surface
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def allocator(self) -> TemporaryIdAllocator:
        return self._allocator

    def get_entity(self, id: str) -> EntityLifecycle[Entity]:
        """Lifecycle for id; unknown ids are fetched in the next batch.

        A miss leaves a loading placeholder in the cache right away, so the
        id is visible to values(), deletes and membership checks before the
        batched load is issued.
        """
        entities = self._state.entities
        lifecycle = entities.get(id)
        if id not in entities:
            self._state = replace(self._state, entities=entities.set(id, lifecycle))
        return lifecycle

    def get_id_list(self) -> IdListLifecycle:
        """The id list, issuing the first list load on first read."""
        if not self._state.ids.was_requested:
            self.dispatch(StartLoadList())
        return self._state.ids

    def values(self) -> list[EntityLifecycle[Entity]]:
        return self._state.entities.values()

    def visible_ids(self) -> list[str]:
        """Listed ids minus the ones waiting on a delete."""
        entities = self._state.entities
        return [
            id
            for id in self.get_id_list().ids
            if not (entities.peek(id) or EntityLifecycle.empty()).is_deleting()
        ]

    def visible_entities(self) -> EntityCache[Entity]:
        return self._state.entities.filter(lambda lo, _: not lo.is_deleting())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener(intent, state) after every dispatch.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Write surface
    # -------------------------------------------------------------------------

    def dispatch(self, intent: Intent) -> SyncState:
        """Reduce intent into the state and run the resulting command.

        ContractViolation propagates and leaves the state unchanged.
        """
        if self._config.log_intents:
            logger.debug("dispatch %s: %r", intent.kind, intent)
        transition = reduce(
            self._state, intent, is_temporary=self._allocator.is_temporary
        )
        if transition.command is not None:
            # The task body runs on a later tick, after the new state is in.
            self._schedule(transition.command)
        self._state = transition.state
        for listener in list(self._listeners):
            listener(intent, self._state)
        return self._state

    def load_list(self) -> None:
        self.dispatch(StartLoadList())

    def load(self, ids: Iterable[str]) -> None:
        self.dispatch(StartLoad(ids=tuple(ids)))

    def create(self, fields: Fields) -> str:
        """Optimistically create an entity. Returns its temporary id."""
        temporary_id = self._allocator.next()
        self.dispatch(StartCreate(fields=dict(fields), temporary_id=temporary_id))
        return temporary_id

    def update(self, ids: Sequence[str], fields: Sequence[Fields]) -> None:
        self.dispatch(
            StartUpdate(ids=tuple(ids), fields=tuple(dict(f) for f in fields))
        )

    def delete(self, ids: Iterable[str]) -> None:
        self.dispatch(StartDelete(ids=tuple(ids)))

    def retry(self, id: str) -> None:
        """Retry the create (temporary id) or reload (real id) of an entry."""
        lifecycle = self._state.entities.peek(id)
        if lifecycle is None:
            raise ContractViolation(f"Cannot retry unknown id {id!r}")
        if not lifecycle.is_resolved():
            raise ContractViolation(
                f"Cannot retry {id!r} while {lifecycle.operation.value} is pending"
            )
        if lifecycle.value is not None:
            entity = lifecycle.value
        else:
            entity = Entity(id=id)
        self.dispatch(Retry(entity=entity))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until no miss flush or remote call is outstanding."""
        while True:
            await asyncio.sleep(0)
            if self._state.entities.batcher.pending:
                self._state.entities.flush_misses()
            if not self._background_tasks:
                if not self._state.entities.batcher.pending:
                    return
                continue
            pending = list(self._background_tasks)
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        await self.wait_idle()
        await self._transport.disconnect()

    async def __aenter__(self) -> SyncStore:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _on_miss(self, ids: frozenset[str]) -> None:
        # Skip ids that got a value or an error before the flush.
        entities = self._state.entities
        missing = [id for id in sorted(ids) if _awaiting_load(entities.peek(id))]
        if missing:
            self.dispatch(StartLoad(ids=tuple(missing)))

    def _schedule(self, command: Command) -> None:
        """Run command in a background task."""
        loop = asyncio.get_running_loop()
        logger.debug("issue %s", type(command).__name__)
        task = loop.create_task(self._run(command))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _run(self, command: Command) -> None:
        """Execute one remote call and dispatch how it settled."""
        try:
            result = await self._execute(command)
        except Exception as e:
            failure = self._failure(command, e)
            logger.warning("%s failed: %s", failure.kind, e)
            self.dispatch(failure)
            return
        self.dispatch(result)

    async def _execute(self, command: Command) -> Intent:
        transport = self._transport
        if isinstance(command, ListIds):
            return ListLoaded(ids=tuple(await transport.list_ids()))
        if isinstance(command, LoadEntities):
            entities = await transport.load_entities(command.ids)
            return Loaded(entities=tuple(entities))
        if isinstance(command, CreateEntity):
            entity = await transport.create_entity(command.fields)
            return Created(entity=entity, temporary_id=command.temporary_id)
        if isinstance(command, UpdateEntities):
            entities = await transport.update_entities(command.ids, command.fields)
            return Updated(entities=tuple(entities))
        if isinstance(command, DeleteEntities):
            await transport.delete_entities(command.ids)
            return Deleted(ids=command.ids)
        raise TypeError(f"Unknown command: {command!r}")

    def _failure(self, command: Command, error: BaseException) -> Intent:
        if isinstance(command, ListIds):
            return ListLoadError(error=error)
        if isinstance(command, LoadEntities):
            return LoadError(ids=command.ids, error=error)
        if isinstance(command, CreateEntity):
            return CreateError(error=error, temporary_id=command.temporary_id)
        if isinstance(command, UpdateEntities):
            return UpdateError(originals=command.originals, error=error)
        if isinstance(command, DeleteEntities):
            return DeleteError(ids=command.ids, error=error)
        raise TypeError(f"Unknown command: {command!r}")


def _awaiting_load(lifecycle: EntityLifecycle[Entity] | None) -> bool:
    """A miss nothing has filled in yet, placeholder or not."""
    if lifecycle is None:
        return True
    return (
        lifecycle.is_loading()
        and not lifecycle.has_value()
        and not lifecycle.has_error()
    )


def create_store(
    transport: AsyncTransport | None = None,
    *,
    config: SyncConfig | None = None,
    **overrides: Any,
) -> SyncStore:
    """Create a store, building an HTTP transport when none is given.

    Args:
        transport: Transport to use (default: AsyncHttpTransport on base_url)
        config: Base configuration (default: SyncConfig.from_env())
        **overrides: SyncConfig fields replacing the base configuration

    Returns:
        SyncStore ready to dispatch intents
    """
    base = config or SyncConfig.from_env()
    if overrides:
        base = replace(base, **overrides)

    if transport is None:
        from optisync.transports.http import AsyncHttpTransport

        transport = AsyncHttpTransport(base.base_url, timeout=base.timeout_seconds)

    return SyncStore(transport, config=base)


__all__ = ["Listener", "SyncStore", "create_store"]
