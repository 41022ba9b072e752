"""EntityCache - copy-on-write map of id -> EntityLifecycle.

Reads never come back empty: an id the cache has never seen reads as
``loading()`` and is queued with the MissBatcher, which reports every miss
collected during one event-loop tick in a single ``on_miss`` call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Generic, TypeVar

from optisync.lifecycle import EntityLifecycle

T = TypeVar("T")

MissCallback = Callable[[frozenset[str]], None]


class MissBatcher:
    """Collects cache misses and reports them in batches.

    Shared by every snapshot derived from the same cache, so misses recorded
    on an old snapshot still end up in the same batch.
    """

    def __init__(self, on_miss: MissCallback | None = None) -> None:
        self._on_miss = on_miss
        self._pending: set[str] = set()
        self._scheduled: asyncio.Handle | None = None
        self._scheduled_loop: asyncio.AbstractEventLoop | None = None

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    def set_callback(self, on_miss: MissCallback | None) -> None:
        self._on_miss = on_miss

    def record(self, id: str) -> None:
        """Queue a miss, scheduling a flush on the running loop if any."""
        self._pending.add(id)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return  # No loop: wait for an explicit flush()
        if self._scheduled is not None:
            if self._scheduled_loop is loop:
                return
            # Left over from a loop that stopped before the flush ran.
            self._scheduled.cancel()
        self._scheduled = loop.call_soon(self.flush)
        self._scheduled_loop = loop

    def flush(self) -> frozenset[str]:
        """Report every pending miss in one call and reset."""
        if self._scheduled is not None:
            self._scheduled.cancel()
            self._scheduled = None
            self._scheduled_loop = None
        if not self._pending:
            return frozenset()
        batch = frozenset(self._pending)
        self._pending.clear()
        if self._on_miss is not None:
            self._on_miss(batch)
        return batch


class EntityCache(Generic[T]):
    """Immutable mapping of id -> EntityLifecycle with batched miss loading.

    Every mutator returns a new cache; the receiver is left untouched.
    """

    __slots__ = ("_batcher", "_entries")

    def __init__(
        self,
        entries: Mapping[str, EntityLifecycle[T]] | None = None,
        *,
        on_miss: MissCallback | None = None,
        batcher: MissBatcher | None = None,
    ) -> None:
        self._entries: dict[str, EntityLifecycle[T]] = dict(entries or {})
        self._batcher = batcher if batcher is not None else MissBatcher(on_miss)

    def _derive(self, entries: dict[str, EntityLifecycle[T]]) -> EntityCache[T]:
        return EntityCache(entries, batcher=self._batcher)

    @property
    def batcher(self) -> MissBatcher:
        return self._batcher

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, id: str) -> EntityLifecycle[T]:
        """Lifecycle for id; unknown ids read as loading and get fetched."""
        entry = self._entries.get(id)
        if entry is not None:
            return entry
        self._batcher.record(id)
        return EntityLifecycle.loading()

    def peek(self, id: str) -> EntityLifecycle[T] | None:
        """Lifecycle for id without triggering a load."""
        return self._entries.get(id)

    def flush_misses(self) -> frozenset[str]:
        return self._batcher.flush()

    def ids(self) -> list[str]:
        return list(self._entries)

    def values(self) -> list[EntityLifecycle[T]]:
        return list(self._entries.values())

    def items(self) -> list[tuple[str, EntityLifecycle[T]]]:
        return list(self._entries.items())

    def for_each(self, fn: Callable[[EntityLifecycle[T], str], None]) -> None:
        for id, entry in self._entries.items():
            fn(entry, id)

    def filter(
        self, predicate: Callable[[EntityLifecycle[T], str], bool]
    ) -> EntityCache[T]:
        return self._derive(
            {id: lo for id, lo in self._entries.items() if predicate(lo, id)}
        )

    def __contains__(self, id: object) -> bool:
        return id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityCache):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"EntityCache({self._entries!r})"

    # -------------------------------------------------------------------------
    # Copy-on-write updates
    # -------------------------------------------------------------------------

    def set(self, id: str, lifecycle: EntityLifecycle[T]) -> EntityCache[T]:
        entries = dict(self._entries)
        entries[id] = lifecycle
        return self._derive(entries)

    def delete(self, id: str) -> EntityCache[T]:
        if id not in self._entries:
            return self
        entries = dict(self._entries)
        del entries[id]
        return self._derive(entries)

    def update(
        self,
        id: str,
        fn: Callable[[EntityLifecycle[T]], EntityLifecycle[T]],
    ) -> EntityCache[T]:
        """set(id, fn(current)). An unknown id starts from loading()."""
        current = self._entries.get(id, EntityLifecycle.loading())
        return self.set(id, fn(current))

    def merge(
        self, pairs: Iterable[tuple[str, EntityLifecycle[T]]]
    ) -> EntityCache[T]:
        """Batched set, e.g. when a batch load comes back."""
        entries = dict(self._entries)
        for id, lifecycle in pairs:
            entries[id] = lifecycle
        return self._derive(entries)


__all__ = ["EntityCache", "MissBatcher", "MissCallback"]
