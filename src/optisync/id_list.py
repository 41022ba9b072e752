"""IdListLifecycle - load state of the list of all known ids."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from optisync.lifecycle import EntityLifecycle
from optisync.types import Operation


def _unique(ids: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(ids))


@dataclass(frozen=True, slots=True)
class IdListLifecycle:
    """An EntityLifecycle over an ordered, duplicate-free tuple of ids.

    "List all" has its own loading and error state, independent of the
    entries in the EntityCache.
    """

    lifecycle: EntityLifecycle[tuple[str, ...]] = field(
        default_factory=EntityLifecycle.empty
    )
    was_requested: bool = False

    @classmethod
    def unrequested(cls) -> IdListLifecycle:
        """Initial state: nobody has asked for the list yet."""
        return cls()

    @classmethod
    def loading(cls) -> IdListLifecycle:
        return cls(EntityLifecycle.loading(), True)

    @classmethod
    def with_ids(cls, ids: Iterable[str]) -> IdListLifecycle:
        return cls(EntityLifecycle.with_value(_unique(ids)), True)

    @classmethod
    def with_error(cls, error: BaseException) -> IdListLifecycle:
        return cls(EntityLifecycle.with_error(error), True)

    @property
    def ids(self) -> tuple[str, ...]:
        """The ids, or an empty tuple while nothing has loaded."""
        return self.lifecycle.value or ()

    @property
    def error(self) -> BaseException | None:
        return self.lifecycle.error

    @property
    def operation(self) -> Operation:
        return self.lifecycle.operation

    def has_value(self) -> bool:
        return self.lifecycle.has_value()

    def has_error(self) -> bool:
        return self.lifecycle.has_error()

    def is_loading(self) -> bool:
        return self.lifecycle.is_loading()

    def is_resolved(self) -> bool:
        return self.lifecycle.is_resolved()

    def contains(self, id: str) -> bool:
        return id in self.ids

    def map_ids(
        self, fn: Callable[[tuple[str, ...]], Iterable[str]]
    ) -> IdListLifecycle:
        """Rewrite the ids when loaded; an unloaded list is left alone."""
        return IdListLifecycle(
            self.lifecycle.map(lambda ids: _unique(fn(ids))), self.was_requested
        )

    def append(self, id: str) -> IdListLifecycle:
        return self.map_ids(lambda ids: ids if id in ids else (*ids, id))

    def replace(self, old: str, new: str) -> IdListLifecycle:
        """Swap old for new in place, keeping the list order."""
        return self.map_ids(lambda ids: (new if i == old else i for i in ids))

    def remove(self, ids: Iterable[str]) -> IdListLifecycle:
        drop = set(ids)
        return self.map_ids(lambda current: (i for i in current if i not in drop))

    def __len__(self) -> int:
        return len(self.ids)


__all__ = ["IdListLifecycle"]
