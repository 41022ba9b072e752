"""Temporary ids for entities the server has not assigned an id to yet."""

from __future__ import annotations

import itertools
import threading

DEFAULT_PREFIX = "tmp:"


class TemporaryIdAllocator:
    """Hands out process-unique placeholder ids.

    Ids look like ``tmp:1``, ``tmp:2``, ... and are never reused. The prefix
    is what tells a temporary id apart from a server-assigned one, so it must
    never occur at the start of a real id.
    """

    def __init__(self, prefix: str = DEFAULT_PREFIX) -> None:
        if not prefix:
            raise ValueError("prefix must be a non-empty string")
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def prefix(self) -> str:
        return self._prefix

    def next(self) -> str:
        """Allocate a fresh temporary id."""
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}{n}"

    def is_temporary(self, id: str) -> bool:
        return id.startswith(self._prefix)


_default = TemporaryIdAllocator()


def next_temporary_id() -> str:
    """Allocate from the process-wide allocator."""
    return _default.next()


def is_temporary_id(id: str) -> bool:
    """Check an id against the default prefix."""
    return _default.is_temporary(id)
