"""EntityLifecycle - the load/mutation state of one remote value.

A lifecycle bundles three things:
- value: the last known value, or None when nothing has loaded yet
- error: the last failure, attached only once an operation has finished
- operation: what the entry is currently waiting on

Every method returns a new lifecycle; instances are never modified.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from optisync.errors import ContractViolation
from optisync.types import Operation

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class EntityLifecycle(Generic[T]):
    """Value, error and pending operation of a single entry."""

    value: T | None = None
    error: BaseException | None = None
    operation: Operation = Operation.NONE

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def empty(cls) -> EntityLifecycle[T]:
        return cls()

    @classmethod
    def loading(cls) -> EntityLifecycle[T]:
        """Nothing known yet, a load is in flight."""
        return cls(operation=Operation.LOADING)

    @classmethod
    def with_value(cls, value: T) -> EntityLifecycle[T]:
        """A resolved, error-free value."""
        return cls(value=value)

    @classmethod
    def with_error(cls, error: BaseException) -> EntityLifecycle[T]:
        """A failed initial load: no value to fall back to."""
        return cls(error=error)

    @classmethod
    def creating(cls, value: T) -> EntityLifecycle[T]:
        """An optimistic value that the server has not confirmed yet."""
        return cls(value=value, operation=Operation.CREATING)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def set_value(self, value: T) -> EntityLifecycle[T]:
        return replace(self, value=value)

    def set_operation(self, operation: Operation) -> EntityLifecycle[T]:
        """Start an operation. A fresh attempt always clears the old error."""
        if operation is Operation.NONE:
            return self.done()
        return replace(self, operation=operation, error=None)

    def updating(self) -> EntityLifecycle[T]:
        return self.set_operation(Operation.UPDATING)

    def deleting(self) -> EntityLifecycle[T]:
        return self.set_operation(Operation.DELETING)

    def set_error(self, error: BaseException) -> EntityLifecycle[T]:
        """Finish the current operation with a failure.

        The value is kept: a failed update or delete falls back to the last
        known-good value instead of losing it.
        """
        return replace(self, error=error, operation=Operation.NONE)

    def clear_error(self) -> EntityLifecycle[T]:
        return replace(self, error=None)

    def done(self) -> EntityLifecycle[T]:
        """Mark the pending operation as finished."""
        return replace(self, operation=Operation.NONE)

    def map(self, fn: Callable[[T], U]) -> EntityLifecycle[U]:
        """Apply fn to the value, leaving operation and error alone."""
        if self.value is None:
            return self  # type: ignore[return-value]
        return EntityLifecycle(
            value=fn(self.value), error=self.error, operation=self.operation
        )

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------

    def has_value(self) -> bool:
        return self.value is not None

    def has_error(self) -> bool:
        return self.error is not None

    def has_operation(self) -> bool:
        return self.operation is not Operation.NONE

    def is_resolved(self) -> bool:
        return self.operation is Operation.NONE

    def is_actionable(self) -> bool:
        """Whether retry and delete controls make sense for this entry."""
        return self.is_resolved() and self.has_value()

    def is_loading(self) -> bool:
        return self.operation is Operation.LOADING

    def is_creating(self) -> bool:
        return self.operation is Operation.CREATING

    def is_updating(self) -> bool:
        return self.operation is Operation.UPDATING

    def is_deleting(self) -> bool:
        return self.operation is Operation.DELETING

    def is_done(self) -> bool:
        """Resolved with either a value or an error to show."""
        return self.is_resolved() and (self.has_value() or self.has_error())

    def require_value(self) -> T:
        """Return the value, raising when there is none."""
        if self.value is None:
            raise ContractViolation("Lifecycle has no value")
        return self.value

    def __repr__(self) -> str:
        return (
            f"EntityLifecycle(value={self.value!r}, error={self.error!r}, "
            f"operation={self.operation.value})"
        )


__all__ = ["EntityLifecycle"]
