"""Exceptions raised by optisync."""

from __future__ import annotations


class OptisyncError(Exception):
    """Base class for optisync errors."""


class TransportError(OptisyncError, RuntimeError):
    """A remote call failed: network error, bad status or malformed body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ContractViolation(OptisyncError, ValueError):
    """A caller bug, e.g. mismatched batch lengths or duplicate ids.

    Raised before any state changes, so the rejected intent leaves the
    store exactly as it was.
    """
