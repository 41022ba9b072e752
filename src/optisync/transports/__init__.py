"""Transports for optisync (async only)."""

from contextlib import suppress

from optisync.transports.base import AsyncTransport
from optisync.transports.memory import AsyncMemoryTransport

# Optional transports - only available when dependencies are installed
with suppress(ImportError):
    from optisync.transports.http import AsyncHttpTransport

with suppress(ImportError):
    from optisync.transports.redis import AsyncRedisTransport

__all__ = [
    "AsyncHttpTransport",
    "AsyncMemoryTransport",
    "AsyncRedisTransport",
    "AsyncTransport",
]
