"""Shared pytest fixtures."""

import pytest

from optisync import AsyncMemoryTransport, Entity, SyncConfig, SyncStore


@pytest.fixture
def password() -> Entity:
    """A stored credential as the server would return it."""
    return Entity(
        id="1",
        fields={
            "url": "https://example.com",
            "username": "ada",
            "password": "hunter2",
            "notes": "",
        },
    )


@pytest.fixture
def transport(password: Entity) -> AsyncMemoryTransport:
    """Create a memory transport holding two entities."""
    other = Entity(
        id="2",
        fields={
            "url": "https://example.org",
            "username": "grace",
            "password": "cobol",
            "notes": "work",
        },
    )
    return AsyncMemoryTransport([password, other], required_fields=("url",))


@pytest.fixture
def store(transport: AsyncMemoryTransport) -> SyncStore:
    """Create a SyncStore on top of the memory transport."""
    return SyncStore(transport, config=SyncConfig(log_intents=True))
