"""Tests for AsyncMemoryTransport."""

import pytest

from optisync import AsyncMemoryTransport, Entity, TransportError


@pytest.fixture
def memory() -> AsyncMemoryTransport:
    return AsyncMemoryTransport(
        [Entity(id="1", fields={"url": "a"}), Entity(id="2", fields={"url": "b"})],
        required_fields=("url",),
    )


class TestAsyncMemoryTransport:
    """Tests for the in-memory transport."""

    async def test_list_ids(self, memory: AsyncMemoryTransport) -> None:
        assert await memory.list_ids() == ["1", "2"]

    async def test_load_skips_unknown_ids(self, memory: AsyncMemoryTransport) -> None:
        entities = await memory.load_entities(["2", "404"])
        assert entities == [Entity(id="2", fields={"url": "b"})]

    async def test_create_assigns_next_id(self, memory: AsyncMemoryTransport) -> None:
        entity = await memory.create_entity({"url": "c"})
        assert entity == Entity(id="3", fields={"url": "c"})
        assert "3" in memory.entities

    async def test_create_requires_fields(self, memory: AsyncMemoryTransport) -> None:
        with pytest.raises(TransportError, match="Missing field 'url'"):
            await memory.create_entity({"notes": "x"})

    async def test_update_replaces_fields(self, memory: AsyncMemoryTransport) -> None:
        updated = await memory.update_entities(["1"], [{"url": "z", "notes": "n"}])
        assert updated == [Entity(id="1", fields={"url": "z", "notes": "n"})]
        assert memory.entities["1"].fields == {"url": "z", "notes": "n"}

    async def test_update_fails_whole_batch(
        self, memory: AsyncMemoryTransport
    ) -> None:
        with pytest.raises(TransportError, match="404"):
            await memory.update_entities(["1", "404"], [{"url": "z"}, {"url": "y"}])
        assert memory.entities["1"].fields == {"url": "a"}

    async def test_update_rejects_duplicates(
        self, memory: AsyncMemoryTransport
    ) -> None:
        with pytest.raises(TransportError, match="duplicates") as info:
            await memory.update_entities(["1", "1"], [{}, {}])
        assert info.value.status_code == 400

    async def test_delete(self, memory: AsyncMemoryTransport) -> None:
        await memory.delete_entities(["1"])
        assert await memory.list_ids() == ["2"]

    async def test_delete_unknown_fails(self, memory: AsyncMemoryTransport) -> None:
        with pytest.raises(TransportError) as info:
            await memory.delete_entities(["2", "404"])
        assert info.value.status_code == 404
        assert "2" in memory.entities

    async def test_fail_next(self, memory: AsyncMemoryTransport) -> None:
        memory.fail_next(2)
        for _ in range(2):
            with pytest.raises(TransportError, match="Simulated"):
                await memory.list_ids()
        assert await memory.list_ids() == ["1", "2"]

    async def test_fail_next_with_custom_error(
        self, memory: AsyncMemoryTransport
    ) -> None:
        memory.fail_next(error=ConnectionError("offline"))
        with pytest.raises(ConnectionError):
            await memory.list_ids()

    async def test_calls_are_recorded(self, memory: AsyncMemoryTransport) -> None:
        await memory.load_entities(["1"])
        await memory.delete_entities(["1"])
        assert memory.calls == [
            ("load_entities", (("1",),)),
            ("delete_entities", (("1",),)),
        ]
