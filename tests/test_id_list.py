"""Tests for IdListLifecycle."""

from optisync import IdListLifecycle, Operation


class TestIdListLifecycle:
    """Tests for the id list lifecycle."""

    def test_initial_state_is_unrequested(self) -> None:
        ids = IdListLifecycle.unrequested()
        assert not ids.was_requested
        assert not ids.has_value()
        assert ids.is_resolved()
        assert ids.ids == ()

    def test_loading(self) -> None:
        ids = IdListLifecycle.loading()
        assert ids.was_requested
        assert ids.is_loading()
        assert ids.operation is Operation.LOADING

    def test_with_ids_drops_duplicates_keeping_order(self) -> None:
        ids = IdListLifecycle.with_ids(["b", "a", "b"])
        assert ids.ids == ("b", "a")
        assert len(ids) == 2
        assert ids.contains("a")

    def test_with_error(self) -> None:
        error = RuntimeError("boom")
        ids = IdListLifecycle.with_error(error)
        assert ids.error is error
        assert ids.has_error()
        assert ids.ids == ()

    def test_append(self) -> None:
        ids = IdListLifecycle.with_ids(["a"]).append("b").append("a")
        assert ids.ids == ("a", "b")

    def test_replace_keeps_position(self) -> None:
        ids = IdListLifecycle.with_ids(["a", "tmp:1", "c"]).replace("tmp:1", "b")
        assert ids.ids == ("a", "b", "c")

    def test_remove(self) -> None:
        ids = IdListLifecycle.with_ids(["a", "b", "c"]).remove(["a", "c", "z"])
        assert ids.ids == ("b",)

    def test_edits_on_unloaded_list_are_noops(self) -> None:
        ids = IdListLifecycle.loading()
        assert ids.append("a") == ids
        assert ids.remove(["a"]) == ids
        assert ids.replace("a", "b") == ids

    def test_map_ids(self) -> None:
        ids = IdListLifecycle.with_ids(["b", "a"]).map_ids(sorted)
        assert ids.ids == ("a", "b")
        assert ids.was_requested
