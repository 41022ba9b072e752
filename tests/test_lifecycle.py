"""Tests for EntityLifecycle."""

import pytest

from optisync import ContractViolation, EntityLifecycle, Operation


class TestConstructors:
    """Tests for the lifecycle constructors."""

    def test_loading(self) -> None:
        lo = EntityLifecycle.loading()
        assert lo.value is None
        assert lo.error is None
        assert lo.operation is Operation.LOADING
        assert not lo.is_resolved()

    def test_with_value(self) -> None:
        lo = EntityLifecycle.with_value("v")
        assert lo.value == "v"
        assert lo.is_resolved()
        assert lo.is_actionable()
        assert lo.is_done()

    def test_with_error_has_no_value(self) -> None:
        error = RuntimeError("boom")
        lo = EntityLifecycle.with_error(error)
        assert lo.error is error
        assert not lo.has_value()
        assert lo.is_resolved()
        assert not lo.is_actionable()

    def test_creating_holds_optimistic_value(self) -> None:
        lo = EntityLifecycle.creating("draft")
        assert lo.value == "draft"
        assert lo.is_creating()
        assert not lo.has_error()
        assert not lo.is_actionable()


class TestTransitions:
    """Tests for pure transitions."""

    def test_transitions_return_new_instances(self) -> None:
        lo = EntityLifecycle.with_value("v")
        updating = lo.updating()
        assert updating is not lo
        assert lo.is_resolved()
        assert updating.is_updating()

    def test_updating_and_deleting_keep_value(self) -> None:
        lo = EntityLifecycle.with_value("v")
        assert lo.updating().value == "v"
        assert lo.deleting().value == "v"
        assert lo.deleting().is_deleting()

    def test_set_error_keeps_value_and_resolves(self) -> None:
        error = RuntimeError("boom")
        lo = EntityLifecycle.with_value("v").updating().set_error(error)
        assert lo.value == "v"
        assert lo.error is error
        assert lo.operation is Operation.NONE
        assert lo.is_actionable()

    def test_starting_an_operation_clears_error(self) -> None:
        lo = EntityLifecycle.with_value("v").set_error(RuntimeError("boom"))
        assert lo.updating().error is None
        assert lo.deleting().error is None

    def test_set_operation_none_is_done(self) -> None:
        lo = EntityLifecycle.with_value("v").updating()
        assert lo.set_operation(Operation.NONE) == lo.done()
        assert lo.done().is_resolved()

    def test_clear_error(self) -> None:
        lo = EntityLifecycle.with_value("v").set_error(RuntimeError("boom"))
        assert not lo.clear_error().has_error()

    def test_set_value(self) -> None:
        lo = EntityLifecycle.loading().set_value("v")
        assert lo.value == "v"
        assert lo.is_loading()


class TestMap:
    """Tests for map()."""

    def test_map_applies_to_value(self) -> None:
        lo = EntityLifecycle.with_value(2).updating().map(lambda v: v * 10)
        assert lo.value == 20
        assert lo.is_updating()

    def test_map_without_value_is_noop(self) -> None:
        lo = EntityLifecycle.loading()
        assert lo.map(lambda v: v * 10) == lo

    def test_identity_map_round_trip(self) -> None:
        lo = EntityLifecycle.with_value({"a": 1})
        mapped = lo.map(lambda v: v)
        assert mapped.has_value()
        assert mapped.value == {"a": 1}
        assert mapped == lo


class TestRequireValue:
    """Tests for require_value()."""

    def test_returns_value(self) -> None:
        assert EntityLifecycle.with_value("v").require_value() == "v"

    def test_raises_without_value(self) -> None:
        with pytest.raises(ContractViolation, match="no value"):
            EntityLifecycle.loading().require_value()
