"""Tests for trigger_dispatch.plugins.contracts — PluginInstance and constructors."""
from __future__ import annotations

import pytest

from trigger_dispatch.dispatch.context import OperationKind, PhaseContext
from trigger_dispatch.plugins.contracts import (
    PluginConstructor,
    PluginInstance,
    instance_constructor,
)


class DefaultStatus(PluginInstance):
    def before_insert(self, records):  # type: ignore[no-untyped-def]
        for record in records:
            record.setdefault("status", self.additional_data or "new")


@pytest.fixture()
def context() -> PhaseContext:
    return PhaseContext(OperationKind.BEFORE_INSERT, [{"id": 1}, {"id": 2}])


class TestPluginInstanceDefaults:
    def test_every_phase_method_is_a_noop(self, context: PhaseContext) -> None:
        instance = PluginInstance(context.records, context)
        records = context.records
        assert instance.before_insert(records) is None
        assert instance.after_insert(records) is None
        assert instance.before_update(records, {}) is None
        assert instance.after_update(records, {}) is None
        assert instance.before_delete(records) is None
        assert instance.after_delete(records) is None
        assert instance.after_undelete(records) is None
        assert records == [{"id": 1}, {"id": 2}]

    def test_instance_holds_batch_view(self, context: PhaseContext) -> None:
        instance = PluginInstance(context.records, context, "cfg")
        assert instance.records is context.records
        assert instance.context is context
        assert instance.additional_data == "cfg"


class TestPluginConstructor:
    def test_cannot_instantiate_abstract_base(self) -> None:
        with pytest.raises(TypeError):
            PluginConstructor()  # type: ignore[abstract]

    def test_additional_data_defaults_to_empty(self) -> None:
        cls = instance_constructor(DefaultStatus)
        assert cls().additional_data == ""


class TestInstanceConstructor:
    def test_builds_constructor_subclass(self) -> None:
        cls = instance_constructor(DefaultStatus)
        assert issubclass(cls, PluginConstructor)
        assert cls.__name__ == "DefaultStatusConstructor"
        assert cls.instance_class is DefaultStatus  # type: ignore[attr-defined]

    def test_construct_passes_batch_context_and_data(self, context: PhaseContext) -> None:
        constructor = instance_constructor(DefaultStatus)("draft")
        instance = constructor.construct(context.records, context)

        assert isinstance(instance, DefaultStatus)
        assert instance.records is context.records
        assert instance.additional_data == "draft"

        instance.before_insert(context.records)
        assert [r["status"] for r in context.records] == ["draft", "draft"]

    def test_each_construct_returns_fresh_instance(self, context: PhaseContext) -> None:
        constructor = instance_constructor(DefaultStatus)()
        first = constructor.construct(context.records, context)
        second = constructor.construct(context.records, context)
        assert first is not second

    def test_rejects_non_instance_class(self) -> None:
        with pytest.raises(TypeError):
            instance_constructor(dict)  # type: ignore[arg-type]
