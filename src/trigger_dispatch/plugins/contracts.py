"""Plugin contracts — the two roles a plugin author implements.

:class:`PluginConstructor`
    A factory. The engine instantiates it with the registration's opaque
    ``additional_data`` and calls :meth:`PluginConstructor.construct` once
    per dispatch call to obtain a :class:`PluginInstance`.
:class:`PluginInstance`
    The lifecycle contract: one method per operation kind. Every method is
    a no-op by default, so a plugin overrides only the phases it handles.

Most plugins need no custom construction logic; :func:`instance_constructor`
builds a :class:`PluginConstructor` subclass for a :class:`PluginInstance`
subclass whose ``__init__`` accepts ``(records, context, additional_data)``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trigger_dispatch.dispatch.context import PhaseContext


class PluginInstance:
    """Base class for per-dispatch plugin instances.

    Instances are built fresh for every dispatch call and discarded when it
    returns. ``records`` is the live batch shared with every other plugin of
    the call; mutations made here are visible to plugins ordered later.

    Parameters
    ----------
    records:
        The record batch of the current dispatch call.
    context:
        The :class:`~trigger_dispatch.dispatch.context.PhaseContext` of the call.
    additional_data:
        The registration's opaque configuration string.
    """

    def __init__(
        self,
        records: list[Any],
        context: "PhaseContext",
        additional_data: str = "",
    ) -> None:
        self.records = records
        self.context = context
        self.additional_data = additional_data

    def before_insert(self, records: list[Any]) -> None:
        """Called for BEFORE_INSERT dispatches."""

    def after_insert(self, records: list[Any]) -> None:
        """Called for AFTER_INSERT dispatches."""

    def before_update(
        self, records: list[Any], prior_state: Mapping[Hashable, Any]
    ) -> None:
        """Called for BEFORE_UPDATE dispatches."""

    def after_update(
        self, records: list[Any], prior_state: Mapping[Hashable, Any]
    ) -> None:
        """Called for AFTER_UPDATE dispatches."""

    def before_delete(self, records: list[Any]) -> None:
        """Called for BEFORE_DELETE dispatches."""

    def after_delete(self, records: list[Any]) -> None:
        """Called for AFTER_DELETE dispatches."""

    def after_undelete(self, records: list[Any]) -> None:
        """Called for AFTER_UNDELETE dispatches."""


class PluginConstructor(ABC):
    """Factory capability that builds a :class:`PluginInstance`.

    Subclasses are registered in a
    :class:`~trigger_dispatch.plugins.registry.PluginRegistry` and referred
    to from configuration by name.

    Parameters
    ----------
    additional_data:
        Opaque configuration string copied from the registration. The
        dispatcher never interprets it.
    """

    def __init__(self, additional_data: str = "") -> None:
        self.additional_data = additional_data

    @abstractmethod
    def construct(
        self, records: list[Any], context: "PhaseContext"
    ) -> PluginInstance:
        """Build the instance that will handle the current phase call."""


def instance_constructor(instance_cls: type[PluginInstance]) -> type[PluginConstructor]:
    """Return a :class:`PluginConstructor` subclass that builds *instance_cls*.

    Example
    -------
    ::

        class DefaultStatus(PluginInstance):
            def before_insert(self, records):
                for record in records:
                    record.setdefault("status", "new")

        constructors.register_class("default-status", instance_constructor(DefaultStatus))
    """
    if not isinstance(instance_cls, type) or not issubclass(instance_cls, PluginInstance):
        raise TypeError(f"{instance_cls!r} must be a subclass of PluginInstance.")

    def construct(
        self: PluginConstructor, records: list[Any], context: "PhaseContext"
    ) -> PluginInstance:
        return instance_cls(records, context, self.additional_data)

    return type(
        f"{instance_cls.__name__}Constructor",
        (PluginConstructor,),
        {
            "construct": construct,
            "instance_class": instance_cls,
            "__module__": instance_cls.__module__,
            "__doc__": f"Builds :class:`{instance_cls.__name__}` instances.",
        },
    )
