"""Convenience API for trigger-dispatch — wire everything in one object.

Example
-------
::

    from trigger_dispatch import PluginInstance, TriggerHandler

    handler = TriggerHandler()

    @handler.plugin("default-status")
    class DefaultStatus(PluginInstance):
        def before_insert(self, records):
            for record in records:
                record.setdefault("status", "new")

    handler.add_registration("invoice", 10, "default-status")
    result = handler.run("invoice", "before_insert", [{"id": 1}])
"""
from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from typing import Any, Callable, Optional, Union

from trigger_dispatch.audit import DispatchAuditLogger
from trigger_dispatch.dispatch.bypass import BypassRegistry
from trigger_dispatch.dispatch.context import OperationKind, PhaseContext
from trigger_dispatch.dispatch.engine import DispatchEngine, DispatchResult
from trigger_dispatch.plugins import ENTRYPOINT_GROUP
from trigger_dispatch.plugins.contracts import (
    PluginConstructor,
    PluginInstance,
    instance_constructor,
)
from trigger_dispatch.plugins.registry import PluginRegistry
from trigger_dispatch.registration.registration import EXTENSION_POINT, Registration
from trigger_dispatch.registration.sources import (
    ConfigurationSource,
    InMemoryConfigurationSource,
)
from trigger_dispatch.registration.store import RegistrationStore


class TriggerHandler:
    """Zero-config facade over the registry, the store and the engine.

    Parameters
    ----------
    source:
        Configuration source; defaults to a fresh
        :class:`~trigger_dispatch.registration.sources.InMemoryConfigurationSource`.
    constructors:
        Constructor registry; defaults to an empty one for
        :data:`~trigger_dispatch.registration.registration.EXTENSION_POINT`.
    bypasses:
        Runtime bypass controls shared with the engine.
    audit_logger:
        Optional audit trail passed to the engine.
    load_entrypoints:
        When True, constructors advertised under the
        ``trigger_dispatch.constructors`` entry-point group are registered.
    """

    def __init__(
        self,
        source: Optional[ConfigurationSource] = None,
        constructors: Optional[PluginRegistry[PluginConstructor]] = None,
        bypasses: Optional[BypassRegistry] = None,
        audit_logger: Optional[DispatchAuditLogger] = None,
        load_entrypoints: bool = False,
    ) -> None:
        self._source = source if source is not None else InMemoryConfigurationSource()
        self._constructors = (
            constructors
            if constructors is not None
            else PluginRegistry(PluginConstructor, EXTENSION_POINT)
        )
        if load_entrypoints:
            self._constructors.load_entrypoints(ENTRYPOINT_GROUP)
        self._engine = DispatchEngine(
            RegistrationStore(self._source, self._constructors),
            bypasses=bypasses,
            audit_logger=audit_logger,
            extension_point=self._constructors.name,
        )

    @property
    def engine(self) -> DispatchEngine:
        return self._engine

    @property
    def constructors(self) -> PluginRegistry[PluginConstructor]:
        return self._constructors

    @property
    def bypasses(self) -> BypassRegistry:
        return self._engine.bypasses

    def plugin(
        self, name: str
    ) -> Callable[[type[Union[PluginConstructor, PluginInstance]]], type[Any]]:
        """Class decorator registering a constructor or an instance class under *name*.

        A :class:`PluginInstance` subclass is wrapped with
        :func:`~trigger_dispatch.plugins.contracts.instance_constructor`; the
        decorated class itself is returned unchanged.
        """

        def decorator(cls: type[Any]) -> type[Any]:
            if isinstance(cls, type) and issubclass(cls, PluginInstance):
                self._constructors.register_class(name, instance_constructor(cls))
            else:
                self._constructors.register_class(name, cls)
            return cls

        return decorator

    def add_registration(
        self,
        target_kind: str,
        order_key: int,
        constructor_ref: str,
        additional_data: str = "",
        description: str = "",
    ) -> Registration:
        """Add a registration to the in-memory source.

        Raises
        ------
        TypeError
            If the handler was built around a source that is not in-memory.
        """
        if not isinstance(self._source, InMemoryConfigurationSource):
            raise TypeError(
                "add_registration() requires an InMemoryConfigurationSource; "
                f"this handler uses {type(self._source).__name__}."
            )
        registration = Registration(
            target_kind=target_kind,
            order_key=order_key,
            constructor_ref=constructor_ref,
            extension_point=self._constructors.name,
            additional_data=additional_data,
            description=description,
        )
        self._source.add(registration)
        return registration

    def run(
        self,
        target_kind: str,
        operation: Union[OperationKind, str],
        records: Iterable[Any],
        prior_state: Optional[Mapping[Hashable, Any]] = None,
    ) -> DispatchResult:
        """Build a :class:`PhaseContext` and dispatch it for *target_kind*.

        A list passed as *records* is shared with the plugins as-is, so their
        changes are visible to the caller afterwards.
        """
        if not isinstance(operation, OperationKind):
            operation = OperationKind.from_name(operation)
        context = PhaseContext(
            operation=operation,
            records=records if isinstance(records, list) else list(records),
            prior_state=prior_state or {},
        )
        return self._engine.dispatch(target_kind, context)

    def __repr__(self) -> str:
        return (
            f"TriggerHandler(extension_point={self._constructors.name!r}, "
            f"constructors={len(self._constructors)})"
        )
