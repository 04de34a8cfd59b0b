"""DispatchEngine — ordered, fail-fast execution of registered plugins.

For one entity kind and one :class:`~trigger_dispatch.dispatch.context.PhaseContext`
the engine:

1. loads the kind's registrations from the
   :class:`~trigger_dispatch.registration.store.RegistrationStore` and
   orders them by ``order_key``,
2. for each registration builds a fresh plugin instance through its
   constructor and calls the method routed for the context's operation,
3. stops at the first failure and reports every record of the batch as
   failed with that failure's message.

Failures never escape :meth:`DispatchEngine.dispatch` as exceptions; they
are returned on a :class:`DispatchResult`. Changes earlier plugins made to
the records stay in place. Nothing is retried.

Example
-------
::

    engine = DispatchEngine(RegistrationStore(source, constructors))
    result = engine.dispatch("invoice", PhaseContext(OperationKind.BEFORE_INSERT, records))
    if not result.success:
        for failure in result.failure.record_failures:
            print(failure.index, failure.message)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from trigger_dispatch.audit import DispatchAuditLogger
from trigger_dispatch.dispatch.bypass import BypassRegistry
from trigger_dispatch.dispatch.context import OperationKind, PhaseContext
from trigger_dispatch.dispatch.ordering import order
from trigger_dispatch.errors import (
    ConfigurationError,
    ConstructionFailure,
    DispatchError,
    ExecutionFailure,
)
from trigger_dispatch.plugins.contracts import PluginInstance
from trigger_dispatch.registration.registration import EXTENSION_POINT, Registration
from trigger_dispatch.registration.store import RegistrationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordFailure:
    """One record of an aborted batch and the reason it was rejected."""

    index: int
    record: Any
    message: str


@dataclass(frozen=True)
class DispatchFailure:
    """The single failure that terminated a dispatch call.

    Parameters
    ----------
    error:
        The terminating error: a
        :class:`~trigger_dispatch.errors.ConfigurationError`,
        :class:`~trigger_dispatch.errors.ConstructionFailure` or
        :class:`~trigger_dispatch.errors.ExecutionFailure`.
    registration:
        The registration whose plugin failed, or ``None`` for configuration
        errors raised before any plugin ran.
    record_failures:
        One entry per record in the batch, in batch order.
    """

    error: DispatchError
    registration: Optional[Registration]
    record_failures: tuple[RecordFailure, ...]

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one dispatch call.

    ``executed`` lists the registrations whose plugins completed, in the
    order they ran. On failure it holds the plugins that completed before
    the abort.
    """

    target_kind: str
    operation: OperationKind
    executed: tuple[Registration, ...] = ()
    failure: Optional[DispatchFailure] = None
    bypassed: bool = False

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def failed_records(self) -> list[Any]:
        """Records reported failed; empty on success."""
        if self.failure is None:
            return []
        return [f.record for f in self.failure.record_failures]

    def raise_for_failure(self) -> None:
        """Raise the terminating error, if any.

        For callers that prefer exceptions at their own boundary.
        """
        if self.failure is not None:
            raise self.failure.error

    def __bool__(self) -> bool:
        return self.success


def mark_records_failed(records: list[Any], message: str) -> tuple[RecordFailure, ...]:
    """Build a :class:`RecordFailure` per record and mark records that support it.

    A record exposing a callable ``add_error`` attribute receives *message*
    through it, so hosts whose records carry their own error list see the
    abort directly. An ``add_error`` that raises is logged and skipped; the
    record is still reported.
    """
    failures = []
    for index, record in enumerate(records):
        add_error = getattr(record, "add_error", None)
        if callable(add_error):
            try:
                add_error(message)
            except Exception:
                logger.warning("Could not mark record %d as failed.", index, exc_info=True)
        failures.append(RecordFailure(index=index, record=record, message=message))
    return tuple(failures)


class DispatchEngine:
    """Runs the plugins registered for an entity kind in order.

    The engine keeps no state between calls, so one engine can serve
    concurrent dispatches for unrelated entity kinds.

    Parameters
    ----------
    store:
        Source of registrations and constructor resolution.
    bypasses:
        Optional runtime bypass controls.
    audit_logger:
        Optional JSONL audit trail.
    extension_point:
        Extension-point tag whose registrations are dispatched.
    """

    def __init__(
        self,
        store: RegistrationStore,
        bypasses: Optional[BypassRegistry] = None,
        audit_logger: Optional[DispatchAuditLogger] = None,
        extension_point: str = EXTENSION_POINT,
    ) -> None:
        self._store = store
        self._bypasses = bypasses if bypasses is not None else BypassRegistry()
        self._audit = audit_logger
        self._extension_point = extension_point

    @property
    def store(self) -> RegistrationStore:
        return self._store

    @property
    def bypasses(self) -> BypassRegistry:
        return self._bypasses

    def resolve_order(self, target_kind: str) -> list[Registration]:
        """Return the registrations for *target_kind* in execution order.

        Raises
        ------
        ConfigurationError
            If the kind's configuration is unusable.
        """
        return order(self._store.load_for(target_kind, self._extension_point))

    def dispatch(self, target_kind: str, context: PhaseContext) -> DispatchResult:
        """Run every plugin registered for *target_kind* against *context*.

        Parameters
        ----------
        target_kind:
            The entity kind the lifecycle event belongs to.
        context:
            The phase and record batch of the event.

        Returns
        -------
        DispatchResult
            Success when every plugin completed; otherwise the first failure
            together with every record of the batch.
        """
        operation = context.operation
        if self._bypasses.is_bypassed(kind=target_kind):
            logger.info("Dispatch for kind %r (%s) bypassed.", target_kind, operation.value)
            self._record("log_dispatch_bypassed", target_kind, operation.value)
            return DispatchResult(target_kind=target_kind, operation=operation, bypassed=True)

        self._record("log_dispatch_started", target_kind, operation.value, len(context.records))

        try:
            registrations = self.resolve_order(target_kind)
        except ConfigurationError as exc:
            return self._abort(target_kind, context, exc, None, ())
        except Exception as exc:
            error = ConfigurationError(
                f"Loading registrations for kind {target_kind!r} failed: {exc}",
                target_kind=target_kind,
            )
            error.__cause__ = exc
            return self._abort(target_kind, context, error, None, ())

        executed: list[Registration] = []
        for registration in registrations:
            if self._bypasses.is_bypassed(constructor_ref=registration.constructor_ref):
                logger.debug(
                    "Plugin %r bypassed for kind %r.", registration.constructor_ref, target_kind
                )
                continue
            try:
                self._run(registration, context)
            except DispatchError as exc:
                return self._abort(target_kind, context, exc, registration, tuple(executed))
            executed.append(registration)
            self._record(
                "log_plugin_executed",
                target_kind,
                operation.value,
                registration.constructor_ref,
                registration.order_key,
            )

        logger.info(
            "Dispatch for kind %r (%s) completed: %d plugin(s) over %d record(s).",
            target_kind,
            operation.value,
            len(executed),
            len(context.records),
        )
        self._record("log_dispatch_succeeded", target_kind, operation.value, len(executed))
        return DispatchResult(target_kind=target_kind, operation=operation, executed=tuple(executed))

    def _run(self, registration: Registration, context: PhaseContext) -> None:
        constructor_cls = self._store.resolve(registration)
        route = context.route

        try:
            constructor = constructor_cls(registration.additional_data)
            instance = constructor.construct(context.records, context)
        except Exception as exc:
            raise ConstructionFailure(registration, exc) from exc

        method = getattr(instance, route.method_name, None)
        if not callable(method):
            raise ConstructionFailure(
                registration,
                TypeError(
                    f"{type(instance).__name__} has no {route.method_name}() method; "
                    f"constructors must return a {PluginInstance.__name__}."
                ),
            )

        logger.debug(
            "Invoking %s.%s (order_key=%d) for %d record(s).",
            registration.constructor_ref,
            route.method_name,
            registration.order_key,
            len(context.records),
        )
        try:
            if route.carries_prior_state:
                method(context.records, context.prior_state)
            else:
                method(context.records)
        except Exception as exc:
            raise ExecutionFailure(registration, context.operation, exc) from exc

    def _abort(
        self,
        target_kind: str,
        context: PhaseContext,
        error: DispatchError,
        registration: Optional[Registration],
        executed: tuple[Registration, ...],
    ) -> DispatchResult:
        message = str(error)
        logger.warning(
            "Dispatch for kind %r (%s) aborted at %r: %s",
            target_kind,
            context.operation.value,
            registration.constructor_ref if registration is not None else None,
            message,
        )
        record_failures = mark_records_failed(context.records, message)
        self._record(
            "log_dispatch_failed",
            target_kind,
            context.operation.value,
            type(error).__name__,
            message,
            registration.constructor_ref if registration is not None else None,
            len(record_failures),
        )
        return DispatchResult(
            target_kind=target_kind,
            operation=context.operation,
            executed=executed,
            failure=DispatchFailure(
                error=error,
                registration=registration,
                record_failures=record_failures,
            ),
        )

    def _record(self, event: str, *args: Any) -> None:
        """Write an audit event. A failing audit write never fails the dispatch."""
        if self._audit is None:
            return
        try:
            getattr(self._audit, event)(*args)
        except Exception:
            logger.warning(
                "Audit %s for kind %r could not be written.", event, args[0], exc_info=True
            )
