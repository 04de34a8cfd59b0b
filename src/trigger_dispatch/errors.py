"""Error taxonomy for trigger-dispatch.

``ConfigurationError``
    A registration cannot be used: its row is malformed or its
    ``constructor_ref`` does not resolve. Raised by the registration store
    for the requested entity kind only.
``ConstructionFailure``
    A plugin constructor raised while building its instance.
``ExecutionFailure``
    A plugin instance raised from its phase method.

The dispatch engine never lets these escape :meth:`DispatchEngine.dispatch`;
they are carried on the returned
:class:`~trigger_dispatch.dispatch.engine.DispatchResult` instead.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from trigger_dispatch.dispatch.context import OperationKind
    from trigger_dispatch.registration.registration import Registration


class DispatchError(Exception):
    """Base class for every error reported by trigger-dispatch."""


class ConfigurationError(DispatchError):
    """Raised when the configured registrations for an entity kind are unusable.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    target_kind:
        The entity kind whose configuration was being loaded.
    constructor_ref:
        The offending constructor reference, when one is known.
    """

    def __init__(
        self,
        message: str,
        target_kind: str = "",
        constructor_ref: Optional[str] = None,
    ) -> None:
        self.target_kind = target_kind
        self.constructor_ref = constructor_ref
        super().__init__(message)


class PluginFailure(DispatchError):
    """Common base of failures raised by plugin code during a dispatch call."""

    def __init__(
        self,
        message: str,
        registration: "Registration",
        cause: BaseException,
    ) -> None:
        self.registration = registration
        self.cause = cause
        super().__init__(message)
        self.__cause__ = cause


class ConstructionFailure(PluginFailure):
    """Raised when a plugin constructor fails to build its instance."""

    def __init__(self, registration: "Registration", cause: BaseException) -> None:
        super().__init__(
            f"Plugin {registration.constructor_ref!r} failed during construction: {cause}",
            registration,
            cause,
        )


class ExecutionFailure(PluginFailure):
    """Raised when a plugin instance fails inside its phase method."""

    def __init__(
        self,
        registration: "Registration",
        operation: "OperationKind",
        cause: BaseException,
    ) -> None:
        self.operation = operation
        super().__init__(
            f"Plugin {registration.constructor_ref!r} failed in "
            f"{operation.method_name}: {cause}",
            registration,
            cause,
        )
