"""trigger-dispatch — ordered plugin dispatch for entity lifecycle events.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import trigger_dispatch
>>> trigger_dispatch.__version__
'0.1.0'

Quick start
-----------
::

    from trigger_dispatch import (
        # Plugins
        PluginConstructor, PluginInstance, PluginRegistry,
        # Registration
        Registration, RegistrationStore, InMemoryConfigurationSource,
        # Dispatch
        DispatchEngine, PhaseContext, OperationKind, DispatchResult,
        # Convenience
        TriggerHandler,
    )
"""
from __future__ import annotations

__version__: str = "0.1.0"

from trigger_dispatch.convenience import TriggerHandler

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from trigger_dispatch.errors import (
    ConfigurationError,
    ConstructionFailure,
    DispatchError,
    ExecutionFailure,
    PluginFailure,
)

# ------------------------------------------------------------------
# Plugin subsystem
# ------------------------------------------------------------------
from trigger_dispatch.plugins import (
    ENTRYPOINT_GROUP,
    PluginAlreadyRegisteredError,
    PluginConstructor,
    PluginInstance,
    PluginNotFoundError,
    PluginRegistry,
    instance_constructor,
)

# ------------------------------------------------------------------
# Registration subsystem
# ------------------------------------------------------------------
from trigger_dispatch.registration import (
    EXTENSION_POINT,
    ConfigurationSource,
    InMemoryConfigurationSource,
    JsonFileConfigurationSource,
    Registration,
    RegistrationStore,
)

# ------------------------------------------------------------------
# Dispatch subsystem
# ------------------------------------------------------------------
from trigger_dispatch.dispatch import (
    BypassRegistry,
    DispatchEngine,
    DispatchFailure,
    DispatchResult,
    OperationKind,
    PhaseContext,
    RecordFailure,
    order,
)

# ------------------------------------------------------------------
# Audit
# ------------------------------------------------------------------
from trigger_dispatch.audit import AuditEvent, DispatchAuditLogger

__all__ = [
    # version
    "__version__",
    "TriggerHandler",
    # errors
    "ConfigurationError",
    "ConstructionFailure",
    "DispatchError",
    "ExecutionFailure",
    "PluginFailure",
    # plugins
    "ENTRYPOINT_GROUP",
    "PluginAlreadyRegisteredError",
    "PluginConstructor",
    "PluginInstance",
    "PluginNotFoundError",
    "PluginRegistry",
    "instance_constructor",
    # registration
    "EXTENSION_POINT",
    "ConfigurationSource",
    "InMemoryConfigurationSource",
    "JsonFileConfigurationSource",
    "Registration",
    "RegistrationStore",
    # dispatch
    "BypassRegistry",
    "DispatchEngine",
    "DispatchFailure",
    "DispatchResult",
    "OperationKind",
    "PhaseContext",
    "RecordFailure",
    "order",
    # audit
    "AuditEvent",
    "DispatchAuditLogger",
]
