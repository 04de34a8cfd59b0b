"""dispatch — ordered, fail-fast execution of plugins for a lifecycle event.

Public API
----------
``DispatchEngine``
    Loads, orders and runs the plugins registered for an entity kind.
``PhaseContext`` / ``OperationKind``
    The record batch and lifecycle phase of one dispatch call.
``DispatchResult``
    Success, or the single terminating failure plus every affected record.
``BypassRegistry``
    Runtime switches that skip an entity kind or a single plugin.
``order``
    Ascending ``order_key`` sort with unspecified order inside tie groups.
"""
from __future__ import annotations

from trigger_dispatch.dispatch.bypass import BypassRegistry
from trigger_dispatch.dispatch.context import (
    ROUTING,
    OperationKind,
    PhaseContext,
    PhaseRoute,
    record_identity,
)
from trigger_dispatch.dispatch.engine import (
    DispatchEngine,
    DispatchFailure,
    DispatchResult,
    RecordFailure,
    mark_records_failed,
)
from trigger_dispatch.dispatch.ordering import ambiguous_groups, group_by_order_key, order

__all__ = [
    "ROUTING",
    "BypassRegistry",
    "DispatchEngine",
    "DispatchFailure",
    "DispatchResult",
    "OperationKind",
    "PhaseContext",
    "PhaseRoute",
    "RecordFailure",
    "ambiguous_groups",
    "group_by_order_key",
    "mark_records_failed",
    "order",
    "record_identity",
]
