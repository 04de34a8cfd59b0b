"""Phase context and operation routing.

:class:`OperationKind` enumerates the seven lifecycle phases a dispatch can
target. :data:`ROUTING` maps each phase to the
:class:`~trigger_dispatch.plugins.contracts.PluginInstance` method that
handles it and says whether the phase carries prior state.

:class:`PhaseContext` wraps the record batch of one dispatch call. It is
shared by every plugin instance of the call.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Optional


class OperationKind(str, Enum):
    """Lifecycle phase of a dispatch call.

    Update phases are the only ones carrying prior state. Undelete has no
    "before" counterpart.
    """

    BEFORE_INSERT = "before_insert"
    AFTER_INSERT = "after_insert"
    BEFORE_UPDATE = "before_update"
    AFTER_UPDATE = "after_update"
    BEFORE_DELETE = "before_delete"
    AFTER_DELETE = "after_delete"
    AFTER_UNDELETE = "after_undelete"

    @property
    def method_name(self) -> str:
        """Name of the plugin instance method handling this phase."""
        return ROUTING[self].method_name

    @property
    def carries_prior_state(self) -> bool:
        return ROUTING[self].carries_prior_state

    @property
    def is_before(self) -> bool:
        return self.value.startswith("before_")

    @property
    def is_update(self) -> bool:
        return self in (OperationKind.BEFORE_UPDATE, OperationKind.AFTER_UPDATE)

    @classmethod
    def from_name(cls, name: str) -> "OperationKind":
        """Look up a phase by host-style name.

        Accepts ``"BEFORE_INSERT"``, ``"before_insert"`` and ``"BeforeInsert"``.

        Raises
        ------
        ValueError
            If *name* does not denote a known phase.
        """
        normalized = name.strip()
        if "_" not in normalized:
            normalized = "".join(
                f"_{ch}" if ch.isupper() and i else ch for i, ch in enumerate(normalized)
            )
        try:
            return cls(normalized.lower())
        except ValueError:
            raise ValueError(f"Unknown operation kind: {name!r}") from None


@dataclass(frozen=True)
class PhaseRoute:
    """Routing entry: which method to call and whether prior state is passed."""

    method_name: str
    carries_prior_state: bool


ROUTING: dict[OperationKind, PhaseRoute] = {
    OperationKind.BEFORE_INSERT: PhaseRoute("before_insert", False),
    OperationKind.AFTER_INSERT: PhaseRoute("after_insert", False),
    OperationKind.BEFORE_UPDATE: PhaseRoute("before_update", True),
    OperationKind.AFTER_UPDATE: PhaseRoute("after_update", True),
    OperationKind.BEFORE_DELETE: PhaseRoute("before_delete", False),
    OperationKind.AFTER_DELETE: PhaseRoute("after_delete", False),
    OperationKind.AFTER_UNDELETE: PhaseRoute("after_undelete", False),
}


def record_identity(record: Any) -> Optional[Hashable]:
    """Return the identity of *record* from its ``id`` (or ``Id``) key or attribute."""
    if isinstance(record, Mapping):
        return record.get("id", record.get("Id"))
    return getattr(record, "id", getattr(record, "Id", None))


@dataclass
class PhaseContext:
    """Everything a plugin sees about the current dispatch call.

    Parameters
    ----------
    operation:
        The lifecycle phase. Strings are accepted and converted with
        :meth:`OperationKind.from_name`.
    records:
        The ordered record batch: new state for insert, update and undelete,
        old state for delete. The same list object is handed to every
        plugin, so mutations made by one plugin are seen by the next.
    prior_state:
        Update phases only: record identity mapped to the record's state
        before the operation. It may cover only some of the records.
    identity:
        Callable extracting a record's identity; defaults to
        :func:`record_identity`.

    Raises
    ------
    ValueError
        If a non-empty ``prior_state`` is given for a phase that does not
        carry one.
    """

    operation: OperationKind
    records: list[Any] = field(default_factory=list)
    prior_state: Mapping[Hashable, Any] = field(default_factory=dict)
    identity: Callable[[Any], Optional[Hashable]] = record_identity

    def __post_init__(self) -> None:
        if not isinstance(self.operation, OperationKind):
            self.operation = OperationKind.from_name(str(self.operation))
        if not isinstance(self.records, list):
            self.records = list(self.records)
        if self.prior_state and not self.operation.carries_prior_state:
            raise ValueError(
                f"{self.operation.name} does not carry prior state; "
                "prior_state is only valid for update phases."
            )
        self.prior_state = MappingProxyType(dict(self.prior_state or {}))

    @property
    def route(self) -> PhaseRoute:
        return ROUTING[self.operation]

    def prior_for(self, record: Any) -> Optional[Any]:
        """Return the prior state of *record*, or ``None`` when it has none."""
        key = self.identity(record)
        if key is None:
            return None
        return self.prior_state.get(key)

    def has_prior(self, record: Any) -> bool:
        key = self.identity(record)
        return key is not None and key in self.prior_state

    def __len__(self) -> int:
        return len(self.records)
