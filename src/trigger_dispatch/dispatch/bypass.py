"""Runtime bypass controls.

Calling code sometimes needs to switch dispatch off temporarily, for
example while a data migration writes records that must not re-trigger
plugins. :class:`BypassRegistry` records two kinds of bypass:

* a whole entity kind: dispatches for it succeed without running anything,
* a single constructor reference: that plugin is skipped wherever it is
  registered.

Bypasses are process-wide state owned by whoever holds the registry; they
are never persisted.
"""
from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional


class BypassRegistry:
    """Thread-safe set of bypassed entity kinds and constructor references.

    Example
    -------
    ::

        bypasses = BypassRegistry()
        with bypasses.bypassed(kind="invoice"):
            engine.dispatch("invoice", context)  # runs nothing
    """

    def __init__(self) -> None:
        self._kinds: set[str] = set()
        self._constructors: set[str] = set()
        # with-block bypasses, counted so overlapping blocks nest
        self._scoped_kinds: Counter[str] = Counter()
        self._scoped_constructors: Counter[str] = Counter()
        self._lock = threading.Lock()

    def bypass(self, kind: Optional[str] = None, constructor_ref: Optional[str] = None) -> None:
        """Bypass an entity kind, a constructor reference, or both."""
        if kind is None and constructor_ref is None:
            raise ValueError("bypass() requires kind or constructor_ref.")
        with self._lock:
            if kind is not None:
                self._kinds.add(kind)
            if constructor_ref is not None:
                self._constructors.add(constructor_ref)

    def clear_bypass(
        self, kind: Optional[str] = None, constructor_ref: Optional[str] = None
    ) -> None:
        """Lift a bypass set by :meth:`bypass`. Unknown names are ignored.

        Bypasses held by an active :meth:`bypassed` block are not affected.
        """
        with self._lock:
            if kind is not None:
                self._kinds.discard(kind)
            if constructor_ref is not None:
                self._constructors.discard(constructor_ref)

    def is_bypassed(
        self, kind: Optional[str] = None, constructor_ref: Optional[str] = None
    ) -> bool:
        """Return True when *kind* or *constructor_ref* is currently bypassed."""
        with self._lock:
            return (kind is not None and (kind in self._kinds or kind in self._scoped_kinds)) or (
                constructor_ref is not None
                and (
                    constructor_ref in self._constructors
                    or constructor_ref in self._scoped_constructors
                )
            )

    def clear_all(self) -> None:
        with self._lock:
            self._kinds.clear()
            self._constructors.clear()
            self._scoped_kinds.clear()
            self._scoped_constructors.clear()

    @contextmanager
    def bypassed(
        self, kind: Optional[str] = None, constructor_ref: Optional[str] = None
    ) -> Iterator["BypassRegistry"]:
        """Bypass for the duration of a ``with`` block.

        Blocks may overlap, across threads too: a name stays bypassed until
        the last block holding it exits. A bypass set with :meth:`bypass`
        before or during the block stays active afterwards.
        """
        if kind is None and constructor_ref is None:
            raise ValueError("bypassed() requires kind or constructor_ref.")
        with self._lock:
            if kind is not None:
                self._scoped_kinds[kind] += 1
            if constructor_ref is not None:
                self._scoped_constructors[constructor_ref] += 1
        try:
            yield self
        finally:
            with self._lock:
                if kind is not None:
                    self._scoped_kinds[kind] -= 1
                    if self._scoped_kinds[kind] <= 0:
                        del self._scoped_kinds[kind]
                if constructor_ref is not None:
                    self._scoped_constructors[constructor_ref] -= 1
                    if self._scoped_constructors[constructor_ref] <= 0:
                        del self._scoped_constructors[constructor_ref]

    def bypassed_kinds(self) -> list[str]:
        with self._lock:
            return sorted(self._kinds | set(self._scoped_kinds))

    def bypassed_constructors(self) -> list[str]:
        with self._lock:
            return sorted(self._constructors | set(self._scoped_constructors))
