"""Configuration sources — where raw registration rows come from.

A configuration source is the collaborator that persists registrations.
The registration store only needs read access keyed by entity kind and
extension point, expressed by the :class:`ConfigurationSource` protocol.

Two implementations ship with the library:

:class:`InMemoryConfigurationSource`
    Rows held in process memory. Used for programmatic configuration and
    as the test fixture.
:class:`JsonFileConfigurationSource`
    A JSON document on disk, re-read on every request so that edits are
    picked up by the next dispatch.

Rows are returned raw. Validation happens in the store, so a malformed
row only affects dispatches for its own entity kind.
"""
from __future__ import annotations

import json
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from trigger_dispatch.errors import ConfigurationError
from trigger_dispatch.registration.registration import EXTENSION_POINT, Registration

RawRow = Mapping[str, object]


@runtime_checkable
class ConfigurationSource(Protocol):
    """Read access to raw registration rows."""

    def rows_for(self, target_kind: str, extension_point: str) -> list[RawRow]:
        """Return the raw rows configured for *target_kind* and *extension_point*."""
        ...


def _row_matches(row: RawRow, target_kind: str, extension_point: str) -> bool:
    return (
        row.get("target_kind") == target_kind
        and row.get("extension_point", EXTENSION_POINT) == extension_point
    )


class InMemoryConfigurationSource:
    """Thread-safe in-memory list of registration rows.

    Rows may be added as raw mappings (validated later, at dispatch time)
    or as :class:`~trigger_dispatch.registration.registration.Registration`
    objects.

    Example
    -------
    ::

        source = InMemoryConfigurationSource()
        source.add(Registration("invoice", 10, "stamp-created-by"))
        source.add_row({"target_kind": "invoice", "order_key": 20,
                        "constructor_ref": "compute-totals"})
    """

    def __init__(self, rows: Iterable[Union[RawRow, Registration]] = ()) -> None:
        self._rows: list[dict[str, object]] = []
        self._lock = threading.Lock()
        for row in rows:
            if isinstance(row, Registration):
                self.add(row)
            else:
                self.add_row(row)

    def add(self, registration: Registration) -> None:
        """Add a validated registration."""
        self.add_row(registration.to_dict())

    def add_row(self, row: RawRow) -> None:
        """Add a raw row. The row is copied; later changes to *row* are not seen."""
        with self._lock:
            self._rows.append(dict(row))

    def remove(self, target_kind: str, constructor_ref: str) -> int:
        """Remove every row binding *constructor_ref* to *target_kind*.

        Returns
        -------
        int
            The number of rows removed.
        """
        with self._lock:
            before = len(self._rows)
            self._rows = [
                r
                for r in self._rows
                if not (
                    r.get("target_kind") == target_kind
                    and r.get("constructor_ref") == constructor_ref
                )
            ]
            return before - len(self._rows)

    def clear(self) -> None:
        """Remove all rows."""
        with self._lock:
            self._rows.clear()

    def rows_for(self, target_kind: str, extension_point: str) -> list[RawRow]:
        with self._lock:
            return [
                dict(r) for r in self._rows if _row_matches(r, target_kind, extension_point)
            ]

    def all_rows(self) -> list[RawRow]:
        """Return a snapshot of every row."""
        with self._lock:
            return [dict(r) for r in self._rows]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)


class JsonFileConfigurationSource:
    """Registration rows stored in a JSON file.

    The file holds either a JSON array of row objects or an object with a
    ``"registrations"`` array. It is read again on every call; there is no
    caching between dispatches.

    Parameters
    ----------
    path:
        Location of the JSON document.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def all_rows(self) -> list[RawRow]:
        """Parse and return every row in the file.

        Raises
        ------
        ConfigurationError
            If the file is missing or unreadable, is not valid UTF-8 JSON, or
            has the wrong shape.
        """
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Configuration file {str(self._path)!r} not found.") from exc
        except OSError as exc:
            raise ConfigurationError(
                f"Configuration file {str(self._path)!r} cannot be read: {exc}"
            ) from exc
        except UnicodeDecodeError as exc:
            raise ConfigurationError(
                f"Configuration file {str(self._path)!r} is not UTF-8 encoded: {exc}"
            ) from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Configuration file {str(self._path)!r} is not valid JSON: {exc}"
            ) from exc

        if isinstance(data, dict):
            data = data.get("registrations")
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise ConfigurationError(
                f"Configuration file {str(self._path)!r} must contain a list of "
                "registration objects."
            )
        return data

    def rows_for(self, target_kind: str, extension_point: str) -> list[RawRow]:
        return [r for r in self.all_rows() if _row_matches(r, target_kind, extension_point)]
