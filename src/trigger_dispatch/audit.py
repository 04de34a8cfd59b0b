"""DispatchAuditLogger — JSONL audit trail of dispatch calls.

Every dispatch-relevant event (start, each plugin executed, success,
abort, bypass) is appended as a single JSON line to the configured log
file. This gives operators an append-only record of which plugins ran for
which entity kind and why a batch was rejected.

If no file path is configured the logger emits to an in-memory buffer
that can be drained via :meth:`DispatchAuditLogger.drain_buffer`.
"""
from __future__ import annotations

import datetime
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AuditEvent:
    """A single auditable dispatch event.

    Parameters
    ----------
    event_type:
        Short snake_case string identifying the event (e.g. "dispatch_failed").
    target_kind:
        The entity kind being dispatched.
    operation:
        The lifecycle phase name, empty when not applicable.
    details:
        Arbitrary key-value metadata about the event.
    timestamp:
        UTC datetime of the event. Defaults to now.
    """

    event_type: str
    target_kind: str
    operation: str = ""
    details: dict[str, object] = field(default_factory=dict)
    timestamp: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary suitable for JSON encoding."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "target_kind": self.target_kind,
            "operation": self.operation,
            "details": self.details,
        }


class DispatchAuditLogger:
    """Append-only JSONL audit logger for dispatch events.

    Thread-safe. Each call to :meth:`log` appends one JSON line to the
    configured file path (or to the in-memory buffer if no path is set).

    Parameters
    ----------
    log_path:
        Path to the JSONL log file. The file is created if it does not
        exist; parent directories are created automatically. If None, events
        are buffered in memory only.
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self._log_path = log_path
        self._buffer: list[str] = []
        self._lock = threading.Lock()

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Core logging
    # ------------------------------------------------------------------

    def log(self, event: AuditEvent) -> None:
        """Append an audit event to the log."""
        line = json.dumps(event.to_dict(), separators=(",", ":"), default=str)
        with self._lock:
            if self._log_path is not None:
                with self._log_path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            else:
                self._buffer.append(line)

    def log_event(
        self,
        event_type: str,
        target_kind: str,
        operation: str = "",
        **details: object,
    ) -> None:
        """Log a simple event without constructing an :class:`AuditEvent`."""
        self.log(
            AuditEvent(
                event_type=event_type,
                target_kind=target_kind,
                operation=operation,
                details=dict(details),
            )
        )

    # ------------------------------------------------------------------
    # Dispatch events
    # ------------------------------------------------------------------

    def log_dispatch_started(self, target_kind: str, operation: str, record_count: int) -> None:
        self.log_event("dispatch_started", target_kind, operation, record_count=record_count)

    def log_plugin_executed(
        self, target_kind: str, operation: str, constructor_ref: str, order_key: int
    ) -> None:
        self.log_event(
            "plugin_executed",
            target_kind,
            operation,
            constructor_ref=constructor_ref,
            order_key=order_key,
        )

    def log_dispatch_succeeded(self, target_kind: str, operation: str, executed: int) -> None:
        self.log_event("dispatch_succeeded", target_kind, operation, executed=executed)

    def log_dispatch_failed(
        self,
        target_kind: str,
        operation: str,
        error_type: str,
        message: str,
        constructor_ref: str | None,
        failed_records: int,
    ) -> None:
        """Log a dispatch_failed event."""
        self.log_event(
            "dispatch_failed",
            target_kind,
            operation,
            error_type=error_type,
            message=message,
            constructor_ref=constructor_ref,
            failed_records=failed_records,
        )

    def log_dispatch_bypassed(self, target_kind: str, operation: str) -> None:
        self.log_event("dispatch_bypassed", target_kind, operation)

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def drain_buffer(self) -> list[str]:
        """Return and clear the in-memory event buffer.

        This is only meaningful when no ``log_path`` was configured.

        Returns
        -------
        list[str]
            List of JSON lines (one per event), oldest first.
        """
        with self._lock:
            events = list(self._buffer)
            self._buffer.clear()
        return events

    def read_log(self, tail: int | None = None) -> list[dict[str, object]]:
        """Read events from the log file, or from the buffer when no file is set.

        Parameters
        ----------
        tail:
            If provided, return only the last *tail* events.

        Returns
        -------
        list[dict[str, object]]
            Parsed event dictionaries in chronological order. Lines that are
            not valid JSON are skipped.
        """
        if self._log_path is None or not self._log_path.exists():
            with self._lock:
                lines = list(self._buffer)
        else:
            with self._lock:
                lines = self._log_path.read_text(encoding="utf-8").splitlines()

        parsed: list[dict[str, object]] = []
        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue
            try:
                parsed.append(json.loads(stripped))
            except json.JSONDecodeError:
                continue

        if tail is not None:
            return parsed[-tail:]
        return parsed
