"""Tests for trigger_dispatch.audit — DispatchAuditLogger."""
from __future__ import annotations

import datetime
import json
from pathlib import Path

import pytest

from trigger_dispatch.audit import AuditEvent, DispatchAuditLogger


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def logger_in_memory() -> DispatchAuditLogger:
    return DispatchAuditLogger(log_path=None)


@pytest.fixture()
def log_file(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "dispatch.jsonl"


@pytest.fixture()
def logger_on_disk(log_file: Path) -> DispatchAuditLogger:
    return DispatchAuditLogger(log_path=log_file)


# ---------------------------------------------------------------------------
# AuditEvent
# ---------------------------------------------------------------------------


class TestAuditEvent:
    def test_to_dict_contains_required_fields(self) -> None:
        event = AuditEvent(event_type="dispatch_started", target_kind="invoice")
        d = event.to_dict()
        assert d["event_type"] == "dispatch_started"
        assert d["target_kind"] == "invoice"
        assert d["operation"] == ""
        assert "timestamp" in d
        assert d["details"] == {}

    def test_timestamp_defaults_to_utc_now(self) -> None:
        before = datetime.datetime.now(datetime.timezone.utc)
        event = AuditEvent(event_type="x", target_kind="y")
        after = datetime.datetime.now(datetime.timezone.utc)
        ts = datetime.datetime.fromisoformat(event.to_dict()["timestamp"])  # type: ignore[arg-type]
        assert before <= ts <= after


# ---------------------------------------------------------------------------
# In-memory mode
# ---------------------------------------------------------------------------


class TestInMemoryLogger:
    def test_events_buffered_as_json(self, logger_in_memory: DispatchAuditLogger) -> None:
        logger_in_memory.log_dispatch_started("invoice", "before_insert", 3)
        buffer = logger_in_memory.drain_buffer()
        assert len(buffer) == 1
        entry = json.loads(buffer[0])
        assert entry["event_type"] == "dispatch_started"
        assert entry["details"] == {"record_count": 3}

    def test_drain_clears_buffer(self, logger_in_memory: DispatchAuditLogger) -> None:
        logger_in_memory.log_dispatch_bypassed("invoice", "after_insert")
        logger_in_memory.drain_buffer()
        assert logger_in_memory.drain_buffer() == []

    def test_read_log_uses_buffer(self, logger_in_memory: DispatchAuditLogger) -> None:
        logger_in_memory.log_plugin_executed("invoice", "before_insert", "compute-totals", 10)
        logger_in_memory.log_dispatch_succeeded("invoice", "before_insert", 1)
        events = logger_in_memory.read_log()
        assert [e["event_type"] for e in events] == ["plugin_executed", "dispatch_succeeded"]

    def test_failed_event_details(self, logger_in_memory: DispatchAuditLogger) -> None:
        logger_in_memory.log_dispatch_failed(
            "invoice", "before_insert", "ExecutionFailure", "boom", "compute-totals", 3
        )
        details = logger_in_memory.read_log()[0]["details"]
        assert details == {
            "error_type": "ExecutionFailure",
            "message": "boom",
            "constructor_ref": "compute-totals",
            "failed_records": 3,
        }


# ---------------------------------------------------------------------------
# File mode
# ---------------------------------------------------------------------------


class TestFileLogger:
    def test_parent_directory_created(self, logger_on_disk: DispatchAuditLogger, log_file: Path) -> None:
        assert log_file.parent.is_dir()

    def test_events_appended_to_file(
        self, logger_on_disk: DispatchAuditLogger, log_file: Path
    ) -> None:
        logger_on_disk.log_dispatch_started("invoice", "before_insert", 1)
        logger_on_disk.log_dispatch_succeeded("invoice", "before_insert", 0)
        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2

    def test_read_log_tail(self, logger_on_disk: DispatchAuditLogger) -> None:
        for count in range(5):
            logger_on_disk.log_dispatch_started("invoice", "before_insert", count)
        events = logger_on_disk.read_log(tail=2)
        assert [e["details"]["record_count"] for e in events] == [3, 4]  # type: ignore[index]

    def test_read_log_skips_corrupt_lines(
        self, logger_on_disk: DispatchAuditLogger, log_file: Path
    ) -> None:
        logger_on_disk.log_dispatch_started("invoice", "before_insert", 1)
        with log_file.open("a", encoding="utf-8") as fh:
            fh.write("not json\n\n")
        assert len(logger_on_disk.read_log()) == 1
