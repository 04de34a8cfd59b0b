#!/usr/bin/env python3
"""Example: JSON Configuration

Demonstrates loading registrations from a JSON file, tracking field
changes in an after-update phase with prior state, and writing an
audit trail.

Usage:
    python examples/03_json_configuration.py

Requirements:
    pip install trigger-dispatch
"""
from __future__ import annotations

import json
import tempfile
from pathlib import Path

import trigger_dispatch
from trigger_dispatch import (
    DispatchAuditLogger,
    JsonFileConfigurationSource,
    OperationKind,
    PluginInstance,
    TriggerHandler,
)


def main() -> None:
    print(f"trigger-dispatch version: {trigger_dispatch.__version__}")

    workdir = Path(tempfile.mkdtemp())
    config = workdir / "registrations.json"
    config.write_text(
        json.dumps(
            {
                "registrations": [
                    {
                        "target_kind": "opportunity",
                        "order_key": 0,
                        "constructor_ref": "stage-history",
                        "additional_data": "stage",
                    }
                ]
            }
        )
    )

    # Step 1: Wire a file-backed source and an audit log
    audit = DispatchAuditLogger(workdir / "audit.jsonl")
    handler = TriggerHandler(source=JsonFileConfigurationSource(config), audit_logger=audit)

    @handler.plugin("stage-history")
    class StageHistory(PluginInstance):
        def after_update(self, records, prior_state):
            field = self.additional_data
            for record in records:
                prior = self.context.prior_for(record)
                if prior is not None and prior[field] != record[field]:
                    print(f"  {record['id']}: {field} {prior[field]} -> {record[field]}")

    # Step 2: Dispatch an update batch with prior state for some records
    records = [{"id": "o1", "stage": "won"}, {"id": "o2", "stage": "open"}]
    prior = {"o1": {"id": "o1", "stage": "negotiation"}}
    result = handler.run("opportunity", OperationKind.AFTER_UPDATE, records, prior_state=prior)
    print(f"Success: {result.success}")

    # Step 3: Read back the audit trail
    for entry in audit.read_log():
        print(f"  audit: {entry['event_type']}")


if __name__ == "__main__":
    main()
