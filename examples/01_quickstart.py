#!/usr/bin/env python3
"""Example: Quickstart

Demonstrates the minimal setup for trigger-dispatch using the
TriggerHandler convenience class: register two plugins for one entity
kind and dispatch a before-insert batch through them.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install trigger-dispatch
"""
from __future__ import annotations

import trigger_dispatch
from trigger_dispatch import PluginInstance, TriggerHandler


def main() -> None:
    print(f"trigger-dispatch version: {trigger_dispatch.__version__}")

    handler = TriggerHandler()

    # Step 1: Register plugin classes under the names configuration refers to
    @handler.plugin("default-status")
    class DefaultStatus(PluginInstance):
        def before_insert(self, records):
            for record in records:
                record.setdefault("status", "new")

    @handler.plugin("compute-total")
    class ComputeTotal(PluginInstance):
        def before_insert(self, records):
            for record in records:
                record["total"] = record["quantity"] * record["unit_price"]

    # Step 2: Configure execution order (lower keys run first)
    handler.add_registration("invoice_line", 20, "compute-total")
    handler.add_registration("invoice_line", -10, "default-status")
    print(f"Handler: {handler!r}")

    # Step 3: Dispatch a batch
    records = [
        {"id": 1, "quantity": 2, "unit_price": 5},
        {"id": 2, "quantity": 1, "unit_price": 12, "status": "draft"},
    ]
    result = handler.run("invoice_line", "before_insert", records)

    print(f"Success: {result.success}")
    print(f"Executed: {', '.join(r.constructor_ref for r in result.executed)}")
    for record in records:
        print(f"  {record}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
