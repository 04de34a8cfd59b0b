#!/usr/bin/env python3
"""Example: Fail-fast Dispatch

Demonstrates how a failing plugin stops the remaining plugins and marks
every record in the batch as failed.

Usage:
    python examples/02_fail_fast.py

Requirements:
    pip install trigger-dispatch
"""
from __future__ import annotations

import trigger_dispatch
from trigger_dispatch import PluginInstance, TriggerHandler


class HostRecord(dict):
    """A record that can carry error messages, like a host platform's record."""

    def __init__(self, **fields):
        super().__init__(**fields)
        self.errors = []

    def add_error(self, message):
        self.errors.append(message)


def main() -> None:
    print(f"trigger-dispatch version: {trigger_dispatch.__version__}")

    handler = TriggerHandler()

    @handler.plugin("require-amount")
    class RequireAmount(PluginInstance):
        def before_insert(self, records):
            missing = [r["id"] for r in records if "amount" not in r]
            if missing:
                raise ValueError(f"amount is required (records {missing})")

    @handler.plugin("notify")
    class Notify(PluginInstance):
        def before_insert(self, records):
            print("  notify ran (should not happen)")

    handler.add_registration("payment", 1, "require-amount")
    handler.add_registration("payment", 2, "notify")

    # Step 1: One bad record fails the whole batch
    records = [HostRecord(id=1, amount=10), HostRecord(id=2)]
    result = handler.run("payment", "before_insert", records)
    print(f"Success: {result.success}")
    print(f"Failure: {result.failure.message}")
    for record in records:
        print(f"  record {record['id']} errors: {record.errors}")

    # Step 2: Bypass the kind for a bulk load
    with handler.bypasses.bypassed(kind="payment"):
        result = handler.run("payment", "before_insert", [HostRecord(id=3)])
    print(f"Bypassed during bulk load: {result.bypassed}")


if __name__ == "__main__":
    main()
