"""Tests for trigger_dispatch.registration.registration — Registration and row parsing."""
from __future__ import annotations

import dataclasses

import pytest

from trigger_dispatch.errors import ConfigurationError
from trigger_dispatch.registration.registration import (
    EXTENSION_POINT,
    Registration,
    parse_row,
)


def _row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "target_kind": "invoice",
        "order_key": 10,
        "constructor_ref": "compute-totals",
    }
    row.update(overrides)
    return row


class TestRegistration:
    def test_defaults(self) -> None:
        reg = Registration("invoice", 10, "compute-totals")
        assert reg.extension_point == EXTENSION_POINT
        assert reg.additional_data == ""
        assert reg.bypass_execution is False

    def test_is_frozen(self) -> None:
        reg = Registration("invoice", 10, "compute-totals")
        with pytest.raises(dataclasses.FrozenInstanceError):
            reg.order_key = 20  # type: ignore[misc]

    def test_empty_target_kind_rejected(self) -> None:
        with pytest.raises(ValueError, match="target_kind"):
            Registration("", 10, "compute-totals")

    def test_empty_constructor_ref_rejected(self) -> None:
        with pytest.raises(ValueError, match="constructor_ref"):
            Registration("invoice", 10, "")

    def test_negative_order_key_allowed(self) -> None:
        assert Registration("invoice", -10, "compute-totals").order_key == -10

    def test_to_dict_parses_back_to_equal_registration(self) -> None:
        reg = Registration("invoice", -5, "compute-totals", additional_data='{"x": 1}')
        assert parse_row(reg.to_dict()) == reg


class TestParseRow:
    def test_minimal_row(self) -> None:
        reg = parse_row(_row())
        assert reg == Registration("invoice", 10, "compute-totals")

    def test_full_row(self) -> None:
        reg = parse_row(
            _row(
                extension_point="trigger_action",
                additional_data="opaque",
                description="Totals the lines",
                bypass_execution=True,
            )
        )
        assert reg.additional_data == "opaque"
        assert reg.description == "Totals the lines"
        assert reg.bypass_execution is True

    def test_whitespace_stripped(self) -> None:
        assert parse_row(_row(constructor_ref="  compute-totals ")).constructor_ref == "compute-totals"

    def test_string_order_key_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_row(_row(order_key="10"), "invoice")

    def test_missing_constructor_ref_rejected(self) -> None:
        row = _row()
        del row["constructor_ref"]
        with pytest.raises(ConfigurationError) as info:
            parse_row(row, "invoice")
        assert info.value.target_kind == "invoice"
        assert info.value.constructor_ref is None

    def test_empty_target_kind_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_row(_row(target_kind=""))

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Malformed"):
            parse_row(_row(priority=3))

    def test_error_carries_constructor_ref(self) -> None:
        with pytest.raises(ConfigurationError) as info:
            parse_row(_row(order_key="first"), "invoice")
        assert info.value.constructor_ref == "compute-totals"
