"""Tests for trigger_dispatch.registration.sources — configuration sources."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from trigger_dispatch.errors import ConfigurationError
from trigger_dispatch.registration.registration import EXTENSION_POINT, Registration
from trigger_dispatch.registration.sources import (
    ConfigurationSource,
    InMemoryConfigurationSource,
    JsonFileConfigurationSource,
)


@pytest.fixture()
def source() -> InMemoryConfigurationSource:
    return InMemoryConfigurationSource(
        [
            Registration("invoice", 10, "compute-totals"),
            Registration("invoice", 20, "notify-owner", extension_point="other_point"),
            {"target_kind": "invoice_line", "order_key": 0, "constructor_ref": "round-amounts"},
        ]
    )


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "registrations.json"
    path.write_text(
        json.dumps(
            [
                {"target_kind": "invoice", "order_key": 10, "constructor_ref": "compute-totals"},
                {"target_kind": "account", "order_key": 0, "constructor_ref": "stamp-owner"},
            ]
        ),
        encoding="utf-8",
    )
    return path


class TestInMemoryConfigurationSource:
    def test_satisfies_protocol(self, source: InMemoryConfigurationSource) -> None:
        assert isinstance(source, ConfigurationSource)

    def test_rows_for_filters_kind_and_extension_point(
        self, source: InMemoryConfigurationSource
    ) -> None:
        rows = source.rows_for("invoice", EXTENSION_POINT)
        assert [r["constructor_ref"] for r in rows] == ["compute-totals"]

    def test_raw_row_without_extension_point_uses_default(
        self, source: InMemoryConfigurationSource
    ) -> None:
        rows = source.rows_for("invoice_line", EXTENSION_POINT)
        assert len(rows) == 1

    def test_unknown_kind_returns_empty(self, source: InMemoryConfigurationSource) -> None:
        assert source.rows_for("ledger", EXTENSION_POINT) == []

    def test_rows_are_copies(self, source: InMemoryConfigurationSource) -> None:
        rows = source.rows_for("invoice", EXTENSION_POINT)
        rows[0]["order_key"] = 999  # type: ignore[index]
        assert source.rows_for("invoice", EXTENSION_POINT)[0]["order_key"] == 10

    def test_add_row_copies_input(self) -> None:
        row = {"target_kind": "invoice", "order_key": 1, "constructor_ref": "a"}
        source = InMemoryConfigurationSource()
        source.add_row(row)
        row["order_key"] = 2
        assert source.all_rows()[0]["order_key"] == 1

    def test_remove(self, source: InMemoryConfigurationSource) -> None:
        assert source.remove("invoice", "compute-totals") == 1
        assert source.rows_for("invoice", EXTENSION_POINT) == []
        assert source.remove("invoice", "compute-totals") == 0

    def test_clear_and_len(self, source: InMemoryConfigurationSource) -> None:
        assert len(source) == 3
        source.clear()
        assert len(source) == 0


class TestJsonFileConfigurationSource:
    def test_reads_list_document(self, config_file: Path) -> None:
        source = JsonFileConfigurationSource(config_file)
        rows = source.rows_for("invoice", EXTENSION_POINT)
        assert [r["constructor_ref"] for r in rows] == ["compute-totals"]

    def test_reads_object_document(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {"registrations": [{"target_kind": "invoice", "order_key": 1, "constructor_ref": "a"}]}
            ),
            encoding="utf-8",
        )
        assert len(JsonFileConfigurationSource(path).all_rows()) == 1

    def test_rereads_file_on_every_call(self, config_file: Path) -> None:
        source = JsonFileConfigurationSource(config_file)
        assert len(source.rows_for("invoice", EXTENSION_POINT)) == 1

        rows = json.loads(config_file.read_text(encoding="utf-8"))
        rows.append({"target_kind": "invoice", "order_key": 20, "constructor_ref": "notify"})
        config_file.write_text(json.dumps(rows), encoding="utf-8")

        assert len(source.rows_for("invoice", EXTENSION_POINT)) == 2

    def test_missing_file_raises_configuration_error(self, tmp_path: Path) -> None:
        source = JsonFileConfigurationSource(tmp_path / "absent.json")
        with pytest.raises(ConfigurationError, match="not found"):
            source.all_rows()

    def test_invalid_json_raises_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            JsonFileConfigurationSource(path).all_rows()

    def test_wrong_shape_raises_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "scalar.json"
        path.write_text(json.dumps({"registrations": 3}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="list of registration objects"):
            JsonFileConfigurationSource(path).all_rows()

    def test_non_utf8_file_raises_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.json"
        path.write_bytes(b'[{"target_kind": "f\xffactura"}]')
        with pytest.raises(ConfigurationError, match="not UTF-8") as info:
            JsonFileConfigurationSource(path).all_rows()
        assert isinstance(info.value.__cause__, UnicodeDecodeError)

    def test_directory_path_raises_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="cannot be read") as info:
            JsonFileConfigurationSource(tmp_path).all_rows()
        assert isinstance(info.value.__cause__, OSError)

    def test_path_property(self, config_file: Path) -> None:
        assert JsonFileConfigurationSource(str(config_file)).path == config_file
