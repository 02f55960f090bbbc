"""Unit tests for frame export."""

from __future__ import annotations

from dataclasses import replace
import json
from pathlib import Path

import pandas as pd
import pytest

from core.errors import ExportError
from core.types import ExportOptions
from store.frame_export import to_export
from tests.fixture_paths import copy_job_root


def _frame() -> pd.DataFrame:
    return pd.DataFrame({"id": [1, 2], "tags": [["a"], []]})


def test_to_export_writes_csv_by_default(tmp_path: Path) -> None:
    """CSV exports should JSON-encode nested cells."""
    config = copy_job_root(tmp_path)

    output_path = to_export(_frame(), "customers", config.output_dir, config)

    assert output_path.name == "customers.csv"
    assert list(pd.read_csv(output_path)["tags"]) == ['["a"]', "[]"]


def test_to_export_writes_jsonl(tmp_path: Path) -> None:
    """JSONL exports should hold one record per line."""
    config = copy_job_root(tmp_path)
    options = ExportOptions(export_format="jsonl")

    output_path = to_export(_frame(), "customers", config.output_dir, config, options)
    lines = output_path.read_text(encoding="utf-8").splitlines()

    assert json.loads(lines[0]) == {"id": 1, "tags": ["a"]}


def test_to_export_writes_parquet(tmp_path: Path) -> None:
    """Parquet exports should round-trip through pyarrow."""
    config = copy_job_root(tmp_path)
    frame = pd.DataFrame({"id": [1, 2], "name": ["a", "b"]})

    output_path = to_export(frame, "customers", config.output_dir, config, ExportOptions("parquet"))

    assert pd.read_parquet(output_path).equals(frame)


def test_to_export_applies_overrides_and_prefix(tmp_path: Path) -> None:
    """Output names should use unified overrides and the formatted prefix."""
    config = replace(
        copy_job_root(tmp_path),
        tenant_id="acme",
        output_file_prefix="{tenant}_{plan}_",
        output_name_overrides={"CUSTOMERS": "contacts"},
    )

    output_path = to_export(_frame(), "customers", config.output_dir, config)

    assert output_path.name == "acme_pro_contacts.csv"


def test_to_export_writes_singer_with_catalog_keys(tmp_path: Path) -> None:
    """Singer exports should default key properties to catalog primary keys."""
    config = copy_job_root(tmp_path)
    frame = pd.DataFrame({"id": [1], "name": ["Ada"]})

    output_path = to_export(frame, "customers", config.output_dir, config, ExportOptions("singer"))
    schema_message = json.loads(output_path.read_text(encoding="utf-8").splitlines()[0])

    assert output_path.name == "data.singer"
    assert schema_message["stream"] == "customers"
    assert schema_message["key_properties"] == ["id"]


def test_to_export_rejects_unknown_format(tmp_path: Path) -> None:
    """Unsupported formats should raise before anything is written."""
    config = copy_job_root(tmp_path)

    with pytest.raises(ExportError):
        to_export(_frame(), "customers", config.output_dir, config, ExportOptions("xlsx"))

    assert not config.output_dir.exists()
