"""Integration test for a read, snapshot, and export job run."""

from __future__ import annotations

from dataclasses import replace
import json
from pathlib import Path

import pandas as pd

from core.types import ExportOptions
from ingest.input_reader import Reader
from store.frame_export import to_export
from store.snapshot_store import SnapshotStore
from tests.fixture_paths import copy_job_root


def test_incremental_runs_accumulate_snapshot_and_export_singer(tmp_path: Path) -> None:
    """A second sync should update the snapshot and export catalog-typed singer output."""
    config = replace(copy_job_root(tmp_path), use_catalog_schema=True)
    store = SnapshotStore(config.snapshot_dir)
    first_run = Reader(config).get("customers", catalog_types=True)
    store.merge(first_run, "customers")
    (config.input_dir / "customers-20240101.csv").write_text(
        "id,name,active,balance,created_at,tags,address\n"
        '3,Grace Hopper,true,4.5,2024-01-04 09:15:00,"[""admiral""]",\n'
        "4,Barbara,false,1.0,2024-01-05 12:00:00,[],\n",
        encoding="utf-8",
    )

    second_run = Reader(config).get("customers", catalog_types=True)
    merged = store.merge(second_run, "customers")
    output_path = to_export(merged, "customers", config.output_dir, config, ExportOptions("singer"))
    messages = [json.loads(line) for line in output_path.read_text(encoding="utf-8").splitlines()]
    records = {message["record"]["id"]: message["record"] for message in messages[1:-1]}

    assert list(merged["id"]) == [1, 2, 3, 4]
    assert records[3]["name"] == "Grace Hopper"
    assert records[3]["tags"] == ["admiral"]
    assert records[1]["address"] == {"city": "Paris"}
    assert messages[0]["schema"]["properties"]["created_at"]["format"] == "date-time"
    assert pd.read_parquet(store.snapshot_path("customers")).shape[0] == 4
