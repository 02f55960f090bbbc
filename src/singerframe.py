"""Public SDK surface for singerframe.

This module provides a stable import path for ETL scripts.
It re-exports the reader, exporters, snapshot helpers, and option models.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from core.config import EtlConfig
from core.types import ExportOptions, SingerWriteOptions, SnapshotMergeOptions
from ingest.catalog_reader import CatalogReader
from ingest.input_reader import Reader
from singer.record_writer import write_singer
from singer.schema_builder import to_singer_schema
from singer.type_inference import build_singer_schema
from store.frame_export import to_export
from store.name_templates import build_format_variables, format_str_safely
from store.snapshot_store import SnapshotStore


def snapshot_records(
    stream_data: pd.DataFrame | None,
    stream: str,
    snapshot_dir: str | Path,
    pk: str = "id",
    just_new: bool = False,
    use_csv: bool = False,
    coerce_types: bool = False,
    localize_datetime_types: bool = False,
    overwrite: bool = False,
) -> pd.DataFrame | None:
    """Merge new rows into a stream snapshot with keyword options.

    Args:
        stream_data: Newly synced rows, or ``None``.
        stream: Stream name.
        snapshot_dir: Directory holding snapshot files.
        pk: Deduplication key.
        just_new: Return only the incoming rows.
        use_csv: Persist as CSV instead of parquet.
        coerce_types: Cast merged columns to the incoming dtypes.
        localize_datetime_types: Tag naive snapshot datetimes as UTC.
        overwrite: Replace the snapshot with the incoming rows.

    Returns:
        Merged, incoming, or stored frame depending on the options.
    """
    options = SnapshotMergeOptions(
        primary_key=pk,
        just_new=just_new,
        use_csv=use_csv,
        coerce_types=coerce_types,
        localize_datetimes=localize_datetime_types,
        overwrite=overwrite,
    )
    return SnapshotStore(Path(snapshot_dir)).merge(stream_data, stream, options)


def read_snapshots(stream: str, snapshot_dir: str | Path) -> pd.DataFrame | None:
    """Load the stored snapshot of a stream, or ``None``."""
    return SnapshotStore(Path(snapshot_dir)).read(stream)


__all__ = [
    "CatalogReader",
    "EtlConfig",
    "ExportOptions",
    "Reader",
    "SingerWriteOptions",
    "SnapshotMergeOptions",
    "SnapshotStore",
    "build_format_variables",
    "build_singer_schema",
    "format_str_safely",
    "read_snapshots",
    "snapshot_records",
    "to_export",
    "to_singer_schema",
    "write_singer",
]
