"""Per-stream snapshot store.

This module keeps one durable, deduplicated copy of each stream and merges
newly synced rows into it on every run. Snapshots live at
``{snapshot_dir}/{stream}.snapshot.{parquet|csv}``.

The store assumes a single writer per stream. It takes no locks and writes
files in place, so concurrent merges or a crash mid-write can lose data.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from pandas.api import types as pdtypes

from core.constants import CSV_EXTENSION, PARQUET_EXTENSION, SNAPSHOT_FILE_TEMPLATE
from core.errors import SnapshotStoreError, TypeCoercionError
from core.logging_config import get_logger
from core.types import SnapshotMergeOptions

_LOGGER = get_logger(__name__)


class SnapshotStore:
    """Snapshot store rooted at one directory."""

    def __init__(self, snapshot_dir: Path) -> None:
        """Initialize the store.

        Args:
            snapshot_dir: Directory holding snapshot files; created on write.
        """
        self._snapshot_dir = Path(snapshot_dir)

    def snapshot_path(self, stream: str, use_csv: bool = False) -> Path:
        """Return the snapshot file path for a stream and format."""
        extension = CSV_EXTENSION if use_csv else PARQUET_EXTENSION
        return self._snapshot_dir / SNAPSHOT_FILE_TEMPLATE.format(stream=stream, extension=extension)

    def read(self, stream: str) -> pd.DataFrame | None:
        """Load the persisted snapshot of a stream.

        Parquet is preferred over CSV when both exist.

        Args:
            stream: Stream name.

        Returns:
            Snapshot frame, or ``None`` when the stream has no snapshot.

        Raises:
            SnapshotStoreError: If an existing snapshot file cannot be parsed.
        """
        parquet_path = self.snapshot_path(stream)
        if parquet_path.exists():
            return _read_snapshot_file(parquet_path)
        csv_path = self.snapshot_path(stream, use_csv=True)
        if csv_path.exists():
            return _read_snapshot_file(csv_path)
        return None

    def merge(
        self,
        stream_data: pd.DataFrame | None,
        stream: str,
        options: SnapshotMergeOptions | None = None,
    ) -> pd.DataFrame | None:
        """Merge new rows into a stream snapshot and persist the result.

        Args:
            stream_data: Newly synced rows, or ``None`` when nothing arrived.
            stream: Stream name.
            options: Merge options.

        Returns:
            The incoming rows when ``just_new`` is set, otherwise the merged
            frame; the incoming value or the stored snapshot when nothing arrived.

        Raises:
            TypeCoercionError: If ``coerce_types`` cannot cast a merged column.
            SnapshotStoreError: If the snapshot cannot be read or written.
        """
        options = options or SnapshotMergeOptions()
        snapshot = self.read(stream)

        if not options.overwrite and stream_data is not None and snapshot is not None:
            merged = self._merge_frames(snapshot, stream_data, stream, options)
            self._write(merged, stream, options.use_csv)
            _LOGGER.info(
                "snapshot_merged",
                stream=stream,
                existing_rows=len(snapshot),
                incoming_rows=len(stream_data),
                merged_rows=len(merged),
            )
            return stream_data if options.just_new else merged
        if stream_data is not None:
            self._write(stream_data, stream, options.use_csv)
            _LOGGER.info(
                "snapshot_written",
                stream=stream,
                rows=len(stream_data),
                overwrite=options.overwrite,
            )
            return stream_data
        if options.just_new or options.overwrite:
            return stream_data
        return snapshot

    def _merge_frames(
        self,
        snapshot: pd.DataFrame,
        stream_data: pd.DataFrame,
        stream: str,
        options: SnapshotMergeOptions,
    ) -> pd.DataFrame:
        if options.localize_datetimes:
            snapshot = localize_datetime_columns(snapshot)
        # Existing rows come first so incoming rows win the keep="last" dedup.
        merged = pd.concat([snapshot, stream_data], ignore_index=True)
        if options.coerce_types:
            merged = coerce_column_types(merged, stream_data, stream)
        primary_key = options.primary_key
        if primary_key in snapshot.columns and primary_key in stream_data.columns:
            merged = merged.drop_duplicates(subset=[primary_key], keep="last")
        return merged.reset_index(drop=True)

    def _write(self, frame: pd.DataFrame, stream: str, use_csv: bool) -> None:
        """Replace the snapshot file of a stream.

        Args:
            frame: Rows to persist.
            stream: Stream name.
            use_csv: Persist as CSV instead of parquet.

        Raises:
            SnapshotStoreError: If persistence fails.
        """
        snapshot_path = self.snapshot_path(stream, use_csv)
        try:
            self._snapshot_dir.mkdir(parents=True, exist_ok=True)
            if use_csv:
                frame.to_csv(snapshot_path, index=False)
            else:
                frame.to_parquet(snapshot_path, engine="pyarrow", index=False)
        except (OSError, TypeError, ValueError) as error:
            raise SnapshotStoreError(
                f"Failed to persist snapshot for stream '{stream}' at {snapshot_path}: {error}. "
                "Check write permissions and column types, or use a CSV snapshot."
            ) from error


def localize_datetime_columns(frame: pd.DataFrame) -> pd.DataFrame:
    """Tag naive datetime columns as UTC.

    Args:
        frame: Loaded snapshot.

    Returns:
        Copy with every naive datetime column localized to UTC.
    """
    localized = frame.copy()
    for column in localized.columns:
        series = localized[column]
        if pdtypes.is_datetime64_any_dtype(series) and getattr(series.dt, "tz", None) is None:
            localized[column] = series.dt.tz_localize("UTC")
    return localized


def coerce_column_types(
    merged: pd.DataFrame,
    stream_data: pd.DataFrame,
    stream: str,
) -> pd.DataFrame:
    """Cast merged columns to the normalized dtypes of the incoming rows.

    Booleans widen to nullable ``boolean`` and 32/64-bit integers widen to
    nullable ``Int64``, so rows missing the column stay NA. Other dtypes pass
    through unchanged.

    Args:
        merged: Concatenated snapshot and incoming rows.
        stream_data: Incoming rows that define the target dtypes.
        stream: Stream name for error context.

    Returns:
        Copy of ``merged`` with coerced columns.

    Raises:
        TypeCoercionError: If any column cannot be cast.
    """
    coerced = merged.copy()
    for column, dtype in stream_data.dtypes.items():
        target = normalize_dtype(dtype)
        try:
            coerced[column] = coerced[column].astype(target)
        except (TypeError, ValueError) as error:
            raise TypeCoercionError(
                f"Failed to coerce column '{column}' of stream '{stream}' to {target}: {error}. "
                "Clean the snapshot column or merge without coerce_types."
            ) from error
    return coerced


def normalize_dtype(dtype: object) -> object:
    """Map an incoming dtype onto the dtype used for merged columns."""
    dtype_name = str(dtype)
    if dtype_name in ("bool", "boolean"):
        return "boolean"
    if dtype_name in ("int32", "int64", "Int32", "Int64"):
        return "Int64"
    return dtype


def _read_snapshot_file(snapshot_path: Path) -> pd.DataFrame:
    try:
        if snapshot_path.suffix == f".{CSV_EXTENSION}":
            return pd.read_csv(snapshot_path)
        return pd.read_parquet(snapshot_path, engine="pyarrow")
    except (OSError, ValueError) as error:
        raise SnapshotStoreError(
            f"Failed to read snapshot at {snapshot_path}: {error}. "
            "Delete the corrupted snapshot and rerun with overwrite."
        ) from error
