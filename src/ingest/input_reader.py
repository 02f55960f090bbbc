"""Stream input readers.

This module discovers per-stream CSV and parquet files in the input
directory and loads them as frames, optionally typed from the catalog.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from core.config import EtlConfig
from core.constants import SUPPORTED_INPUT_EXTENSIONS
from core.errors import InputReadError
from core.logging_config import get_logger
from ingest.catalog_reader import DATETIME_DTYPE, CatalogReader

_LOGGER = get_logger(__name__)


class Reader:
    """Stream-keyed access to synced input files."""

    def __init__(self, config: EtlConfig, ignore: tuple[str, ...] = ()) -> None:
        """Scan the configured input directory.

        Args:
            config: Runtime configuration.
            ignore: Stream names to leave out.
        """
        self._input_dir = config.input_dir
        self._catalog = CatalogReader(config.root_dir)
        self._input_files = _discover_input_files(self._input_dir, ignore)

    def __repr__(self) -> str:
        return repr(self.keys())

    def keys(self) -> list[str]:
        """Return discovered stream names in discovery order."""
        return list(self._input_files)

    def path_for(self, stream: str) -> Path | None:
        """Return the input file backing a stream."""
        return self._input_files.get(stream)

    def get(self, stream: str, catalog_types: bool = False) -> pd.DataFrame | None:
        """Load one stream as a frame.

        Args:
            stream: Stream name.
            catalog_types: Apply catalog dtypes and date parsing to CSV input.

        Returns:
            Loaded frame, or ``None`` for unknown streams.

        Raises:
            InputReadError: If the file cannot be parsed.
        """
        file_path = self._input_files.get(stream)
        if file_path is None:
            return None
        if file_path.suffix.lower() == ".parquet":
            return _read_parquet(file_path)
        return self._read_csv(stream, file_path, catalog_types)

    def get_pk(self, stream: str) -> list[str]:
        """Return catalog primary keys for a stream."""
        return self._catalog.get_pk(stream)

    def _read_csv(self, stream: str, file_path: Path, catalog_types: bool) -> pd.DataFrame:
        dtypes: dict[str, str] = {}
        if catalog_types:
            headers = list(_read_csv_file(file_path, nrows=0).columns)
            dtypes = self._catalog.get_column_dtypes(stream, headers)
        date_columns = [column for column, dtype in dtypes.items() if dtype == DATETIME_DTYPE]
        read_dtypes = {column: dtype for column, dtype in dtypes.items() if dtype != DATETIME_DTYPE}
        frame = _read_csv_file(file_path, dtype=read_dtypes or None)
        for column in date_columns:
            _parse_date_column(frame, column)
        return frame


def _discover_input_files(input_dir: Path, ignore: tuple[str, ...]) -> dict[str, Path]:
    """Map stream names onto input files.

    The stream name is the file stem up to its first ``-``; the first file
    found for a stream wins.

    Args:
        input_dir: Directory to scan, or a single input file.
        ignore: Stream names to skip.

    Returns:
        Stream name to file path mapping.
    """
    if input_dir.is_dir():
        candidates = sorted(
            path
            for path in input_dir.iterdir()
            if path.is_file() and path.suffix.lower() in SUPPORTED_INPUT_EXTENSIONS
        )
    elif input_dir.is_file():
        candidates = [input_dir]
    else:
        candidates = []
    input_files: dict[str, Path] = {}
    for file_path in candidates:
        stream = file_path.stem.split("-")[0]
        if stream not in input_files and stream not in ignore:
            input_files[stream] = file_path
    return input_files


def _read_csv_file(file_path: Path, **kwargs: object) -> pd.DataFrame:
    try:
        return pd.read_csv(file_path, **kwargs)
    except (OSError, TypeError, ValueError) as error:
        raise InputReadError(
            f"Failed to read CSV input at {file_path}: {error}. "
            "Check the file contents and catalog types."
        ) from error


def _read_parquet(file_path: Path) -> pd.DataFrame:
    try:
        return pd.read_parquet(file_path, engine="pyarrow")
    except (OSError, ValueError) as error:
        raise InputReadError(
            f"Failed to read parquet input at {file_path}: {error}. "
            "Re-sync the stream to produce a valid parquet file."
        ) from error


def _parse_date_column(frame: pd.DataFrame, column: str) -> None:
    try:
        frame[column] = pd.to_datetime(frame[column], format="mixed")
    except (TypeError, ValueError) as error:
        _LOGGER.warning("date_column_parse_failed", column=column, error=str(error))
