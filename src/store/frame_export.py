"""Frame export to output files.

This module writes a processed stream to the output directory as CSV,
JSON, JSONL, parquet, or a singer stream, applying output name overrides
and the configured file prefix template.
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from core.config import EtlConfig
from core.constants import SUPPORTED_EXPORT_FORMATS
from core.errors import ExportError
from core.logging_config import get_logger
from core.types import ExportOptions, SingerWriteOptions
from ingest.catalog_reader import CatalogReader
from singer.record_writer import write_singer
from singer.value_codec import deep_convert_datetimes, is_structured
from store.name_templates import build_format_variables, format_str_safely

_LOGGER = get_logger(__name__)


def to_export(
    frame: pd.DataFrame,
    name: str,
    output_dir: Path,
    config: EtlConfig,
    options: ExportOptions | None = None,
) -> Path:
    """Export a frame under the resolved output name.

    Args:
        frame: Rows to export.
        name: Stream name.
        output_dir: Destination directory, created when missing.
        config: Runtime configuration.
        options: Export options.

    Returns:
        Path of the written file.

    Raises:
        ExportError: If the format is unsupported or writing fails.
        CatalogError: If singer output runs in catalog mode for an undeclared stream.
    """
    options = options or ExportOptions()
    export_format = (options.export_format or config.default_export_format).lower()
    if export_format not in SUPPORTED_EXPORT_FORMATS:
        raise ExportError(
            f"Unsupported export format '{export_format}' for stream {name}. "
            f"Choose one of {SUPPORTED_EXPORT_FORMATS}."
        )
    output_name = resolve_output_name(name, config, options.reserved_variables)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if export_format == "singer":
        return _export_singer(frame, name, output_name, output_dir, config, options)
    try:
        if export_format == "parquet":
            output_path = output_dir / f"{output_name}.parquet"
            frame.to_parquet(output_path, engine="pyarrow", index=False)
        elif export_format == "json":
            output_path = output_dir / f"{output_name}.json"
            frame.to_json(output_path, orient="records", date_format="iso", indent=2)
        elif export_format == "jsonl":
            output_path = output_dir / f"{output_name}.jsonl"
            frame.to_json(output_path, orient="records", date_format="iso", lines=True)
        else:
            output_path = output_dir / f"{output_name}.csv"
            stringify_structured_columns(frame).to_csv(output_path, index=False)
    except (OSError, TypeError, ValueError) as error:
        raise ExportError(
            f"Failed to export stream {name} as {export_format} under {output_dir}: {error}. "
            "Check column types or choose another export format."
        ) from error
    _LOGGER.info("stream_exported", stream=name, export_format=export_format, path=str(output_path))
    return output_path


def resolve_output_name(
    name: str,
    config: EtlConfig,
    reserved_variables: dict[str, str] | None = None,
) -> str:
    """Apply the unified output override and the formatted prefix to a name."""
    output_name = config.output_name_for(name)
    if config.output_file_prefix:
        variables = build_format_variables(config, reserved_variables)
        output_name = format_str_safely(config.output_file_prefix, variables) + output_name
    return output_name


def stringify_structured_columns(frame: pd.DataFrame) -> pd.DataFrame:
    """JSON-encode nested cells so the frame fits a flat CSV.

    Args:
        frame: Frame to export.

    Returns:
        Copy with mapping and list cells encoded as JSON strings.
    """
    flat_frame = frame.copy()
    for column in frame.columns:
        if frame[column].dtype != object:
            continue
        if not any(is_structured(value) for value in frame[column]):
            continue
        flat_frame[column] = frame[column].map(
            lambda value: json.dumps(deep_convert_datetimes(value), default=str)
            if is_structured(value)
            else value
        )
    return flat_frame


def _export_singer(
    frame: pd.DataFrame,
    name: str,
    output_name: str,
    output_dir: Path,
    config: EtlConfig,
    options: ExportOptions,
) -> Path:
    keys = options.keys
    if keys is None:
        keys = tuple(CatalogReader(config.root_dir).get_pk(name))
    writer_options = SingerWriteOptions(
        keys=tuple(keys),
        allow_objects=options.allow_objects,
        schema=options.schema,
        catalog_stream=name if config.use_catalog_schema else None,
    )
    return write_singer(frame, output_name, output_dir, config, writer_options)
