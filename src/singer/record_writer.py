"""Singer stream writer.

This module writes a frame as one SCHEMA message, one RECORD message per
row, and a closing STATE message. The batch is rendered in memory and
written with a single append-or-create call.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from core.config import EtlConfig
from core.errors import ExportError
from core.logging_config import get_logger
from core.types import SingerSchema, SingerWriteOptions
from ingest.catalog_reader import CatalogReader
from singer.type_inference import build_singer_schema
from singer.value_codec import deep_convert_datetimes, is_missing, parse_df_cols

_LOGGER = get_logger(__name__)


def write_singer(
    frame: pd.DataFrame,
    stream: str,
    output_dir: Path,
    config: EtlConfig,
    options: SingerWriteOptions | None = None,
) -> Path:
    """Write a frame as a singer stream.

    Args:
        frame: Rows to emit.
        stream: Stream name used in every message.
        output_dir: Directory receiving the singer file.
        config: Runtime configuration; supplies catalog mode and root.
        options: Writer options.

    Returns:
        Path of the written singer file.

    Raises:
        CatalogError: If catalog mode is active and the stream is undeclared.
        ExportError: If the file cannot be written.
    """
    options = options or SingerWriteOptions()
    catalog_mode = config.use_catalog_schema
    messages = build_singer_messages(frame, stream, config, options)
    output_path = Path(output_dir) / options.filename
    _write_batch(output_path, messages)
    _LOGGER.info(
        "singer_stream_written",
        stream=stream,
        path=str(output_path),
        record_count=len(messages) - 2,
        catalog_mode=catalog_mode,
    )
    return output_path


def build_singer_messages(
    frame: pd.DataFrame,
    stream: str,
    config: EtlConfig,
    options: SingerWriteOptions,
) -> list[dict[str, Any]]:
    """Build the ordered SCHEMA, RECORD, and STATE messages for a frame.

    Args:
        frame: Rows to emit.
        stream: Stream name.
        config: Runtime configuration.
        options: Writer options.

    Returns:
        Message dictionaries in output order.
    """
    catalog_mode = config.use_catalog_schema
    keep_nulls = catalog_mode or options.keep_null_fields
    schema = options.schema
    working_frame = frame
    if options.allow_objects and not catalog_mode and not options.keep_null_fields:
        working_frame = working_frame.dropna(axis=1, how="all")
    if catalog_mode or options.catalog_stream:
        catalog_stream = options.catalog_stream or stream
        schema = CatalogReader(config.root_dir).get_schema(catalog_stream)
        working_frame = parse_df_cols(working_frame, schema)

    output_frame, header = build_singer_schema(
        working_frame,
        options.allow_objects or catalog_mode,
        schema=schema,
        prefer_schema=not catalog_mode,
        recursive_typing=options.recursive_typing,
    )
    messages: list[dict[str, Any]] = [_schema_message(stream, header, options.keys)]
    for row in output_frame.to_dict(orient="records"):
        record = _build_record(row, keep_nulls)
        messages.append({"type": "RECORD", "stream": stream, "record": record})
    messages.append({"type": "STATE", "value": {}})
    return messages


def _schema_message(stream: str, schema: SingerSchema, keys: tuple[str, ...]) -> dict[str, Any]:
    return {
        "type": "SCHEMA",
        "stream": stream,
        "schema": schema,
        "key_properties": list(keys),
    }


def _build_record(row: dict[Any, Any], keep_nulls: bool) -> dict[str, Any]:
    """Convert one row into a JSON-ready record.

    Args:
        row: Column to cell mapping.
        keep_nulls: Keep null cells as explicit ``None`` values.

    Returns:
        Record with datetimes converted and nulls filtered by policy.
    """
    record: dict[str, Any] = {}
    for key, value in row.items():
        if is_missing(value):
            if keep_nulls:
                record[str(key)] = None
            continue
        record[str(key)] = deep_convert_datetimes(value)
    return record


def _write_batch(output_path: Path, messages: list[dict[str, Any]]) -> None:
    """Append or create the singer file with every message at once.

    Args:
        output_path: Target singer file.
        messages: Messages to serialize.

    Raises:
        ExportError: If serialization or the write fails.
    """
    try:
        body = "".join(json.dumps(message, default=str) + "\n" for message in messages)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if output_path.exists() else "w"
        with output_path.open(mode, encoding="utf-8") as handle:
            handle.write(body)
    except (OSError, TypeError, ValueError) as error:
        raise ExportError(
            f"Failed to write singer output at {output_path}: {error}. "
            "Check write permissions and record contents."
        ) from error
