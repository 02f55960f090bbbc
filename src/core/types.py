"""Shared typed models.

This module defines immutable option models used by the singer writer,
snapshot store, and flat exporters to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from core.constants import DEFAULT_PRIMARY_KEY, SINGER_FILE_NAME

SingerSchema = Dict[str, Any]
"""JSON-shaped schema node, e.g. ``{"type": ["integer", "null"]}``."""


@dataclass(frozen=True)
class SingerWriteOptions:
    """Options for writing a frame as a singer stream.

    Attributes:
        keys: Primary key columns announced in the SCHEMA record.
        filename: Output file name under the output directory.
        allow_objects: Keep nested values as objects instead of JSON strings.
        schema: Explicit schema used verbatim instead of inference.
        keep_null_fields: Keep null-valued keys and all-null columns.
        catalog_stream: Catalog stream whose schema drives the output.
        recursive_typing: Infer array item schemas across every row.
    """

    keys: tuple[str, ...] = ()
    filename: str = SINGER_FILE_NAME
    allow_objects: bool = False
    schema: SingerSchema | None = None
    keep_null_fields: bool = False
    catalog_stream: str | None = None
    recursive_typing: bool = True


@dataclass(frozen=True)
class SnapshotMergeOptions:
    """Options for merging new rows into a stream snapshot.

    Attributes:
        primary_key: Column used to deduplicate merged rows.
        just_new: Return only incoming rows instead of the merged frame.
        use_csv: Persist the snapshot as CSV instead of parquet.
        coerce_types: Cast merged columns to the incoming dtypes.
        localize_datetimes: Tag naive snapshot datetime columns as UTC.
        overwrite: Replace the snapshot with incoming rows.
    """

    primary_key: str = DEFAULT_PRIMARY_KEY
    just_new: bool = False
    use_csv: bool = False
    coerce_types: bool = False
    localize_datetimes: bool = False
    overwrite: bool = False


@dataclass(frozen=True)
class ExportOptions:
    """Options for exporting a frame to the output directory.

    Attributes:
        export_format: Target format; config default when omitted.
        keys: Primary keys for singer output; catalog keys when omitted.
        allow_objects: Keep nested values as objects in singer output.
        schema: Explicit singer schema.
        reserved_variables: Prefix template variables that win over tenant metadata.
    """

    export_format: str | None = None
    keys: tuple[str, ...] | None = None
    allow_objects: bool = True
    schema: SingerSchema | None = None
    reserved_variables: dict[str, str] = field(default_factory=dict)
