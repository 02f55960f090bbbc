"""Singer catalog access.

This module reads ``catalog.json`` and answers per-stream schema,
primary key, and read-dtype questions for the rest of the package.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from core.constants import CATALOG_FILE_NAME
from core.errors import CatalogError
from core.logging_config import get_logger
from core.types import SingerSchema

_LOGGER = get_logger(__name__)
_UNSET = object()

DATETIME_DTYPE = "datetime"
"""Marker dtype for columns that must be parsed as dates after reading."""


class CatalogReader:
    """Lazy reader over a singer catalog file."""

    def __init__(self, root_dir: Path) -> None:
        """Create a catalog reader.

        Args:
            root_dir: Directory containing ``catalog.json``.
        """
        self._catalog_path = Path(root_dir) / CATALOG_FILE_NAME
        self._catalog: Any = _UNSET

    @property
    def catalog(self) -> dict[str, Any] | None:
        """Parsed catalog payload, or ``None`` when absent or unreadable."""
        if self._catalog is _UNSET:
            self._catalog = _read_catalog_file(self._catalog_path)
        return self._catalog

    def find_stream(self, stream: str) -> dict[str, Any] | None:
        """Find a catalog stream by ``stream`` or ``tap_stream_id``.

        Args:
            stream: Stream name or tap stream id.

        Returns:
            Catalog stream entry, or ``None`` when not declared.
        """
        catalog = self.catalog
        if not catalog:
            return None
        for entry in catalog.get("streams", []):
            if entry.get("stream") == stream or entry.get("tap_stream_id") == stream:
                return entry
        return None

    def get_schema(self, stream: str) -> SingerSchema:
        """Return the declared root schema for a stream.

        Array properties without ``items`` get an empty items descriptor.

        Args:
            stream: Stream name or tap stream id.

        Returns:
            Root schema with ``type`` and ``properties``.

        Raises:
            CatalogError: If there is no catalog or the stream is undeclared.
        """
        if not self.catalog:
            raise CatalogError(
                f"No catalog found at {self._catalog_path}. "
                "Provide catalog.json or disable catalog schema mode."
            )
        entry = self.find_stream(stream)
        if entry is None:
            raise CatalogError(
                f"No schema found in catalog for stream {stream}. "
                "Declare the stream in catalog.json or pass an explicit schema."
            )
        declared = entry.get("schema") or {}
        properties = copy.deepcopy(declared.get("properties") or {})
        for prop in properties.values():
            if isinstance(prop, dict) and _includes_type(prop.get("type"), "array"):
                if not prop.get("items"):
                    prop["items"] = {}
        return {"type": declared.get("type") or ["object", "null"], "properties": properties}

    def get_pk(self, stream: str) -> list[str]:
        """Return the table key properties declared for a stream."""
        entry = self.find_stream(stream)
        if entry is None:
            return []
        for metadata_entry in entry.get("metadata") or []:
            if metadata_entry.get("breadcrumb"):
                continue
            key_properties = (metadata_entry.get("metadata") or {}).get("table-key-properties")
            if isinstance(key_properties, list):
                return [str(key) for key in key_properties]
        return []

    def get_column_dtypes(self, stream: str, columns: Sequence[str]) -> dict[str, str]:
        """Map input columns onto pandas read dtypes from the catalog.

        Date-time columns map to :data:`DATETIME_DTYPE`; callers parse them
        after reading.

        Args:
            stream: Stream name or tap stream id.
            columns: Column headers of the input file.

        Returns:
            Column to dtype mapping, empty when the stream is undeclared.
        """
        entry = self.find_stream(stream)
        if entry is None:
            return {}
        declared = (entry.get("schema") or {}).get("properties") or {}
        return {column: _column_dtype(declared.get(column)) for column in columns}


def _read_catalog_file(catalog_path: Path) -> dict[str, Any] | None:
    """Read a catalog file, treating failures as an absent catalog.

    Args:
        catalog_path: Catalog JSON path.

    Returns:
        Parsed catalog object, or ``None``.
    """
    if not catalog_path.exists():
        return None
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        _LOGGER.warning("catalog_read_failed", path=str(catalog_path), error=str(error))
        return None
    if not isinstance(payload, dict):
        _LOGGER.warning(
            "catalog_read_failed",
            path=str(catalog_path),
            error="expected JSON object at top level",
        )
        return None
    return payload


def _column_dtype(column_schema: Mapping[str, Any] | None) -> str:
    if not column_schema:
        return "object"
    any_of = column_schema.get("anyOf") or []
    if any_of:
        with_format = next((item for item in any_of if item.get("format")), None)
        column_schema = with_format or {"type": "object"}
    if column_schema.get("format") == "date-time":
        return DATETIME_DTYPE
    declared_type = column_schema.get("type")
    if declared_type:
        types = declared_type if isinstance(declared_type, list) else [declared_type]
        non_null = [item for item in types if item != "null"]
        if len(non_null) == 1:
            return {"integer": "Int64", "number": "float64", "boolean": "boolean"}.get(
                non_null[0], "object"
            )
    return "object"


def _includes_type(declared_type: Any, type_name: str) -> bool:
    if isinstance(declared_type, list):
        return type_name in declared_type
    return declared_type == type_name
