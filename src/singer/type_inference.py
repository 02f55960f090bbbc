"""Singer schema inference for frames.

This module derives a nested singer schema from a pandas frame. Declared
dtypes decide primitive columns; object columns are typed by sampling
their values, either as nested structures or as JSON strings.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Mapping

import pandas as pd

from core.constants import SINGER_DATETIME_FORMAT
from core.logging_config import get_logger
from core.types import SingerSchema
from singer.schema_builder import (
    array_schema,
    generic_array_schema,
    leaf_schema,
    object_schema,
    string_schema,
    to_singer_schema,
)
from singer.value_classifier import classify_dtype, is_datetime_dtype
from singer.value_codec import (
    deep_convert_datetimes,
    is_mapping,
    is_missing,
    is_sequence,
    is_structured,
)

_LOGGER = get_logger(__name__)


def build_singer_schema(
    frame: pd.DataFrame,
    allow_objects: bool,
    schema: SingerSchema | None = None,
    prefer_schema: bool = False,
    recursive_typing: bool = True,
) -> tuple[pd.DataFrame, SingerSchema]:
    """Infer the singer schema of a frame.

    Args:
        frame: Input frame; it is never mutated.
        allow_objects: Type nested columns as objects/arrays instead of
            serializing them to JSON strings.
        schema: Optional externally declared root schema.
        prefer_schema: Return ``schema`` verbatim without inference.
        recursive_typing: Merge every row of array columns to type their items.

    Returns:
        Pair of the output frame (datetime columns formatted, nested columns
        possibly serialized) and the root schema.
    """
    if schema is not None and prefer_schema:
        return frame, schema

    output_frame = frame.copy()
    properties: dict[str, SingerSchema] = {}
    for column in frame.columns:
        dtype = frame[column].dtype
        if is_datetime_dtype(dtype):
            _format_datetime_column(output_frame, column)
        category = classify_dtype(dtype)
        if category is not None:
            properties[column] = leaf_schema(category)
        elif not allow_objects:
            properties[column] = string_schema()
            _serialize_structured_column(output_frame, column)
        else:
            properties[column] = _infer_object_column(frame[column], recursive_typing)

    # Catalog-declared fields win over inferred ones; extra columns are kept.
    if schema is not None:
        properties.update(copy.deepcopy(dict(schema.get("properties") or {})))
    return output_frame, object_schema(properties)


def _format_datetime_column(frame: pd.DataFrame, column: Any) -> None:
    """Rewrite a datetime column as ISO-8601 strings in place.

    Args:
        frame: Frame being prepared for output.
        column: Datetime column name.
    """
    try:
        series = frame[column]
        if getattr(series.dt, "tz", None) is not None:
            series = series.dt.tz_convert("UTC")
        frame[column] = series.dt.strftime(SINGER_DATETIME_FORMAT)
    except (AttributeError, TypeError, ValueError) as error:
        _LOGGER.warning("datetime_column_conversion_failed", column=str(column), error=str(error))


def _serialize_structured_column(frame: pd.DataFrame, column: Any) -> None:
    """JSON-encode nested cells of an object column in place.

    When encoding fails the column keeps its structured values even though
    its schema says string.

    Args:
        frame: Frame being prepared for output.
        column: Object column name.
    """
    values = list(frame[column])
    if not any(is_structured(value) for value in values if not is_missing(value)):
        return
    try:
        serialized = [
            json.dumps(deep_convert_datetimes(value)) if is_structured(value) else value
            for value in values
        ]
    except (TypeError, ValueError) as error:
        _LOGGER.warning("object_column_serialization_failed", column=str(column), error=str(error))
        return
    frame[column] = pd.Series(serialized, index=frame.index, dtype=object)


def _infer_object_column(series: pd.Series, recursive_typing: bool) -> SingerSchema:
    """Infer a schema for a column holding nested values.

    Args:
        series: Object column.
        recursive_typing: Whether array items are typed across all rows.

    Returns:
        Column schema node.
    """
    values = [value for value in series if not is_missing(value)]
    if not values:
        return string_schema()
    first_value = values[0]
    if is_sequence(first_value):
        if not recursive_typing:
            return generic_array_schema()
        envelope = build_array_envelope(values)
        if _is_empty_envelope(envelope):
            return array_schema(string_schema())
        return array_schema(to_singer_schema(envelope))
    if is_mapping(first_value):
        # Only the first row shapes object columns.
        return to_singer_schema(first_value)
    return string_schema()


def build_array_envelope(rows: list[Any]) -> Any:
    """Merge the elements of every array row into one structural envelope.

    Object elements are unioned key by key; any other element replaces the
    envelope as-is, so scalar arrays yield a scalar envelope. Null elements
    never replace an envelope seen earlier.

    Args:
        rows: Non-null cells of an array column.

    Returns:
        Merged envelope, ``None`` when no row has elements.
    """
    envelope: Any = None
    for row in rows:
        if not is_sequence(row):
            continue
        for element in row:
            envelope = _merge_element(envelope, element)
    return envelope


def _merge_element(envelope: Any, element: Any) -> Any:
    if envelope is not None and is_missing(element):
        return envelope
    if not is_mapping(element):
        return element
    base = envelope if is_mapping(envelope) else {}
    return _merge_mappings(base, element)


def _merge_mappings(base: Mapping[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        existing = merged.get(key)
        if is_mapping(existing) and is_mapping(value):
            merged[key] = _merge_mappings(existing, value)
        elif is_missing(value) and key in merged:
            continue
        else:
            merged[key] = value
    return merged


def _is_empty_envelope(envelope: Any) -> bool:
    if envelope is None:
        return True
    return is_structured(envelope) and len(envelope) == 0
