"""Decoded value helpers for singer output.

This module normalizes individual cell values: it recognizes nested
structures, converts embedded date/time objects to ISO-8601 strings,
and decodes JSON-encoded cells back into structures.
"""

from __future__ import annotations

from datetime import date, datetime, time
import json
from typing import Any, Mapping

import numpy as np
import pandas as pd

from core.logging_config import get_logger
from core.types import SingerSchema

_LOGGER = get_logger(__name__)
_STRUCTURED_SCHEMA_TYPES = ("object", "array")


def is_sequence(value: Any) -> bool:
    """Return whether a cell holds an array-like value."""
    return isinstance(value, (list, tuple, np.ndarray))


def is_mapping(value: Any) -> bool:
    """Return whether a cell holds an object-like value."""
    return isinstance(value, Mapping)


def is_structured(value: Any) -> bool:
    """Return whether a cell holds an array or object."""
    return is_sequence(value) or is_mapping(value)


def is_missing(value: Any) -> bool:
    """Return whether a cell is null (None, NaN, NaT, or NA).

    Structured values are never missing, even when empty.
    """
    if value is None:
        return True
    if is_structured(value):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def deep_convert_datetimes(value: Any) -> Any:
    """Recursively convert date/time objects to ISO-8601 strings.

    Numpy scalars and arrays are unwrapped into plain Python values and
    nested nulls (NaN, NaT, NA) become ``None`` so the result is strict JSON.

    Args:
        value: Cell value, possibly nested.

    Returns:
        Value with the same shape and no date/time objects.
    """
    if is_mapping(value):
        return {key: deep_convert_datetimes(child) for key, child in value.items()}
    if is_sequence(value):
        return [deep_convert_datetimes(child) for child in value]
    if is_missing(value):
        return None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, np.datetime64):
        return pd.Timestamp(value).isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def parse_objs(value: Any) -> Any:
    """Decode a JSON-encoded string cell.

    Args:
        value: Cell value.

    Returns:
        Decoded structure, or the original value when it is not a string
        or not valid JSON.
    """
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


def parse_df_cols(frame: pd.DataFrame, schema: SingerSchema) -> pd.DataFrame:
    """Decode string cells in columns the schema declares as object or array.

    Args:
        frame: Input frame.
        schema: Root schema whose ``properties`` describe the columns.

    Returns:
        Copy of the frame with structured columns decoded.
    """
    properties = schema.get("properties") or {}
    parsed_frame = frame.copy()
    for column in frame.columns:
        if not _declares_structure(properties.get(column)):
            continue
        try:
            parsed_frame[column] = frame[column].map(parse_objs).astype(object)
        except (TypeError, ValueError) as error:
            _LOGGER.warning("column_decode_failed", column=str(column), error=str(error))
    return parsed_frame


def _declares_structure(column_schema: Any) -> bool:
    if not isinstance(column_schema, Mapping):
        return False
    declared_type = column_schema.get("type", [])
    declared_types = declared_type if isinstance(declared_type, list) else [declared_type]
    return any(item in _STRUCTURED_SCHEMA_TYPES for item in declared_types)
