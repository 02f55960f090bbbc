"""Unit tests for cell value helpers."""

from __future__ import annotations

from datetime import date, datetime

import numpy as np
import pandas as pd

from singer.value_codec import deep_convert_datetimes, is_missing, parse_df_cols, parse_objs


def test_deep_convert_datetimes_rewrites_nested_dates() -> None:
    """Dates inside objects and arrays should become ISO strings."""
    value = {"at": datetime(2024, 1, 2, 3, 4, 5), "days": [date(2024, 5, 6)]}

    converted = deep_convert_datetimes(value)

    assert converted == {"at": "2024-01-02T03:04:05", "days": ["2024-05-06"]}


def test_deep_convert_datetimes_unwraps_numpy_values() -> None:
    """Numpy arrays and scalars should become plain Python values."""
    converted = deep_convert_datetimes({"ids": np.array([1, 2]), "score": np.float64(0.5)})

    assert converted == {"ids": [1, 2], "score": 0.5}


def test_deep_convert_datetimes_maps_nat_to_none() -> None:
    """Missing timestamps should not render as the string NaT."""
    assert deep_convert_datetimes([pd.NaT]) == [None]


def test_deep_convert_datetimes_maps_nested_nan_to_none() -> None:
    """Nested NaN values should become None so output stays strict JSON."""
    converted = deep_convert_datetimes({"xs": np.array([1.0, np.nan]), "y": [float("nan")]})

    assert converted == {"xs": [1.0, None], "y": [None]}


def test_is_missing_never_treats_structures_as_null() -> None:
    """Empty containers are values, not nulls."""
    assert is_missing([]) is False and is_missing(float("nan")) is True


def test_parse_objs_keeps_invalid_json_unchanged() -> None:
    """Undecodable strings should be returned as-is."""
    assert parse_objs("{not json") == "{not json"


def test_parse_df_cols_decodes_only_structured_columns() -> None:
    """Only object or array columns in the schema should be decoded."""
    frame = pd.DataFrame({"tags": ['["a"]', "oops"], "note": ['["keep"]', None]})
    schema = {
        "type": ["object", "null"],
        "properties": {"tags": {"type": ["array", "null"], "items": {}}, "note": {"type": "string"}},
    }

    parsed = parse_df_cols(frame, schema)

    assert list(parsed["tags"]) == [["a"], "oops"] and parsed["note"][0] == '["keep"]'
