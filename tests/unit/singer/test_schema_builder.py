"""Unit tests for recursive schema construction."""

from __future__ import annotations

import numpy as np

from singer.schema_builder import generic_array_schema, leaf_schema, to_singer_schema


def test_to_singer_schema_describes_nested_objects() -> None:
    """Mappings should recurse into one property per key."""
    schema = to_singer_schema({"id": 7, "owner": {"name": "ada", "score": 1.5}})

    assert schema == {
        "type": ["object", "null"],
        "properties": {
            "id": {"type": ["integer", "null"]},
            "owner": {
                "type": ["object", "null"],
                "properties": {
                    "name": {"type": ["string", "null"]},
                    "score": {"type": ["number", "null"]},
                },
            },
        },
    }


def test_to_singer_schema_uses_first_list_element() -> None:
    """Array items should be typed from the first element only."""
    schema = to_singer_schema([True, "later", 3])

    assert schema == {"type": ["array", "null"], "items": {"type": ["boolean", "null"]}}


def test_to_singer_schema_types_empty_list_items_as_string() -> None:
    """Empty arrays should still carry an items descriptor."""
    schema = to_singer_schema([])

    assert schema["items"] == {"type": ["string", "null"]}


def test_to_singer_schema_treats_integral_floats_as_integers() -> None:
    """Floats without a fractional part should become integer leaves."""
    assert to_singer_schema(4.0) == {"type": ["integer", "null"]}


def test_to_singer_schema_handles_numpy_values() -> None:
    """Numpy arrays and scalars should follow the same variant rules."""
    schema = to_singer_schema(np.array([np.int64(3)]))

    assert schema == {"type": ["array", "null"], "items": {"type": ["integer", "null"]}}


def test_to_singer_schema_defaults_to_string_for_null() -> None:
    """Null and unrecognized values should become string leaves."""
    assert to_singer_schema(None) == {"type": ["string", "null"]}


def test_leaf_schema_returns_independent_copies() -> None:
    """Mutating a returned leaf must not leak into later calls."""
    first = leaf_schema("date-time")
    first["type"].append("object")

    assert leaf_schema("date-time") == {"format": "date-time", "type": ["string", "null"]}


def test_generic_array_schema_allows_objects_and_strings() -> None:
    """Untyped arrays should accept object or string items."""
    assert generic_array_schema()["items"] == {"type": ["object", "string", "null"]}
