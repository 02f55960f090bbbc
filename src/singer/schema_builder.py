"""Singer schema node construction.

This module holds the fixed leaf schemas and the recursive structural
inference used for nested values. Inference dispatches over the decoded
value variants: null, bool, int, float, str, list, and mapping.
"""

from __future__ import annotations

import copy
import numbers
from typing import Any

import numpy as np

from core.types import SingerSchema
from singer.value_classifier import BOOLEAN, DATE_TIME, INTEGER, NUMBER, STRING
from singer.value_codec import is_mapping, is_sequence

_LEAF_SCHEMAS: dict[str, SingerSchema] = {
    NUMBER: {"type": ["number", "null"]},
    INTEGER: {"type": ["integer", "null"]},
    BOOLEAN: {"type": ["boolean", "null"]},
    STRING: {"type": ["string", "null"]},
    DATE_TIME: {"format": "date-time", "type": ["string", "null"]},
}

GENERIC_ARRAY_SCHEMA: SingerSchema = {
    "type": ["array", "null"],
    "items": {"type": ["object", "string", "null"]},
}


def leaf_schema(category: str) -> SingerSchema:
    """Return a fresh primitive leaf schema for a category.

    Args:
        category: Primitive category from the value classifier.

    Returns:
        Leaf schema unioned with ``null``.
    """
    return copy.deepcopy(_LEAF_SCHEMAS[category])


def string_schema() -> SingerSchema:
    """Return a fresh nullable string leaf."""
    return leaf_schema(STRING)


def generic_array_schema() -> SingerSchema:
    """Return the array schema used when item typing is disabled."""
    return copy.deepcopy(GENERIC_ARRAY_SCHEMA)


def array_schema(items: SingerSchema) -> SingerSchema:
    """Wrap an item schema in a nullable array node."""
    return {"type": ["array", "null"], "items": items}


def object_schema(properties: dict[str, SingerSchema] | None = None) -> SingerSchema:
    """Build a nullable object node with the given properties."""
    return {"type": ["object", "null"], "properties": properties or {}}


def to_singer_schema(value: Any) -> SingerSchema:
    """Infer a schema node from one decoded value.

    Mappings recurse per key, lists take the schema of their first element,
    and scalars map onto primitive leaves. Strings, nulls, and anything
    unrecognized become string leaves.

    Args:
        value: Decoded value to describe.

    Returns:
        Schema node for the value.
    """
    if is_mapping(value):
        return object_schema({str(key): to_singer_schema(child) for key, child in value.items()})
    if is_sequence(value):
        if len(value) > 0:
            return array_schema(to_singer_schema(value[0]))
        return array_schema(string_schema())
    # bool subclasses int, so it is matched first.
    if isinstance(value, (bool, np.bool_)):
        return leaf_schema(BOOLEAN)
    if isinstance(value, numbers.Integral):
        return leaf_schema(INTEGER)
    if isinstance(value, numbers.Real):
        if float(value).is_integer():
            return leaf_schema(INTEGER)
        return leaf_schema(NUMBER)
    return string_schema()
