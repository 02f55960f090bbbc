"""Column dtype classification.

This module maps a frame column's declared dtype onto a singer primitive
category. Object-like dtypes classify as ``None`` so callers fall back to
sampling the actual values.
"""

from __future__ import annotations

from typing import Any

DATE_TIME = "date-time"
NUMBER = "number"
INTEGER = "integer"
BOOLEAN = "boolean"
STRING = "string"

_DTYPE_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("date", "time"), DATE_TIME),
    (("float", "double"), NUMBER),
    (("int",), INTEGER),
    (("bool",), BOOLEAN),
    (("str", "utf8"), STRING),
)


def classify_dtype(dtype: Any) -> str | None:
    """Classify a declared dtype into a primitive category.

    Args:
        dtype: A pandas/numpy dtype or its string name.

    Returns:
        Primitive category name, or ``None`` for object-like dtypes.
    """
    dtype_name = str(dtype).lower()
    for keywords, category in _DTYPE_KEYWORDS:
        if any(keyword in dtype_name for keyword in keywords):
            return category
    return None


def is_datetime_dtype(dtype: Any) -> bool:
    """Return whether a dtype denotes a calendar or time type."""
    return classify_dtype(dtype) == DATE_TIME
