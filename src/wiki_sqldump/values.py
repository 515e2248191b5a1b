"""
Column values carried by INSERT tuples.

A value is exactly one of Integer, Float, Text or Null. Rows are plain tuples
of values, batches are lists of rows.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

import numpy as np

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


class Null:
    """SQL NULL. Use the NULL singleton rather than instantiating."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NULL"

    def __reduce__(self):
        return (Null, ())


NULL = Null()

Value = Union[Integer, Float, Text, Null]
Row = Tuple[Value, ...]
Batch = List[Row]


# ============================================================================
# ENCODING (inverse of tuple_parser.parse_tuples)
# ============================================================================

def encode_value(value: Value) -> str:
    """Render one value the way mysqldump writes it inside a VALUES tuple."""
    if isinstance(value, Integer):
        if not INT64_MIN <= value.value <= INT64_MAX:
            raise ValueError(f"Integer out of 64-bit range: {value.value}")
        return str(value.value)
    if isinstance(value, Float):
        if not math.isfinite(value.value):
            raise ValueError(f"Cannot encode non-finite float: {value.value}")
        # Positional notation only; the grammar has no exponent marker
        return np.format_float_positional(value.value, unique=True, trim="0")
    if isinstance(value, Text):
        escaped = value.value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    if isinstance(value, Null):
        return "NULL"
    raise TypeError(f"Not a SQL value: {value!r}")


def format_tuples(rows: Iterable[Row]) -> str:
    """Serialize rows as a VALUES payload: (..),(..),..."""
    return ",".join(
        "(" + ",".join(encode_value(v) for v in row) + ")"
        for row in rows
    )
