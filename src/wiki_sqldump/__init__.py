"""Typed row extraction from MySQL INSERT dumps, and PageRank over Wikipedia link tables."""

from .errors import ReaderClosedError, SqlSyntaxError
from .sql_reader import SqlReader
from .tuple_parser import ParseResult, State, parse_tuples, scan_tuples
from .values import NULL, Batch, Float, Integer, Null, Row, Text, Value, format_tuples

__all__ = [
    "ReaderClosedError",
    "SqlSyntaxError",
    "SqlReader",
    "ParseResult",
    "State",
    "parse_tuples",
    "scan_tuples",
    "NULL",
    "Batch",
    "Float",
    "Integer",
    "Null",
    "Row",
    "Text",
    "Value",
    "format_tuples",
]
