"""
SQL DUMP READER

Pulls `INSERT INTO `<table>` VALUES (...),...;` statements out of a
line-oriented dump and parses each one into a batch of rows. Every other line
(comments, DDL, other tables, LOCK/UNLOCK) is skipped without being kept.
"""

import logging
from typing import Iterable, Iterator, Optional, TextIO, Union

from .errors import ReaderClosedError, SqlSyntaxError
from .tuple_parser import parse_tuples
from .values import Batch

logger = logging.getLogger(__name__)

LineSource = Union[TextIO, Iterable[str]]

COMMENT_MARKER = "--"


def _strip_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class SqlReader:
    """
    Reads batches of insertion tuples for one table.

    read_insertion_tuples() returns the rows of the next matching statement,
    or None once the source is exhausted (and on every call after that).

    close() closes the source the first time it is called. Later calls do
    nothing, so a failure from the source's close() is reported once.
    Reading after close() raises ReaderClosedError, an OSError.
    """

    def __init__(self, source: LineSource, table_name: str):
        self.table_name = table_name
        self.match_prefix = f"INSERT INTO `{table_name}` VALUES "
        self.match_suffix = ";"

        self._source = source
        if hasattr(source, "readline"):
            # File-like: readline() gives "" at end of stream
            self._next_line = lambda: source.readline() or None
        else:
            lines = iter(source)
            self._next_line = lambda: next(lines, None)

        self._exhausted = False
        self._closed = False
        self.lines_read = 0
        self.statements_matched = 0

    def read_insertion_tuples(self) -> Optional[Batch]:
        if self._closed:
            raise ReaderClosedError("I/O operation on closed SqlReader")
        if self._exhausted:
            return None

        prefix = self.match_prefix
        suffix = self.match_suffix
        while True:
            raw = self._next_line()
            if raw is None:
                self._exhausted = True
                logger.info(f"Reached end of dump for `{self.table_name}`: "
                            f"{self.statements_matched:,} statements in {self.lines_read:,} lines")
                return None
            self.lines_read += 1

            line = _strip_terminator(raw)
            if line == "" or line.startswith(COMMENT_MARKER):
                continue
            if not line.startswith(prefix) or not line.endswith(suffix):
                continue
            payload = line[len(prefix):len(line) - len(suffix)]

            self.statements_matched += 1
            try:
                rows = parse_tuples(payload)
            except SqlSyntaxError as e:
                e.line_number = self.lines_read
                logger.error(f"Malformed INSERT for `{self.table_name}`: {e}")
                raise
            logger.debug(f"Line {self.lines_read}: {len(rows)} rows")
            return rows

    def __iter__(self) -> Iterator[Batch]:
        while True:
            rows = self.read_insertion_tuples()
            if rows is None:
                return
            yield rows

    def close(self):
        if self._closed:
            return
        self._closed = True
        close = getattr(self._source, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
