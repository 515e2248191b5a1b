"""Open Wikimedia SQL dumps (plain, .gz or .bz2) as text line sources."""

import bz2
import gzip
import logging
import os
from typing import TextIO

from .sql_reader import SqlReader

logger = logging.getLogger(__name__)


def format_bytes(bytes_val):
    """Format bytes into human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_val < 1024.0:
            return f"{bytes_val:.2f} {unit}"
        bytes_val /= 1024.0
    return f"{bytes_val:.2f} PB"


def open_dump(path) -> TextIO:
    """
    Open a dump file for line reading, decompressing on the fly by suffix.

    newline="" leaves line terminators untranslated; SqlReader strips them.
    """
    path = os.fspath(path)
    if path.endswith(".gz"):
        opener = gzip.open
    elif path.endswith(".bz2"):
        opener = bz2.open
    else:
        opener = open

    f = opener(path, "rt", encoding="utf-8", newline="")
    logger.info(f"Opened {path} ({format_bytes(os.path.getsize(path))} on disk)")
    return f


def open_table(path, table_name: str) -> SqlReader:
    """SqlReader over the INSERT statements for table_name in the dump at path."""
    return SqlReader(open_dump(path), table_name)
