"""
WIKIPEDIA LINK GRAPH

Builds a page -> page edge list from three dump tables:

    page        (page_id, page_namespace, page_title, ...)
    linktarget  (lt_id, lt_namespace, lt_title)
    pagelinks   (pl_from, pl_from_namespace, pl_target_id)

Titles are resolved to page ids in the configured namespace. Links whose
source or target is not a known page are dropped and counted.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable

import numpy as np
from tqdm import tqdm

from .values import Batch, Integer, Row, Text

logger = logging.getLogger(__name__)


@dataclass
class LinkGraph:
    """Edges between page ids, plus every page id that can hold rank"""
    page_ids: np.ndarray
    sources: np.ndarray
    targets: np.ndarray
    titles: Dict[int, str] = field(default_factory=dict)

    @property
    def num_pages(self) -> int:
        return len(self.page_ids)

    @property
    def num_links(self) -> int:
        return len(self.sources)


def _column(row: Row, index: int, kind, table: str, column: str):
    """Unwrap row[index], checking it holds the expected value variant."""
    if index >= len(row):
        raise ValueError(f"`{table}` row has {len(row)} columns, no {column} at position {index}")
    value = row[index]
    if not isinstance(value, kind):
        raise ValueError(f"`{table}`.{column}: expected {kind.__name__}, got {value!r}")
    return value.value


def _batches(reader: Iterable[Batch], desc: str, show_progress: bool):
    return tqdm(reader, desc=desc, unit=" stmts", disable=not show_progress)


# ============================================================================
# TABLE READERS
# ============================================================================

def read_page_titles(reader: Iterable[Batch], namespace: int = 0,
                     show_progress: bool = True) -> Dict[str, int]:
    """Map page_title -> page_id for pages in namespace."""
    title_to_id: Dict[str, int] = {}
    skipped = 0

    for batch in _batches(reader, "Reading page", show_progress):
        for row in batch:
            page_id = _column(row, 0, Integer, "page", "page_id")
            page_namespace = _column(row, 1, Integer, "page", "page_namespace")
            if page_namespace != namespace:
                skipped += 1
                continue
            title_to_id[_column(row, 2, Text, "page", "page_title")] = page_id

    logger.info(f"Loaded {len(title_to_id):,} page titles (skipped {skipped:,} in other namespaces)")
    return title_to_id


def read_link_targets(reader: Iterable[Batch], title_to_id: Dict[str, int],
                      namespace: int = 0, show_progress: bool = True) -> Dict[int, int]:
    """Map lt_id -> page_id for link targets that resolve to a known page."""
    target_to_page: Dict[int, int] = {}
    unresolved = 0

    for batch in _batches(reader, "Reading linktarget", show_progress):
        for row in batch:
            lt_id = _column(row, 0, Integer, "linktarget", "lt_id")
            if _column(row, 1, Integer, "linktarget", "lt_namespace") != namespace:
                continue
            page_id = title_to_id.get(_column(row, 2, Text, "linktarget", "lt_title"))
            if page_id is None:
                unresolved += 1
                continue
            target_to_page[lt_id] = page_id

    logger.info(f"Resolved {len(target_to_page):,} link targets ({unresolved:,} titles not found)")
    return target_to_page


def read_links(reader: Iterable[Batch], target_to_page: Dict[int, int],
               title_to_id: Dict[str, int], namespace: int = 0,
               show_progress: bool = True) -> LinkGraph:
    """Collect pagelinks rows into a LinkGraph over the pages in title_to_id."""
    known_pages = set(title_to_id.values())
    sources = []
    targets = []
    links_skipped = 0

    for batch in _batches(reader, "Reading pagelinks", show_progress):
        for row in batch:
            pl_from = _column(row, 0, Integer, "pagelinks", "pl_from")
            pl_from_namespace = _column(row, 1, Integer, "pagelinks", "pl_from_namespace")
            target_id = target_to_page.get(_column(row, 2, Integer, "pagelinks", "pl_target_id"))

            if pl_from_namespace != namespace or pl_from not in known_pages or target_id is None:
                links_skipped += 1
                continue
            sources.append(pl_from)
            targets.append(target_id)

    logger.info(f"Links kept: {len(sources):,}")
    if links_skipped > 0:
        logger.info(f"Links skipped (unknown source or target): {links_skipped:,}")

    return LinkGraph(
        page_ids=np.array(sorted(known_pages), dtype=np.int64),
        sources=np.array(sources, dtype=np.int64),
        targets=np.array(targets, dtype=np.int64),
        titles={page_id: title for title, page_id in title_to_id.items()},
    )
