"""
PAGERANK

Power iteration over the sparse link matrix of a LinkGraph.

    PR(i) = (1-d)/N + d * (SUM(PR(j) / L(j)) + D/N)

Where:
    d = damping factor
    N = total number of pages
    PR(j) = PageRank of page j that links to i
    L(j) = number of distinct outlinks from page j
    D = total rank held by pages with no outlinks (spread evenly)
"""

import logging
from typing import List, Tuple

import numpy as np
from scipy.sparse import csr_matrix
from tqdm import tqdm

from .config import Config
from .link_graph import LinkGraph

logger = logging.getLogger(__name__)


def build_link_matrix(graph: LinkGraph) -> Tuple[csr_matrix, np.ndarray]:
    """
    Build the column-stochastic link matrix.

    Matrix structure:
    - Rows = target pages (who receives the rank)
    - Cols = source pages (who distributes the rank)
    - Value = 1/outlinks, duplicate links counted once

    Returns:
        matrix: sparse CSR matrix, indexed like graph.page_ids
        dangling: boolean mask of pages without outlinks
    """
    n = graph.num_pages
    source_idx = np.searchsorted(graph.page_ids, graph.sources)
    target_idx = np.searchsorted(graph.page_ids, graph.targets)

    # Drop duplicate (source, target) pairs
    if len(source_idx):
        pairs = np.unique(source_idx * n + target_idx)
        source_idx, target_idx = np.divmod(pairs, n)

    outlink_counts = np.bincount(source_idx, minlength=n)
    weights = 1.0 / outlink_counts[source_idx]

    matrix = csr_matrix((weights, (target_idx, source_idx)), shape=(n, n), dtype=np.float64)
    dangling = outlink_counts == 0

    logger.info(f"Matrix shape: {matrix.shape}, non-zero entries: {matrix.nnz:,}, "
                f"dangling pages: {int(dangling.sum()):,}")
    return matrix, dangling


def calculate_pagerank(matrix: csr_matrix, dangling: np.ndarray, config: Config) -> np.ndarray:
    """Run power iteration until converged or max_iterations; scores sum to 1."""
    n = matrix.shape[0]
    if n == 0:
        return np.zeros(0, dtype=np.float64)

    damping = config.damping_factor
    rank = np.full(n, 1.0 / n, dtype=np.float64)
    teleport = (1 - damping) / n

    for iteration in tqdm(range(config.max_iterations), desc="Iterations",
                          disable=not config.show_progress):
        prev_rank = rank

        dangling_mass = rank[dangling].sum()
        rank = damping * (matrix.dot(rank) + dangling_mass / n) + teleport
        rank = rank / rank.sum()

        delta = np.abs(rank - prev_rank).sum()

        if iteration % 10 == 0:
            logger.info(f"Iteration {iteration}: delta = {delta:.8f}")

        if delta < config.convergence_threshold:
            logger.info(f"Converged after {iteration + 1} iterations (delta = {delta:.8f})")
            break

    return rank


def rank_pages(graph: LinkGraph, config: Config) -> List[Tuple[int, float]]:
    """(page_id, score) for every page, highest score first."""
    if graph.num_pages == 0:
        return []
    matrix, dangling = build_link_matrix(graph)
    scores = calculate_pagerank(matrix, dangling, config)
    # Sort by score descending, page id ascending on ties
    order = np.lexsort((graph.page_ids, -scores))
    return [(int(graph.page_ids[i]), float(scores[i])) for i in order]
