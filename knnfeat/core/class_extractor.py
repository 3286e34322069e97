"""
Per-class, per-fold neighbor distance features.

One call handles one work item: it restricts the reference pool to the
training rows of a single class that are outside the held-out fold, queries
the held-out rows (or the test rows) against it, and turns the sorted
distances into cumulative sums.
"""

import logging
from typing import Hashable, Optional

import numpy as np

from .config import DEFAULT_CHUNK_SIZE, DEFAULT_TREE_TYPE
from .data_types import FeatureBlock
from .exceptions import InsufficientNeighborsError
from .neighbor_index import create_neighbor_index

logger = logging.getLogger(__name__)


def reference_rows(labels: np.ndarray, class_label: Hashable,
                   held_out_idx: Optional[np.ndarray] = None) -> np.ndarray:
    """Indices of rows labelled ``class_label`` that are not held out."""
    in_class = labels == class_label
    if held_out_idx is not None and len(held_out_idx):
        in_class[held_out_idx] = False
    return np.flatnonzero(in_class)


def cumulative_distances(dist_mat: np.ndarray) -> np.ndarray:
    """Column j becomes the sum of the j+1 smallest distances of the row."""
    return np.cumsum(dist_mat, axis=1)


def extract_class_block(x: np.ndarray, labels: np.ndarray, class_label: Hashable,
                        held_out_idx: Optional[np.ndarray], k: int,
                        queries: Optional[np.ndarray] = None,
                        fold_id: Optional[Hashable] = None,
                        tree_type: str = DEFAULT_TREE_TYPE,
                        chunk_size: int = DEFAULT_CHUNK_SIZE) -> FeatureBlock:
    """
    Cumulative k-NN distances from query rows to one class's training rows.

    Args:
        x: Training matrix [n_train, D]
        labels: Training labels [n_train]
        class_label: Class whose rows form the reference pool
        held_out_idx: Training rows of the held-out fold. They are the queries
            when ``queries`` is None and are always excluded from the pool.
        k: Number of neighbors
        queries: External query matrix (test pass); None for the training pass
        fold_id: Held-out fold id, only used in error messages
        tree_type: Neighbor index backend
        chunk_size: Query chunk size for the brute-force backend

    Returns:
        FeatureBlock whose row_index holds the original position of each query
    """
    ref_idx = reference_rows(labels, class_label, held_out_idx)
    if len(ref_idx) < k:
        raise InsufficientNeighborsError(len(ref_idx), k, class_label=class_label, fold_id=fold_id)

    if queries is None:
        row_index = np.asarray(held_out_idx, dtype=int)
        query_mat = x[row_index]
    else:
        row_index = np.arange(queries.shape[0])
        query_mat = queries

    index = create_neighbor_index(x[ref_idx], tree_type=tree_type, chunk_size=chunk_size)
    dist_mat = index.query(query_mat, k)

    logger.debug(f"Class {class_label!r}, fold {fold_id!r}: {len(row_index)} queries "
                 f"against {len(ref_idx)} reference rows")
    return FeatureBlock(row_index=row_index, values=cumulative_distances(dist_mat))


def check_reference_pools(labels: np.ndarray, classes, fold_assignment, k: int) -> None:
    """
    Make sure every (class, fold) pool and every full class pool holds at least k rows.

    Raises InsufficientNeighborsError for the first starved pool, before any
    neighbor query runs.
    """
    for class_label in classes:
        in_class = labels == class_label
        n_class = int(np.sum(in_class))
        if n_class < k:
            raise InsufficientNeighborsError(n_class, k, class_label=class_label)
        for fold_id in fold_assignment.levels:
            available = n_class - int(np.sum(in_class & (fold_assignment.fold_ids == fold_id)))
            if available < k:
                raise InsufficientNeighborsError(available, k, class_label=class_label, fold_id=fold_id)
