"""
Neighbor index package for knnfeat.

This package wraps exact k-nearest-neighbor search behind a single interface
so the extraction pipeline does not depend on the search algorithm.
"""

import numpy as np

from ..config import DEFAULT_CHUNK_SIZE, DEFAULT_TREE_TYPE
from .base_neighbor_index import BaseNeighborIndex
from .brute_force_index import BruteForceNeighborIndex
from .kdtree_index import KDTreeNeighborIndex

TREE_TYPES = {
    'kd': KDTreeNeighborIndex,
    'brute': BruteForceNeighborIndex,
}


def create_neighbor_index(reference, tree_type: str = DEFAULT_TREE_TYPE,
                          chunk_size: int = DEFAULT_CHUNK_SIZE) -> BaseNeighborIndex:
    """
    Build a neighbor index of the requested type over ``reference``.

    Args:
        reference: Reference matrix [N, D]
        tree_type: 'kd' (scipy cKDTree) or 'brute' (numpy exhaustive search)
        chunk_size: Query chunk size for the brute-force backend
    """
    if tree_type not in TREE_TYPES:
        raise ValueError(f"Tree type '{tree_type}' not supported. "
                         f"Available types: {list(TREE_TYPES)}")
    if tree_type == 'brute':
        return BruteForceNeighborIndex(reference, chunk_size=chunk_size)
    return TREE_TYPES[tree_type](reference)


def query_neighbors(reference, queries, k: int, tree_type: str = DEFAULT_TREE_TYPE,
                    chunk_size: int = DEFAULT_CHUNK_SIZE) -> np.ndarray:
    """Ascending distances [n_queries, k] from each query row to its k nearest reference rows."""
    return create_neighbor_index(reference, tree_type, chunk_size).query(queries, k)


__all__ = [
    'BaseNeighborIndex',
    'KDTreeNeighborIndex',
    'BruteForceNeighborIndex',
    'TREE_TYPES',
    'create_neighbor_index',
    'query_neighbors',
]
