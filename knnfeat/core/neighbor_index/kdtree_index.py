"""
Exact kd-tree neighbor index backed by scipy.
"""

import numpy as np
from scipy.spatial import cKDTree

from .base_neighbor_index import BaseNeighborIndex


class KDTreeNeighborIndex(BaseNeighborIndex):
    """
    Neighbor index over a scipy cKDTree (Euclidean, exact search).
    """
    def __init__(self, reference, leafsize: int = 16):
        super().__init__(reference)
        # Empty pools are rejected at query time
        self.tree = cKDTree(self.reference, leafsize=leafsize) if self.n_reference else None

    def _query(self, queries, k):
        dists, _ = self.tree.query(queries, k=k)
        # cKDTree drops the neighbor axis when k == 1
        return np.asarray(dists, dtype=float).reshape(queries.shape[0], k)
