"""
Brute-force neighbor index for knnfeat.

Computes all query-to-reference Euclidean distances with numpy and keeps the
k smallest per row. Queries are processed in chunks to bound the size of the
distance matrix held in memory.
"""

import logging

import numpy as np

from ..config import DEFAULT_CHUNK_SIZE
from .base_neighbor_index import BaseNeighborIndex

logger = logging.getLogger(__name__)


class BruteForceNeighborIndex(BaseNeighborIndex):
    """
    Exhaustive neighbor search. Useful for small or high-dimensional data where
    a kd-tree degenerates to a linear scan anyway.
    """
    def __init__(self, reference, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(reference)
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.chunk_size = int(chunk_size)
        self._ref_sq = np.sum(self.reference * self.reference, axis=1)  # [N]

    def _query(self, queries, k):
        total = queries.shape[0]
        if total <= self.chunk_size:
            return self._query_single_chunk(queries, k)

        logger.debug(f"Running chunked brute-force query with chunk_size={self.chunk_size} "
                     f"for {total} queries")
        chunks = []
        for start_idx in range(0, total, self.chunk_size):
            end_idx = min(start_idx + self.chunk_size, total)
            chunks.append(self._query_single_chunk(queries[start_idx:end_idx], k))
        return np.vstack(chunks)

    def _query_single_chunk(self, chunk, k):
        """
        Top-k distances for one chunk of queries.

        Args:
            chunk: Query rows [B, D]
            k: Number of neighbors (<= N)

        Returns:
            Sorted distances [B, k]
        """
        x2 = np.sum(chunk * chunk, axis=1)                  # [B]
        xy = chunk @ self.reference.T                       # [B,N]
        dist2 = x2[:, None] + self._ref_sq[None, :] - 2.0 * xy
        dist2 = np.maximum(dist2, 0.0)

        rows = np.arange(chunk.shape[0])[:, None]
        if k < dist2.shape[1]:
            topk_idx = np.argpartition(dist2, kth=k - 1, axis=1)[:, :k]
        else:
            topk_idx = np.broadcast_to(np.arange(dist2.shape[1]), dist2.shape)
        topk_sorted_idx = topk_idx[rows, np.argsort(dist2[rows, topk_idx], axis=1)]
        return np.sqrt(dist2[rows, topk_sorted_idx])
