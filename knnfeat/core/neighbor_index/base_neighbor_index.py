"""
Base neighbor index interface for knnfeat.

A neighbor index is built once over a reference matrix and answers exact
k-nearest-neighbor distance queries against it.
"""

from abc import ABC, abstractmethod

import numpy as np

from ..exceptions import ArgumentMismatchError, InsufficientNeighborsError


class BaseNeighborIndex(ABC):
    def __init__(self, reference):
        reference = np.asarray(reference, dtype=float)
        if reference.ndim != 2:
            raise ArgumentMismatchError(f"Reference rows must be a 2-D matrix, got shape {reference.shape}")
        self.reference = reference

    @property
    def n_reference(self) -> int:
        return self.reference.shape[0]

    def query(self, queries, k: int) -> np.ndarray:
        """
        Distances from every query row to its k nearest reference rows.

        Args:
            queries: Query matrix [n_queries, n_features]
            k: Number of neighbors

        Returns:
            Array [n_queries, k] with each row sorted ascending
        """
        queries = np.asarray(queries, dtype=float)
        if queries.ndim != 2 or queries.shape[1] != self.reference.shape[1]:
            raise ArgumentMismatchError(
                f"Query shape {queries.shape} does not match reference shape {self.reference.shape}"
            )
        if k < 1:
            raise ArgumentMismatchError(f"k must be >= 1, got {k}")
        if self.n_reference < k:
            raise InsufficientNeighborsError(self.n_reference, k)
        if queries.shape[0] == 0:
            return np.empty((0, k), dtype=float)
        return self._query(queries, k)

    @abstractmethod
    def _query(self, queries: np.ndarray, k: int) -> np.ndarray:
        """Backend search; inputs are already validated"""
        pass
