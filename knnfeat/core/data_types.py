"""
Plain data containers passed between the knnfeat pipeline stages.
"""

from dataclasses import dataclass
from typing import Any, Hashable, Optional, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class FoldAssignment:
    """Fold id of every training row plus the sorted set of distinct ids."""
    fold_ids: np.ndarray
    levels: Tuple[Hashable, ...]

    @property
    def n_folds(self) -> int:
        return len(self.levels)

    def rows_in(self, fold_id: Hashable) -> np.ndarray:
        """Row indices assigned to ``fold_id``, in ascending order."""
        return np.flatnonzero(self.fold_ids == fold_id)

    def counts(self) -> dict:
        return {level: int(np.sum(self.fold_ids == level)) for level in self.levels}


@dataclass(frozen=True)
class WorkItem:
    """One independent unit of work: a class label and the held-out fold.

    ``fold_id`` is None for the test pass, where nothing is held out. The
    stacker, which does not split by class, leaves ``class_label`` None.
    """
    class_label: Hashable
    fold_id: Optional[Hashable] = None

    def __str__(self) -> str:
        parts = []
        if self.class_label is not None:
            parts.append(f"class={self.class_label!r}")
        if self.fold_id is not None:
            parts.append(f"fold={self.fold_id!r}")
        return f"({', '.join(parts) or 'full fit'})"


@dataclass(frozen=True)
class FeatureBlock:
    """Cumulative neighbor distances for a set of query rows.

    ``row_index`` holds the original position of each row in ``values`` so the
    assembler can restore input order.
    """
    row_index: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        if self.values.ndim != 2 or self.values.shape[0] != self.row_index.shape[0]:
            raise ValueError(
                f"row_index length {self.row_index.shape[0]} does not match "
                f"values shape {self.values.shape}"
            )


@dataclass(frozen=True)
class ExtractionResult:
    """Distance features for the training and test sets."""
    train: pd.DataFrame
    test: pd.DataFrame
    classes: Tuple[Any, ...]
    fold_assignment: FoldAssignment


@dataclass(frozen=True)
class StackingResult:
    """Out-of-fold training probabilities and full-fit test probabilities."""
    train: pd.DataFrame
    test: pd.DataFrame
    classes: Tuple[Any, ...]
    fold_assignment: FoldAssignment
