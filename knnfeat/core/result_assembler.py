"""
Reassembly of per-work-item results into the final feature matrices.
"""

from typing import Dict, Hashable, Optional, Sequence

import numpy as np
import pandas as pd

from .config import FEATURE_PRECISION, FEATURE_PREFIX
from .data_types import FeatureBlock, WorkItem


def order_fold_blocks(blocks: Sequence[FeatureBlock]) -> np.ndarray:
    """
    Stack one class's fold blocks and sort them back into input row order.

    Returns:
        Values matrix [n_rows, k] in ascending row_index order
    """
    row_index = np.concatenate([b.row_index for b in blocks])
    values = np.vstack([b.values for b in blocks])
    order = np.argsort(row_index, kind='stable')
    return values[order]


def combine_class_blocks(blocks: Sequence[np.ndarray]) -> np.ndarray:
    """Horizontal concatenation of per-class blocks, in the given class order."""
    return np.hstack(list(blocks))


def format_features(matrix: np.ndarray, index: Optional[pd.Index] = None,
                    columns: Optional[Sequence] = None,
                    decimals: Optional[int] = FEATURE_PRECISION) -> pd.DataFrame:
    """
    Round and label a feature matrix.

    Columns default to knn1..knn{n}. ``decimals=None`` keeps full precision.
    """
    if decimals is not None:
        matrix = np.round(matrix, decimals)
    if columns is None:
        columns = [f"{FEATURE_PREFIX}{i}" for i in range(1, matrix.shape[1] + 1)]
    return pd.DataFrame(matrix, index=index, columns=list(columns))


def assemble_train_features(blocks: Dict[WorkItem, FeatureBlock], classes: Sequence[Hashable],
                            fold_levels: Sequence[Hashable],
                            index: Optional[pd.Index] = None) -> pd.DataFrame:
    """Merge training-pass results keyed by (class, fold) work items."""
    per_class = [
        order_fold_blocks([blocks[WorkItem(c, f)] for f in fold_levels])
        for c in classes
    ]
    return format_features(combine_class_blocks(per_class), index=index)


def assemble_test_features(blocks: Dict[WorkItem, FeatureBlock], classes: Sequence[Hashable],
                           index: Optional[pd.Index] = None) -> pd.DataFrame:
    """Merge test-pass results keyed by (class,) work items; rows are already in query order."""
    per_class = [blocks[WorkItem(c)].values for c in classes]
    return format_features(combine_class_blocks(per_class), index=index)
