"""
Argument checks shared by the extraction and stacking pipelines.
"""

import numbers
from typing import Any, Tuple

import numpy as np
import pandas as pd

from .exceptions import ArgumentMismatchError


def as_matrix(x: Any, name: str) -> np.ndarray:
    """Convert a matrix-like input to a 2-D float array without touching the original."""
    try:
        if isinstance(x, pd.DataFrame):
            array = x.to_numpy(dtype=float)
        else:
            array = np.asarray(x, dtype=float)
    except (TypeError, ValueError) as e:
        raise ArgumentMismatchError(f"{name} must be numeric: {e}") from e

    if array.ndim != 2:
        raise ArgumentMismatchError(f"{name} must be a 2-D matrix, got {array.ndim} dimension(s)")
    if not np.all(np.isfinite(array)):
        raise ArgumentMismatchError(f"{name} contains NaN or infinite values")
    return array


def as_labels(y: Any) -> Tuple[np.ndarray, Tuple]:
    """
    Convert a label vector to an array and derive the class order.

    Categorical labels keep their declared category order (restricted to the
    categories present); everything else is sorted.

    Returns:
        (labels, classes)
    """
    if isinstance(y, pd.Series) and isinstance(y.dtype, pd.CategoricalDtype):
        y = y.array
    categories = y.categories if isinstance(y, pd.Categorical) else None
    labels = np.asarray(y, dtype=object) if categories is not None else np.asarray(y)
    if labels.ndim != 1:
        raise ArgumentMismatchError(f"Labels must be one-dimensional, got shape {labels.shape}")
    if pd.isna(labels).any():
        raise ArgumentMismatchError("Labels contain missing values")

    if categories is not None:
        present = set(labels.tolist())
        classes = tuple(c for c in categories if c in present)
    else:
        classes = tuple(np.unique(labels).tolist())
    return labels, classes


def check_k(k: Any) -> int:
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise ArgumentMismatchError(f"k must be an integer, got {k!r}")
    if k < 1:
        raise ArgumentMismatchError(f"k must be >= 1, got {k}")
    return int(k)


def check_n_jobs(n_jobs: Any) -> int:
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, numbers.Integral) or n_jobs < 1:
        raise ArgumentMismatchError(f"n_jobs must be a positive integer, got {n_jobs!r}")
    return int(n_jobs)


def check_knn_args(x_train: Any, y_train: Any, x_test: Any, k: Any):
    """
    Validate the common inputs of knn_extract / knn_stack.

    Returns:
        (x_train, labels, x_test, k, classes) with arrays converted
    """
    k = check_k(k)
    xtr = as_matrix(x_train, 'x_train')
    xte = as_matrix(x_test, 'x_test')
    labels, classes = as_labels(y_train)

    if xtr.shape[0] != labels.shape[0]:
        raise ArgumentMismatchError(
            f"x_train and y_train row counts mismatch: {xtr.shape[0]} vs {labels.shape[0]}"
        )
    if xtr.shape[1] != xte.shape[1]:
        raise ArgumentMismatchError(
            f"x_train and x_test column counts mismatch: {xtr.shape[1]} vs {xte.shape[1]}"
        )
    if xte.shape[0] == 0:
        raise ArgumentMismatchError("x_test must contain at least one row")
    if len(classes) < 2:
        raise ArgumentMismatchError(f"y_train must contain at least two classes, got {list(classes)}")

    return xtr, labels, xte, k, classes


def frame_index(x: Any, n_rows: int) -> pd.Index:
    """Index to put on output frames: the input frame's index, or 0..n-1."""
    if isinstance(x, pd.DataFrame):
        return x.index
    return pd.RangeIndex(n_rows)
