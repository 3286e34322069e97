"""
Fold assignment for out-of-fold feature extraction and stacking.

Either builds a label-stratified assignment from a fold count, or validates an
explicit per-row assignment supplied by the caller.
"""

import logging
import numbers
from typing import Any, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold

from .config import FOLD_WARNING_THRESHOLD, MIN_FOLDS
from .data_types import FoldAssignment
from .exceptions import InvalidFoldSpecError

logger = logging.getLogger(__name__)


def _is_fold_count(folds: Any) -> bool:
    return isinstance(folds, numbers.Integral) and not isinstance(folds, bool)


def create_stratified_folds(labels: np.ndarray, n_folds: int,
                            random_state: Optional[int] = None) -> np.ndarray:
    """
    Deal the rows of every class out to folds ``1..n_folds``.

    When every class has at least ``n_folds`` rows the split comes from
    scikit-learn's StratifiedKFold. Otherwise (up to leave-one-out, which
    StratifiedKFold rejects) rows of each class are shuffled and assigned
    round-robin, with the rotation carried over from one class to the next.
    Either way fold sizes differ by at most one overall and by at most one
    within every class.

    Args:
        labels: Label of every row
        n_folds: Number of folds, 1 <= n_folds <= len(labels)
        random_state: Seed for the shuffle

    Returns:
        Integer fold id (1-based) for every row
    """
    fold_ids = np.zeros(len(labels), dtype=int)

    _, class_counts = np.unique(labels, return_counts=True)
    if n_folds >= 2 and class_counts.min() >= n_folds:
        skf = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=random_state)
        for fold_idx, (_, val_idx) in enumerate(skf.split(np.zeros((len(labels), 1)), labels)):
            fold_ids[val_idx] = fold_idx + 1
        return fold_ids

    rng = np.random.default_rng(random_state)
    offset = 0
    for class_label in np.unique(labels):
        rows = np.flatnonzero(labels == class_label)
        rng.shuffle(rows)
        fold_ids[rows] = (np.arange(len(rows)) + offset) % n_folds + 1
        offset = (offset + len(rows)) % n_folds

    return fold_ids


def assign_folds(labels: np.ndarray, folds: Union[int, Sequence, np.ndarray],
                 random_state: Optional[int] = None) -> FoldAssignment:
    """
    Build or validate the fold assignment for the training rows.

    Args:
        labels: Training labels, one per row
        folds: Number of folds, or an explicit fold id for every row
        random_state: Seed used when folds are generated

    Returns:
        FoldAssignment with canonical, sorted fold levels
    """
    n_rows = len(labels)

    if _is_fold_count(folds):
        n_folds = min(max(MIN_FOLDS, int(folds)), n_rows)
        if n_folds < MIN_FOLDS:
            raise InvalidFoldSpecError(
                f"At least {MIN_FOLDS} training rows are needed for {MIN_FOLDS}-fold CV, got {n_rows}"
            )
        if n_folds != folds:
            logger.info(f"Number of folds adjusted from {folds} to {n_folds}")
        if n_folds > FOLD_WARNING_THRESHOLD:
            logger.warning(f"The number of folds is greater than {FOLD_WARNING_THRESHOLD}. "
                           f"It may take too much time.")
        fold_ids = create_stratified_folds(np.asarray(labels), n_folds, random_state)
    elif isinstance(folds, (str, bytes)) or np.ndim(folds) != 1:
        raise InvalidFoldSpecError(
            f"folds must be an integer count or a sequence of fold ids, got {folds!r}"
        )
    else:
        fold_ids = np.asarray(folds)
        if len(fold_ids) != n_rows:
            # One id per row also caps the distinct ids at n_rows (leave-one-out CV)
            raise InvalidFoldSpecError(
                f"Explicit folds must have one id per training row: got {len(fold_ids)} ids for {n_rows} rows"
            )
        if pd.isna(fold_ids).any():
            raise InvalidFoldSpecError("Explicit folds contain missing fold ids")
        n_distinct = len(np.unique(fold_ids))
        if n_distinct < MIN_FOLDS:
            raise InvalidFoldSpecError(f"The smallest number of folds allowable is {MIN_FOLDS}, "
                                       f"got {n_distinct} distinct fold id(s)")

    levels = tuple(np.unique(fold_ids).tolist())
    assignment = FoldAssignment(fold_ids=fold_ids, levels=levels)
    logger.info(f"Using {assignment.n_folds} folds: {assignment.counts()}")
    return assignment
