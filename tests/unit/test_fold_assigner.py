"""
Unit tests for fold assignment.

Tests:
- Fold count clamping and the performance warning
- Stratified balance across folds
- Reproducibility with seed
- Validation of explicit fold ids
"""
import logging

import numpy as np
import pytest
from sklearn.model_selection import StratifiedKFold

from knnfeat.core.fold_assigner import assign_folds, create_stratified_folds
from knnfeat.core.exceptions import InvalidFoldSpecError


class TestStratifiedFolds:
    """Test suite for generated fold assignments."""

    def test_every_class_spread_evenly(self):
        """Each class is split across folds with sizes differing by at most one."""
        labels = np.array(['a'] * 10 + ['b'] * 5)
        fold_ids = create_stratified_folds(labels, 5, random_state=0)

        for c in ('a', 'b'):
            counts = np.bincount(fold_ids[labels == c], minlength=6)[1:]
            assert counts.max() - counts.min() <= 1
        assert sorted(np.unique(fold_ids).tolist()) == [1, 2, 3, 4, 5]

    def test_overall_fold_sizes_balanced(self):
        labels = np.array([0] * 7 + [1] * 4)
        fold_ids = create_stratified_folds(labels, 3, random_state=1)

        counts = np.bincount(fold_ids, minlength=4)[1:]
        assert sorted(counts.tolist()) == [3, 4, 4]

    def test_small_class_rotation_keeps_folds_balanced(self):
        """A class smaller than the fold count continues the rotation of the previous class."""
        labels = np.array([0] * 7 + [1] * 2)
        fold_ids = create_stratified_folds(labels, 3, random_state=1)

        counts = np.bincount(fold_ids, minlength=4)[1:]
        assert counts.tolist() == [3, 3, 3]
        assert len(set(fold_ids[labels == 1].tolist())) == 2

    def test_matches_sklearn_when_classes_are_large_enough(self):
        """Every class fills every fold, so the split is StratifiedKFold's."""
        labels = np.array(['a', 'b', 'c'] * 8)
        fold_ids = create_stratified_folds(labels, 4, random_state=9)

        skf = StratifiedKFold(n_splits=4, shuffle=True, random_state=9)
        for fold_idx, (_, val_idx) in enumerate(skf.split(np.zeros((len(labels), 1)), labels)):
            assert np.all(fold_ids[val_idx] == fold_idx + 1)

    def test_same_seed_same_folds(self):
        labels = np.array([0, 1] * 20)
        first = create_stratified_folds(labels, 4, random_state=42)
        second = create_stratified_folds(labels, 4, random_state=42)
        np.testing.assert_array_equal(first, second)

    def test_leave_one_out_uses_every_fold(self):
        """With as many folds as rows, every row gets its own fold."""
        labels = np.array(['x', 'y', 'x', 'y', 'x'])
        fold_ids = create_stratified_folds(labels, 5, random_state=3)
        assert sorted(fold_ids.tolist()) == [1, 2, 3, 4, 5]


class TestAssignFolds:
    """Test suite for assign_folds()."""

    def test_count_is_raised_to_minimum(self):
        labels = np.array([0, 1] * 6)
        assignment = assign_folds(labels, 2, random_state=0)
        assert assignment.n_folds == 3
        assert assignment.levels == (1, 2, 3)

    def test_count_is_capped_at_rows(self):
        labels = np.array([0, 1] * 3)
        assignment = assign_folds(labels, 50, random_state=0)
        assert assignment.n_folds == 6

    def test_warns_above_ten_folds(self, caplog):
        """More than 10 folds logs a performance warning but still works."""
        labels = np.array([0, 1] * 10)
        with caplog.at_level(logging.WARNING, logger='knnfeat.core.fold_assigner'):
            assignment = assign_folds(labels, 12, random_state=0)

        assert assignment.n_folds == 12
        assert any("greater than 10" in r.getMessage() for r in caplog.records)

    def test_no_warning_at_ten_folds(self, caplog):
        labels = np.array([0, 1] * 10)
        with caplog.at_level(logging.WARNING, logger='knnfeat.core.fold_assigner'):
            assign_folds(labels, 10, random_state=0)
        assert not any(r.levelno == logging.WARNING for r in caplog.records)

    def test_too_few_rows(self):
        with pytest.raises(InvalidFoldSpecError):
            assign_folds(np.array([0, 1]), 3)

    def test_explicit_folds_are_kept(self):
        fold_ids = np.array([3, 1, 2, 1, 2, 3])
        assignment = assign_folds(np.array([0, 0, 0, 1, 1, 1]), fold_ids)

        np.testing.assert_array_equal(assignment.fold_ids, fold_ids)
        assert assignment.levels == (1, 2, 3)
        np.testing.assert_array_equal(assignment.rows_in(1), [1, 3])

    def test_explicit_levels_are_sorted(self):
        """String fold ids are canonicalised to a sorted tuple."""
        fold_ids = ['c', 'a', 'b', 'b', 'a', 'c']
        assignment = assign_folds(np.array([0, 1, 0, 1, 0, 1]), fold_ids)
        assert assignment.levels == ('a', 'b', 'c')

    def test_explicit_single_fold_rejected(self):
        with pytest.raises(InvalidFoldSpecError, match="smallest number of folds"):
            assign_folds(np.array([0, 1, 0, 1]), [2, 2, 2, 2])

    def test_explicit_two_folds_rejected(self):
        with pytest.raises(InvalidFoldSpecError):
            assign_folds(np.array([0, 1, 0, 1]), [1, 2, 1, 2])

    def test_explicit_wrong_length_rejected(self):
        with pytest.raises(InvalidFoldSpecError, match="one id per training row"):
            assign_folds(np.array([0, 1, 0, 1]), [1, 2, 3])

    def test_explicit_missing_id_rejected(self):
        with pytest.raises(InvalidFoldSpecError):
            assign_folds(np.array([0, 1, 0, 1]), [1.0, 2.0, np.nan, 3.0])

    @pytest.mark.parametrize("folds", [5.0, True, "5", None])
    def test_non_integer_spec_rejected(self, folds):
        with pytest.raises(InvalidFoldSpecError):
            assign_folds(np.array([0, 1] * 5), folds)
