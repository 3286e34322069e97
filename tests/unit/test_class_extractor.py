"""
Unit tests for per-class, per-fold extraction.
"""
import numpy as np
import pytest

from knnfeat.core.class_extractor import (
    check_reference_pools,
    cumulative_distances,
    extract_class_block,
    reference_rows,
)
from knnfeat.core.data_types import FoldAssignment
from knnfeat.core.exceptions import InsufficientNeighborsError


class TestReferenceRows:

    def test_excludes_other_classes_and_held_out_rows(self):
        labels = np.array(['a', 'b', 'a', 'a', 'b', 'a'])
        rows = reference_rows(labels, 'a', held_out_idx=np.array([2, 4]))
        np.testing.assert_array_equal(rows, [0, 3, 5])

    def test_no_held_out_rows(self):
        labels = np.array([1, 2, 1])
        np.testing.assert_array_equal(reference_rows(labels, 1), [0, 2])

    def test_labels_not_modified(self):
        labels = np.array([1, 2, 1])
        reference_rows(labels, 1, held_out_idx=np.array([0]))
        np.testing.assert_array_equal(labels, [1, 2, 1])


class TestExtractClassBlock:
    """Test suite for extract_class_block()."""

    def test_cumulative_distances(self):
        dists = np.array([[1.0, 2.0, 4.0], [0.0, 0.5, 0.5]])
        np.testing.assert_allclose(cumulative_distances(dists), [[1.0, 3.0, 7.0], [0.0, 0.5, 1.0]])

    def test_training_pass_carries_held_out_rows(self, six_row_data):
        x_train, y_train, _, _ = six_row_data

        block = extract_class_block(x_train, y_train, 'a', np.array([0, 3]), k=2, fold_id=1)

        np.testing.assert_array_equal(block.row_index, [0, 3])
        # Row 0 against rows 1 and 2: distances 3 and 4
        np.testing.assert_allclose(block.values[0], [3.0, 7.0])
        # Row 3 (10, 10) against (0, 4) then (3, 0)
        np.testing.assert_allclose(block.values[1], [np.sqrt(136), np.sqrt(136) + np.sqrt(149)])

    def test_test_pass_uses_whole_class(self, six_row_data):
        x_train, y_train, _, x_test = six_row_data

        block = extract_class_block(x_train, y_train, 'a', None, k=3, queries=x_test)

        np.testing.assert_array_equal(block.row_index, [0, 1])
        expected = np.cumsum(sorted([np.sqrt(2), np.sqrt(5), np.sqrt(10)]))
        np.testing.assert_allclose(block.values[0], expected)

    def test_brute_backend_matches_kd(self, blob_data):
        x_train, y_train, _ = blob_data
        held_out = np.arange(0, len(y_train), 3)

        kd = extract_class_block(x_train, y_train, 1, held_out, k=3, tree_type='kd')
        brute = extract_class_block(x_train, y_train, 1, held_out, k=3, tree_type='brute')

        np.testing.assert_allclose(kd.values, brute.values, atol=1e-6)

    def test_starved_pool_raises(self, six_row_data):
        x_train, y_train, _, _ = six_row_data
        with pytest.raises(InsufficientNeighborsError) as excinfo:
            extract_class_block(x_train, y_train, 'b', np.array([0, 3]), k=3, fold_id=1)

        assert excinfo.value.class_label == 'b'
        assert excinfo.value.fold_id == 1
        assert excinfo.value.available == 2


class TestCheckReferencePools:

    def test_small_class_rejected(self):
        labels = np.array(['a'] * 6 + ['b'] * 2)
        assignment = FoldAssignment(fold_ids=np.array([1, 2, 3, 1, 2, 3, 1, 2]), levels=(1, 2, 3))
        with pytest.raises(InsufficientNeighborsError) as excinfo:
            check_reference_pools(labels, ('a', 'b'), assignment, k=3)
        assert excinfo.value.class_label == 'b'

    def test_fold_that_starves_a_class(self):
        """A fold holding most of a class leaves too few rows behind."""
        labels = np.array(['a'] * 4 + ['b'] * 4)
        assignment = FoldAssignment(fold_ids=np.array([1, 1, 1, 2, 2, 3, 1, 2]), levels=(1, 2, 3))
        with pytest.raises(InsufficientNeighborsError) as excinfo:
            check_reference_pools(labels, ('a', 'b'), assignment, k=2)
        assert excinfo.value.class_label == 'a'
        assert excinfo.value.fold_id == 1

    def test_enough_rows(self):
        labels = np.array([0, 1] * 6)
        assignment = FoldAssignment(fold_ids=np.repeat([1, 2, 3], 4), levels=(1, 2, 3))
        check_reference_pools(labels, (0, 1), assignment, k=4)
