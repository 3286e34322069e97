"""
Pytest fixtures for knnfeat unit tests.

Provides small labelled datasets and a slow, loop-based reference
implementation of the out-of-fold distance features to compare against.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def six_row_data():
    """6 rows, 2 classes of 3 rows, one row per class in each of 3 folds."""
    x_train = np.array([
        [0.0, 0.0],
        [3.0, 0.0],
        [0.0, 4.0],
        [10.0, 10.0],
        [10.0, 13.0],
        [14.0, 10.0],
    ])
    y_train = np.array(['a', 'a', 'a', 'b', 'b', 'b'])
    folds = np.array([1, 2, 3, 1, 2, 3])
    x_test = np.array([[1.0, 1.0], [12.0, 12.0]])
    return x_train, y_train, folds, x_test


@pytest.fixture
def blob_data():
    """Three gaussian blobs with uneven class sizes."""
    rng = np.random.default_rng(7)
    centers = np.array([[0.0, 0.0, 0.0], [4.0, 4.0, 0.0], [0.0, 4.0, 4.0]])
    sizes = [20, 14, 11]
    x_train = np.vstack([rng.normal(c, 1.0, size=(n, 3)) for c, n in zip(centers, sizes)])
    y_train = np.repeat([0, 1, 2], sizes)

    # Shuffle so classes are interleaved in row order
    order = rng.permutation(len(y_train))
    x_train, y_train = x_train[order], y_train[order]
    x_test = rng.normal(2.0, 2.0, size=(9, 3))
    return x_train, y_train, x_test


def _reference_train_features(x_train, y_train, fold_ids, k):
    """Row-by-row out-of-fold cumulative distances, no vectorisation."""
    classes = sorted(set(y_train.tolist()))
    out = np.zeros((len(x_train), k * len(classes)))
    for r in range(len(x_train)):
        for ci, c in enumerate(classes):
            pool = [j for j in range(len(x_train))
                    if y_train[j] == c and fold_ids[j] != fold_ids[r]]
            dists = sorted(float(np.linalg.norm(x_train[r] - x_train[j])) for j in pool)
            out[r, ci * k:(ci + 1) * k] = np.cumsum(dists[:k])
    return np.round(out, 6)


def _reference_test_features(x_train, y_train, x_test, k):
    classes = sorted(set(y_train.tolist()))
    out = np.zeros((len(x_test), k * len(classes)))
    for r in range(len(x_test)):
        for ci, c in enumerate(classes):
            dists = sorted(float(np.linalg.norm(x_test[r] - x_train[j]))
                           for j in range(len(x_train)) if y_train[j] == c)
            out[r, ci * k:(ci + 1) * k] = np.cumsum(dists[:k])
    return np.round(out, 6)


@pytest.fixture
def reference_train_features():
    return _reference_train_features


@pytest.fixture
def reference_test_features():
    return _reference_test_features
