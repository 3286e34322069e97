"""
Nearest neighbors feature extraction.

Generates k * c new features from the distances between each row and its k
nearest neighbors inside each of the c classes:

1. feature 1 is the distance to the nearest neighbor in the first class;
2. feature 2 is the sum of distances to the 2 nearest neighbors in that class;
3. and so on up to k, then the same for every other class.

Because kNN is a nonlinear learner, these features let a simple linear model
(GLM, LDA, ...) reach much better accuracy than on the raw columns. Training
features are computed out-of-fold so a row's own fold never contributes
neighbors to it.
"""

import logging
from typing import Dict, Optional

import numpy as np

from .base_pipeline import BasePipeline
from .class_extractor import check_reference_pools, extract_class_block
from .config import EXTRACT_DEFAULTS
from .data_types import ExtractionResult, WorkItem
from .fold_assigner import assign_folds
from .neighbor_index import TREE_TYPES
from .normalizer import create_normalizer
from .result_assembler import assemble_test_features, assemble_train_features
from .validation import check_knn_args, frame_index

logger = logging.getLogger(__name__)


class KNNFeatureExtractor(BasePipeline):
    """
    Out-of-fold kNN distance feature extractor.

    The training pass runs one work item per (class, fold): the held-out fold
    is queried against the class's rows from the remaining folds. The test pass
    runs one work item per class against all of that class's training rows.
    All work items share one bounded thread pool.
    """

    DEFAULTS = EXTRACT_DEFAULTS
    CONFIG_SECTION = 'extract'

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize the extractor.

        Args:
            config: Configuration dictionary containing:
                - k: Number of neighbors per class (default: 1). The output has
                  k * n_classes columns, so large k on big data is slow.
                - normalize: None, 'std', 'minmax', 'maxabs', 'robust', a
                  scikit-learn transformer or a BaseNormalizer (default: None)
                - folds: Number of folds (default: 5, clamped to [3, n_rows])
                  or an explicit fold id per training row
                - n_jobs: Worker threads (default: 1)
                - random_state: Seed for fold generation (default: None)
                - tree_type: 'kd' or 'brute' (default: 'kd')
                - chunk_size: Query chunk size for 'brute' (default: 1000)
                - show_progress: Show tqdm progress bars (default: True)
        """
        super().__init__(config)

        self.k = self.config['k']
        self.folds = self.config['folds']
        self.random_state = self.config['random_state']
        self.tree_type = self.config['tree_type']
        self.chunk_size = self.config['chunk_size']
        self.normalizer = create_normalizer(self.config['normalize'])

        if self.tree_type not in TREE_TYPES:
            raise ValueError(f"Tree type '{self.tree_type}' not supported. "
                             f"Available types: {list(TREE_TYPES)}")

    def run(self, x_train, y_train, x_test) -> ExtractionResult:
        """
        Build the new training and test sets.

        Args:
            x_train: Training matrix (array or DataFrame)
            y_train: Training labels
            x_test: Test matrix with the same columns as x_train

        Returns:
            ExtractionResult with 'train' and 'test' frames of width k * n_classes
        """
        xtr, labels, xte, k, classes = check_knn_args(x_train, y_train, x_test, self.k)
        fold_assignment = assign_folds(labels, self.folds, self.random_state)
        logger.info(f"Class distribution: {dict(zip(*np.unique(labels, return_counts=True)))}")

        if self.normalizer is not None:
            logger.info(f"Normalizing data with {self.normalizer}")
            xtr, xte = self.normalizer.fit_apply(xtr, xte)

        check_reference_pools(labels, classes, fold_assignment, k)
        held_out = {f: fold_assignment.rows_in(f) for f in fold_assignment.levels}

        def _train_task(item: WorkItem):
            return extract_class_block(
                xtr, labels, item.class_label, held_out[item.fold_id], k,
                fold_id=item.fold_id, tree_type=self.tree_type, chunk_size=self.chunk_size,
            )

        def _test_task(item: WorkItem):
            return extract_class_block(
                xtr, labels, item.class_label, None, k, queries=xte,
                tree_type=self.tree_type, chunk_size=self.chunk_size,
            )

        train_items = [WorkItem(c, f) for c in classes for f in fold_assignment.levels]
        test_items = [WorkItem(c) for c in classes]

        with self._worker_pool() as executor:
            # n-fold CV is used to avoid overfitting
            logger.info("Building new training set...")
            train_blocks = self._run_work_items(executor, train_items, _train_task,
                                                desc="Building new training set")
            train = assemble_train_features(train_blocks, classes, fold_assignment.levels,
                                            index=frame_index(x_train, xtr.shape[0]))
            del train_blocks

            logger.info("Building new test set...")
            test_blocks = self._run_work_items(executor, test_items, _test_task,
                                               desc="Building new test set")
            test = assemble_test_features(test_blocks, classes,
                                          index=frame_index(x_test, xte.shape[0]))

        logger.info(f"Extracted {train.shape[1]} features for {train.shape[0]} training "
                    f"and {test.shape[0]} test rows")
        return ExtractionResult(train=train, test=test, classes=classes,
                                fold_assignment=fold_assignment)


def knn_extract(x_train, y_train, x_test, k: int = 1, normalize=None, folds=5,
                n_jobs: int = 1, **options) -> ExtractionResult:
    """
    Nearest neighbors features for a training and a test set.

    Args:
        x_train: Training matrix
        y_train: Training labels
        x_test: Test matrix
        k: Neighbors per class; the output has k * n_classes columns
        normalize: Optional scaler applied before the neighbor search
        folds: Number of folds (min 3) or an explicit fold id per training row
        n_jobs: Worker threads
        **options: Other KNNFeatureExtractor config keys
            (random_state, tree_type, chunk_size, show_progress)

    Returns:
        ExtractionResult; ``result.train`` and ``result.test`` hold the new data
    """
    config = dict(options, k=k, normalize=normalize, folds=folds, n_jobs=n_jobs)
    return KNNFeatureExtractor(config).run(x_train, y_train, x_test)
