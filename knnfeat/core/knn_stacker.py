"""
Out-of-fold kNN probability stacking.

Training probabilities for each fold come from a base classifier fitted on
the other folds, so a row's prediction never sees the row itself. Test
probabilities come from one fit on the full training set. The resulting
probability matrices can be fed to a second-level model.
"""

import logging
from typing import Dict, Optional, Sequence

import numpy as np

from .base_classifier import BaseClassifier, KNNProbabilityClassifier
from .base_pipeline import BasePipeline
from .config import STACK_DEFAULTS
from .data_types import FeatureBlock, StackingResult, WorkItem
from .exceptions import InsufficientNeighborsError
from .fold_assigner import assign_folds
from .result_assembler import format_features, order_fold_blocks
from .validation import check_knn_args, frame_index

logger = logging.getLogger(__name__)

# Work item key of the full-training-set fit
FULL_FIT = WorkItem(class_label=None, fold_id=None)


def align_probabilities(probs: np.ndarray, model_classes: Sequence,
                        classes: Sequence) -> np.ndarray:
    """
    Reorder probability columns to ``classes``.

    Classes the model never saw (absent from a fold's training rows) get
    probability 0.
    """
    aligned = np.zeros((probs.shape[0], len(classes)), dtype=float)
    position = {c: i for i, c in enumerate(classes)}
    for j, c in enumerate(model_classes):
        aligned[:, position[c]] = probs[:, j]
    return aligned


class KNNStacker(BasePipeline):
    """
    Produces leakage-free class-probability features with a base classifier.
    """

    DEFAULTS = STACK_DEFAULTS
    CONFIG_SECTION = 'stack'

    def __init__(self, config: Optional[Dict] = None, classifier: Optional[BaseClassifier] = None):
        """
        Initialize the stacker.

        Args:
            config: Configuration dictionary containing:
                - k: Neighbors of the default kNN classifier (default: 10)
                - method: 'dist' (inverse-distance weights) or 'vote' (default: 'dist')
                - normalize: Scaler applied inside the classifier (default: None)
                - folds: Number of folds or explicit fold ids (default: 5)
                - n_jobs: Worker threads, one fold per work item (default: 1)
                - random_state: Seed for fold generation (default: None)
                - show_progress: Show tqdm progress bars (default: True)
            classifier: Base classifier; defaults to KNNProbabilityClassifier
                built from k, method and normalize
        """
        super().__init__(config)

        self.k = self.config['k']
        self.folds = self.config['folds']
        self.random_state = self.config['random_state']
        self.classifier = classifier or KNNProbabilityClassifier(
            k=self.k, method=self.config['method'], normalize=self.config['normalize']
        )

    def run(self, x_train, y_train, x_test) -> StackingResult:
        """
        Build out-of-fold training probabilities and test probabilities.

        Returns:
            StackingResult with one column per class, in class order
        """
        xtr, labels, xte, _, classes = check_knn_args(x_train, y_train, x_test, self.k)
        fold_assignment = assign_folds(labels, self.folds, self.random_state)

        if isinstance(self.classifier, KNNProbabilityClassifier):
            # The fit rows left by the largest fold bound the neighbors available
            counts = fold_assignment.counts()
            largest = max(counts, key=counts.get)
            smallest = xtr.shape[0] - counts[largest]
            if smallest < self.classifier.k:
                raise InsufficientNeighborsError(smallest, self.classifier.k, fold_id=largest)

        def _fit_predict(item: WorkItem) -> FeatureBlock:
            if item == FULL_FIT:
                model = self.classifier.fit(xtr, labels)
                probs, model_classes = self.classifier.predict_probabilities(model, xte)
                return FeatureBlock(row_index=np.arange(xte.shape[0]),
                                    values=align_probabilities(probs, model_classes, classes))

            val_idx = fold_assignment.rows_in(item.fold_id)
            fit_idx = np.flatnonzero(fold_assignment.fold_ids != item.fold_id)
            model = self.classifier.fit(xtr[fit_idx], labels[fit_idx])
            probs, model_classes = self.classifier.predict_probabilities(model, xtr[val_idx])
            return FeatureBlock(row_index=val_idx,
                                values=align_probabilities(probs, model_classes, classes))

        fold_items = [WorkItem(class_label=None, fold_id=f) for f in fold_assignment.levels]

        with self._worker_pool() as executor:
            # n-fold CV is used to avoid overfitting
            logger.info("Building new training set...")
            fold_blocks = self._run_work_items(executor, fold_items, _fit_predict,
                                               desc="Building new training set")
            train_prob = order_fold_blocks([fold_blocks[item] for item in fold_items])

            logger.info("Building new test set...")
            test_blocks = self._run_work_items(executor, [FULL_FIT], _fit_predict,
                                               desc="Building new test set")
            test_prob = test_blocks[FULL_FIT].values

        train = format_features(train_prob, index=frame_index(x_train, xtr.shape[0]), columns=classes,
                                decimals=None)
        test = format_features(test_prob, index=frame_index(x_test, xte.shape[0]), columns=classes,
                               decimals=None)
        return StackingResult(train=train, test=test, classes=classes,
                              fold_assignment=fold_assignment)


def knn_stack(x_train, y_train, x_test, k: int = 10, method: str = 'dist',
              normalize=None, folds=5, **options) -> StackingResult:
    """
    Out-of-fold kNN class probabilities for stacking.

    Args:
        x_train: Training matrix
        y_train: Training labels
        x_test: Test matrix
        k: Neighbors of the kNN classifier
        method: 'dist' or 'vote'
        normalize: Optional scaler fitted inside every fold
        folds: Number of folds (min 3) or an explicit fold id per training row
        **options: Other KNNStacker config keys (n_jobs, random_state, show_progress)
            and ``classifier`` to replace the default kNN base classifier

    Returns:
        StackingResult with one probability column per class
    """
    classifier = options.pop('classifier', None)
    config = dict(options, k=k, method=method, normalize=normalize, folds=folds)
    return KNNStacker(config, classifier=classifier).run(x_train, y_train, x_test)
