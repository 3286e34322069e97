"""
Base classifier interface used by the stacking pipeline.

The stacker only needs to fit a model on some rows and get class probabilities
for others; any classifier exposing that can be plugged in. The default is a
k-nearest-neighbor classifier from scikit-learn.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

import numpy as np
from sklearn.base import clone
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import make_pipeline

from .config import DEFAULT_STACK_K
from .normalizer import make_scaler

# Probability methods: 'dist' weighs neighbors by inverse distance, 'vote' counts them
KNN_WEIGHTS = {
    'dist': 'distance',
    'vote': 'uniform',
}


class BaseClassifier(ABC):
    """
    Base class for classifiers used inside knn_stack.
    """

    @abstractmethod
    def fit(self, x_train: np.ndarray, y_train: np.ndarray) -> Any:
        """
        Fit a model on the training rows.

        Returns:
            Fitted model object passed back to predict_probabilities()
        """
        pass

    @abstractmethod
    def predict_probabilities(self, model: Any, x_query: np.ndarray) -> Tuple[np.ndarray, Tuple]:
        """
        Predict class probabilities.

        Returns:
            (probabilities [n_queries, n_model_classes], model_classes)
        """
        pass


class KNNProbabilityClassifier(BaseClassifier):
    """
    k-nearest-neighbor classifier with optional feature scaling.

    The scaler, when given, is fitted on the same rows as the classifier, so
    each fold of the stacker scales with its own training rows only.
    """

    def __init__(self, k: int = DEFAULT_STACK_K, method: str = 'dist',
                 normalize: Optional[Any] = None):
        if method not in KNN_WEIGHTS:
            raise ValueError(f"Method '{method}' not supported. Available methods: {list(KNN_WEIGHTS)}")
        self.k = k
        self.method = method
        self.normalize = normalize
        if normalize is not None:
            make_scaler(normalize)  # validate early

    def _build(self):
        knn = KNeighborsClassifier(
            n_neighbors=self.k,
            weights=KNN_WEIGHTS[self.method],
            algorithm='kd_tree',
            metric='euclidean',
        )
        if self.normalize is None:
            return make_pipeline(knn)
        return make_pipeline(clone(make_scaler(self.normalize)), knn)

    def fit(self, x_train, y_train):
        return self._build().fit(x_train, y_train)

    def predict_probabilities(self, model, x_query):
        return model.predict_proba(x_query), tuple(model.classes_.tolist())

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(k={self.k}, method={self.method!r}, "
                f"normalize={self.normalize!r})")
