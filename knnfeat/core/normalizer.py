"""
Optional normalisation step applied before any neighbor search.

The scaling math itself is delegated to scikit-learn; this module only maps
the short names accepted by the pipelines onto scaler classes and exposes a
fit/apply interface.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

import numpy as np
from sklearn.base import TransformerMixin, clone
from sklearn.preprocessing import MaxAbsScaler, MinMaxScaler, RobustScaler, StandardScaler

SCALERS = {
    'std': StandardScaler,
    'minmax': MinMaxScaler,
    'maxabs': MaxAbsScaler,
    'robust': RobustScaler,
}


class BaseNormalizer(ABC):
    @abstractmethod
    def fit(self, x: np.ndarray):
        """Learn scaling parameters from training rows and return them"""
        pass

    @abstractmethod
    def apply(self, params, x: np.ndarray) -> np.ndarray:
        """Transform rows with parameters returned by fit()"""
        pass

    def fit_apply(self, x_train: np.ndarray, x_test: np.ndarray):
        """Fit on the training rows and transform both sets identically."""
        params = self.fit(x_train)
        return self.apply(params, x_train), self.apply(params, x_test)


class SklearnNormalizer(BaseNormalizer):
    """Normalizer delegating to a scikit-learn transformer."""

    def __init__(self, scaler: Union[str, TransformerMixin] = 'std'):
        self.scaler = make_scaler(scaler)

    def fit(self, x):
        return clone(self.scaler).fit(x)

    def apply(self, params, x):
        return np.asarray(params.transform(x), dtype=float)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.scaler!r})"


def make_scaler(normalize: Union[str, TransformerMixin]) -> TransformerMixin:
    """Unfitted scikit-learn scaler for a short name, or the transformer itself."""
    if isinstance(normalize, str):
        if normalize not in SCALERS:
            raise ValueError(f"Normalization '{normalize}' not supported. "
                             f"Available types: {list(SCALERS)}")
        return SCALERS[normalize]()
    if hasattr(normalize, 'fit') and hasattr(normalize, 'transform'):
        return normalize
    raise ValueError(f"normalize must be one of {list(SCALERS)}, a scikit-learn transformer "
                     f"or None, got {normalize!r}")


def create_normalizer(normalize) -> Optional[BaseNormalizer]:
    """
    Resolve the ``normalize`` option of a pipeline.

    Args:
        normalize: None, a scaler name, a scikit-learn transformer, or a
            BaseNormalizer instance

    Returns:
        BaseNormalizer or None when no normalisation is requested
    """
    if normalize is None:
        return None
    if isinstance(normalize, BaseNormalizer):
        return normalize
    return SklearnNormalizer(normalize)
