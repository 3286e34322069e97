"""
knnfeat - Nearest Neighbors Feature Engineering

Out-of-fold k-nearest-neighbor distance features and probability stacking for
tabular classification data.
"""

from .core.knn_extractor import KNNFeatureExtractor, knn_extract
from .core.knn_stacker import KNNStacker, knn_stack
from .core.base_classifier import BaseClassifier, KNNProbabilityClassifier
from .core.normalizer import BaseNormalizer
from .core.data_types import ExtractionResult, StackingResult
from .core.exceptions import (
    KNNFeatError,
    InvalidFoldSpecError,
    InsufficientNeighborsError,
    ArgumentMismatchError,
    WorkItemError,
)

# Main entry points for users
__all__ = [
    'knn_extract',
    'knn_stack',
    'KNNFeatureExtractor',
    'KNNStacker',
    'BaseClassifier',
    'KNNProbabilityClassifier',
    'BaseNormalizer',
    'ExtractionResult',
    'StackingResult',
    'KNNFeatError',
    'InvalidFoldSpecError',
    'InsufficientNeighborsError',
    'ArgumentMismatchError',
    'WorkItemError',
]

# Version info
__version__ = "0.1.0"
