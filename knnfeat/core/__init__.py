"""
Core components of knnfeat.

Fold assignment, neighbor search, per-class extraction, result assembly and
the two pipelines built on them.
"""

from .base_classifier import BaseClassifier, KNNProbabilityClassifier
from .base_pipeline import BasePipeline
from .class_extractor import extract_class_block
from .config import EXTRACT_DEFAULTS, STACK_DEFAULTS, load_config
from .data_types import ExtractionResult, FeatureBlock, FoldAssignment, StackingResult, WorkItem
from .exceptions import (ArgumentMismatchError, InsufficientNeighborsError, InvalidFoldSpecError,
                         KNNFeatError, WorkItemError)
from .fold_assigner import assign_folds
from .knn_extractor import KNNFeatureExtractor, knn_extract
from .knn_stacker import KNNStacker, knn_stack
from .neighbor_index import (BaseNeighborIndex, BruteForceNeighborIndex, KDTreeNeighborIndex,
                             create_neighbor_index, query_neighbors)
from .normalizer import BaseNormalizer, SklearnNormalizer, create_normalizer

__all__ = [
    'BaseClassifier',
    'KNNProbabilityClassifier',
    'BasePipeline',
    'extract_class_block',
    'EXTRACT_DEFAULTS',
    'STACK_DEFAULTS',
    'load_config',
    'ExtractionResult',
    'FeatureBlock',
    'FoldAssignment',
    'StackingResult',
    'WorkItem',
    'ArgumentMismatchError',
    'InsufficientNeighborsError',
    'InvalidFoldSpecError',
    'KNNFeatError',
    'WorkItemError',
    'assign_folds',
    'KNNFeatureExtractor',
    'knn_extract',
    'KNNStacker',
    'knn_stack',
    'BaseNeighborIndex',
    'BruteForceNeighborIndex',
    'KDTreeNeighborIndex',
    'create_neighbor_index',
    'query_neighbors',
    'BaseNormalizer',
    'SklearnNormalizer',
    'create_normalizer',
]
