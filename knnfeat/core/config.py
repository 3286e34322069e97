"""
Configuration defaults and YAML loading for knnfeat pipelines.

Pipelines take a plain configuration dictionary. Missing keys fall back to the
defaults below; unknown keys are rejected so typos do not silently change
behaviour.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Fold handling
DEFAULT_FOLDS = 5
MIN_FOLDS = 3
FOLD_WARNING_THRESHOLD = 10

# Neighbor search
DEFAULT_EXTRACT_K = 1
DEFAULT_STACK_K = 10
DEFAULT_TREE_TYPE = 'kd'
DEFAULT_CHUNK_SIZE = 1000

# Output formatting
FEATURE_PRECISION = 6
FEATURE_PREFIX = 'knn'

EXTRACT_DEFAULTS = {
    'k': DEFAULT_EXTRACT_K,
    'normalize': None,
    'folds': DEFAULT_FOLDS,
    'n_jobs': 1,
    'random_state': None,
    'tree_type': DEFAULT_TREE_TYPE,
    'chunk_size': DEFAULT_CHUNK_SIZE,
    'show_progress': True,
}

STACK_DEFAULTS = {
    'k': DEFAULT_STACK_K,
    'method': 'dist',
    'normalize': None,
    'folds': DEFAULT_FOLDS,
    'n_jobs': 1,
    'random_state': None,
    'show_progress': True,
}


def build_config(defaults: Dict, overrides: Optional[Dict] = None) -> Dict:
    """
    Merge user overrides on top of a defaults dictionary.

    Args:
        defaults: One of EXTRACT_DEFAULTS / STACK_DEFAULTS
        overrides: User supplied values (may be None)

    Returns:
        New dictionary with every default key present
    """
    overrides = overrides or {}
    unknown = sorted(set(overrides) - set(defaults))
    if unknown:
        raise ValueError(f"Unknown configuration keys: {unknown}. "
                         f"Available keys: {sorted(defaults)}")
    config = dict(defaults)
    config.update(overrides)
    return config


def load_config(path: Union[str, Path], section: Optional[str] = None) -> Dict:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file
        section: Optional top-level key to select (e.g. 'extract' or 'stack')

    Returns:
        Configuration dictionary (empty if the file or section is empty)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    if section is not None:
        if section not in data:
            raise ValueError(f"Section '{section}' not found in {path}. "
                             f"Available sections: {sorted(data)}")
        data = data[section] or {}
        if not isinstance(data, dict):
            raise ValueError(f"Section '{section}' in {path} must be a mapping")

    logger.info(f"Loaded configuration from {path}" + (f" [{section}]" if section else ""))
    return data
