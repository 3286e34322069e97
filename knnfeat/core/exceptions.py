"""
Exception hierarchy for the knnfeat pipelines.

All errors raised on purpose by the library derive from KNNFeatError, which is
itself a ValueError so callers that already guard against bad input keep
working.
"""

from typing import Any, Optional


class KNNFeatError(ValueError):
    """Base exception for knnfeat failures."""


class InvalidFoldSpecError(KNNFeatError):
    """Raised when a fold count or explicit fold assignment is invalid."""


class ArgumentMismatchError(KNNFeatError):
    """Raised when inputs disagree in shape or k is out of range."""


class InsufficientNeighborsError(KNNFeatError):
    """Raised when a reference pool has fewer rows than the requested k."""

    def __init__(self, available: int, k: int, class_label: Any = None,
                 fold_id: Any = None):
        self.available = available
        self.k = k
        self.class_label = class_label
        self.fold_id = fold_id

        where = ""
        if class_label is not None:
            where = f" for class {class_label!r}"
        if fold_id is not None:
            where += f" with fold {fold_id!r} held out"
        super().__init__(
            f"Only {available} reference rows available{where}, "
            f"but k={k} neighbors were requested"
        )


class WorkItemError(KNNFeatError):
    """Raised when a work item fails with an unexpected exception."""

    def __init__(self, work_item: Any, cause: Optional[BaseException] = None):
        self.work_item = work_item
        message = f"Work item {work_item} failed"
        if cause is not None:
            message += f": {type(cause).__name__}: {cause}"
        super().__init__(message)
