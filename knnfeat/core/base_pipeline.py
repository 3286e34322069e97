"""
Base pipeline abstract class for knnfeat.

This module provides the abstract base class shared by the extraction and
stacking pipelines: configuration handling and the bounded worker pool that
runs independent work items.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, Optional, Union
import logging

from tqdm import tqdm

from .config import build_config, load_config
from .exceptions import KNNFeatError, WorkItemError
from .validation import check_n_jobs

logger = logging.getLogger(__name__)


class BasePipeline(ABC):
    """
    Abstract base class for knnfeat pipelines.

    Subclasses set DEFAULTS to their configuration defaults and implement run().
    """

    DEFAULTS: Dict = {}
    CONFIG_SECTION: Optional[str] = None

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize the pipeline.

        Args:
            config: Configuration dictionary; missing keys use DEFAULTS
        """
        self.config = build_config(self.DEFAULTS, config)
        self.n_jobs = check_n_jobs(self.config.get('n_jobs', 1))
        self.show_progress = bool(self.config.get('show_progress', True))
        logger.info(f"Initialized {self.__class__.__name__}")

    @classmethod
    def from_yaml(cls, path: Union[str, Path], section: Optional[str] = None):
        """
        Create a pipeline from a YAML config file.

        If ``section`` is omitted and the file has a top-level key matching
        CONFIG_SECTION, that section is used.
        """
        if section is None and cls.CONFIG_SECTION is not None:
            data = load_config(path)
            if cls.CONFIG_SECTION in data:
                data = data[cls.CONFIG_SECTION] or {}
            return cls(data)
        return cls(load_config(path, section=section))

    @abstractmethod
    def run(self, x_train: Any, y_train: Any, x_test: Any):
        """
        Run the pipeline on a training and a test set.

        Returns:
            Result dataclass with train and test frames
        """
        pass

    @contextmanager
    def _worker_pool(self) -> Iterator[ThreadPoolExecutor]:
        """
        Bounded thread pool for one top-level call.

        Pending work items are cancelled and the pool is shut down on exit,
        whether the call succeeded or failed.
        """
        executor = ThreadPoolExecutor(max_workers=self.n_jobs)
        try:
            yield executor
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _run_work_items(self, executor: ThreadPoolExecutor, items: Iterable[Hashable],
                        task: Callable[[Hashable], Any], desc: str) -> Dict[Hashable, Any]:
        """
        Run ``task`` for every work item on the pool.

        Results are keyed by work item, so completion order does not matter.
        The first failure is raised immediately; library errors propagate as
        they are, anything else is wrapped in WorkItemError.

        Args:
            executor: Pool from _worker_pool()
            items: Work items (hashable)
            task: Function of one work item
            desc: Progress bar label

        Returns:
            Dict mapping each work item to its result
        """
        items = list(items)
        results: Dict[Hashable, Any] = {}

        futures = {executor.submit(task, item): item for item in items}
        with tqdm(total=len(items), desc=desc, unit='item', ncols=100,
                  disable=not self.show_progress) as pbar:
            for fut in as_completed(futures):
                item = futures[fut]
                try:
                    results[item] = fut.result()
                except Exception as e:
                    logger.error(f"Work item {item} failed: {e}")
                    if isinstance(e, KNNFeatError):
                        raise
                    raise WorkItemError(item, e) from e
                pbar.update(1)

        return results

    def __str__(self) -> str:
        """String representation of the pipeline."""
        return f"{self.__class__.__name__}(config={self.config})"

    def __repr__(self) -> str:
        """Detailed string representation."""
        return self.__str__()
