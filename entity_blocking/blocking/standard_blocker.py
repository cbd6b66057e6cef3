"""
Standard key-based blocker.

All elements for which the same blocking key is generated are returned as
candidate pairs, either across two datasets or within one.
"""

import logging
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from ..model.correspondence import Correspondence
from ..model.dataset import DataSet
from ..processing.processable import Processable
from .cross_dataset import CrossDatasetBlocker
from .generators import BlockingKeyGenerator
from .self_blocking import SelfBlocker

logger = logging.getLogger(__name__)


class StandardBlocker:
    """
    Blocker offering both cross dataset and single dataset blocking.

    If two datasets are blocked and a second blocking function is given, it
    is used for the second dataset; otherwise the first one is used for both.
    """

    def __init__(self, blocking_function: BlockingKeyGenerator,
                 second_blocking_function: Optional[BlockingKeyGenerator] = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Initialize blocker.

        Args:
            blocking_function: Key generator (first dataset, or the only one)
            second_blocking_function: Key generator for the second dataset
            config: The ``blocking`` configuration section
        """
        self.cross_blocker = CrossDatasetBlocker(blocking_function, second_blocking_function, config)
        self.self_blocker = SelfBlocker(blocking_function, config)
        self._last_blocker = None

    @property
    def blocking_function(self) -> BlockingKeyGenerator:
        return self.cross_blocker.blocking_function

    @property
    def second_blocking_function(self) -> BlockingKeyGenerator:
        return self.cross_blocker.second_blocking_function

    @property
    def block_sizes(self) -> Optional[pd.DataFrame]:
        """Block size table of the last run, if block size measurement is enabled."""
        return self._last_blocker.block_sizes if self._last_blocker else None

    def run_blocking(self, dataset1: DataSet, dataset2: DataSet,
                     schema_correspondences: Optional[Iterable[Correspondence]] = None) -> Processable:
        """Candidate pairs between two datasets; see CrossDatasetBlocker."""
        self._last_blocker = self.cross_blocker
        return self.cross_blocker.run_blocking(dataset1, dataset2, schema_correspondences)

    def run_self_blocking(self, dataset: DataSet,
                          schema_correspondences: Optional[Iterable[Correspondence]] = None) -> Processable:
        """Candidate pairs within one dataset; see SelfBlocker."""
        self._last_blocker = self.self_blocker
        return self.self_blocker.run_blocking(dataset, schema_correspondences)
