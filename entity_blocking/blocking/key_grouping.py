"""
Grouping of blocked elements by blocking key.

Several records can produce the same blocked element under one key, for
example when blocking attribute-level records at entity granularity. The
grouping collapses those into a single entry per key and merges their
causal correspondences.
"""

import logging
from typing import Any, Hashable, List, Sequence, Tuple

from ..model.correspondence import Correspondence
from ..model.matchable import Record
from ..processing.aggregators import DistributionAggregator
from ..processing.processable import Processable
from .generators import BlockingKeyGenerator

logger = logging.getLogger(__name__)


class KeyGroupingEngine:
    """Applies a blocking key generator and groups the results by key."""

    def __init__(self, blocking_function: BlockingKeyGenerator):
        """
        Initialize engine.

        Args:
            blocking_function: Generator producing (key, blocked element) pairs
        """
        self.blocking_function = blocking_function

    def generate_keys(self, record_with_correspondences: Tuple[Record, Sequence[Correspondence]]
                      ) -> List[Tuple[Hashable, Tuple[Any, Tuple[Correspondence, ...]]]]:
        """
        Generate (key, (blocked element, causes)) entries for one record.

        Exceptions raised by the generator are logged and re-raised.
        """
        record, correspondences = record_with_correspondences
        correspondences = tuple(correspondences or ())

        try:
            keys = list(self.blocking_function.generate_blocking_keys(record, correspondences))
        except Exception as e:
            logger.error(f"Blocking key generation with {self.blocking_function.name} failed "
                         f"for record {getattr(record, 'identifier', record)}: {e}")
            raise

        return [(key, (blocked, correspondences)) for key, blocked in keys]

    def group(self, records_with_correspondences: Processable) -> Processable:
        """
        Group blocked elements by blocking key.

        Args:
            records_with_correspondences: Processable of (record, correspondences)

        Returns:
            Processable of (blocking key, Distribution) with non-empty distributions
        """
        grouped = records_with_correspondences.aggregate(self.generate_keys, DistributionAggregator())
        return grouped.filter(lambda group: len(group[1]) > 0)
