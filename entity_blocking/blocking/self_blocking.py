"""
Blocking within a single dataset.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from ..model.correspondence import Correspondence, filter_causes_by_sources, union_causes
from ..model.dataset import DataSet
from ..model.distribution import Distribution
from ..processing.processable import Processable
from .base import AbstractBlocker
from .correspondence_joiner import ROLES, CorrespondenceJoiner
from .generators import BlockingKeyGenerator
from .key_grouping import KeyGroupingEngine

logger = logging.getLogger(__name__)


class SelfBlocker(AbstractBlocker):
    """
    Candidate pairs among the records of one dataset.

    Within every block, elements are ordered by data source identifier (then
    identifier) so a pair is always emitted in the same orientation. Pairs
    found under several keys are reported once.
    """

    def __init__(self, blocking_function: BlockingKeyGenerator,
                 config: Optional[Dict[str, Any]] = None):
        """
        Initialize blocker.

        Args:
            blocking_function: Key generator for the dataset
            config: The ``blocking`` configuration section
        """
        super().__init__(config)
        self.blocking_function = blocking_function

        logger.info(f"Initialized SelfBlocker with {self.blocking_function.name} "
                    f"on engine '{self.engine}'")

    def run_blocking(self, dataset: DataSet,
                     schema_correspondences: Optional[Iterable[Correspondence]] = None) -> Processable:
        """
        Generate candidate pairs within a dataset.

        Records may be on either side of a schema correspondence, so each
        record is combined with the correspondences of both roles.

        Args:
            dataset: Dataset to block
            schema_correspondences: Schema correspondences

        Returns:
            Processable of distinct Correspondence(element_i, element_j, 1.0, causes)
        """
        source_ids = {record.data_source_identifier for record in dataset}
        correspondences = self._validate_schema_correspondences(schema_correspondences, source_ids)
        logger.info(f"Blocking {len(dataset)} records with {len(correspondences)} schema correspondences")

        joiner = CorrespondenceJoiner(correspondences)
        ds = joiner.combine(self._create_processable(dataset), roles=ROLES)

        grouped = KeyGroupingEngine(self.blocking_function).group(ds)

        if self.measure_block_sizes:
            self._measure(grouped)

        blocked = grouped.transform(pairs_within_block)

        # the same two elements can share several keys
        return blocked.distinct(key=Correspondence.identity)


def canonical_order(entry: Tuple[Any, Tuple[Correspondence, ...]]) -> Tuple[int, str]:
    element = entry[0]
    return element.data_source_identifier, str(element.identifier)


def pairs_within_block(group: Tuple[Any, Distribution]) -> Iterator[Correspondence]:
    """
    All unordered pairs of one block.

    Args:
        group: (blocking key, Distribution)

    Yields:
        Correspondence per pair, lower data source identifier first
    """
    key, distribution = group
    elements = sorted(distribution.get_elements(), key=canonical_order)
    logger.debug(f"Block {key!r}: {len(elements) * (len(elements) - 1) // 2} pairs")

    for i, (record1, causes1) in enumerate(elements):
        for record2, causes2 in elements[i + 1:]:
            causes = filter_causes_by_sources(
                union_causes(causes1, causes2),
                record1.data_source_identifier,
                record2.data_source_identifier
            )
            yield Correspondence(record1, record2, 1.0, causes)
