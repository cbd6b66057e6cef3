"""
Blocking across two datasets.

Both datasets are grouped by blocking key, the groupings are joined on the
key and every element of the first dataset is paired with every element of
the second one within a shared key. Keys present on one side only produce
no pairs.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, Optional, Set, Tuple

from ..model.correspondence import Correspondence, filter_causes_by_sources, union_causes
from ..model.dataset import DataSet
from ..processing.processable import Processable
from .base import AbstractBlocker
from .correspondence_joiner import FIRST, SECOND, CorrespondenceJoiner
from .generators import BlockingKeyGenerator
from .key_grouping import KeyGroupingEngine

logger = logging.getLogger(__name__)


class CrossDatasetBlocker(AbstractBlocker):
    """
    Candidate pairs between two datasets sharing a blocking key.

    The same pair is produced once per shared key; no deduplication across
    keys takes place.
    """

    def __init__(self, blocking_function: BlockingKeyGenerator,
                 second_blocking_function: Optional[BlockingKeyGenerator] = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Initialize blocker.

        Args:
            blocking_function: Key generator for the first dataset
            second_blocking_function: Key generator for the second dataset;
                the first one is used when None
            config: The ``blocking`` configuration section
        """
        super().__init__(config)
        self.blocking_function = blocking_function
        self.second_blocking_function = second_blocking_function or blocking_function

        logger.info(f"Initialized CrossDatasetBlocker with {self.blocking_function.name} / "
                    f"{self.second_blocking_function.name} on engine '{self.engine}'")

    def run_blocking(self, dataset1: DataSet, dataset2: DataSet,
                     schema_correspondences: Optional[Iterable[Correspondence]] = None) -> Processable:
        """
        Generate candidate pairs between two datasets.

        Args:
            dataset1: First dataset
            dataset2: Second dataset, with a different source identifier
            schema_correspondences: Schema correspondences between the datasets

        Returns:
            Processable of Correspondence(element1, element2, 1.0, causes)
        """
        sources1 = _sources_of(dataset1)
        sources2 = _sources_of(dataset2)
        shared = sources1 & sources2
        if shared:
            raise ValueError(f"Both datasets contain data source identifiers {sorted(shared)}; "
                             f"cross dataset blocking requires disjoint sources")

        correspondences = self._validate_schema_correspondences(schema_correspondences, sources1 | sources2)
        logger.info(f"Blocking {len(dataset1)} x {len(dataset2)} records "
                    f"with {len(correspondences)} schema correspondences")

        joiner = CorrespondenceJoiner(correspondences)
        ds1 = joiner.combine(self._create_processable(dataset1), roles=(FIRST,))
        ds2 = joiner.combine(self._create_processable(dataset2), roles=(SECOND,))

        grouped1 = KeyGroupingEngine(self.blocking_function).group(ds1)
        grouped2 = KeyGroupingEngine(self.second_blocking_function).group(ds2)

        if self.measure_block_sizes:
            self._measure(grouped1, grouped2)

        blocked = grouped1.join(grouped2, key=lambda group: group[0])
        return blocked.transform(cross_product)


def cross_product(joined: Tuple[Tuple[Any, Any], Tuple[Any, Any]]) -> Iterator[Correspondence]:
    """
    All pairs of one joined block.

    Args:
        joined: ((key, Distribution of dataset1), (key, Distribution of dataset2))

    Yields:
        Correspondence per (element1, element2) with causes restricted to
        correspondences between the two elements' data sources
    """
    (key, distribution1), (_, distribution2) = joined
    logger.debug(f"Block {key!r}: {len(distribution1)} x {len(distribution2)} pairs")

    elements2 = distribution2.get_elements()
    for record1, causes1 in distribution1.get_elements():
        for record2, causes2 in elements2:
            causes = filter_causes_by_sources(
                union_causes(causes1, causes2),
                record1.data_source_identifier,
                record2.data_source_identifier
            )
            yield Correspondence(record1, record2, 1.0, causes)


def _sources_of(dataset) -> Set[int]:
    return {record.data_source_identifier for record in dataset}
