"""
Shared infrastructure of the blockers.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Set

import pandas as pd

from ..config import get_default_blocking_config, merge_configs
from ..model.correspondence import Correspondence
from ..processing import create_processable
from ..processing.processable import Processable
from .statistics import block_size_table

logger = logging.getLogger(__name__)


class AbstractBlocker:
    """
    Base class for blockers.

    Holds the processing engine settings and the optional block size
    measurement of the last run.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize blocker with configuration.

        Args:
            config: The ``blocking`` configuration section
        """
        self.config = merge_configs(get_default_blocking_config()["blocking"], config or {})
        self.engine = self.config.get("engine", "collection")
        self.partitions = self.config.get("partitions", 1)
        self.measure_block_sizes = self.config.get("measure_block_sizes", False)
        self.log_largest_blocks = self.config.get("log_largest_blocks", 10)

        self.block_sizes: Optional[pd.DataFrame] = None

    def _create_processable(self, items: Iterable) -> Processable:
        return create_processable(items, engine=self.engine, partitions=self.partitions)

    @staticmethod
    def _validate_schema_correspondences(schema_correspondences: Optional[Iterable[Correspondence]],
                                         source_ids: Set[int]) -> tuple:
        """
        Materialise schema correspondences and check they refer to the data.

        Raises:
            ValueError: If a correspondence references none of ``source_ids``
        """
        correspondences = tuple(schema_correspondences or ())
        for correspondence in correspondences:
            if not correspondence.source_ids() & source_ids:
                raise ValueError(
                    f"Schema correspondence {correspondence!r} references data sources "
                    f"{sorted(correspondence.source_ids())}, none of which is blocked ({sorted(source_ids)})"
                )
        return correspondences

    def _measure(self, grouped1: Processable, grouped2: Optional[Processable] = None) -> None:
        """Compute and log the block size table of the current run."""
        self.block_sizes = block_size_table(grouped1, grouped2)
        logger.info(f"Measured {len(self.block_sizes)} blocks, "
                    f"{int(self.block_sizes['pairs'].sum()) if len(self.block_sizes) else 0:,} pairs in total")

        for row in self.block_sizes.head(self.log_largest_blocks).itertuples(index=False):
            logger.info(f"Block {row.blocking_key!r}: {row.pairs:,} pairs")
