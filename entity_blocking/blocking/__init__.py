"""
Blocking strategies for entity-blocking.

Implements key-based blocking across two datasets and within one dataset,
reducing the number of candidate pairs passed to similarity scoring.
"""

from .generators import (
    AttributeValueBlockingKeyGenerator,
    BlockingKeyGenerator,
    FunctionBlockingKeyGenerator,
    StaticBlockingKeyGenerator,
    TokenBlockingKeyGenerator,
)
from .correspondence_joiner import CorrespondenceJoiner
from .key_grouping import KeyGroupingEngine
from .cross_dataset import CrossDatasetBlocker
from .self_blocking import SelfBlocker
from .standard_blocker import StandardBlocker
from .statistics import block_size_table, get_blocking_statistics, reduction_ratio

__all__ = [
    "AttributeValueBlockingKeyGenerator",
    "BlockingKeyGenerator",
    "FunctionBlockingKeyGenerator",
    "StaticBlockingKeyGenerator",
    "TokenBlockingKeyGenerator",
    "CorrespondenceJoiner",
    "KeyGroupingEngine",
    "CrossDatasetBlocker",
    "SelfBlocker",
    "StandardBlocker",
    "block_size_table",
    "get_blocking_statistics",
    "reduction_ratio",
]
