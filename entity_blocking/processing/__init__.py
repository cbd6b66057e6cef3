"""
Collection-processing substrate for entity-blocking.

Provides the Processable contract and two engines: a lazy in-memory
collection and a pandas-backed collection.
"""

from typing import Iterable, Optional

from .processable import DataAggregator, Processable
from .collection import ProcessableCollection
from .dataframe import DataFrameProcessable
from .aggregators import DistributionAggregator

ENGINES = ("collection", "dataframe")


def create_processable(items: Optional[Iterable] = None, engine: str = "collection",
                       partitions: int = 1) -> Processable:
    """
    Create a processable collection on the requested engine.

    Args:
        items: Elements of the collection
        engine: "collection" (lazy, in-memory) or "dataframe" (pandas)
        partitions: Aggregation partitions for the dataframe engine

    Returns:
        Processable holding the items
    """
    if engine == "collection":
        return ProcessableCollection(items)
    if engine == "dataframe":
        return DataFrameProcessable(items, partitions=partitions)
    raise ValueError(f"Unknown processing engine '{engine}'. Available: {list(ENGINES)}")


__all__ = [
    "DataAggregator",
    "Processable",
    "ProcessableCollection",
    "DataFrameProcessable",
    "DistributionAggregator",
    "ENGINES",
    "create_processable",
]
