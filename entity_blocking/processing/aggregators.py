"""
Aggregators used by the blocking engine.
"""

from typing import Any, Iterable, Tuple

from ..model.correspondence import Correspondence
from ..model.distribution import Distribution
from .processable import DataAggregator


class DistributionAggregator(DataAggregator):
    """
    Collects (blocked element, causes) values of one key into a Distribution.

    Values with equal blocked elements collapse into one entry whose causes
    are the union of all contributions.
    """

    def initialise(self, key: Any) -> Distribution:
        return Distribution()

    def aggregate(self, state: Distribution, value: Tuple[Any, Iterable[Correspondence]]) -> Distribution:
        element, causes = value
        state.add(element, causes)
        return state

    def merge(self, state1: Distribution, state2: Distribution) -> Distribution:
        return state1.merge(state2)

