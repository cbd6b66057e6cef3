"""
Lazy in-memory implementation of the processing substrate.

Every operation returns a new collection that recomputes from its source
each time it is iterated, so results are restartable and nothing is
materialised until consumed.
"""

from collections import defaultdict
from itertools import chain
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, Optional, Tuple

from .processable import DataAggregator, Processable


class ProcessableCollection(Processable):
    """Lazy, restartable collection backed by an iterable factory."""

    def __init__(self, items: Optional[Iterable] = None,
                 source: Optional[Callable[[], Iterable]] = None):
        """
        Initialize collection.

        Args:
            items: Elements of the collection (materialised once if they are
                a one-shot iterator)
            source: Zero-argument callable producing the elements on demand
        """
        if source is not None:
            self._source = source
        else:
            if items is None:
                items = ()
            elif not isinstance(items, (list, tuple, Processable)):
                items = list(items)
            self._source = lambda: items

    def __iter__(self) -> Iterator:
        return iter(self._source())

    def _derive(self, generate: Callable[[], Iterable]) -> "ProcessableCollection":
        return ProcessableCollection(source=generate)

    def transform(self, mapper: Callable[[Any], Iterable]) -> "ProcessableCollection":
        return self._derive(lambda: (out for element in self for out in mapper(element)))

    def filter(self, predicate: Callable[[Any], bool]) -> "ProcessableCollection":
        return self._derive(lambda: (element for element in self if predicate(element)))

    def append(self, other: Iterable) -> "ProcessableCollection":
        if other is None:
            return self
        return self._derive(lambda: chain(self, other))

    def distinct(self, key: Optional[Callable[[Any], Hashable]] = None) -> "ProcessableCollection":
        def generate():
            seen = set()
            for element in self:
                identity = key(element) if key else element
                if identity not in seen:
                    seen.add(identity)
                    yield element
        return self._derive(generate)

    def aggregate(self, key_mapper: Callable[[Any], Iterable[Tuple[Any, Any]]],
                  aggregator: DataAggregator) -> "ProcessableCollection":
        def generate():
            states: Dict[Any, Any] = {}
            for element in self:
                for key, value in key_mapper(element):
                    if key not in states:
                        states[key] = aggregator.initialise(key)
                    states[key] = aggregator.aggregate(states[key], value)
            for key, state in states.items():
                yield key, aggregator.create_final_value(key, state)
        return self._derive(generate)

    def join(self, other: Processable, key: Callable[[Any], Hashable],
             other_key: Optional[Callable[[Any], Hashable]] = None) -> "ProcessableCollection":
        other_key = other_key or key

        def generate():
            index = defaultdict(list)
            for element in other:
                index[other_key(element)].append(element)
            for element in self:
                for partner in index.get(key(element), ()):
                    yield element, partner
        return self._derive(generate)

    def __repr__(self) -> str:
        return "ProcessableCollection(lazy)"
