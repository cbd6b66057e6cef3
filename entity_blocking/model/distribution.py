"""
Per-key distribution of distinct blocked elements with merged provenance.
"""

from typing import Dict, Generic, Iterable, Iterator, List, Tuple, TypeVar

from .correspondence import Correspondence, union_causes

T = TypeVar("T")


class Distribution(Generic[T]):
    """
    Distinct blocked elements of one blocking key.

    Elements are distinct by their own equality. Adding an element that is
    already present merges its causes into the existing entry and increases
    its frequency; the element is never duplicated.
    """

    def __init__(self, entries: Iterable[Tuple[T, Iterable[Correspondence]]] = ()):
        self._causes: Dict[T, Tuple[Correspondence, ...]] = {}
        self._frequency: Dict[T, int] = {}
        for element, causes in entries:
            self.add(element, causes)

    def add(self, element: T, causes: Iterable[Correspondence] = ()) -> None:
        if element in self._causes:
            self._causes[element] = union_causes(self._causes[element], causes)
            self._frequency[element] += 1
        else:
            self._causes[element] = union_causes(causes)
            self._frequency[element] = 1

    def merge(self, other: "Distribution[T]") -> "Distribution[T]":
        """Combine two partial distributions of the same key."""
        merged = Distribution(self.get_elements())
        merged._frequency = dict(self._frequency)
        for element, causes in other.get_elements():
            frequency = other.get_frequency(element)
            merged.add(element, causes)
            merged._frequency[element] += frequency - 1
        return merged

    def get_elements(self) -> List[Tuple[T, Tuple[Correspondence, ...]]]:
        return list(self._causes.items())

    def get_causes(self, element: T) -> Tuple[Correspondence, ...]:
        return self._causes[element]

    def get_frequency(self, element: T) -> int:
        return self._frequency.get(element, 0)

    def get_population_size(self) -> int:
        return sum(self._frequency.values())

    def __contains__(self, element) -> bool:
        return element in self._causes

    def __iter__(self) -> Iterator[T]:
        return iter(self._causes)

    def __len__(self) -> int:
        return len(self._causes)

    def __repr__(self) -> str:
        return f"Distribution(elements={len(self)}, population={self.get_population_size()})"
