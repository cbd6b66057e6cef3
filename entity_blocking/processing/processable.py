"""
Capability contract of the collection-processing substrate.

Blocking is expressed entirely in terms of these operations so that the
same algorithm runs on a lazy in-memory collection or on a pandas-backed
one.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")
V = TypeVar("V")
S = TypeVar("S")
R = TypeVar("R")


class DataAggregator(ABC, Generic[K, V, S, R]):
    """
    Folds the values of one group into a result.

    ``merge`` combines two partial states of the same key so that substrates
    can aggregate partitions independently.
    """

    @abstractmethod
    def initialise(self, key: K) -> S:
        raise NotImplementedError

    @abstractmethod
    def aggregate(self, state: S, value: V) -> S:
        raise NotImplementedError

    @abstractmethod
    def merge(self, state1: S, state2: S) -> S:
        raise NotImplementedError

    def create_final_value(self, key: K, state: S) -> R:
        return state


class Processable(ABC, Generic[T]):
    """Collection supporting the operations blocking is built from."""

    @abstractmethod
    def __iter__(self) -> Iterator[T]:
        raise NotImplementedError

    @abstractmethod
    def transform(self, mapper: Callable[[T], Iterable[U]]) -> "Processable[U]":
        """Fan-out transform: every element maps to zero or more outputs."""
        raise NotImplementedError

    @abstractmethod
    def filter(self, predicate: Callable[[T], bool]) -> "Processable[T]":
        raise NotImplementedError

    @abstractmethod
    def append(self, other: Iterable[T]) -> "Processable[T]":
        raise NotImplementedError

    @abstractmethod
    def distinct(self, key: Optional[Callable[[T], Hashable]] = None) -> "Processable[T]":
        """Remove duplicates; ``key`` defines equality, defaulting to the element itself."""
        raise NotImplementedError

    @abstractmethod
    def aggregate(self, key_mapper: Callable[[T], Iterable[Tuple[K, V]]],
                  aggregator: DataAggregator[K, V, Any, R]) -> "Processable[Tuple[K, R]]":
        """
        Group by key and aggregate.

        Args:
            key_mapper: Emits zero or more (key, value) pairs per element
            aggregator: Folds all values of a key into one result

        Returns:
            Processable of (key, aggregated result)
        """
        raise NotImplementedError

    @abstractmethod
    def join(self, other: "Processable[U]", key: Callable[[T], Hashable],
             other_key: Optional[Callable[[U], Hashable]] = None) -> "Processable[Tuple[T, U]]":
        """Inner equi-join; elements without a partner are dropped."""
        raise NotImplementedError

    def count(self) -> int:
        return sum(1 for _ in self)

    def get(self) -> List[T]:
        return list(self)

    def first(self) -> Optional[T]:
        return next(iter(self), None)
