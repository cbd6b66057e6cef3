"""
Correspondences between matchable elements.
"""

from dataclasses import dataclass
from typing import FrozenSet, Generic, Iterable, Tuple, TypeVar

A = TypeVar("A")
B = TypeVar("B")


@dataclass(frozen=True)
class Correspondence(Generic[A, B]):
    """
    Typed link between two elements.

    ``causes`` holds the schema correspondences that justify the link.
    """

    first: A
    second: B
    similarity: float = 1.0
    causes: Tuple["Correspondence", ...] = ()

    def __post_init__(self):
        if self.causes is None:
            object.__setattr__(self, "causes", ())
        elif not isinstance(self.causes, tuple):
            object.__setattr__(self, "causes", tuple(self.causes))

    def source_ids(self) -> FrozenSet[int]:
        """Source identifiers of both endpoints."""
        return frozenset((self.first.data_source_identifier,
                          self.second.data_source_identifier))

    def identity(self) -> Tuple:
        """Structural identity with causes compared as a set."""
        return (self.first, self.second, self.similarity, frozenset(self.causes))

    def __repr__(self) -> str:
        return (f"Correspondence({getattr(self.first, 'identifier', self.first)!s} <-> "
                f"{getattr(self.second, 'identifier', self.second)!s}, "
                f"similarity={self.similarity}, causes={len(self.causes)})")


def union_causes(*cause_sets: Iterable[Correspondence]) -> Tuple[Correspondence, ...]:
    """Union of correspondence collections, first-seen order, no duplicates."""
    merged = {}
    for causes in cause_sets:
        for cause in causes:
            merged.setdefault(cause, None)
    return tuple(merged)


def filter_causes_by_sources(causes: Iterable[Correspondence], first_source: int,
                             second_source: int) -> Tuple[Correspondence, ...]:
    """Keep causes whose endpoints' source identifiers equal exactly {first, second}."""
    expected = frozenset((first_source, second_source))
    return tuple(c for c in causes if c.source_ids() == expected)
