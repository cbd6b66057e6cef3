"""
Identity contract shared by every entity that takes part in blocking.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Matchable(Protocol):
    """Anything with a unique identifier and the id of its originating dataset."""

    @property
    def identifier(self) -> str:
        ...

    @property
    def data_source_identifier(self) -> int:
        ...


@dataclass(frozen=True)
class Record:
    """
    A single record drawn from one dataset.

    Equality and hashing only consider the identifier and the source
    identifier; attribute values are carried along for key generation.
    """

    identifier: str
    data_source_identifier: int
    values: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def get_value(self, attribute: str, default: Any = None) -> Any:
        return self.values.get(attribute, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"identifier": self.identifier,
                "data_source_identifier": self.data_source_identifier,
                **dict(self.values)}


@dataclass(frozen=True)
class Attribute:
    """Schema element of a dataset, used as endpoint of schema correspondences."""

    identifier: str
    data_source_identifier: int
    name: str = ""

    def __str__(self) -> str:
        return self.name or self.identifier
