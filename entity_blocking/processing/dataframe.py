"""
pandas-backed implementation of the processing substrate.

Elements are held in an object column of a DataFrame. Grouping uses
``DataFrame.groupby``, joins use ``pandas.merge`` and duplicate removal uses
``drop_duplicates``. Aggregation runs per partition and combines the partial
states with the aggregator's ``merge``.
"""

import logging
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from .processable import DataAggregator, Processable

logger = logging.getLogger(__name__)

VALUE_COLUMN = "value"
KEY_COLUMN = "_key"


class DataFrameProcessable(Processable):
    """Eager collection stored in a single-column DataFrame."""

    def __init__(self, items: Optional[Iterable] = None, partitions: int = 1):
        """
        Initialize collection.

        Args:
            items: Elements of the collection
            partitions: Number of partitions aggregation is split into
        """
        if partitions < 1:
            raise ValueError(f"partitions must be >= 1, got {partitions}")
        self.partitions = partitions
        self._df = _to_frame(list(items) if items is not None else [])

    @classmethod
    def _from_frame(cls, df: pd.DataFrame, partitions: int) -> "DataFrameProcessable":
        result = cls(partitions=partitions)
        result._df = df.reset_index(drop=True)
        return result

    def _derive(self, items: List) -> "DataFrameProcessable":
        result = DataFrameProcessable(partitions=self.partitions)
        result._df = _to_frame(items)
        return result

    def __iter__(self) -> Iterator:
        return iter(self._df[VALUE_COLUMN].tolist())

    def __len__(self) -> int:
        return len(self._df)

    def count(self) -> int:
        return len(self._df)

    def to_frame(self) -> pd.DataFrame:
        return self._df.copy()

    def transform(self, mapper: Callable[[Any], Iterable]) -> "DataFrameProcessable":
        return self._derive([out for value in self._df[VALUE_COLUMN] for out in mapper(value)])

    def filter(self, predicate: Callable[[Any], bool]) -> "DataFrameProcessable":
        mask = [bool(predicate(value)) for value in self._df[VALUE_COLUMN]]
        return self._from_frame(self._df.loc[mask], self.partitions)

    def append(self, other: Iterable) -> "DataFrameProcessable":
        if other is None:
            return self
        other_df = other._df if isinstance(other, DataFrameProcessable) else _to_frame(list(other))
        return self._from_frame(pd.concat([self._df, other_df], ignore_index=True), self.partitions)

    def distinct(self, key: Optional[Callable[[Any], Hashable]] = None) -> "DataFrameProcessable":
        if self._df.empty:
            return self
        keys = pd.Series([key(v) if key else v for v in self._df[VALUE_COLUMN]],
                         index=self._df.index, dtype=object)
        keyed = self._df.assign(**{KEY_COLUMN: keys})
        deduplicated = keyed.drop_duplicates(subset=[KEY_COLUMN], keep="first")
        return self._from_frame(deduplicated[[VALUE_COLUMN]], self.partitions)

    def aggregate(self, key_mapper: Callable[[Any], Iterable[Tuple[Any, Any]]],
                  aggregator: DataAggregator) -> "DataFrameProcessable":
        rows = [(key, value) for element in self._df[VALUE_COLUMN] for key, value in key_mapper(element)]
        if not rows:
            return self._derive([])

        keyed = pd.DataFrame({
            KEY_COLUMN: pd.Series([key for key, _ in rows], dtype=object),
            VALUE_COLUMN: pd.Series([value for _, value in rows], dtype=object),
        })

        states: Dict[Any, Any] = {}
        for partition in _split(keyed, self.partitions):
            for key, group in partition.groupby(KEY_COLUMN, sort=False, dropna=False):
                state = aggregator.initialise(key)
                for value in group[VALUE_COLUMN]:
                    state = aggregator.aggregate(state, value)
                states[key] = aggregator.merge(states[key], state) if key in states else state

        logger.debug(f"Aggregated {len(rows)} keyed values into {len(states)} groups "
                     f"over {self.partitions} partition(s)")
        return self._derive([(key, aggregator.create_final_value(key, state))
                             for key, state in states.items()])

    def join(self, other: Processable, key: Callable[[Any], Hashable],
             other_key: Optional[Callable[[Any], Hashable]] = None) -> "DataFrameProcessable":
        other_key = other_key or key
        right_values = other._df[VALUE_COLUMN].tolist() if isinstance(other, DataFrameProcessable) else list(other)

        left = pd.DataFrame({
            KEY_COLUMN: pd.Series([key(v) for v in self._df[VALUE_COLUMN]], dtype=object),
            "left": pd.Series(self._df[VALUE_COLUMN].tolist(), dtype=object),
        })
        right = pd.DataFrame({
            KEY_COLUMN: pd.Series([other_key(v) for v in right_values], dtype=object),
            "right": pd.Series(right_values, dtype=object),
        })
        if left.empty or right.empty:
            return self._derive([])

        joined = pd.merge(left, right, on=KEY_COLUMN, how="inner")
        return self._derive(list(zip(joined["left"], joined["right"])))

    def __repr__(self) -> str:
        return f"DataFrameProcessable(size={len(self)}, partitions={self.partitions})"


def _to_frame(items: List) -> pd.DataFrame:
    return pd.DataFrame({VALUE_COLUMN: pd.Series(items, dtype=object)})


def _split(df: pd.DataFrame, partitions: int) -> List[pd.DataFrame]:
    size = -(-len(df) // partitions)
    return [df.iloc[start:start + size] for start in range(0, len(df), size)]
