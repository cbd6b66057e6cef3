"""
Datasets of records.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Set

import pandas as pd

from .matchable import Record

logger = logging.getLogger(__name__)


class DataSet:
    """
    Ordered collection of records.

    When a data source identifier is given, every record must carry it.
    Otherwise it is inferred when all records share one source and left
    as None for combined datasets.
    """

    def __init__(self, records: Iterable[Record], data_source_identifier: Optional[int] = None):
        """
        Initialize dataset.

        Args:
            records: Records of the dataset
            data_source_identifier: Expected source identifier of all records
        """
        self._records: List[Record] = list(records)

        if data_source_identifier is None:
            sources = self.source_identifiers()
            self.data_source_identifier = next(iter(sources)) if len(sources) == 1 else None
            return

        self.data_source_identifier = data_source_identifier
        mismatched = [r.identifier for r in self._records
                      if r.data_source_identifier != data_source_identifier]
        if mismatched:
            raise ValueError(
                f"Records {mismatched[:5]} do not belong to data source {data_source_identifier}"
            )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, id_column: str,
                       data_source_identifier: int) -> "DataSet":
        """
        Build a dataset from a DataFrame, one record per row.

        Args:
            df: Input DataFrame
            id_column: Column holding the record identifier
            data_source_identifier: Source identifier assigned to every record

        Returns:
            DataSet with one record per row
        """
        if id_column not in df.columns:
            raise ValueError(f"Identifier column '{id_column}' not found in DataFrame")

        records = []
        for row in _restore_integer_columns(df).to_dict(orient="records"):
            values = {k: v for k, v in row.items() if k != id_column and not _is_missing(v)}
            records.append(Record(str(row[id_column]), data_source_identifier, values))

        logger.info(f"Created dataset {data_source_identifier} with {len(records)} records")
        return cls(records, data_source_identifier)

    def source_identifiers(self) -> Set[int]:
        return {record.data_source_identifier for record in self._records}

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"DataSet(data_source_identifier={self.data_source_identifier}, size={len(self)})"


def _restore_integer_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Undo pandas' float upcast of integer columns holding missing values.

    A float column whose present values are all integral becomes a nullable
    Int64 column, so 21287 is not read back as 21287.0.
    """
    restored = df.copy()
    for column in restored.select_dtypes(include="float").columns:
        present = restored[column].dropna()
        if len(present) and (present % 1 == 0).all():
            restored[column] = restored[column].astype("Int64")
    return restored


def _is_missing(value) -> bool:
    # pd.isna is elementwise on list-like values
    if isinstance(value, (list, tuple, set, dict)):
        return False
    return bool(pd.isna(value))
