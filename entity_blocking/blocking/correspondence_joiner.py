"""
Association of records with the schema correspondences applicable to them.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..model.correspondence import Correspondence
from ..model.matchable import Record
from ..processing.processable import Processable

logger = logging.getLogger(__name__)

FIRST = "first"
SECOND = "second"
ROLES = (FIRST, SECOND)


class CorrespondenceJoiner:
    """
    Attaches schema correspondences to records by source identifier.

    A record matches a correspondence when its data source identifier equals
    the source identifier of the correspondence side given by its role.
    """

    def __init__(self, schema_correspondences: Optional[Iterable[Correspondence]] = None):
        """
        Initialize joiner.

        Args:
            schema_correspondences: Schema correspondences; None means none
        """
        self.schema_correspondences: Tuple[Correspondence, ...] = tuple(schema_correspondences or ())
        self._index = {role: self._build_index(role) for role in ROLES}

        logger.debug(f"Initialized CorrespondenceJoiner with {len(self.schema_correspondences)} "
                     f"schema correspondences")

    def _build_index(self, role: str) -> Dict[int, Tuple[Correspondence, ...]]:
        index: Dict[int, List[Correspondence]] = defaultdict(list)
        for correspondence in self.schema_correspondences:
            side = correspondence.first if role == FIRST else correspondence.second
            index[side.data_source_identifier].append(correspondence)
        return {source: tuple(correspondences) for source, correspondences in index.items()}

    def applicable(self, record: Record, role: str) -> Tuple[Correspondence, ...]:
        """Correspondences whose ``role`` side comes from the record's data source."""
        if role not in self._index:
            raise ValueError(f"Unknown correspondence role '{role}'. Available: {list(ROLES)}")
        return self._index[role].get(record.data_source_identifier, ())

    def combine(self, records: Processable, roles: Sequence[str] = (FIRST,)) -> Processable:
        """
        Pair every record with its applicable correspondences.

        With several roles (single dataset blocking, where a record may be on
        either side) each record is emitted once per role.

        Args:
            records: Processable of records
            roles: Correspondence sides to match against

        Returns:
            Processable of (record, correspondences) pairs
        """
        for role in roles:
            if role not in self._index:
                raise ValueError(f"Unknown correspondence role '{role}'. Available: {list(ROLES)}")
        roles = tuple(roles)
        return records.transform(lambda record: [(record, self.applicable(record, role)) for role in roles])
