"""
Blocking efficiency statistics.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

import pandas as pd

from ..model.distribution import Distribution

logger = logging.getLogger(__name__)


def possible_pairs(n1: int, n2: Optional[int] = None) -> int:
    """Number of comparisons without blocking."""
    if n2 is None:
        return n1 * (n1 - 1) // 2
    return n1 * n2


def reduction_ratio(candidate_count: int, n1: int, n2: Optional[int] = None) -> float:
    """
    Share of comparisons removed by blocking.

    Args:
        candidate_count: Number of generated candidate pairs
        n1: Size of the first (or only) dataset
        n2: Size of the second dataset, None for single dataset blocking

    Returns:
        1 - candidates / possible pairs, 0.0 if no pair is possible
    """
    total = possible_pairs(n1, n2)
    if total <= 0:
        return 0.0
    return 1.0 - (candidate_count / total)


def get_blocking_statistics(candidate_count: int, n1: int, n2: Optional[int] = None) -> Dict[str, Any]:
    """
    Calculate blocking efficiency statistics.

    Args:
        candidate_count: Number of generated candidate pairs
        n1: Size of the first (or only) dataset
        n2: Size of the second dataset, None for single dataset blocking

    Returns:
        Dictionary with blocking statistics
    """
    total_possible_pairs = possible_pairs(n1, n2)
    ratio = reduction_ratio(candidate_count, n1, n2)

    statistics = {
        "mode": "self" if n2 is None else "cross",
        "records_left": n1,
        "records_right": n1 if n2 is None else n2,
        "total_possible_pairs": total_possible_pairs,
        "generated_candidates": candidate_count,
        "reduction_ratio": ratio,
        "reduction_percentage": ratio * 100
    }

    logger.info(f"Blocking statistics: {candidate_count:,} candidates from "
                f"{total_possible_pairs:,} possible pairs "
                f"({statistics['reduction_percentage']:.2f}% reduction)")

    return statistics


def block_size_table(grouped1: Iterable[Tuple[Any, Distribution]],
                     grouped2: Optional[Iterable[Tuple[Any, Distribution]]] = None) -> pd.DataFrame:
    """
    Per-key block sizes of a blocking run.

    With two groupings the table has ``left_size``, ``right_size`` and the
    number of cross pairs per key (0 for keys present on one side only).
    With one grouping it has ``block_size`` and the number of internal pairs.

    Args:
        grouped1: (blocking key, Distribution) of the first dataset
        grouped2: (blocking key, Distribution) of the second dataset

    Returns:
        DataFrame sorted by number of pairs, largest first
    """
    left = pd.DataFrame(
        [(key, len(distribution)) for key, distribution in grouped1],
        columns=["blocking_key", "left_size" if grouped2 is not None else "block_size"]
    )

    if grouped2 is None:
        left["pairs"] = left["block_size"] * (left["block_size"] - 1) // 2
        table = left
    else:
        right = pd.DataFrame(
            [(key, len(distribution)) for key, distribution in grouped2],
            columns=["blocking_key", "right_size"]
        )
        # keys may be of any hashable type, and of different types per side
        left["blocking_key"] = left["blocking_key"].astype(object)
        right["blocking_key"] = right["blocking_key"].astype(object)
        table = pd.merge(left, right, on="blocking_key", how="outer")
        table[["left_size", "right_size"]] = table[["left_size", "right_size"]].fillna(0).astype(int)
        table["pairs"] = table["left_size"] * table["right_size"]

    return table.sort_values("pairs", ascending=False, kind="stable").reset_index(drop=True)
