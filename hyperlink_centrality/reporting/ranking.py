"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
ranking.py

MAIN OBJECTIVE:
---------------
This script extracts the top-K nodes of each centrality column, sorted by score descending
with a deterministic tie-break.

Dependencies:
-------------
- typing
- numpy

MAIN FEATURES:
--------------
1) Top-K extraction with a stable sort (ties keep first-seen input order)
2) Rankings for every column of a ScoreTable

Author:
-------
Antoine Lemor
"""

from typing import Dict, List, Optional, Sequence
import numpy as np

from hyperlink_centrality.core.constants import DEFAULT_TOP_K
from hyperlink_centrality.core.models import ScoreTable, RankedEntry


class RankingExtractor:
    """
    Builds top-K lists from score columns.

    Ties are broken by ascending node id. Node ids follow first appearance
    in the edge list, so equal scores are listed in input order.
    """

    def __init__(self, k: int = DEFAULT_TOP_K):
        self.k = k

    def top_k(self, scores: np.ndarray, names: Sequence[str],
              k: Optional[int] = None) -> List[RankedEntry]:
        """
        Highest-scoring nodes of one column.

        Args:
            scores: Column indexed by node id
            names: Node names indexed by node id
            k: Number of entries (defaults to the extractor's k)

        Returns:
            Up to k entries, best first
        """
        k = self.k if k is None else k
        scores = np.asarray(scores, dtype=np.float64)
        if len(scores) != len(names):
            raise ValueError(f"{len(scores)} scores for {len(names)} names")

        k = min(k, len(scores))
        if k <= 0:
            return []

        order = np.argsort(-scores, kind='stable')[:k]
        return [RankedEntry(int(i), names[i], float(scores[i])) for i in order]

    def rank_all(self, table: ScoreTable, names: Sequence[str],
                 k: Optional[int] = None) -> Dict[str, List[RankedEntry]]:
        """Top-K lists for every computed column of the table."""
        return {metric: self.top_k(table.column(metric), names, k) for metric in table.metrics}
