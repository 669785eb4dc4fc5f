"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
models.py

MAIN OBJECTIVE:
---------------
This script defines the result data structures of the centrality framework: the write-once
score table filled by the parallel scheduler and the ranked entries read from it.

Dependencies:
-------------
- dataclasses
- typing
- numpy
- pandas

MAIN FEATURES:
--------------
1) ScoreTable with one write-once float64 column per metric
2) Conversion of the table to a pandas DataFrame for export
3) RankedEntry records for top-K reports

Author:
-------
Antoine Lemor
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd

from hyperlink_centrality.core.constants import METRICS
from hyperlink_centrality.core.exceptions import ComputationFault


class ScoreTable:
    """
    Per-node centrality scores indexed by dense node id.

    Each metric column is stored exactly once, after the scheduler barrier,
    and is read-only from then on.
    """

    def __init__(self, n_nodes: int):
        self.n_nodes = n_nodes
        self._columns: Dict[str, np.ndarray] = {}

    def set_column(self, metric: str, values: np.ndarray) -> None:
        """Store a completed metric column."""
        if metric not in METRICS:
            raise ComputationFault(f"Unknown metric: {metric!r}")
        if metric in self._columns:
            raise ComputationFault(f"Column {metric!r} already written")

        values = np.array(values, dtype=np.float64, copy=True)
        if values.shape != (self.n_nodes,):
            raise ComputationFault(
                f"Column {metric!r} has shape {values.shape}, expected ({self.n_nodes},)"
            )
        values.setflags(write=False)
        self._columns[metric] = values

    def column(self, metric: str) -> np.ndarray:
        """Get a completed metric column."""
        try:
            return self._columns[metric]
        except KeyError:
            raise ComputationFault(f"Column {metric!r} has not been computed")

    def has_column(self, metric: str) -> bool:
        return metric in self._columns

    @property
    def metrics(self) -> List[str]:
        return [m for m in METRICS if m in self._columns]

    @property
    def is_complete(self) -> bool:
        return all(m in self._columns for m in METRICS)

    def get(self, node_id: int) -> Dict[str, float]:
        """Get all computed scores of one node."""
        return {m: float(self._columns[m][node_id]) for m in self.metrics}

    def to_dataframe(self, names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Convert to a DataFrame with one row per node, in node id order."""
        df = pd.DataFrame(
            {m: self._columns[m] for m in self.metrics},
            index=pd.RangeIndex(self.n_nodes, name='node_id')
        )
        if names is not None:
            df.insert(0, 'name', list(names))
        return df

    def __len__(self) -> int:
        return self.n_nodes


@dataclass(frozen=True)
class RankedEntry:
    """Single row of a top-K ranking."""
    node_id: int
    name: str
    score: float

    def as_tuple(self) -> Tuple[str, float]:
        return self.name, self.score

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'node_id': self.node_id,
            'name': self.name,
            'score': self.score
        }
