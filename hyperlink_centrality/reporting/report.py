"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
report.py

MAIN OBJECTIVE:
---------------
This script formats the results of a centrality run as a human-readable report and exports
the report and the full score table to disk.

Dependencies:
-------------
- json
- logging
- dataclasses
- pathlib
- typing
- pandas

MAIN FEATURES:
--------------
1) Text report with node/edge counts and four top-K lists
2) JSON export of the report
3) CSV export of every node's scores

Author:
-------
Antoine Lemor
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Any, Optional, Sequence
import pandas as pd

from hyperlink_centrality.core.constants import METRICS, METRIC_LABELS, SCORE_FORMAT
from hyperlink_centrality.core.models import ScoreTable, RankedEntry

logger = logging.getLogger(__name__)


@dataclass
class CentralityReport:
    """
    Results of one centrality run.
    """
    n_nodes: int
    n_edges: int
    rankings: Dict[str, List[RankedEntry]]
    top_k: int
    metric_times: Dict[str, float] = field(default_factory=dict)
    validation: Optional[Dict[str, Any]] = None
    graph_statistics: Dict[str, Any] = field(default_factory=dict)

    def format_text(self) -> str:
        """Render the report as plain text."""
        lines = [f"The network has {self.n_nodes:,} nodes and {self.n_edges:,} edges"]

        for metric in METRICS:
            if metric not in self.rankings:
                continue
            entries = self.rankings[metric]
            lines.append("")
            lines.append(f"The top {self.top_k} subreddits with the highest "
                         f"{METRIC_LABELS[metric]} are:")
            if not entries:
                lines.append("  (no nodes)")
            width = max((len(e.name) for e in entries), default=0)
            for rank, entry in enumerate(entries, 1):
                lines.append(f"  {rank:2d}. {entry.name:<{width}}  "
                             f"{SCORE_FORMAT.format(entry.score)}")

        if self.validation is not None:
            lines.append("")
            lines.append(f"Cross-validated {self.validation['n_checked']} nodes against NetworkX")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            'n_nodes': self.n_nodes,
            'n_edges': self.n_edges,
            'top_k': self.top_k,
            'rankings': {
                metric: [entry.to_dict() for entry in entries]
                for metric, entries in self.rankings.items()
            },
            'metric_times': self.metric_times,
            'validation': self.validation,
            'graph_statistics': self.graph_statistics
        }

    def export_json(self, path: Path) -> Path:
        """Write the report as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Report exported to {path}")
        return path


def export_scores(table: ScoreTable, names: Sequence[str], path: Path,
                  format: str = 'csv') -> Path:
    """
    Write every node's scores, one row per node in id order.

    Args:
        table: Completed score table
        names: Node names indexed by id
        path: Output path
        format: 'csv' or 'json' (one record per node)

    Returns:
        Path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df: pd.DataFrame = table.to_dataframe(names)
    if format == 'json':
        df.reset_index().to_json(path, orient='records', indent=2)
    else:
        df.to_csv(path)
    logger.info(f"Exported {len(df):,} node scores to {path}")
    return path
