"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
validation.py

MAIN OBJECTIVE:
---------------
This script cross-checks computed centrality scores against NetworkX on a sample of nodes,
so a run can prove its scores before they are reported.

Dependencies:
-------------
- logging
- typing
- numpy
- networkx

MAIN FEATURES:
--------------
1) Deterministic node sampling
2) Degree and Wasserman-Faust closeness recomputed with NetworkX
3) Per-metric maximum deviation report
4) ValidationError on any mismatch beyond tolerance

Author:
-------
Antoine Lemor
"""

import logging
from typing import Dict, Any, List, Optional
import numpy as np
import networkx as nx

from hyperlink_centrality.core.constants import METRICS, OUT_DEGREE, IN_DEGREE, OUT_CLOSENESS, IN_CLOSENESS
from hyperlink_centrality.core.exceptions import ValidationError
from hyperlink_centrality.core.models import ScoreTable
from hyperlink_centrality.graph.store import Graph

logger = logging.getLogger(__name__)


class CentralityValidator:
    """
    Recomputes a sample of scores with NetworkX and compares.
    """

    def __init__(self, tolerance: float = 1e-9, seed: int = 0):
        self.tolerance = tolerance
        self.seed = seed

    def sample_nodes(self, n_nodes: int, sample_size: int) -> List[int]:
        """Pick up to sample_size distinct node ids, reproducibly."""
        if sample_size >= n_nodes:
            return list(range(n_nodes))
        rng = np.random.default_rng(self.seed)
        return sorted(rng.choice(n_nodes, size=sample_size, replace=False).tolist())

    def reference_scores(self, graph: Graph, nodes: List[int]) -> Dict[str, Dict[int, float]]:
        """NetworkX scores for the given nodes."""
        n = graph.n_nodes
        G = graph.to_networkx()
        # NetworkX closeness on a DiGraph uses incoming distances
        G_out = G.reverse(copy=False)

        reference = {metric: {} for metric in METRICS}
        for node in nodes:
            reference[OUT_DEGREE][node] = G.out_degree(node) / n
            reference[IN_DEGREE][node] = G.in_degree(node) / n
            reference[OUT_CLOSENESS][node] = nx.closeness_centrality(G_out, u=node, wf_improved=True)
            reference[IN_CLOSENESS][node] = nx.closeness_centrality(G, u=node, wf_improved=True)
        return reference

    def validate(self, graph: Graph, table: ScoreTable, sample_size: int) -> Dict[str, Any]:
        """
        Compare a sample of the table with NetworkX.

        Args:
            graph: Graph the table was computed on
            table: Completed score table
            sample_size: Number of nodes to check

        Returns:
            Report with the checked nodes and max deviation per metric
        """
        nodes = self.sample_nodes(graph.n_nodes, sample_size)
        if not nodes:
            return {'n_checked': 0, 'max_deviation': {}}

        logger.info(f"Cross-validating {len(nodes)} nodes against NetworkX...")
        reference = self.reference_scores(graph, nodes)

        max_deviation = {}
        mismatches = []
        for metric in table.metrics:
            column = table.column(metric)
            worst = 0.0
            for node in nodes:
                deviation = abs(float(column[node]) - reference[metric][node])
                worst = max(worst, deviation)
                if deviation > self.tolerance:
                    mismatches.append((metric, graph.names[node], float(column[node]),
                                       reference[metric][node]))
            max_deviation[metric] = worst

        if mismatches:
            metric, name, got, expected = mismatches[0]
            raise ValidationError(
                f"{len(mismatches)} scores differ from NetworkX; first: "
                f"{metric} of {name!r} = {got!r}, expected {expected!r}"
            )

        logger.info(f"Cross-validation passed (max deviation "
                    f"{max(max_deviation.values(), default=0.0):.2e})")
        return {'n_checked': len(nodes), 'max_deviation': max_deviation}
