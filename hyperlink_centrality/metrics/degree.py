"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
degree.py

MAIN OBJECTIVE:
---------------
This script computes out- and in-degree centrality from the adjacency list sizes of the graph.

Dependencies:
-------------
- numpy

MAIN FEATURES:
--------------
1) Degree centrality |adjacency[u]| / N for one node or a whole node range
2) Direction-aware (forward = out-degree, reverse = in-degree)

Author:
-------
Antoine Lemor
"""

import numpy as np

from hyperlink_centrality.core.constants import FORWARD
from hyperlink_centrality.graph.store import Graph


def degree_centrality_range(indptr: np.ndarray, start: int, stop: int) -> np.ndarray:
    """Degree centrality of nodes [start, stop) from CSR row pointers."""
    n_nodes = len(indptr) - 1
    counts = indptr[start + 1:stop + 1] - indptr[start:stop]
    return counts.astype(np.float64) / n_nodes


def degree_centrality(graph: Graph, direction: str = FORWARD) -> np.ndarray:
    """Degree centrality of every node (empty for an empty graph)."""
    indptr, _ = graph.adjacency(direction)
    if graph.n_nodes == 0:
        return np.zeros(0, dtype=np.float64)
    return degree_centrality_range(indptr, 0, graph.n_nodes)
