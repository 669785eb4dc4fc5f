"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
closeness.py

MAIN OBJECTIVE:
---------------
This script turns one node's breadth-first distance map into its Wasserman-Faust adjusted
closeness centrality, the score used for disconnected directed graphs.

Dependencies:
-------------
- typing
- numpy

MAIN FEATURES:
--------------
1) Exact WF closeness: ((n-1)/(N-1)) * ((n-1)/sum_d)
2) Explicit 0.0 for nodes that reach nothing
3) Per-node task helper combining BFS and aggregation

Author:
-------
Antoine Lemor
"""

from typing import Optional
import numpy as np

from hyperlink_centrality.core.exceptions import ComputationFault
from hyperlink_centrality.graph.traversal import DistanceMap, bfs_distances


def wf_closeness(reachable: int, total_distance: int, n_nodes: int) -> float:
    """
    Wasserman-Faust closeness from aggregate counts.

    Args:
        reachable: Nodes reached, start excluded (n - 1)
        total_distance: Sum of hop distances to those nodes
        n_nodes: Graph size N

    Returns:
        Closeness in [0, 1]
    """
    if reachable <= 0:
        return 0.0
    if n_nodes < 2:
        raise ComputationFault(f"Closeness needs at least 2 nodes, graph has {n_nodes}")

    # First factor shrinks scores of nodes that only reach a small component
    return (reachable / (n_nodes - 1)) * (reachable / total_distance)


def closeness(distance_map: DistanceMap, n_nodes: int) -> float:
    """
    Closeness centrality of the start node of a distance map.

    Args:
        distance_map: Distances from the start node to every reachable node
        n_nodes: Graph size N

    Returns:
        WF-adjusted closeness, 0.0 for an isolated start node
    """
    return wf_closeness(len(distance_map), distance_map.total(), n_nodes)


def node_closeness(indptr: np.ndarray,
                   indices: np.ndarray,
                   node: int,
                   dist: Optional[np.ndarray] = None) -> float:
    """BFS from ``node`` and aggregate in one step."""
    n_nodes = len(indptr) - 1
    return closeness(bfs_distances(indptr, indices, node, dist), n_nodes)
