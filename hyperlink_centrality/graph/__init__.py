"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (graph module)

MAIN OBJECTIVE:
---------------
This script initializes the graph module, providing the immutable graph representation and
the breadth-first distance engine that runs over it.

Dependencies:
-------------
- hyperlink_centrality.graph.store
- hyperlink_centrality.graph.traversal

MAIN FEATURES:
--------------
1) Exports Graph and GraphStore
2) Exports DistanceMap, bfs_distances and shortest_distances

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.graph.store import Graph, GraphStore
from hyperlink_centrality.graph.traversal import DistanceMap, bfs_distances, shortest_distances

__all__ = [
    'Graph',
    'GraphStore',
    'DistanceMap',
    'bfs_distances',
    'shortest_distances'
]
