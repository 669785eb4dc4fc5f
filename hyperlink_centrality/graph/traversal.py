"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
traversal.py

MAIN OBJECTIVE:
---------------
This script computes exact shortest hop distances from a start node with a level-synchronous
breadth-first search over CSR adjacency arrays, in either edge direction.

Dependencies:
-------------
- dataclasses
- typing
- numpy

MAIN FEATURES:
--------------
1) Vectorised frontier expansion (one numpy gather per BFS level)
2) O(1) visited test through a dense distance array indexed by node id
3) DistanceMap results holding only reachable nodes, start node excluded
4) Forward (outgoing) and reverse (incoming) traversal of the same Graph

Author:
-------
Antoine Lemor
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple
import numpy as np

from hyperlink_centrality.core.constants import FORWARD
from hyperlink_centrality.core.exceptions import ComputationFault
from hyperlink_centrality.graph.store import Graph

UNVISITED = -1


@dataclass(frozen=True, eq=False)
class DistanceMap:
    """
    Reachable node -> hop distance from a start node.

    ``nodes`` and ``distances`` are parallel arrays sorted by node id.
    The start node is never included.
    """
    start: int
    nodes: np.ndarray
    distances: np.ndarray

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node: int) -> bool:
        i = np.searchsorted(self.nodes, node)
        return bool(i < len(self.nodes) and self.nodes[i] == node)

    def __getitem__(self, node: int) -> int:
        i = np.searchsorted(self.nodes, node)
        if i < len(self.nodes) and self.nodes[i] == node:
            return int(self.distances[i])
        raise KeyError(node)

    def get(self, node: int, default: Optional[int] = None) -> Optional[int]:
        try:
            return self[node]
        except KeyError:
            return default

    def items(self) -> Iterator[Tuple[int, int]]:
        return zip(self.nodes.tolist(), self.distances.tolist())

    def total(self) -> int:
        """Sum of all distances."""
        return int(self.distances.sum(dtype=np.int64))

    def eccentricity(self) -> int:
        """Largest distance to a reachable node (0 when nothing is reachable)."""
        return int(self.distances.max()) if len(self.distances) else 0

    def to_dict(self) -> Dict[int, int]:
        return dict(self.items())


def expand_frontier(indptr: np.ndarray, indices: np.ndarray, frontier: np.ndarray) -> np.ndarray:
    """
    Concatenate the adjacency lists of every frontier node in one gather.

    Args:
        indptr: CSR row pointers
        indices: CSR column indices
        frontier: Node ids to expand

    Returns:
        All neighbours of the frontier (with repeats)
    """
    starts = indptr[frontier]
    counts = indptr[frontier + 1] - starts
    total = int(counts.sum())
    if total == 0:
        return indices[:0]

    # Position k of row i maps to starts[i] + (k - offset_i)
    offsets = np.cumsum(counts) - counts
    positions = np.repeat(starts - offsets, counts) + np.arange(total, dtype=np.int64)
    return indices[positions]


def bfs_distances(indptr: np.ndarray,
                  indices: np.ndarray,
                  start: int,
                  dist: Optional[np.ndarray] = None) -> DistanceMap:
    """
    Breadth-first search from ``start`` over one CSR adjacency.

    Args:
        indptr: CSR row pointers (length N + 1)
        indices: CSR column indices
        start: Start node id
        dist: Optional scratch buffer of length N filled with UNVISITED;
              it is restored to UNVISITED before returning

    Returns:
        DistanceMap of every reachable node except ``start``
    """
    n = len(indptr) - 1
    if not 0 <= start < n:
        raise ComputationFault(f"Start node {start} outside [0, {n})")

    if dist is None:
        dist = np.full(n, UNVISITED, dtype=np.int32)

    dist[start] = 0
    frontier = np.array([start], dtype=np.int64)
    levels = []
    level = 0

    while len(frontier):
        level += 1
        neighbours = expand_frontier(indptr, indices, frontier)
        fresh = neighbours[dist[neighbours] == UNVISITED]
        if len(fresh) == 0:
            break
        # Same node can be reached from several frontier nodes
        fresh = np.unique(fresh)
        dist[fresh] = level
        levels.append(fresh)
        frontier = fresh

    if levels:
        reached = np.concatenate(levels)
        reached.sort()
        distances = dist[reached].astype(np.int32)
        dist[reached] = UNVISITED
    else:
        reached = np.empty(0, dtype=np.int64)
        distances = np.empty(0, dtype=np.int32)
    dist[start] = UNVISITED

    return DistanceMap(start=start, nodes=reached.astype(np.int64), distances=distances)


def shortest_distances(graph: Graph, start_node: int, direction: str = FORWARD) -> DistanceMap:
    """
    Shortest hop distances from a node of a Graph.

    Args:
        graph: Graph built by GraphStore
        start_node: Start node id
        direction: FORWARD for outgoing paths, REVERSE for incoming paths

    Returns:
        DistanceMap of reachable nodes
    """
    indptr, indices = graph.adjacency(direction)
    return bfs_distances(indptr, indices, start_node)
