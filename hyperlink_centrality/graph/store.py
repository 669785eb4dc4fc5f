"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
store.py

MAIN OBJECTIVE:
---------------
This script builds the immutable directed graph used by every centrality computation: node
names are interned into dense integer ids and edges are stored as forward and reverse CSR
adjacency arrays.

Dependencies:
-------------
- logging
- typing
- numpy
- networkx

MAIN FEATURES:
--------------
1) Deterministic first-seen interning of node names into ids [0, N)
2) Forward and reverse CSR adjacency built with stable sorts (input order kept per row)
3) Optional de-duplication of repeated edges
4) Read-only arrays shared safely between worker threads and processes
5) Export to NetworkX for reference checks

Author:
-------
Antoine Lemor
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Any
import numpy as np
import networkx as nx

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.constants import FORWARD, REVERSE
from hyperlink_centrality.core.exceptions import InputError

logger = logging.getLogger(__name__)


class Graph:
    """
    Immutable directed graph over dense node ids.

    ``forward`` maps a node to its targets, ``reverse`` maps a node to its
    sources. Both are CSR pairs (indptr, indices): the neighbours of node u
    are ``indices[indptr[u]:indptr[u + 1]]``.
    """

    def __init__(self,
                 names: Sequence[str],
                 forward: Tuple[np.ndarray, np.ndarray],
                 reverse: Tuple[np.ndarray, np.ndarray],
                 n_edges: int,
                 n_unique_edges: Optional[int] = None):
        self.names: Tuple[str, ...] = tuple(names)
        self.n_edges = n_edges
        self.n_unique_edges = n_edges if n_unique_edges is None else n_unique_edges

        self._adjacency: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}
        for direction, (indptr, indices) in ((FORWARD, forward), (REVERSE, reverse)):
            if len(indptr) != len(self.names) + 1:
                raise ValueError(
                    f"{direction} indptr has {len(indptr)} entries for {len(self.names)} nodes"
                )
            indptr.setflags(write=False)
            indices.setflags(write=False)
            self._adjacency[direction] = (indptr, indices)

        self._ids: Dict[str, int] = {name: i for i, name in enumerate(self.names)}

    @property
    def n_nodes(self) -> int:
        return len(self.names)

    def adjacency(self, direction: str = FORWARD) -> Tuple[np.ndarray, np.ndarray]:
        """Get the (indptr, indices) CSR pair for a traversal direction."""
        try:
            return self._adjacency[direction]
        except KeyError:
            raise ValueError(f"Unknown direction: {direction!r}")

    def neighbors(self, node: int, direction: str = FORWARD) -> np.ndarray:
        """Targets (forward) or sources (reverse) of a node, in input order."""
        indptr, indices = self.adjacency(direction)
        return indices[indptr[node]:indptr[node + 1]]

    def successors(self, node: int) -> np.ndarray:
        return self.neighbors(node, FORWARD)

    def predecessors(self, node: int) -> np.ndarray:
        return self.neighbors(node, REVERSE)

    def degrees(self, direction: str = FORWARD) -> np.ndarray:
        """Adjacency list sizes for every node."""
        indptr, _ = self.adjacency(direction)
        return np.diff(indptr)

    def node_id(self, name: str) -> int:
        """Get the dense id of a node name."""
        try:
            return self._ids[name]
        except KeyError:
            raise KeyError(f"Unknown node: {name!r}")

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def to_networkx(self) -> nx.MultiDiGraph:
        """Export as a NetworkX multigraph labelled by node id."""
        G = nx.MultiDiGraph()
        G.add_nodes_from((i, {'name': name}) for i, name in enumerate(self.names))
        indptr, indices = self.adjacency(FORWARD)
        sources = np.repeat(np.arange(self.n_nodes), np.diff(indptr))
        G.add_edges_from(zip(sources.tolist(), indices.tolist()))
        return G

    def get_statistics(self) -> Dict[str, Any]:
        """Get graph statistics."""
        n = self.n_nodes
        out_deg = self.degrees(FORWARD)
        in_deg = self.degrees(REVERSE)
        indptr, indices = self.adjacency(FORWARD)
        sources = np.repeat(np.arange(n), np.diff(indptr))

        return {
            'n_nodes': n,
            'n_edges': self.n_edges,
            'n_unique_edges': self.n_unique_edges,
            'density': self.n_unique_edges / (n * (n - 1)) if n > 1 else 0.0,
            'n_sources_only': int(np.sum((out_deg > 0) & (in_deg == 0))),
            'n_sinks_only': int(np.sum((out_deg == 0) & (in_deg > 0))),
            'n_self_loops': int(np.sum(sources == indices)),
            'max_out_degree': int(out_deg.max()) if n else 0,
            'max_in_degree': int(in_deg.max()) if n else 0
        }


class GraphStore:
    """
    Builds a Graph from an ordered edge sequence.
    """

    def __init__(self, config: Optional[CentralityConfig] = None):
        """
        Initialize graph store.

        Args:
            config: Centrality configuration
        """
        self.config = config or CentralityConfig()
        self.deduplicate = self.config.deduplicate_edges

    def build(self, edges: Iterable[Tuple[str, str]]) -> Graph:
        """
        Intern node names and build forward/reverse adjacency.

        Args:
            edges: Ordered (source_name, target_name) pairs

        Returns:
            Immutable Graph
        """
        ids: Dict[str, int] = {}
        names: List[str] = []
        src: List[int] = []
        dst: List[int] = []

        for position, edge in enumerate(edges):
            try:
                source, target = edge
            except (TypeError, ValueError):
                raise InputError(f"Edge {position} is not a (source, target) pair: {edge!r}")

            pair = []
            for name in (source, target):
                if not isinstance(name, str) or not name:
                    raise InputError(f"Edge {position} has an invalid node name: {name!r}")
                node = ids.get(name)
                if node is None:
                    node = ids[name] = len(names)
                    names.append(name)
                pair.append(node)

            src.append(pair[0])
            dst.append(pair[1])

        n = len(names)
        n_edges = len(src)
        src_arr = np.asarray(src, dtype=np.int64)
        dst_arr = np.asarray(dst, dtype=np.int64)

        if self.deduplicate and n_edges:
            src_arr, dst_arr = self._unique_pairs(src_arr, dst_arr, n)
        n_unique = self._count_unique(src_arr, dst_arr, n)

        forward = self._to_csr(src_arr, dst_arr, n)
        reverse = self._to_csr(dst_arr, src_arr, n)

        graph = Graph(names, forward, reverse, n_edges, n_unique)

        if n == 0:
            logger.warning("Edge list is empty: graph has no nodes")
        logger.info(f"Graph built: {n:,} nodes, {n_edges:,} edges "
                    f"({n_unique:,} unique{', deduplicated' if self.deduplicate else ''})")
        return graph

    @staticmethod
    def _to_csr(keys: np.ndarray, values: np.ndarray, n: int) -> Tuple[np.ndarray, np.ndarray]:
        """Group values by key into CSR arrays, keeping input order within each row."""
        index_dtype = np.int32 if n < np.iinfo(np.int32).max else np.int64

        order = np.argsort(keys, kind='stable')
        indices = values[order].astype(index_dtype)

        indptr = np.zeros(n + 1, dtype=np.int64)
        np.cumsum(np.bincount(keys, minlength=n), out=indptr[1:])
        return indptr, indices

    @staticmethod
    def _unique_pairs(src: np.ndarray, dst: np.ndarray, n: int) -> Tuple[np.ndarray, np.ndarray]:
        """Keep the first occurrence of every (source, target) pair."""
        _, first = np.unique(src * n + dst, return_index=True)
        first.sort()
        return src[first], dst[first]

    @staticmethod
    def _count_unique(src: np.ndarray, dst: np.ndarray, n: int) -> int:
        if len(src) == 0:
            return 0
        return int(len(np.unique(src * n + dst)))
