"""
Unit tests for edge list loading, graph construction and traversal.
"""

import pytest
import numpy as np
import gzip
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.constants import FORWARD, REVERSE
from hyperlink_centrality.core.exceptions import InputError, ComputationFault
from hyperlink_centrality.data import EdgeListLoader
from hyperlink_centrality.graph import GraphStore, bfs_distances, shortest_distances
from hyperlink_centrality.graph.traversal import UNVISITED, expand_frontier

HEADER = "SOURCE_SUBREDDIT\tTARGET_SUBREDDIT\tPOST_ID\tLINK_SENTIMENT\n"


def write_tsv(path: Path, rows, header: str = HEADER) -> Path:
    with open(path, 'w') as f:
        f.write(header)
        for row in rows:
            f.write("\t".join(row) + "\n")
    return path


def random_edges(n_nodes: int, n_edges: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    src = rng.integers(0, n_nodes, n_edges)
    dst = rng.integers(0, n_nodes, n_edges)
    return [(f"sub{s}", f"sub{d}") for s, d in zip(src, dst)]


class TestEdgeListLoader:
    """Test TSV edge list loading."""

    def test_load_preserves_order(self, tmp_path):
        """Test rows come back in file order with extra columns ignored."""
        path = write_tsv(tmp_path / "edges.tsv", [
            ("askreddit", "funny", "p1", "1"),
            ("funny", "pics", "p2", "-1"),
            ("askreddit", "funny", "p3", "1"),
        ])

        edges = EdgeListLoader().load(path)
        assert edges == [("askreddit", "funny"), ("funny", "pics"), ("askreddit", "funny")]

    def test_load_compressed(self, tmp_path):
        """Test gzip input is decompressed from its suffix."""
        path = tmp_path / "edges.tsv.gz"
        with gzip.open(path, 'wt') as f:
            f.write(HEADER)
            f.write("a\tb\tp1\t1\n")

        assert EdgeListLoader().load(path) == [("a", "b")]

    def test_names_are_not_converted(self, tmp_path):
        """Test names that look like numbers or NA stay strings."""
        path = write_tsv(tmp_path / "edges.tsv", [("nan", "1234", "p1", "1")])

        assert EdgeListLoader().load(path) == [("nan", "1234")]

    def test_missing_file(self, tmp_path):
        """Test a missing file is an input error."""
        with pytest.raises(InputError, match="not found"):
            EdgeListLoader().load(tmp_path / "absent.tsv")

    def test_missing_column(self, tmp_path):
        """Test a file without the target column."""
        path = write_tsv(tmp_path / "edges.tsv", [("a", "p1")],
                         header="SOURCE_SUBREDDIT\tPOST_ID\n")

        with pytest.raises(InputError, match="TARGET_SUBREDDIT"):
            EdgeListLoader().load(path)

    def test_blank_name(self, tmp_path):
        """Test rows with an empty node name are rejected."""
        path = write_tsv(tmp_path / "edges.tsv", [
            ("a", "b", "p1", "1"),
            ("", "b", "p2", "1"),
        ])

        with pytest.raises(InputError, match=r"\[3\]"):
            EdgeListLoader().load(path)

    def test_empty_file(self, tmp_path):
        """Test a file with no header."""
        path = tmp_path / "edges.tsv"
        path.write_text("")

        with pytest.raises(InputError):
            EdgeListLoader().load(path)

    def test_header_only(self, tmp_path):
        """Test a header without rows yields no edges."""
        path = write_tsv(tmp_path / "edges.tsv", [])

        assert EdgeListLoader().load(path) == []

    def test_custom_columns(self, tmp_path):
        """Test configured column names and separator."""
        path = tmp_path / "edges.csv"
        path.write_text("from,to\nx,y\n")
        config = CentralityConfig(source_column="from", target_column="to", separator=",")

        assert EdgeListLoader(config).load(path) == [("x", "y")]


class TestGraphStore:
    """Test graph construction."""

    def test_interning_order(self):
        """Test ids follow first appearance, source before target."""
        graph = GraphStore().build([("b", "a"), ("c", "b"), ("a", "d")])

        assert graph.names == ("b", "a", "c", "d")
        assert graph.node_id("c") == 2
        assert "d" in graph
        assert "z" not in graph
        with pytest.raises(KeyError):
            graph.node_id("z")

    def test_adjacency_keeps_input_order_and_duplicates(self):
        """Test adjacency lists are multisets in input order."""
        graph = GraphStore().build([("a", "c"), ("a", "b"), ("a", "c"), ("b", "c")])
        a, b, c = (graph.node_id(x) for x in "abc")

        assert graph.successors(a).tolist() == [c, b, c]
        assert graph.predecessors(c).tolist() == [a, a, b]
        assert graph.n_edges == 4
        assert graph.n_unique_edges == 3

    def test_forward_reverse_consistency(self):
        """Test v in forward[u] exactly as often as u in reverse[v]."""
        graph = GraphStore().build(random_edges(60, 400, seed=1))

        for u in range(graph.n_nodes):
            for v in set(graph.successors(u).tolist()):
                forward_count = int(np.sum(graph.successors(u) == v))
                reverse_count = int(np.sum(graph.predecessors(v) == u))
                assert forward_count == reverse_count

        assert graph.degrees(FORWARD).sum() == graph.degrees(REVERSE).sum() == 400

    def test_deduplication(self):
        """Test duplicate pairs are collapsed when configured."""
        edges = [("a", "b"), ("a", "b"), ("b", "a"), ("a", "b")]
        graph = GraphStore(CentralityConfig(deduplicate_edges=True)).build(edges)

        assert graph.n_edges == 4
        assert graph.n_unique_edges == 2
        assert graph.successors(0).tolist() == [1]
        assert graph.predecessors(0).tolist() == [1]

    def test_empty_graph(self):
        """Test an empty edge sequence."""
        graph = GraphStore().build([])

        assert graph.n_nodes == 0
        assert graph.n_edges == 0
        assert graph.get_statistics()['density'] == 0.0

    def test_arrays_are_read_only(self):
        """Test the built graph cannot be mutated."""
        graph = GraphStore().build([("a", "b")])
        indptr, indices = graph.adjacency(FORWARD)

        with pytest.raises(ValueError):
            indices[0] = 0
        with pytest.raises(ValueError):
            graph.adjacency("sideways")

    def test_invalid_edges(self):
        """Test malformed pairs and names."""
        with pytest.raises(InputError):
            GraphStore().build([("a", "b", "c")])
        with pytest.raises(InputError):
            GraphStore().build([("a", "")])
        with pytest.raises(InputError):
            GraphStore().build([("a", None)])

    def test_statistics(self):
        """Test graph statistics."""
        graph = GraphStore().build([("a", "a"), ("a", "b"), ("c", "b")])
        stats = graph.get_statistics()

        assert stats['n_nodes'] == 3
        assert stats['n_self_loops'] == 1
        assert stats['n_sinks_only'] == 1
        assert stats['n_sources_only'] == 1
        assert stats['max_in_degree'] == 2

    def test_to_networkx(self):
        """Test NetworkX export keeps parallel edges and names."""
        graph = GraphStore().build([("a", "b"), ("a", "b"), ("b", "c")])
        G = graph.to_networkx()

        assert G.number_of_nodes() == 3
        assert G.number_of_edges() == 3
        assert G.nodes[2]['name'] == "c"


class TestTraversal:
    """Test breadth-first distances."""

    def setup_method(self):
        # a -> b -> c -> d, plus a shortcut a -> c and an isolated pair e -> f
        self.graph = GraphStore().build([
            ("a", "b"), ("b", "c"), ("c", "d"), ("a", "c"), ("e", "f")
        ])

    def test_distances(self):
        """Test hop distances along shortest paths."""
        dm = shortest_distances(self.graph, self.graph.node_id("a"))
        b, c, d = (self.graph.node_id(x) for x in "bcd")

        assert len(dm) == 3
        assert dm.to_dict() == {b: 1, c: 1, d: 2}
        assert dm.total() == 4
        assert dm.eccentricity() == 2

    def test_start_excluded(self):
        """Test the start node never appears in its own map."""
        graph = GraphStore().build([("a", "a"), ("a", "b"), ("b", "a")])
        dm = shortest_distances(graph, 0)

        assert 0 not in dm
        assert dm.to_dict() == {1: 1}

    def test_unreachable(self):
        """Test unreachable nodes are absent."""
        dm = shortest_distances(self.graph, self.graph.node_id("d"))

        assert len(dm) == 0
        assert dm.total() == 0
        assert dm.eccentricity() == 0
        assert dm.get(0) is None
        with pytest.raises(KeyError):
            dm[0]

    def test_reverse_direction(self):
        """Test incoming distances follow reversed edges."""
        dm = shortest_distances(self.graph, self.graph.node_id("d"), REVERSE)
        a, b, c = (self.graph.node_id(x) for x in "abc")

        assert dm.to_dict() == {c: 1, a: 2, b: 2}

    def test_forward_reverse_symmetry(self):
        """Test d_forward(u)[v] == d_reverse(v)[u]."""
        graph = GraphStore().build(random_edges(40, 120, seed=2))
        reverse_maps = [shortest_distances(graph, v, REVERSE) for v in range(graph.n_nodes)]

        for u in range(graph.n_nodes):
            for v, d in shortest_distances(graph, u, FORWARD).items():
                assert reverse_maps[v][u] == d

    def test_scratch_buffer_restored(self):
        """Test the shared visited buffer is reset after each search."""
        indptr, indices = self.graph.adjacency(FORWARD)
        dist = np.full(self.graph.n_nodes, UNVISITED, dtype=np.int32)

        first = bfs_distances(indptr, indices, 0, dist)
        assert np.all(dist == UNVISITED)
        second = bfs_distances(indptr, indices, 0, dist)
        assert first.to_dict() == second.to_dict()

    def test_invalid_start(self):
        """Test an out-of-range start node."""
        indptr, indices = self.graph.adjacency(FORWARD)

        with pytest.raises(ComputationFault):
            bfs_distances(indptr, indices, self.graph.n_nodes)

    def test_expand_frontier(self):
        """Test the frontier gather concatenates adjacency lists."""
        indptr, indices = self.graph.adjacency(FORWARD)
        a, b = self.graph.node_id("a"), self.graph.node_id("b")

        gathered = expand_frontier(indptr, indices, np.array([a, b]))
        expected = self.graph.successors(a).tolist() + self.graph.successors(b).tolist()
        assert gathered.tolist() == expected
