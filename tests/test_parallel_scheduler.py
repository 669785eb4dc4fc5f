"""
Tests for ParallelScheduler.

Every execution mode must produce the same scores, bit for bit, and failures must abort the run.
"""

import pytest
import numpy as np
import threading
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.constants import (
    METRICS, OUT_DEGREE, IN_DEGREE, OUT_CLOSENESS, IN_CLOSENESS, FORWARD, REVERSE
)
from hyperlink_centrality.core.exceptions import ComputationFault, ComputationCancelled
from hyperlink_centrality.graph import Graph, GraphStore
from hyperlink_centrality.metrics import ParallelScheduler, compute_range
from hyperlink_centrality.metrics import parallel_scheduler
from hyperlink_centrality.utils import ProgressMonitor


def make_config(**overrides) -> CentralityConfig:
    settings = dict(n_workers=1, executor='thread', chunks_per_worker=4, min_chunk_size=1,
                    min_parallel_nodes=0, show_progress=False)
    settings.update(overrides)
    return CentralityConfig(**settings)


@pytest.fixture(scope="module")
def random_graph():
    rng = np.random.default_rng(42)
    edges = [(f"sub{s}", f"sub{d}") for s, d in rng.integers(0, 300, (1200, 2))]
    return GraphStore().build(edges)


@pytest.fixture(scope="module")
def inline_table(random_graph):
    return ParallelScheduler(make_config()).compute_table(random_graph)


class TestPartition:
    """Test node range partitioning."""

    @pytest.mark.parametrize("n_nodes", [1, 7, 100, 1001])
    def test_disjoint_cover(self, n_nodes):
        """Test chunks are contiguous and cover every node once."""
        scheduler = ParallelScheduler(make_config(n_workers=3, min_chunk_size=5))
        chunks = scheduler.partition(n_nodes)

        covered = np.zeros(n_nodes, dtype=int)
        for start, stop in chunks:
            assert start < stop
            covered[start:stop] += 1
        assert np.all(covered == 1)
        assert chunks[0][0] == 0
        assert chunks[-1][1] == n_nodes

    def test_oversubscription(self):
        """Test the chunk count targets workers x chunks_per_worker."""
        scheduler = ParallelScheduler(make_config(n_workers=4, chunks_per_worker=4))
        assert len(scheduler.partition(1600)) == 16

    def test_min_chunk_size(self):
        """Test small graphs are not split below min_chunk_size."""
        scheduler = ParallelScheduler(make_config(n_workers=8, min_chunk_size=50))
        assert len(scheduler.partition(120)) == 3

    def test_empty(self):
        """Test an empty graph has no chunks."""
        assert ParallelScheduler(make_config()).partition(0) == []


class TestExecutionModes:
    """Test inline, thread and process execution agree."""

    def test_inline_table(self, random_graph, inline_table):
        """Test the inline run fills every column."""
        assert inline_table.is_complete
        assert len(inline_table) == random_graph.n_nodes
        assert inline_table.column(OUT_DEGREE).sum() * random_graph.n_nodes == pytest.approx(1200)

    def test_threads_bit_identical(self, random_graph, inline_table):
        """Test a thread pool gives the same bits as one worker."""
        table = ParallelScheduler(make_config(n_workers=4)).compute_table(random_graph)

        for metric in METRICS:
            assert np.array_equal(table.column(metric), inline_table.column(metric))

    def test_processes_bit_identical(self, random_graph, inline_table):
        """Test a process pool over shared memory gives the same bits as one worker."""
        table = ParallelScheduler(
            make_config(n_workers=2, executor='process')
        ).compute_table(random_graph)

        for metric in METRICS:
            assert np.array_equal(table.column(metric), inline_table.column(metric))

    def test_small_graph_runs_inline(self, random_graph, inline_table):
        """Test graphs under min_parallel_nodes skip the pool."""
        scheduler = ParallelScheduler(make_config(n_workers=4, executor='process',
                                                  min_parallel_nodes=10_000))
        assert scheduler._select_mode(random_graph.n_nodes) == 'inline'

        column = scheduler.compute_all(random_graph, IN_CLOSENESS)
        assert np.array_equal(column, inline_table.column(IN_CLOSENESS))

    def test_metric_subset(self, random_graph):
        """Test computing only some metrics."""
        table = ParallelScheduler(make_config(n_workers=2)).compute_table(
            random_graph, [IN_DEGREE, OUT_CLOSENESS]
        )
        assert table.metrics == [IN_DEGREE, OUT_CLOSENESS]

    def test_unknown_metric(self, random_graph):
        """Test unknown metrics are rejected before scheduling."""
        with pytest.raises(ComputationFault):
            ParallelScheduler(make_config()).compute_all(random_graph, "pagerank")

    def test_empty_graph(self):
        """Test an empty graph gives empty columns in every mode."""
        graph = GraphStore().build([])
        for config in (make_config(), make_config(n_workers=2)):
            table = ParallelScheduler(config).compute_table(graph)
            assert table.is_complete
            assert all(len(table.column(m)) == 0 for m in METRICS)

    def test_progress_monitor(self, random_graph):
        """Test completed metrics are recorded."""
        monitor = ProgressMonitor()
        ParallelScheduler(make_config(n_workers=2), monitor).compute_table(random_graph)

        status = monitor.get_status()
        assert status['completed'] == sorted(METRICS)
        assert status['failed'] == {}
        assert set(status['metric_times']) == set(METRICS)


class TestFailures:
    """Test cancellation and fault propagation."""

    def test_compute_range_honours_cancel(self, random_graph):
        """Test a set event stops a closeness range."""
        event = threading.Event()
        event.set()
        out = np.zeros(random_graph.n_nodes)

        with pytest.raises(ComputationCancelled):
            compute_range(OUT_CLOSENESS, random_graph.adjacency(FORWARD),
                          random_graph.adjacency(FORWARD), out, 0, 10, event)

    def test_cancel_before_run(self, random_graph):
        """Test a pending cancellation aborts the next run only."""
        scheduler = ParallelScheduler(make_config(n_workers=2))
        scheduler.cancel()
        assert scheduler.cancelled

        with pytest.raises(ComputationCancelled):
            scheduler.compute_table(random_graph)

        assert not scheduler.cancelled
        assert scheduler.compute_table(random_graph).is_complete

    def test_cancel_during_run(self, random_graph, monkeypatch):
        """Test cancelling from inside a task stops the other workers."""
        scheduler = ParallelScheduler(make_config(n_workers=3))
        original = parallel_scheduler.node_closeness

        def cancelling_closeness(indptr, indices, node, dist=None):
            if node == 5:
                scheduler.cancel()
            return original(indptr, indices, node, dist)

        monkeypatch.setattr(parallel_scheduler, 'node_closeness', cancelling_closeness)

        with pytest.raises(ComputationCancelled):
            scheduler.compute_all(random_graph, OUT_CLOSENESS)

    @pytest.mark.parametrize("n_workers", [1, 3])
    def test_task_fault(self, random_graph, monkeypatch, n_workers):
        """Test an error in one task aborts the whole computation."""
        def failing_closeness(indptr, indices, node, dist=None):
            if node == 7:
                raise RuntimeError("corrupt adjacency")
            return 0.0

        monkeypatch.setattr(parallel_scheduler, 'node_closeness', failing_closeness)
        monitor = ProgressMonitor()
        scheduler = ParallelScheduler(make_config(n_workers=n_workers), monitor)

        with pytest.raises(ComputationFault, match="corrupt adjacency") as excinfo:
            scheduler.compute_table(random_graph)

        assert not isinstance(excinfo.value, ComputationCancelled)
        assert OUT_CLOSENESS in monitor.get_status()['failed']

    def test_spurious_cancellation_is_a_fault(self, random_graph, monkeypatch):
        """Test a worker stopping without a cancel request is reported as a fault."""
        def stopping_closeness(indptr, indices, node, dist=None):
            raise ComputationCancelled("stopped")

        monkeypatch.setattr(parallel_scheduler, 'node_closeness', stopping_closeness)

        with pytest.raises(ComputationFault) as excinfo:
            ParallelScheduler(make_config()).compute_all(random_graph, IN_CLOSENESS)
        assert type(excinfo.value) is ComputationFault

    def test_cancel_while_lock_held(self):
        """Test cancel() from a signal handler interrupting the main thread inside the lock."""
        scheduler = ParallelScheduler(make_config())

        with scheduler._lock:
            scheduler.cancel()
        assert scheduler.cancelled

    def test_late_cancel_is_dropped(self, random_graph):
        """Test a request arriving after the last chunk does not poison the next run."""
        scheduler = ParallelScheduler(make_config())

        class LateMonitor(ProgressMonitor):
            def complete_metric(self, metric):
                super().complete_metric(metric)
                if metric == IN_CLOSENESS:
                    scheduler.cancel()

        scheduler.monitor = LateMonitor()
        assert scheduler.compute_table(random_graph).is_complete
        assert not scheduler.cancelled
        assert scheduler.compute_table(random_graph).is_complete


def shared_memory_blocks():
    return {p.name for p in Path('/dev/shm').glob('psm_*')}


@pytest.fixture(scope="module")
def busy_graph():
    rng = np.random.default_rng(7)
    edges = [(f"sub{s}", f"sub{d}") for s, d in rng.integers(0, 3000, (15000, 2))]
    return GraphStore().build(edges)


class TestProcessFailures:
    """Test fault and cancellation paths of the process pool."""

    def make_scheduler(self, monitor=None) -> ParallelScheduler:
        return ParallelScheduler(
            make_config(n_workers=2, executor='process', chunks_per_worker=100), monitor
        )

    def corrupted(self, graph) -> Graph:
        indptr, indices = graph.adjacency(FORWARD)
        bad = indices.copy()
        bad[len(bad) // 2] = graph.n_nodes + 1000
        reverse = tuple(a.copy() for a in graph.adjacency(REVERSE))
        return Graph(graph.names, (indptr.copy(), bad), reverse, graph.n_edges)

    def test_failing_chunk(self, busy_graph):
        """Test an out-of-range neighbour in shared memory aborts the run."""
        monitor = ProgressMonitor()
        scheduler = self.make_scheduler(monitor)

        with pytest.raises(ComputationFault, match="out_closeness failed") as excinfo:
            scheduler.compute_all(self.corrupted(busy_graph), OUT_CLOSENESS)

        assert not isinstance(excinfo.value, ComputationCancelled)
        assert OUT_CLOSENESS in monitor.get_status()['failed']

    def test_cancel_reaches_workers(self, busy_graph):
        """Test cancel() during a run stops the worker processes."""
        scheduler = self.make_scheduler()

        class CancellingMonitor(ProgressMonitor):
            def chunk_done(self, metric):
                super().chunk_done(metric)
                scheduler.cancel()

        scheduler.monitor = CancellingMonitor()

        with pytest.raises(ComputationCancelled):
            scheduler.compute_all(busy_graph, OUT_CLOSENESS)
        assert not scheduler.cancelled

    @pytest.mark.skipif(not Path('/dev/shm').is_dir(), reason="needs POSIX shared memory")
    def test_shared_memory_released(self, busy_graph):
        """Test no shared memory block outlives a failed or cancelled run."""
        before = shared_memory_blocks()

        with pytest.raises(ComputationFault):
            self.make_scheduler().compute_all(self.corrupted(busy_graph), IN_CLOSENESS)
        scheduler = self.make_scheduler()
        scheduler.cancel()
        with pytest.raises(ComputationCancelled):
            scheduler._run_pooled(busy_graph, [OUT_CLOSENESS], 'process')

        assert shared_memory_blocks() <= before
