"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
parallel_scheduler.py

MAIN OBJECTIVE:
---------------
This script computes per-node centrality columns for the whole graph with a fixed pool of
workers, each owning disjoint node ranges and writing its scores straight into the result
column, with a single barrier before the table is read.

Dependencies:
-------------
- time
- logging
- threading
- multiprocessing
- concurrent.futures
- typing
- numpy
- psutil
- tqdm

MAIN FEATURES:
--------------
1) Contiguous, disjoint node partitions with oversubscription for load balancing
2) Process pool (graph and scores in shared memory) or thread pool execution
3) Inline execution for one worker or small graphs, bit-identical to pooled runs
4) Abort-on-first-failure with ComputationFault and cooperative cancellation
5) Memory-aware scheduling and per-metric progress tracking

Author:
-------
Antoine Lemor
"""

import time
import logging
import signal
import threading
import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from concurrent.futures.process import BrokenProcessPool
from contextlib import contextmanager
from typing import Dict, List, Tuple, Any, Optional, Sequence
import numpy as np
import psutil
from tqdm import tqdm

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.constants import (
    METRICS, OUT_DEGREE, IN_DEGREE, OUT_CLOSENESS, IN_CLOSENESS, FORWARD, REVERSE
)
from hyperlink_centrality.core.exceptions import ComputationFault, ComputationCancelled
from hyperlink_centrality.core.models import ScoreTable
from hyperlink_centrality.graph.store import Graph
from hyperlink_centrality.graph.traversal import UNVISITED
from hyperlink_centrality.metrics.closeness import node_closeness
from hyperlink_centrality.metrics.degree import degree_centrality_range
from hyperlink_centrality.utils.progress_monitor import ProgressMonitor
from hyperlink_centrality.utils.shared_memory_transfer import SharedMemoryTransfer, attach_blocks

logger = logging.getLogger(__name__)

DEGREE_DIRECTIONS = {OUT_DEGREE: FORWARD, IN_DEGREE: REVERSE}
CLOSENESS_DIRECTIONS = {OUT_CLOSENESS: FORWARD, IN_CLOSENESS: REVERSE}

# Transient bytes per node for one running BFS: distance buffer plus frontier temporaries
BYTES_PER_NODE_PER_TASK = 24

Adjacency = Tuple[np.ndarray, np.ndarray]


def compute_range(metric: str,
                  forward: Adjacency,
                  reverse: Adjacency,
                  out: np.ndarray,
                  start: int,
                  stop: int,
                  cancel=None) -> None:
    """
    Fill ``out[start:stop]`` with one metric.

    Args:
        metric: Metric identifier
        forward: Forward (indptr, indices)
        reverse: Reverse (indptr, indices)
        out: Result column of length N, written only in [start, stop)
        start: First node id
        stop: One past the last node id
        cancel: Event checked between nodes
    """
    if metric in DEGREE_DIRECTIONS:
        indptr, _ = forward if DEGREE_DIRECTIONS[metric] == FORWARD else reverse
        out[start:stop] = degree_centrality_range(indptr, start, stop)
        return

    if metric not in CLOSENESS_DIRECTIONS:
        raise ComputationFault(f"Unknown metric: {metric!r}")

    indptr, indices = forward if CLOSENESS_DIRECTIONS[metric] == FORWARD else reverse
    # One visited buffer per task, reset by every BFS
    dist = np.full(len(indptr) - 1, UNVISITED, dtype=np.int32)

    for node in range(start, stop):
        if cancel is not None and cancel.is_set():
            raise ComputationCancelled(f"{metric} cancelled at node {node}")
        out[node] = node_closeness(indptr, indices, node, dist)


# Worker process state, set once per process by the pool initializer
_WORKER_STATE: Dict[str, Any] = {}


@contextmanager
def _sigint_blocked():
    """Block SIGINT in the calling thread; processes spawned meanwhile inherit the mask."""
    if not hasattr(signal, 'pthread_sigmask'):
        yield
        return
    previous = signal.pthread_sigmask(signal.SIG_BLOCK, {signal.SIGINT})
    try:
        yield
    finally:
        signal.pthread_sigmask(signal.SIG_SETMASK, previous)


def _init_process_worker(specs, cancel_event) -> None:
    # Ctrl-C reaches the whole process group; the parent relays it through cancel_event
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    if hasattr(signal, 'pthread_sigmask'):
        # Drops an interrupt left pending while the worker was starting
        signal.pthread_sigmask(signal.SIG_UNBLOCK, {signal.SIGINT})
    _WORKER_STATE['specs'] = specs
    _WORKER_STATE['blocks'] = attach_blocks(specs)
    _WORKER_STATE['cancel'] = cancel_event


def _process_chunk(metric: str, row: int, start: int, stop: int) -> int:
    """Run one chunk inside a worker process against the shared arrays."""
    specs = _WORKER_STATE['specs']
    blocks = _WORKER_STATE['blocks']
    views = {name: spec.view(blocks[name]) for name, spec in specs.items()}
    try:
        compute_range(
            metric,
            (views['forward_indptr'], views['forward_indices']),
            (views['reverse_indptr'], views['reverse_indices']),
            views['scores'][row],
            start, stop,
            _WORKER_STATE['cancel']
        )
    finally:
        # Views must not outlive the attached blocks
        views.clear()
    return stop - start


class ResourceMonitor:
    """Monitor system resources for memory-aware scheduling."""

    def __init__(self):
        self.total_memory = psutil.virtual_memory().total

    def get_available_memory_gb(self) -> float:
        """Get available memory in GB."""
        return psutil.virtual_memory().available / (1024**3)

    @staticmethod
    def estimate_task_memory_mb(n_nodes: int) -> float:
        """Transient memory of one running BFS task."""
        return n_nodes * BYTES_PER_NODE_PER_TASK / (1024**2)

    def can_schedule(self, n_nodes: int, n_tasks: int) -> bool:
        """Check that n_tasks concurrent BFS tasks fit in 80% of available memory."""
        needed_mb = self.estimate_task_memory_mb(n_nodes) * n_tasks
        return needed_mb < self.get_available_memory_gb() * 1024 * 0.8


class ParallelScheduler:
    """
    Computes centrality columns over all nodes with a fixed worker pool.

    Every node id belongs to exactly one chunk and every chunk is run by
    exactly one worker, so each score cell has a single writer and no
    locking is needed. Results are read only after all chunks finish.
    """

    def __init__(self,
                 config: Optional[CentralityConfig] = None,
                 monitor: Optional[ProgressMonitor] = None):
        """
        Initialize the scheduler.

        Args:
            config: Centrality configuration (n_workers, executor, chunking)
            monitor: Progress monitor shared with the pipeline
        """
        self.config = config or CentralityConfig()
        self.config.validate()
        self.n_workers = self.config.n_workers
        self.executor_kind = self.config.executor
        self.show_progress = self.config.show_progress
        self.monitor = monitor or ProgressMonitor()
        self.resource_monitor = ResourceMonitor()

        self._cancel_requested = threading.Event()
        self._active_events: List[Any] = []
        # Reentrant: cancel() may run in a signal handler while the main thread holds it
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Ask running workers to stop; the running computation raises ComputationCancelled."""
        self._cancel_requested.set()
        with self._lock:
            for event in self._active_events:
                event.set()
        logger.warning("Cancellation requested")

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested.is_set()

    def clear_cancel(self) -> None:
        """Drop a pending cancellation request."""
        self._cancel_requested.clear()

    def partition(self, n_nodes: int) -> List[Tuple[int, int]]:
        """
        Split [0, n_nodes) into disjoint contiguous chunks.

        Returns:
            List of (start, stop) ranges covering every node once
        """
        if n_nodes <= 0:
            return []
        target_chunks = self.n_workers * self.config.chunks_per_worker
        size = max(self.config.min_chunk_size, -(-n_nodes // target_chunks))
        return [(start, min(start + size, n_nodes)) for start in range(0, n_nodes, size)]

    def compute_all(self, graph: Graph, metric: str) -> np.ndarray:
        """
        Compute one metric for every node.

        Args:
            graph: Graph built by GraphStore
            metric: One of METRICS

        Returns:
            Float64 column indexed by node id
        """
        return self._run(graph, [metric])[metric]

    def compute_table(self, graph: Graph, metrics: Sequence[str] = METRICS) -> ScoreTable:
        """
        Compute several metrics and store them in a ScoreTable.

        Closeness metrics share one worker pool.
        """
        columns = self._run(graph, list(metrics))
        table = ScoreTable(graph.n_nodes)
        for metric in metrics:
            table.set_column(metric, columns[metric])
        return table

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _select_mode(self, n_nodes: int) -> str:
        if self.n_workers == 1 or n_nodes < max(2, self.config.min_parallel_nodes):
            return 'inline'
        return self.executor_kind

    def _run(self, graph: Graph, metrics: List[str]) -> Dict[str, np.ndarray]:
        unknown = [m for m in metrics if m not in METRICS]
        if unknown:
            raise ComputationFault(f"Unknown metrics: {unknown}")
        if len(set(metrics)) != len(metrics):
            raise ComputationFault(f"Metrics requested twice: {metrics}")

        if self._cancel_requested.is_set():
            self._cancel_requested.clear()
            raise ComputationCancelled("Computation cancelled before it started")

        n = graph.n_nodes
        results: Dict[str, np.ndarray] = {}
        degree = [m for m in metrics if m in DEGREE_DIRECTIONS]
        closeness = [m for m in metrics if m in CLOSENESS_DIRECTIONS]

        try:
            # Degree is a vectorised count-and-divide, never worth a pool
            if degree:
                results.update(self._run_inline(graph, degree))

            if closeness:
                mode = self._select_mode(n)
                if mode == 'inline':
                    results.update(self._run_inline(graph, closeness))
                else:
                    results.update(self._run_pooled(graph, closeness, mode))
        except ComputationCancelled:
            if self._cancel_requested.is_set():
                self._cancel_requested.clear()
                raise
            raise ComputationFault("Workers stopped without a cancellation request")

        # A request that arrived after the last chunk finished has nothing left to stop
        self._cancel_requested.clear()
        return results

    def _register_event(self, event) -> None:
        with self._lock:
            self._active_events.append(event)
            if self._cancel_requested.is_set():
                event.set()

    def _unregister_event(self, event) -> None:
        with self._lock:
            self._active_events.remove(event)

    def _run_inline(self, graph: Graph, metrics: List[str]) -> Dict[str, np.ndarray]:
        """Run every chunk in the calling thread."""
        n = graph.n_nodes
        forward = graph.adjacency(FORWARD)
        reverse = graph.adjacency(REVERSE)
        chunks = self.partition(n)
        event = threading.Event()
        self._register_event(event)

        results = {}
        try:
            for metric in metrics:
                column = np.zeros(n, dtype=np.float64)
                self.monitor.start_metric(metric, n, len(chunks), 'inline')
                show = self.show_progress and metric in CLOSENESS_DIRECTIONS and n > 0
                with tqdm(total=n, desc=f"   {metric}", unit="nodes",
                          disable=not show, leave=False) as pbar:
                    for start, stop in chunks:
                        try:
                            compute_range(metric, forward, reverse, column, start, stop, event)
                        except ComputationCancelled as e:
                            self.monitor.fail_metric(metric, str(e))
                            raise
                        except Exception as e:
                            self.monitor.fail_metric(metric, str(e))
                            raise ComputationFault(
                                f"{metric} failed on nodes [{start}, {stop}): {e}"
                            ) from e
                        pbar.update(stop - start)
                        self.monitor.chunk_done(metric)
                self.monitor.complete_metric(metric)
                results[metric] = column
        finally:
            self._unregister_event(event)
        return results

    def _run_pooled(self, graph: Graph, metrics: List[str], mode: str) -> Dict[str, np.ndarray]:
        """Run chunks on a thread or process pool."""
        n = graph.n_nodes
        chunks = self.partition(n)
        n_workers = min(self.n_workers, len(chunks))

        if not self.resource_monitor.can_schedule(n, n_workers):
            logger.warning(
                f"{n_workers} concurrent BFS tasks need about "
                f"{self.resource_monitor.estimate_task_memory_mb(n) * n_workers:,.0f} MB, "
                f"only {self.resource_monitor.get_available_memory_gb():.1f} GB available"
            )

        logger.info(f"Scheduling {len(metrics)} x {len(chunks)} chunks "
                    f"(~{chunks[0][1] - chunks[0][0]} nodes each) on {n_workers} {mode} workers")

        if mode == 'thread':
            return self._run_threads(graph, metrics, chunks, n_workers)
        return self._run_processes(graph, metrics, chunks, n_workers)

    def _run_threads(self, graph, metrics, chunks, n_workers) -> Dict[str, np.ndarray]:
        forward = graph.adjacency(FORWARD)
        reverse = graph.adjacency(REVERSE)
        scores = np.zeros((len(metrics), graph.n_nodes), dtype=np.float64)
        event = threading.Event()
        self._register_event(event)

        try:
            executor = ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix='centrality')

            def submit(metric, row, start, stop):
                return executor.submit(compute_range, metric, forward, reverse,
                                       scores[row], start, stop, event)

            self._drive(executor, submit, metrics, chunks, graph.n_nodes, event, 'thread')
        finally:
            self._unregister_event(event)

        return {metric: scores[row] for row, metric in enumerate(metrics)}

    def _run_processes(self, graph, metrics, chunks, n_workers) -> Dict[str, np.ndarray]:
        ctx = mp.get_context('spawn')
        event = ctx.Event()
        self._register_event(event)

        try:
            with SharedMemoryTransfer() as transfer:
                for direction in (FORWARD, REVERSE):
                    indptr, indices = graph.adjacency(direction)
                    transfer.share_array(indptr, f'{direction}_indptr')
                    transfer.share_array(indices, f'{direction}_indices')
                _, scores = transfer.create_array('scores', (len(metrics), graph.n_nodes))

                executor = ProcessPoolExecutor(
                    max_workers=n_workers,
                    mp_context=ctx,
                    initializer=_init_process_worker,
                    initargs=(dict(transfer.specs), event)
                )

                def submit(metric, row, start, stop):
                    # Workers may be spawned here; they start with SIGINT blocked
                    with _sigint_blocked():
                        return executor.submit(_process_chunk, metric, row, start, stop)

                try:
                    self._drive(executor, submit, metrics, chunks, graph.n_nodes, event, 'process')
                    results = {metric: scores[row].copy() for row, metric in enumerate(metrics)}
                finally:
                    del scores
        finally:
            self._unregister_event(event)

        return results

    def _drive(self, executor, submit, metrics, chunks, n_nodes, event, mode) -> None:
        """Submit every chunk, wait for all of them, abort on the first failure."""
        remaining = {metric: len(chunks) for metric in metrics}
        start_time = time.time()

        try:
            futures = {}
            for row, metric in enumerate(metrics):
                self.monitor.start_metric(metric, n_nodes, len(chunks), mode)
                for start, stop in chunks:
                    futures[submit(metric, row, start, stop)] = (metric, start, stop)

            with tqdm(total=n_nodes * len(metrics),
                      desc=f"   {', '.join(metrics)}",
                      unit="nodes",
                      disable=not self.show_progress,
                      leave=False) as pbar:

                for future in as_completed(futures):
                    metric, start, stop = futures[future]
                    try:
                        future.result()
                    except ComputationCancelled as e:
                        self._fail_all(remaining, str(e))
                        raise
                    except KeyboardInterrupt as e:
                        # Interrupt delivered to a worker before it ignored SIGINT
                        self.cancel()
                        self._fail_all(remaining, "interrupted")
                        raise ComputationCancelled(f"{metric} interrupted") from e
                    except BrokenProcessPool:
                        raise
                    except Exception as e:
                        # Stop the other chunks; there is no usable partial ranking
                        event.set()
                        self._fail_all(remaining, str(e))
                        raise ComputationFault(
                            f"{metric} failed on nodes [{start}, {stop}): {e}"
                        ) from e

                    pbar.update(stop - start)
                    self.monitor.chunk_done(metric)
                    remaining[metric] -= 1
                    if remaining[metric] == 0:
                        self.monitor.complete_metric(metric)
        except BrokenProcessPool as e:
            # A worker process died, during submission or while running a chunk
            event.set()
            self._fail_all(remaining, str(e))
            if self._cancel_requested.is_set():
                raise ComputationCancelled(f"Cancelled, worker pool stopped: {e}") from e
            raise ComputationFault(f"Worker pool stopped: {e}") from e
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        logger.info(f"All chunks finished in {time.time() - start_time:.1f}s")

    def _fail_all(self, remaining: Dict[str, int], error: str) -> None:
        for metric, left in remaining.items():
            if left > 0:
                self.monitor.fail_metric(metric, error)
