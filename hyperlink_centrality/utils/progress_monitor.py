"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
progress_monitor.py

MAIN OBJECTIVE:
---------------
This script provides progress monitoring for centrality runs, tracking each metric computation
with timing, chunk counts, and failure reporting.

Dependencies:
-------------
- time
- logging
- typing
- threading

MAIN FEATURES:
--------------
1) Metric-level computation tracking with timing
2) Chunk completion counters and node throughput
3) Failed metric tracking and reporting
4) Thread-safe operation monitoring

Author:
-------
Antoine Lemor
"""

import time
import logging
from typing import Dict, Any, Optional
import threading

logger = logging.getLogger(__name__)


class ProgressMonitor:
    """
    Monitor and report progress of metric computations.
    """

    def __init__(self):
        self.start_time = time.time()
        self.metric_times: Dict[str, float] = {}
        self.current_metrics: Dict[str, Dict[str, Any]] = {}
        self.completed_metrics: Dict[str, Dict[str, Any]] = {}
        self.failed_metrics: Dict[str, str] = {}
        self.lock = threading.Lock()

    def start_metric(self, metric: str, n_nodes: int, n_chunks: int, mode: str):
        """Mark a metric as started."""
        with self.lock:
            self.current_metrics[metric] = {
                'start_time': time.time(),
                'n_nodes': n_nodes,
                'n_chunks': n_chunks,
                'chunks_done': 0,
                'mode': mode
            }
        logger.info(f"[STARTED] {metric:14s} | {n_nodes:,} nodes | "
                    f"{n_chunks} chunks | mode: {mode}")

    def chunk_done(self, metric: str):
        """Count one finished chunk."""
        with self.lock:
            if metric in self.current_metrics:
                self.current_metrics[metric]['chunks_done'] += 1

    def complete_metric(self, metric: str):
        """Mark a metric as completed."""
        with self.lock:
            info = self.current_metrics.pop(metric, None)
            elapsed = time.time() - info['start_time'] if info else 0.0
            self.metric_times[metric] = elapsed
            self.completed_metrics[metric] = info or {}

        n_nodes = info['n_nodes'] if info else 0
        rate = n_nodes / elapsed if elapsed > 0 else 0.0
        logger.info(f"[COMPLETE] {metric:14s} | Time: {elapsed:6.1f}s | {rate:,.0f} nodes/sec")

    def fail_metric(self, metric: str, error: str):
        """Mark a metric as failed."""
        with self.lock:
            self.current_metrics.pop(metric, None)
            self.failed_metrics[metric] = error
        logger.error(f"[FAILED] {metric:14s} | Error: {error}")

    def get_status(self) -> Dict[str, Any]:
        """Get current status."""
        with self.lock:
            return {
                'completed': sorted(self.completed_metrics),
                'failed': dict(self.failed_metrics),
                'in_progress': {
                    m: f"{info['chunks_done']}/{info['n_chunks']} chunks"
                    for m, info in self.current_metrics.items()
                },
                'metric_times': dict(self.metric_times),
                'elapsed_time': time.time() - self.start_time
            }

    def get_metric_time(self, metric: str) -> Optional[float]:
        with self.lock:
            return self.metric_times.get(metric)
