"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
centrality_pipeline.py

MAIN OBJECTIVE:
---------------
This script orchestrates a complete centrality run: edge list loading, graph construction,
parallel degree and closeness computation, optional cross-validation, ranking, and export.

Dependencies:
-------------
- typing
- dataclasses
- datetime
- pathlib
- logging
- uuid
- time

MAIN FEATURES:
--------------
1) Single entry point from a TSV path or an in-memory edge sequence
2) One shared progress monitor for all metric computations
3) Optional NetworkX cross-validation of a node sample
4) Report and score table export
5) External cancellation of a running computation

Author:
-------
Antoine Lemor
"""

from typing import Dict, Iterable, Optional, Tuple, Any
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
import logging
import uuid
import time

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.exceptions import ComputationCancelled
from hyperlink_centrality.core.models import ScoreTable
from hyperlink_centrality.data.loader import EdgeListLoader
from hyperlink_centrality.graph.store import Graph, GraphStore
from hyperlink_centrality.metrics.parallel_scheduler import ParallelScheduler
from hyperlink_centrality.metrics.validation import CentralityValidator
from hyperlink_centrality.reporting.ranking import RankingExtractor
from hyperlink_centrality.reporting.report import CentralityReport, export_scores
from hyperlink_centrality.utils.progress_monitor import ProgressMonitor

logger = logging.getLogger(__name__)


@dataclass
class CentralityResults:
    """
    Complete results from one pipeline execution.
    """
    pipeline_id: str
    execution_timestamp: datetime
    execution_duration: float  # seconds
    config_used: CentralityConfig
    graph: Graph
    table: ScoreTable
    report: CentralityReport
    exported_files: Dict[str, str] = field(default_factory=dict)

    def get_summary(self) -> Dict[str, Any]:
        """Get a short summary of the run."""
        return {
            'pipeline_id': self.pipeline_id,
            'timestamp': self.execution_timestamp.isoformat(),
            'duration': f"{self.execution_duration:.2f}s",
            'n_nodes': self.graph.n_nodes,
            'n_edges': self.graph.n_edges,
            'metrics': self.table.metrics,
            'exported_files': self.exported_files
        }


class CentralityPipeline:
    """
    Orchestration pipeline for a centrality run.
    """

    def __init__(self, config: Optional[CentralityConfig] = None):
        """Initialize the pipeline."""
        self.config = config or CentralityConfig()
        self.config.validate()
        self.pipeline_id = str(uuid.uuid4())

        # Set up logging
        logging.basicConfig(level=getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger = logging.getLogger(f"CentralityPipeline_{self.pipeline_id[:8]}")

        self.monitor = ProgressMonitor()
        self.loader = EdgeListLoader(self.config)
        self.store = GraphStore(self.config)
        self.scheduler = ParallelScheduler(self.config, self.monitor)
        self.ranker = RankingExtractor(self.config.top_k)
        self.validator = CentralityValidator()

        self.results: Optional[CentralityResults] = None
        self.logger.info(f"CentralityPipeline initialized with ID: {self.pipeline_id} "
                         f"({self.config.n_workers} {self.config.executor} workers)")

    def run(self, data_path: str) -> CentralityResults:
        """
        Run the pipeline on an edge list file.

        Args:
            data_path: Path to the TSV edge list

        Returns:
            Centrality results
        """
        start_time = time.time()
        self.scheduler.clear_cancel()
        edges = self.loader.load(data_path)
        return self._execute(edges, start_time)

    def run_edges(self, edges: Iterable[Tuple[str, str]]) -> CentralityResults:
        """
        Run the pipeline on an in-memory edge sequence.

        Args:
            edges: Ordered (source, target) name pairs

        Returns:
            Centrality results
        """
        start_time = time.time()
        self.scheduler.clear_cancel()
        return self._execute(edges, start_time)

    def _execute(self, edges: Iterable[Tuple[str, str]], start_time: float) -> CentralityResults:
        """Build, compute, rank and export; cancel() stops the run between stages."""
        timestamp = datetime.now()

        self._check_cancelled("graph construction")
        graph = self.store.build(edges)
        statistics = graph.get_statistics()
        self.logger.info(f"The network has {graph.n_nodes:,} nodes and {graph.n_edges:,} edges")

        table = self.scheduler.compute_table(graph)

        validation = None
        if self.config.validate_sample > 0:
            self._check_cancelled("validation")
            validation = self.validator.validate(graph, table, self.config.validate_sample)

        self._check_cancelled("ranking")
        rankings = self.ranker.rank_all(table, graph.names)
        report = CentralityReport(
            n_nodes=graph.n_nodes,
            n_edges=graph.n_edges,
            rankings=rankings,
            top_k=self.config.top_k,
            metric_times=self.monitor.get_status()['metric_times'],
            validation=validation,
            graph_statistics=statistics
        )

        exported = {}
        if self.config.output_dir:
            self._check_cancelled("export")
            exported = self._export_results(report, table, graph)

        duration = time.time() - start_time
        self.results = CentralityResults(
            pipeline_id=self.pipeline_id,
            execution_timestamp=timestamp,
            execution_duration=duration,
            config_used=self.config,
            graph=graph,
            table=table,
            report=report,
            exported_files=exported
        )
        self.logger.info(f"Pipeline completed in {duration:.1f}s")
        return self.results

    def cancel(self) -> None:
        """
        Cancel the running pipeline.

        Stops the current computation, or the next stage if none is running.
        A request made between runs is dropped when the next run starts.
        """
        self.scheduler.cancel()

    def _check_cancelled(self, stage: str) -> None:
        if self.scheduler.cancelled:
            self.scheduler.clear_cancel()
            raise ComputationCancelled(f"Pipeline cancelled before {stage}")

    def _export_results(self, report: CentralityReport, table: ScoreTable,
                        graph: Graph) -> Dict[str, str]:
        """Export report and scores."""
        export_dir = Path(self.config.output_dir)
        export_dir.mkdir(parents=True, exist_ok=True)
        stem = f"centrality_{self.pipeline_id[:8]}"

        fmt = self.config.export_format
        scores_path = export_scores(table, graph.names, export_dir / f"{stem}_scores.{fmt}", fmt)
        report_path = report.export_json(export_dir / f"{stem}_report.json")
        return {'scores': str(scores_path), 'report': str(report_path)}


def run_centrality_pipeline(data_path: str,
                            config: Optional[CentralityConfig] = None) -> CentralityResults:
    """
    Convenience function to run the centrality pipeline.

    Args:
        data_path: Path to input edge list
        config: Pipeline configuration

    Returns:
        Centrality results
    """
    pipeline = CentralityPipeline(config)
    return pipeline.run(data_path)
