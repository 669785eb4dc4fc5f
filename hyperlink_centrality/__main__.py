"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__main__.py

MAIN OBJECTIVE:
---------------
This script is the command-line entry point: it runs the centrality pipeline on a TSV edge list
and prints the network size and the four top-K rankings.

Dependencies:
-------------
- argparse
- logging
- signal
- sys

MAIN FEATURES:
--------------
1) Command-line overrides of the configuration (workers, executor, top-K, export)
2) Optional JSON configuration file
3) Ctrl-C cancels the running computation
4) One-line diagnostic and exit code 1 on failure

Author:
-------
Antoine Lemor
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.constants import EXECUTOR_KINDS
from hyperlink_centrality.core.exceptions import CentralityError
from hyperlink_centrality.pipelines.centrality_pipeline import CentralityPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hyperlink-centrality',
        description='Degree and closeness centrality of a directed hyperlink network'
    )
    parser.add_argument('path', help='TSV edge list with SOURCE_SUBREDDIT and TARGET_SUBREDDIT columns')
    parser.add_argument('--config', default=None, help='JSON configuration file')
    parser.add_argument('--workers', type=int, default=None, help='Worker pool size')
    parser.add_argument('--executor', choices=EXECUTOR_KINDS, default=None,
                        help='Parallel backend')
    parser.add_argument('--top-k', type=int, default=None, help='Entries per ranking')
    parser.add_argument('--dedup', action='store_true', help='Collapse repeated source/target pairs')
    parser.add_argument('--output-dir', default=None, help='Directory for score and report export')
    parser.add_argument('--format', choices=('csv', 'json'), default=None,
                        help='Score table export format')
    parser.add_argument('--validate-sample', type=int, default=None,
                        help='Cross-check this many nodes against NetworkX')
    parser.add_argument('--no-progress', action='store_true', help='Disable progress bars')
    parser.add_argument('--log-level', default=None, help='Logging level (e.g. INFO, DEBUG)')
    return parser


def config_from_args(args: argparse.Namespace) -> CentralityConfig:
    """Build the run configuration, command-line values taking precedence."""
    config = CentralityConfig.from_file(args.config) if args.config else CentralityConfig()

    if args.workers is not None:
        config.n_workers = args.workers
    if args.executor is not None:
        config.executor = args.executor
    if args.top_k is not None:
        config.top_k = args.top_k
    if args.dedup:
        config.deduplicate_edges = True
    if args.output_dir is not None:
        config.output_dir = args.output_dir
    if args.format is not None:
        config.export_format = args.format
    if args.validate_sample is not None:
        config.validate_sample = args.validate_sample
    if args.no_progress:
        config.show_progress = False
    if args.log_level is not None:
        config.log_level = args.log_level

    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        pipeline = CentralityPipeline(config)

        previous = signal.getsignal(signal.SIGINT)

        def _on_interrupt(signum, frame):
            logger.warning("Interrupted, cancelling computation")
            pipeline.cancel()

        signal.signal(signal.SIGINT, _on_interrupt)
        try:
            results = pipeline.run(args.path)
        finally:
            signal.signal(signal.SIGINT, previous)
    except CentralityError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(results.report.format_text())
    for kind, path in results.exported_files.items():
        print(f"Exported {kind} to {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
