"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (metrics module)

MAIN OBJECTIVE:
---------------
This script initializes the metrics module, providing the centrality formulas, the parallel
scheduler that applies them to every node, and the NetworkX cross-validator.

Dependencies:
-------------
- hyperlink_centrality.metrics.closeness
- hyperlink_centrality.metrics.degree
- hyperlink_centrality.metrics.parallel_scheduler
- hyperlink_centrality.metrics.validation

MAIN FEATURES:
--------------
1) Exports closeness and degree centrality functions
2) Exports ParallelScheduler for whole-graph computation
3) Exports CentralityValidator

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.metrics.closeness import closeness, wf_closeness, node_closeness
from hyperlink_centrality.metrics.degree import degree_centrality
from hyperlink_centrality.metrics.parallel_scheduler import ParallelScheduler, compute_range
from hyperlink_centrality.metrics.validation import CentralityValidator

__all__ = [
    'closeness',
    'wf_closeness',
    'node_closeness',
    'degree_centrality',
    'ParallelScheduler',
    'compute_range',
    'CentralityValidator'
]
