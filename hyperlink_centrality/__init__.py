"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py

MAIN OBJECTIVE:
---------------
Degree and closeness centrality for large directed hyperlink networks, computed in parallel
over an immutable shared graph.

Dependencies:
-------------
- hyperlink_centrality.core
- hyperlink_centrality.pipelines

MAIN FEATURES:
--------------
1) CentralityConfig and the error hierarchy
2) CentralityPipeline end-to-end entry point

Author:
-------
Antoine Lemor
"""

__version__ = "1.0.0"

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.exceptions import CentralityError
from hyperlink_centrality.pipelines.centrality_pipeline import (
    CentralityPipeline,
    run_centrality_pipeline
)

__all__ = [
    'CentralityConfig',
    'CentralityError',
    'CentralityPipeline',
    'run_centrality_pipeline'
]
