"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (pipelines module)

MAIN OBJECTIVE:
---------------
This script initializes the pipelines module, exposing the end-to-end centrality pipeline.

Dependencies:
-------------
- hyperlink_centrality.pipelines.centrality_pipeline

MAIN FEATURES:
--------------
1) Exports CentralityPipeline, CentralityResults and run_centrality_pipeline

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.pipelines.centrality_pipeline import (
    CentralityPipeline,
    CentralityResults,
    run_centrality_pipeline
)

__all__ = [
    'CentralityPipeline',
    'CentralityResults',
    'run_centrality_pipeline'
]
