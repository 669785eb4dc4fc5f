"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (reporting module)

MAIN OBJECTIVE:
---------------
This script initializes the reporting module, providing top-K ranking extraction and report
formatting and export.

Dependencies:
-------------
- hyperlink_centrality.reporting.ranking
- hyperlink_centrality.reporting.report

MAIN FEATURES:
--------------
1) Exports RankingExtractor
2) Exports CentralityReport and export_scores

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.reporting.ranking import RankingExtractor
from hyperlink_centrality.reporting.report import CentralityReport, export_scores

__all__ = [
    'RankingExtractor',
    'CentralityReport',
    'export_scores'
]
