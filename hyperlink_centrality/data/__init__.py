"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (data module)

MAIN OBJECTIVE:
---------------
This script initializes the data module of the centrality framework, providing access to
edge list loading.

Dependencies:
-------------
- hyperlink_centrality.data.loader

MAIN FEATURES:
--------------
1) Exports EdgeListLoader for TSV edge lists

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.data.loader import EdgeListLoader

__all__ = [
    'EdgeListLoader'
]
