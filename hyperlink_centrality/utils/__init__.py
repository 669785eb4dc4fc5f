"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (utils module)

MAIN OBJECTIVE:
---------------
This script initializes the utils module, providing shared-memory transfer and progress
monitoring helpers used by the parallel scheduler.

Dependencies:
-------------
- hyperlink_centrality.utils.shared_memory_transfer
- hyperlink_centrality.utils.progress_monitor

MAIN FEATURES:
--------------
1) Exports SharedMemoryTransfer and SharedArraySpec
2) Exports ProgressMonitor

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.utils.shared_memory_transfer import (
    SharedMemoryTransfer,
    SharedArraySpec,
    attach_blocks
)
from hyperlink_centrality.utils.progress_monitor import ProgressMonitor

__all__ = [
    'SharedMemoryTransfer',
    'SharedArraySpec',
    'attach_blocks',
    'ProgressMonitor'
]
