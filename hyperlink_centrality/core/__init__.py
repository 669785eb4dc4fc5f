"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
__init__.py (core module)

MAIN OBJECTIVE:
---------------
This script initializes the core module of the centrality framework, exposing the main
configuration, result models, exceptions, and constants for use throughout the package.

Dependencies:
-------------
- hyperlink_centrality.core.config
- hyperlink_centrality.core.models
- hyperlink_centrality.core.exceptions
- hyperlink_centrality.core.constants

MAIN FEATURES:
--------------
1) Exports CentralityConfig for configuration management
2) Exports result models (ScoreTable, RankedEntry)
3) Exports the exception hierarchy
4) Exports metric and direction constants

Author:
-------
Antoine Lemor
"""

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.models import ScoreTable, RankedEntry
from hyperlink_centrality.core.exceptions import (
    CentralityError,
    ConfigurationError,
    InputError,
    ComputationFault,
    ComputationCancelled,
    ValidationError
)
from hyperlink_centrality.core.constants import (
    METRICS,
    OUT_DEGREE,
    IN_DEGREE,
    OUT_CLOSENESS,
    IN_CLOSENESS,
    FORWARD,
    REVERSE
)

__all__ = [
    'CentralityConfig',
    'ScoreTable',
    'RankedEntry',
    'CentralityError',
    'ConfigurationError',
    'InputError',
    'ComputationFault',
    'ComputationCancelled',
    'ValidationError',
    'METRICS',
    'OUT_DEGREE',
    'IN_DEGREE',
    'OUT_CLOSENESS',
    'IN_CLOSENESS',
    'FORWARD',
    'REVERSE'
]
