"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
exceptions.py

MAIN OBJECTIVE:
---------------
This script defines custom exception classes for the centrality framework, providing
structured error handling for input loading, computation, and validation.

Dependencies:
-------------
None

MAIN FEATURES:
--------------
1) Base CentralityError exception class
2) Input and configuration errors
3) Computation faults raised from worker tasks, including cancellation
4) Cross-validation errors

Author:
-------
Antoine Lemor
"""


class CentralityError(Exception):
    """Base exception for the centrality framework."""
    pass


class ConfigurationError(CentralityError):
    """Configuration-related errors."""
    pass


class InputError(CentralityError):
    """Malformed or missing edge-list input."""
    pass


class ComputationFault(CentralityError):
    """Unexpected fault inside a computation task."""
    pass


class ComputationCancelled(ComputationFault):
    """Computation stopped by an external cancellation request."""
    pass


class ValidationError(CentralityError):
    """Scores disagree with the reference implementation."""
    pass
