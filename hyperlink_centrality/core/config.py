"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
config.py

MAIN OBJECTIVE:
---------------
This script manages the configuration settings for the centrality framework, providing
centralized configuration management with environment variable overrides.

Dependencies:
-------------
- os
- json
- dataclasses
- typing

MAIN FEATURES:
--------------
1) Central configuration dataclass for all run parameters
2) Environment variable integration for flexible deployment
3) Default values for all configuration parameters
4) Validation and JSON round-tripping

Author:
-------
Antoine Lemor
"""

import os
import json
from dataclasses import dataclass, field, fields
from typing import Dict, Optional
from hyperlink_centrality.core.constants import *
from hyperlink_centrality.core.exceptions import ConfigurationError


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CentralityConfig:
    """
    Central configuration for a centrality run.
    Can be overridden via environment variables or config files.
    """

    # Input configuration
    source_column: str = SOURCE_COLUMN
    target_column: str = TARGET_COLUMN
    separator: str = INPUT_SEPARATOR
    deduplicate_edges: bool = field(default_factory=lambda: _env_flag("DEDUPLICATE_EDGES", False))

    # Performance settings
    n_workers: int = field(default_factory=lambda: int(os.getenv("N_WORKERS", str(DEFAULT_N_WORKERS))))
    executor: str = field(default_factory=lambda: os.getenv("CENTRALITY_EXECUTOR", DEFAULT_EXECUTOR))
    chunks_per_worker: int = DEFAULT_CHUNKS_PER_WORKER
    min_chunk_size: int = DEFAULT_MIN_CHUNK_SIZE
    min_parallel_nodes: int = DEFAULT_MIN_PARALLEL_NODES

    # Output configuration
    top_k: int = DEFAULT_TOP_K
    output_dir: Optional[str] = field(default_factory=lambda: os.getenv("OUTPUT_DIR"))
    export_format: str = "csv"
    show_progress: bool = True
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Cross-check a sample of nodes against networkx after computing
    validate_sample: int = 0

    def validate(self) -> bool:
        """Validate configuration consistency."""
        if self.n_workers < 1:
            raise ConfigurationError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.executor not in EXECUTOR_KINDS:
            raise ConfigurationError(
                f"executor must be one of {EXECUTOR_KINDS}, got {self.executor!r}"
            )
        if self.chunks_per_worker < 1:
            raise ConfigurationError("chunks_per_worker must be >= 1")
        if self.min_chunk_size < 1:
            raise ConfigurationError("min_chunk_size must be >= 1")
        if self.min_parallel_nodes < 0:
            raise ConfigurationError("min_parallel_nodes must be >= 0")
        if self.top_k < 0:
            raise ConfigurationError(f"top_k must be >= 0, got {self.top_k}")
        if self.validate_sample < 0:
            raise ConfigurationError("validate_sample must be >= 0")
        if self.export_format not in ("csv", "json"):
            raise ConfigurationError(f"Unknown export format: {self.export_format!r}")
        if not self.source_column or not self.target_column:
            raise ConfigurationError("Source and target column names are required")
        return True

    def to_dict(self) -> Dict:
        """Convert config to dictionary."""
        return {
            'input': {
                'source_column': self.source_column,
                'target_column': self.target_column,
                'separator': self.separator,
                'deduplicate_edges': self.deduplicate_edges
            },
            'performance': {
                'n_workers': self.n_workers,
                'executor': self.executor,
                'chunks_per_worker': self.chunks_per_worker,
                'min_chunk_size': self.min_chunk_size,
                'min_parallel_nodes': self.min_parallel_nodes
            },
            'output': {
                'top_k': self.top_k,
                'output_dir': self.output_dir,
                'export_format': self.export_format,
                'show_progress': self.show_progress,
                'log_level': self.log_level,
                'validate_sample': self.validate_sample
            }
        }

    @classmethod
    def from_file(cls, path: str) -> 'CentralityConfig':
        """Load configuration from JSON file (flat or sectioned as in to_dict)."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must hold a JSON object")

        flat = {}
        for key, value in data.items():
            if isinstance(value, dict):
                flat.update(value)
            else:
                flat[key] = value

        known = {f.name for f in fields(cls)}
        unknown = set(flat) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**flat)

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
