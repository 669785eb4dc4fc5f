"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
constants.py

MAIN OBJECTIVE:
---------------
This script defines global constants used throughout the centrality framework, including
input column names, metric identifiers, and scheduling defaults.

Dependencies:
-------------
- os

MAIN FEATURES:
--------------
1) Column mappings for the SNAP Reddit Hyperlinks dataset
2) Metric names in report order
3) Scheduling and chunking defaults
4) Reporting defaults

Author:
-------
Antoine Lemor
"""

import os

# Input columns (SNAP soc-redditHyperlinks-body.tsv / -title.tsv)
SOURCE_COLUMN = "SOURCE_SUBREDDIT"
TARGET_COLUMN = "TARGET_SUBREDDIT"
INPUT_SEPARATOR = "\t"

# Metric identifiers, in the order they appear in the report
OUT_DEGREE = "out_degree"
IN_DEGREE = "in_degree"
OUT_CLOSENESS = "out_closeness"
IN_CLOSENESS = "in_closeness"
METRICS = [OUT_DEGREE, IN_DEGREE, OUT_CLOSENESS, IN_CLOSENESS]

METRIC_LABELS = {
    OUT_DEGREE: "out degree centrality",
    IN_DEGREE: "in degree centrality",
    OUT_CLOSENESS: "out closeness centrality",
    IN_CLOSENESS: "in closeness centrality",
}

# Scheduling defaults
DEFAULT_N_WORKERS = os.cpu_count() or 1
DEFAULT_EXECUTOR = "process"
EXECUTOR_KINDS = ["process", "thread"]
DEFAULT_CHUNKS_PER_WORKER = 4  # Oversubscription for load balancing
DEFAULT_MIN_CHUNK_SIZE = 16
DEFAULT_MIN_PARALLEL_NODES = 2000  # Below this the pool costs more than it saves

# Reporting defaults
DEFAULT_TOP_K = 5
SCORE_FORMAT = "{:.6f}"

# Traversal directions
FORWARD = "forward"  # Follow edges source -> target (outgoing distances)
REVERSE = "reverse"  # Follow edges target -> source (incoming distances)
DIRECTIONS = [FORWARD, REVERSE]
