"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
loader.py

MAIN OBJECTIVE:
---------------
This script loads the tab-separated hyperlink edge list (SNAP Reddit Hyperlinks format) and
turns it into an ordered sequence of (source, target) name pairs for the graph store.

Dependencies:
-------------
- logging
- pathlib
- pandas

MAIN FEATURES:
--------------
1) Column-selective TSV loading with pandas (extra columns are never parsed)
2) Transparent handling of compressed inputs
3) Validation of required columns and empty node names
4) Conversion of all read failures into InputError

Author:
-------
Antoine Lemor
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union
import pandas as pd

from hyperlink_centrality.core.config import CentralityConfig
from hyperlink_centrality.core.exceptions import InputError

logger = logging.getLogger(__name__)


class EdgeListLoader:
    """
    Reads hyperlink edge lists into (source, target) pairs.
    Input order is preserved since node ids are assigned in first-seen order.
    """

    def __init__(self, config: Optional[CentralityConfig] = None):
        """
        Initialize loader.

        Args:
            config: Centrality configuration
        """
        self.config = config or CentralityConfig()
        self.source_column = self.config.source_column
        self.target_column = self.config.target_column

    def load(self, path: Union[str, Path]) -> List[Tuple[str, str]]:
        """
        Load an edge list file.

        Args:
            path: Path to the TSV file (optionally compressed)

        Returns:
            List of (source, target) pairs in file order
        """
        df = self.read_frame(path)
        return self.to_edges(df)

    def read_frame(self, path: Union[str, Path]) -> pd.DataFrame:
        """Read the required columns of the edge list into a DataFrame."""
        path = Path(path)
        if not path.is_file():
            raise InputError(f"Edge list not found: {path}")

        logger.info(f"Reading edge list from {path}...")

        required = [self.source_column, self.target_column]
        try:
            df = pd.read_csv(
                path,
                sep=self.config.separator,
                usecols=required,
                dtype=str,
                keep_default_na=False,
                compression='infer'
            )
        except pd.errors.EmptyDataError:
            raise InputError(f"Edge list is empty (no header row): {path}")
        except pd.errors.ParserError as e:
            raise InputError(f"Malformed edge list {path}: {e}")
        except ValueError as e:
            # usecols mismatch is reported by pandas as a ValueError
            raise InputError(
                f"Edge list {path} is missing required columns {required}: {e}"
            )
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"Could not read edge list {path}: {e}")

        self._validate(df, path)
        logger.info(f"Loaded {len(df):,} edges")
        return df

    def to_edges(self, df: pd.DataFrame) -> List[Tuple[str, str]]:
        """Convert a validated frame into (source, target) pairs."""
        return list(zip(df[self.source_column].tolist(),
                        df[self.target_column].tolist()))

    def _validate(self, df: pd.DataFrame, path: Path) -> None:
        """Reject rows with blank node names."""
        for col in (self.source_column, self.target_column):
            blank = df[col].str.strip() == ''
            if blank.any():
                # +2: one for the header, one for 1-based line numbers
                lines = (df.index[blank.to_numpy()][:5] + 2).tolist()
                raise InputError(
                    f"{int(blank.sum())} rows in {path} have an empty {col} "
                    f"(first lines: {lines})"
                )

        if df.empty:
            logger.warning(f"Edge list {path} contains a header but no edges")
