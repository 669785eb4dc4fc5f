"""
PROJECT:
-------
hyperlink-centrality

TITLE:
------
shared_memory_transfer.py

MAIN OBJECTIVE:
---------------
This script places numpy arrays in shared memory so that worker processes can read the graph
adjacency and write their score slices without pickling or copying the arrays.

Dependencies:
-------------
- logging
- dataclasses
- multiprocessing.shared_memory
- numpy

MAIN FEATURES:
--------------
1) Zero-copy sharing of existing numpy arrays
2) Allocation of shared output arrays
3) Picklable array descriptors for worker initializers
4) Worker-side attachment with explicit view lifetimes
5) Guaranteed release of all blocks by the owning process

Author:
-------
Antoine Lemor
"""

import logging
from dataclasses import dataclass
from multiprocessing import shared_memory
from typing import Dict, Tuple
import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharedArraySpec:
    """Picklable description of an array living in shared memory."""
    shm_name: str
    shape: Tuple[int, ...]
    dtype: str

    def view(self, shm: shared_memory.SharedMemory) -> np.ndarray:
        """Array view over an attached block."""
        return np.ndarray(self.shape, dtype=self.dtype, buffer=shm.buf)


class SharedMemoryTransfer:
    """
    Owner of shared memory blocks for one computation.
    Use as a context manager so every block is unlinked.
    """

    def __init__(self):
        """Initialize shared memory manager."""
        self.shared_blocks: Dict[str, shared_memory.SharedMemory] = {}
        self.specs: Dict[str, SharedArraySpec] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()

    def _allocate(self, name: str, shape: Tuple[int, ...], dtype) -> Tuple[SharedArraySpec, np.ndarray]:
        if name in self.shared_blocks:
            raise ValueError(f"Shared array '{name}' already exists")

        dtype = np.dtype(dtype)
        nbytes = int(np.prod(shape, dtype=np.int64)) * dtype.itemsize
        # Zero-sized blocks are rejected by SharedMemory
        shm = shared_memory.SharedMemory(create=True, size=max(nbytes, 1))
        self.shared_blocks[name] = shm

        spec = SharedArraySpec(shm.name, tuple(shape), dtype.str)
        self.specs[name] = spec
        logger.debug(f"Shared array '{name}': {nbytes / (1024**2):.1f} MB")
        return spec, spec.view(shm)

    def share_array(self, array: np.ndarray, name: str) -> SharedArraySpec:
        """
        Copy an array into shared memory.

        Args:
            array: Numpy array to share
            name: Unique name for this array

        Returns:
            Descriptor to pass to workers
        """
        spec, shared = self._allocate(name, array.shape, array.dtype)
        shared[...] = array
        del shared
        return spec

    def create_array(self, name: str, shape: Tuple[int, ...], dtype=np.float64,
                     fill: float = 0.0) -> Tuple[SharedArraySpec, np.ndarray]:
        """
        Allocate a new shared array.

        Returns:
            (descriptor, view) - drop the view before cleanup()
        """
        spec, shared = self._allocate(name, shape, dtype)
        shared.fill(fill)
        return spec, shared

    def cleanup(self):
        """Release all shared memory blocks."""
        for name, shm in self.shared_blocks.items():
            try:
                shm.close()
            except BufferError:
                # A view is still alive; unlinking still frees the name
                logger.warning(f"Shared array '{name}' closed with live views")
            shm.unlink()
            logger.debug(f"Released shared memory: {name}")
        self.shared_blocks.clear()
        self.specs.clear()


def attach_blocks(specs: Dict[str, SharedArraySpec]) -> Dict[str, shared_memory.SharedMemory]:
    """Attach to every block of a descriptor set (worker side)."""
    return {name: shared_memory.SharedMemory(name=spec.shm_name)
            for name, spec in specs.items()}
