"""
Benchmarking utilities for indexed Merkle trees.

This module provides common utilities and base classes for ASV benchmarking
that work optimally with ASV's built-in timing and stabilization mechanisms.

Reproducibility:
    All random data generation uses deterministic seeds by default.
    The default seed can be overridden via the BENCHMARK_SEED environment variable.

Logging:
    Benchmarks should be run with logging at INFO level or higher to avoid
    performance contamination from verbose debug output.
"""

import gc
import logging
import os
from typing import List, Tuple

import numpy as np

from indexed_merkle.factory import create_imt
from indexed_merkle.imt_base import IMTBase

# Default seed for deterministic benchmarking - can be overridden via environment variable
DEFAULT_BENCHMARK_SEED = int(os.environ.get('BENCHMARK_SEED', '42'))

_logger = logging.getLogger(__name__)


class BenchmarkUtils:
    """Utility class for ASV benchmarking operations."""

    @staticmethod
    def check_logging_level():
        """
        Check if logging level is appropriate for benchmarking.

        Raises if DEBUG or lower (more verbose) logging is enabled, as this
        can significantly contaminate benchmark results with I/O overhead.
        """
        imt_logger = logging.getLogger("indexed_merkle")
        effective_level = imt_logger.getEffectiveLevel()
        if effective_level <= logging.DEBUG:
            raise ValueError(
                f"Logging level is set to {logging.getLevelName(effective_level)}. "
                "Benchmarks require logging to be at INFO level or higher to avoid "
                "performance contamination from verbose debug output."
            )

    @staticmethod
    def generate_deterministic_keys(size: int,
                                    seed: int = None,
                                    key_range: Tuple[int, int] = (1, 1_000_000),
                                    distribution: str = 'uniform') -> List[int]:
        """
        Generate unique deterministic keys for benchmarking.

        Args:
            size: Number of keys to generate
            seed: Random seed for reproducibility. If None, uses DEFAULT_BENCHMARK_SEED.
            key_range: Range of key values (min, max); the sentinel key 0 is excluded
            distribution: 'uniform', 'sequential' or 'descending'

        Returns:
            List of unique keys
        """
        if seed is None:
            seed = DEFAULT_BENCHMARK_SEED

        rng = np.random.default_rng(seed)

        min_key, max_key = key_range
        if min_key < 1:
            raise ValueError("key_range must exclude the sentinel key 0")
        if max_key - min_key + 1 < size:
            raise ValueError("Not enough unique keys available to generate desired size")

        if distribution == 'uniform':
            return rng.choice(np.arange(min_key, max_key + 1), size=size, replace=False).tolist()
        elif distribution == 'sequential':
            return list(range(min_key, min_key + size))
        elif distribution == 'descending':
            return list(range(min_key + size - 1, min_key - 1, -1))
        else:
            raise ValueError(f"Unknown distribution: {distribution}")

    @staticmethod
    def build_tree(depth: int, keys: List[int]) -> IMTBase:
        """Create a tree of ``depth`` holding ``keys`` (value = key)."""
        tree = create_imt(depth)
        insert = tree.insert
        for key in keys:
            insert(key, key)
        return tree


class BaseBenchmark:
    """Base class for ASV benchmarks optimized for ASV's built-in timing.

    Subclasses should:
    1. Call super().setup(*params) first
    2. Prepare test data
    3. Call gc.collect() then gc.disable() to prevent GC during measurement
    """

    params = []
    param_names = []

    # Let ASV handle timing optimization automatically
    warmup_time = 0.1
    sample_time = 0.4

    def setup(self, *params):
        BenchmarkUtils.check_logging_level()

    def teardown(self, *params):
        """Re-enables garbage collection after measurement completes."""
        if not gc.isenabled():
            gc.enable()
