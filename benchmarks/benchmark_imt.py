"""
ASV benchmarks for indexed Merkle tree operations.

Covers insertion (including proof assembly), value updates, predecessor
search and read-only sibling path capture across tree sizes and depths.
"""

import gc

from indexed_merkle.factory import create_imt
from benchmarks.benchmark_utils import BaseBenchmark, BenchmarkUtils


class IMTInsertBenchmarks(BaseBenchmark):
    """Benchmarks for building a tree through sequential inserts."""

    params = [
        [16, 32],                                     # depth
        [10, 100, 1000],                              # size
        ['uniform', 'sequential', 'descending'],      # key distribution
    ]
    param_names = ['depth', 'size', 'distribution']

    min_run_count = 5

    def setup(self, depth, size, distribution):
        super().setup(depth, size, distribution)
        self.keys = BenchmarkUtils.generate_deterministic_keys(
            size=size,
            seed=42 + depth + size,
            distribution=distribution,
        )
        gc.collect()
        gc.disable()

    def time_insert_batch(self, depth, size, distribution):
        """Insert every key into a fresh tree."""
        tree = create_imt(depth)
        for key in self.keys:
            tree.insert(key, key)


class IMTUpdateBenchmarks(BaseBenchmark):
    """Benchmarks for value updates on a populated tree."""

    params = [
        [16, 32],
        [100, 1000],
    ]
    param_names = ['depth', 'size']

    def setup(self, depth, size):
        super().setup(depth, size)
        self.keys = BenchmarkUtils.generate_deterministic_keys(size=size, seed=7)
        self.tree = BenchmarkUtils.build_tree(depth, self.keys)
        gc.collect()
        gc.disable()

    def time_update_all(self, depth, size):
        update = self.tree.update
        for key in self.keys:
            update(key, key + 1)


class IMTReadBenchmarks(BaseBenchmark):
    """Benchmarks for predecessor search and sibling path capture."""

    params = [
        [32],
        [100, 1000],
    ]
    param_names = ['depth', 'size']

    def setup(self, depth, size):
        super().setup(depth, size)
        self.keys = BenchmarkUtils.generate_deterministic_keys(size=size, seed=11, key_range=(1, 2_000_000))
        self.tree = BenchmarkUtils.build_tree(depth, self.keys)
        present = set(self.keys)
        self.misses = [k for k in BenchmarkUtils.generate_deterministic_keys(
            size=size, seed=12, key_range=(1, 2_000_000)) if k not in present]
        gc.collect()
        gc.disable()

    def time_low_nullifier(self, depth, size):
        low_nullifier = self.tree.low_nullifier
        for key in self.misses:
            low_nullifier(key)

    def time_siblings(self, depth, size):
        siblings = self.tree.siblings
        for key in self.keys:
            siblings(key)
