"""
Benchmarks package for indexed Merkle trees.

This package contains ASV benchmarks for performance testing of
insertion with proof assembly, value updates, low-nullifier search and
sibling path capture, using deterministic test data.
"""

from .benchmark_utils import BaseBenchmark, BenchmarkUtils

__all__ = ["BaseBenchmark", "BenchmarkUtils"]
