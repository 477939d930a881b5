"""Invariant checking for indexed Merkle trees.

Used by the test suite and the stats script to validate a tree after a
sequence of mutations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from indexed_merkle.logging_config import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from indexed_merkle.imt_base import IMTBase
    from indexed_merkle.tree_stats import Stats

TREE_FLAGS = (
    "sentinel_present",
    "keys_unique",
    "indices_contiguous",
    "chain_sorted",
    "chain_complete",
    "within_capacity",
    "low_nullifiers_unique",
    "root_consistent",
)


class InvariantError(Exception):
    """Raised when an indexed Merkle tree invariant is violated."""


def assert_imt_invariants_raise(t: IMTBase, stats: Stats) -> None:
    """Check all invariants, raising :class:`InvariantError` on the first failure."""
    for flag in TREE_FLAGS:
        if not getattr(stats, flag):
            logger.error("Invariant failed: %s is False", flag)
            raise InvariantError(f"Invariant failed: {flag} is False")

    if stats.node_count != t.size + 1:
        raise InvariantError(
            f"Invariant failed: node_count={stats.node_count} ≠ size + 1={t.size + 1}"
        )
    if stats.chain_length != stats.node_count:
        raise InvariantError(
            f"Invariant failed: chain_length={stats.chain_length} ≠ node_count={stats.node_count}"
        )
    if stats.level_counts.get(t.depth, 0) != stats.node_count:
        raise InvariantError(
            f"Invariant failed: {stats.level_counts.get(t.depth, 0)} cached leaves "
            f"≠ node_count={stats.node_count}"
        )
    if stats.level_counts.get(0, 0) != 1:
        raise InvariantError(
            f"Invariant failed: {stats.level_counts.get(0, 0)} cached top digests ≠ 1"
        )
