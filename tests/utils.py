"""Utility functions for testing indexed Merkle tree invariants and proofs."""

from typing import Iterable, Optional

from indexed_merkle.base import IMTNode
from indexed_merkle.imt_base import IMTBase
from indexed_merkle.invariants import TREE_FLAGS
from indexed_merkle.tree_stats import Stats
from indexed_merkle.utils import bind_root, combine


def assert_imt_invariants_tc(tc, t: IMTBase, stats: Stats, err_msg: Optional[str] = "") -> None:
    """TestCase version: use inside unittest.TestCase methods."""
    for flag in TREE_FLAGS:
        tc.assertTrue(
            getattr(stats, flag),
            f"Invariant failed: {flag} is False \n\n{err_msg}"
        )

    tc.assertEqual(
        stats.node_count, t.size + 1,
        f"Invariant failed: node_count={stats.node_count} ≠ size + 1={t.size + 1}\n\n{err_msg}"
    )
    tc.assertEqual(
        stats.level_counts[t.depth], stats.node_count,
        f"Invariant failed: every node must have a cached leaf digest\n\n{err_msg}"
    )
    tc.assertEqual(
        stats.level_counts[0], 1,
        f"Invariant failed: exactly one top digest expected\n\n{err_msg}"
    )
    tc.assertLessEqual(
        stats.cached_digest_count, stats.node_count * (t.depth + 1),
        f"Invariant failed: hash cache is not sparse\n\n{err_msg}"
    )


def root_from_path(
    leaf: bytes,
    index: int,
    siblings: Iterable[Optional[bytes]],
    size: int,
    hasher,
) -> bytes:
    """Fold a leaf digest and its sibling path (leaf level first) into a root."""
    digest = leaf
    for sibling in siblings:
        if index % 2 == 0:
            digest = combine(hasher, digest, sibling)
        else:
            digest = combine(hasher, sibling, digest)
        index //= 2
    return bind_root(hasher, digest, size)


def with_next_key(node: IMTNode, next_key) -> IMTNode:
    return IMTNode(index=node.index, key=node.key, value=node.value, next_key=next_key)


def with_value(node: IMTNode, value) -> IMTNode:
    return IMTNode(index=node.index, key=node.key, value=value, next_key=node.next_key)


def path_positions(index: int, depth: int) -> set:
    """``(level, position)`` pairs on the path from leaf ``index`` to the top."""
    return {(level, index >> (depth - level)) for level in range(depth + 1)}
