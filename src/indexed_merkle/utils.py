"""
Helpers shared by the incremental tree updater and full root recomputation.
"""
from typing import Dict, Iterable, Optional

from indexed_merkle.hashing import Hasher

SIZE_BYTES = 8


def sibling_index(index: int) -> int:
    """Index of the sibling position: even indices are left children."""
    return index ^ 1


def encode_size(size: int) -> bytes:
    """Encode the node count as a fixed-width big-endian unsigned integer."""
    return size.to_bytes(SIZE_BYTES, "big")


def combine(
    hasher: Hasher,
    left: Optional[bytes],
    right: Optional[bytes],
) -> bytes:
    """
    Hash two children into their parent.

    A child that was never populated is absent, not zero: the parent is
    then the hash of the present child alone.
    """
    if left is None and right is None:
        raise ValueError("combine(): at least one child digest is required")
    if left is None:
        return hasher(right)
    if right is None:
        return hasher(left)
    return hasher(left + right)


def bind_root(hasher: Hasher, top: bytes, size: int) -> bytes:
    """Bind the node count into the root."""
    return hasher(top + encode_size(size))


def compute_root(
    nodes: Iterable,
    depth: int,
    size: int,
    hasher: Hasher,
) -> bytes:
    """
    Recompute the root from scratch from a node set.

    Parameters:
        nodes: Nodes exposing ``index`` and ``hash(hasher)``.
        depth (int): Tree depth.
        size (int): Node count bound into the root.
        hasher: Hash function.

    Returns:
        bytes: The root digest.
    """
    level: Dict[int, bytes] = {node.index: node.hash(hasher) for node in nodes}
    if not level:
        raise ValueError("compute_root(): at least one node is required")

    for _ in range(depth):
        parents: Dict[int, bytes] = {}
        for index in sorted(level):
            parent = index // 2
            if parent in parents:
                continue
            if index % 2 == 0:
                left, right = level[index], level.get(index + 1)
            else:
                left, right = None, level[index]
            parents[parent] = combine(hasher, left, right)
        level = parents

    return bind_root(hasher, level[0], size)

