"""Statistics and invariant flags for indexed Merkle trees."""

from __future__ import annotations

import collections
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict

from indexed_merkle.logging_config import get_logger
from indexed_merkle.utils import compute_root

if TYPE_CHECKING:
    from indexed_merkle.imt_base import IMTBase

logger = get_logger(__name__)


@dataclass
class Stats:
    """Aggregated statistics for an indexed Merkle tree."""

    node_count: int
    size: int
    depth: int
    capacity: int
    chain_length: int
    sentinel_present: bool
    keys_unique: bool
    indices_contiguous: bool
    chain_sorted: bool
    chain_complete: bool
    within_capacity: bool
    low_nullifiers_unique: bool
    root_consistent: bool
    level_counts: Dict[int, int] = field(default_factory=dict)

    @property
    def cached_digest_count(self) -> int:
        return sum(self.level_counts.values())


def imt_stats_(t: IMTBase) -> Stats:
    """
    Returns aggregated statistics for an indexed Merkle tree in **O(n · depth)** time.

    Walks the raw node registry rather than the public iterator so that a
    corrupted linked list is reported through the flags instead of raising.
    """
    sentinel = t.SENTINEL_KEY
    nodes = t._nodes

    sentinel_node = nodes.get(sentinel)
    sentinel_present = (
        sentinel_node is not None and sentinel_node.index == 0 and sentinel_node.key == sentinel
    )

    keys_unique = all(key == node.key for key, node in nodes.items())
    indices = sorted(node.index for node in nodes.values())
    indices_contiguous = indices == list(range(len(nodes))) and len(nodes) == t.size + 1

    # ---------- walk the next_key chain --------------------------------
    # Strictly increasing keys rule out cycles.
    chain_sorted = sentinel_node is not None
    chain_length = 0
    node = sentinel_node
    while node is not None:
        chain_length += 1
        if node.next_key == sentinel:
            break
        nxt = nodes.get(node.next_key)
        if nxt is None or not node.key < nxt.key:
            chain_sorted = False
            break
        node = nxt

    terminators = sum(1 for n in nodes.values() if n.next_key == sentinel)
    chain_complete = chain_length == len(nodes) and terminators == 1

    # ---------- each key is pointed at once, by its true predecessor ---
    ordered = sorted(nodes)
    pointers = collections.Counter(n.next_key for n in nodes.values() if n.next_key != sentinel)
    low_nullifiers_unique = all(pointers[key] == 1 for key in ordered[1:]) and all(
        nodes[prev].next_key == key for prev, key in zip(ordered, ordered[1:])
    )

    root_consistent = compute_root(nodes.values(), t.depth, t.size, t.hasher) == t.root

    level_counts = {level: len(t.cached_positions(level)) for level in range(t.depth + 1)}

    stats = Stats(
        node_count=len(nodes),
        size=t.size,
        depth=t.depth,
        capacity=t.capacity,
        chain_length=chain_length,
        sentinel_present=sentinel_present,
        keys_unique=keys_unique,
        indices_contiguous=indices_contiguous,
        chain_sorted=chain_sorted,
        chain_complete=chain_complete,
        within_capacity=t.size <= t.capacity,
        low_nullifiers_unique=low_nullifiers_unique,
        root_consistent=root_consistent,
        level_counts=level_counts,
    )
    logger.debug("Stats: %s", stats)
    return stats
