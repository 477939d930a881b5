"""Indexed Merkle tree: a Merkle-tree-backed sorted key/value map.

Nodes occupy leaves in insertion order and form a sorted singly-linked
list through ``next_key``, anchored by a sentinel node at index 0. Every
mutation returns a proof bundle (see :mod:`indexed_merkle.mutate`) with
the sibling paths an external verifier needs to check the transition
from the old root to the new one.

The hash cache is sparse: ``_hashes[level][position]`` only holds
positions that have been computed. Level ``depth`` holds leaf digests,
level 0 the single top digest. The root binds the node count:
``H(top || size)``.
"""

from __future__ import annotations

from bisect import bisect_left, insort
from typing import Any, Dict, Iterator, List, Optional

from indexed_merkle.base import IMTNode, debug_log, encode_field
from indexed_merkle.errors import (
    InvalidKeyError,
    KeyConflictError,
    TreeOverflowError,
    UnknownKeyError,
)
from indexed_merkle.hashing import Hasher, keccak256
from indexed_merkle.invariants import InvariantError
from indexed_merkle.mutate import IMTInsert, IMTUpdate, SiblingPath
from indexed_merkle.utils import bind_root, combine, sibling_index

MAX_DEPTH = 64


class IMTBase:
    """
    Base class for indexed Merkle trees. Factory will set:
        DEPTH: Fixed number of levels above the leaves
    Subclasses may override:
        SENTINEL_KEY: Minimal key, also the "no successor" marker
        DEFAULT_VALUE: Value stored in the sentinel node
    """
    DEPTH: int
    SENTINEL_KEY: Any = 0
    DEFAULT_VALUE: Any = 0

    __slots__ = ("root", "hasher", "_size", "_nodes", "_keys_by_index", "_sorted_keys", "_hashes")

    def __init__(self, hasher: Optional[Hasher] = None):
        depth = getattr(self.__class__, "DEPTH", None)
        if not isinstance(depth, int) or isinstance(depth, bool) or not 1 <= depth <= MAX_DEPTH:
            raise ValueError(f"DEPTH must be an int in 1..{MAX_DEPTH}, got {depth!r}")
        if hasher is None:
            hasher = keccak256
        if not callable(hasher):
            raise TypeError(f"hasher must be callable, got {type(hasher).__name__}")

        self.hasher = hasher
        self.root: bytes = b""
        self._size = 0
        self._nodes: Dict[Any, IMTNode] = {}
        self._keys_by_index: List[Any] = []
        self._sorted_keys: List[Any] = []
        self._hashes: Dict[int, Dict[int, bytes]] = {level: {} for level in range(depth + 1)}

        sentinel = IMTNode(
            index=0,
            key=self.SENTINEL_KEY,
            value=self.DEFAULT_VALUE,
            next_key=self.SENTINEL_KEY,
        )
        self._register(sentinel)
        self._refresh(sentinel.key)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def depth(self) -> int:
        return self.DEPTH

    @property
    def size(self) -> int:
        """Number of non-sentinel nodes inserted so far."""
        return self._size

    @property
    def capacity(self) -> int:
        """Maximum number of non-sentinel nodes."""
        return (1 << self.DEPTH) - 1

    def is_full(self) -> bool:
        return self._size >= self.capacity

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key) -> bool:
        return key in self._nodes

    def __iter__(self) -> Iterator[IMTNode]:
        """Yield node snapshots in key order, sentinel first."""
        node = self._node(self.SENTINEL_KEY)
        while True:
            yield node.copy()
            if node.next_key == self.SENTINEL_KEY:
                return
            node = self._node(node.next_key)

    def __str__(self):
        return f"{self.__class__.__name__}(depth={self.DEPTH}, size={self._size}, root=0x{self.root.hex()})"

    def get(self, key) -> Optional[IMTNode]:
        """Return a snapshot of the node stored under ``key``, or None."""
        node = self._nodes.get(key)
        return node.copy() if node is not None else None

    def get_by_index(self, index: int) -> Optional[IMTNode]:
        """Return a snapshot of the node at leaf ``index``, or None."""
        if not 0 <= index < len(self._keys_by_index):
            return None
        return self._node(self._keys_by_index[index]).copy()

    def nodes(self) -> List[IMTNode]:
        """Snapshots of all nodes in index order."""
        return [self._nodes[key].copy() for key in self._keys_by_index]

    def cached_digest(self, level: int, index: int) -> Optional[bytes]:
        """Return the cached digest at ``(level, index)``, or None if never computed."""
        return self._hashes.get(level, {}).get(index)

    def cached_positions(self, level: int) -> List[int]:
        return sorted(self._hashes.get(level, {}))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, key, value) -> IMTInsert:
        """
        Insert a new key and return the proof of the insertion.

        Parameters:
            key: New key, strictly greater than the sentinel key.
            value: Value stored with the key.

        Returns:
            IMTInsert: Old root and size, the low nullifier before the
            insertion with its sibling paths before and after, and the
            new node with its sibling path.

        Raises:
            TreeOverflowError: If the tree holds ``capacity`` nodes.
            KeyConflictError: If ``key`` is already present.
            InvalidKeyError: If ``key`` orders below the sentinel key.
        """
        if self.is_full():
            debug_log("Rejected insert of %r: tree is full", key)
            raise TreeOverflowError(self.capacity)
        if key in self._nodes:
            debug_log("Rejected insert of %r: key exists", key)
            raise KeyConflictError(key)
        if key < self.SENTINEL_KEY:
            debug_log("Rejected insert of %r: below sentinel", key)
            raise InvalidKeyError(key, self.SENTINEL_KEY)

        old_root = self.root
        old_size = self._size

        # Everything that can fail runs before the first mutation.
        ln_node = self.low_nullifier(key)
        ln_siblings = self.siblings(ln_node.key)
        node = IMTNode(
            index=old_size + 1,
            key=key,
            value=value,
            next_key=ln_node.next_key,
        )
        node.to_bytes()

        self._size += 1

        self._node(ln_node.key).next_key = key
        self._refresh(ln_node.key)

        self._register(node)
        node_siblings = self._refresh(key)

        updated_ln_siblings = self.siblings(ln_node.key)

        debug_log(
            "Inserted key=%r at index %d (low nullifier key=%r), size %d -> %d",
            key, node.index, ln_node.key, old_size, self._size,
        )

        return IMTInsert(
            old_root=old_root,
            old_size=old_size,
            ln_node=ln_node,
            ln_siblings=ln_siblings,
            node=node.copy(),
            node_siblings=node_siblings,
            updated_ln_siblings=updated_ln_siblings,
        )

    def update(self, key, value) -> IMTUpdate:
        """
        Replace the value stored under an existing key.

        Returns:
            IMTUpdate: Old root, size, the updated node with its sibling
            path, and the new value.

        Raises:
            UnknownKeyError: If ``key`` is not present.
        """
        node = self._nodes.get(key)
        if node is None:
            debug_log("Rejected update of %r: unknown key", key)
            raise UnknownKeyError(key)

        encode_field(value)

        old_root = self.root
        node.value = value
        node_siblings = self._refresh(key)

        debug_log("Updated key=%r at index %d", key, node.index)

        return IMTUpdate(
            old_root=old_root,
            size=self._size,
            node=node.copy(),
            node_siblings=node_siblings,
            new_value=value,
        )

    # ------------------------------------------------------------------
    # Low-nullifier search
    # ------------------------------------------------------------------

    def low_nullifier(self, key) -> IMTNode:
        """
        Return a snapshot of the low nullifier of ``key``: the live node
        ``p`` with ``p.key < key`` and ``p.next_key > key`` (or
        ``p.next_key`` is the sentinel).

        Raises:
            KeyConflictError: If ``key`` is already present.
            InvalidKeyError: If ``key`` orders below the sentinel key.
            InvariantError: If no node qualifies for a valid absent key.
        """
        if key in self._nodes:
            raise KeyConflictError(key)
        if key < self.SENTINEL_KEY:
            raise InvalidKeyError(key, self.SENTINEL_KEY)

        pos = bisect_left(self._sorted_keys, key)
        if pos == 0:
            raise InvariantError(f"failed to find low nullifier of {key!r}")
        node = self._node(self._sorted_keys[pos - 1])
        if not node.is_ln_of(key, self.SENTINEL_KEY):
            raise InvariantError(
                f"node {node} is not the low nullifier of {key!r}: linked list is corrupted"
            )
        return node.copy()

    # ------------------------------------------------------------------
    # Hash cache
    # ------------------------------------------------------------------

    def siblings(self, key) -> SiblingPath:
        """
        Sibling path of the node under ``key`` from the current cache, leaf
        level first. Never mutates the cache.

        Raises:
            UnknownKeyError: If ``key`` is not present.
        """
        node = self._nodes.get(key)
        if node is None:
            raise UnknownKeyError(key)
        index = node.index
        siblings: SiblingPath = []
        for level in range(self.DEPTH, 0, -1):
            siblings.append(self._hashes[level].get(sibling_index(index)))
            index //= 2
        return siblings

    def _refresh(self, key) -> SiblingPath:
        """
        Recompute the leaf digest of ``key`` and every digest on its path
        to the top, then the root.

        Returns:
            The sibling digests met on the way up, leaf level first.
        """
        node = self._node(key)
        index = node.index
        digest = node.hash(self.hasher)
        self._hashes[self.DEPTH][index] = digest

        siblings: SiblingPath = []
        for level in range(self.DEPTH, 0, -1):
            sibling = self._hashes[level].get(sibling_index(index))
            siblings.append(sibling)

            if index % 2 == 0:
                digest = combine(self.hasher, digest, sibling)
            else:
                digest = combine(self.hasher, sibling, digest)

            index //= 2
            self._hashes[level - 1][index] = digest

        self.root = bind_root(self.hasher, digest, self._size)
        return siblings

    # ------------------------------------------------------------------
    # Registry internals
    # ------------------------------------------------------------------

    def _register(self, node: IMTNode) -> None:
        if node.index != len(self._keys_by_index):
            raise InvariantError(
                f"node index {node.index} breaks the append-only sequence (expected {len(self._keys_by_index)})"
            )
        self._nodes[node.key] = node
        self._keys_by_index.append(node.key)
        insort(self._sorted_keys, node.key)

    def _node(self, key) -> IMTNode:
        try:
            return self._nodes[key]
        except KeyError:
            raise InvariantError(f"failed to get node {key!r}") from None
