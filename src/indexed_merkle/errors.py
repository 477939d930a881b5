"""Expected, caller-triggerable errors raised by indexed Merkle trees.

A failed ``insert`` or ``update`` never leaves a partial state change
behind: root, size and the node set are exactly as before the call.
Broken internal invariants are reported with
:class:`indexed_merkle.invariants.InvariantError` instead, which is
deliberately not part of this hierarchy.
"""


class IMTError(Exception):
    """Base class for recoverable indexed Merkle tree errors."""


class TreeOverflowError(IMTError):
    """Raised when inserting into a tree that holds ``2**depth - 1`` nodes."""

    def __init__(self, capacity: int):
        super().__init__(f"tree overflow: capacity of {capacity} nodes reached")
        self.capacity = capacity


class KeyConflictError(IMTError):
    """Raised when inserting a key that is already present."""

    def __init__(self, key):
        super().__init__(f"key conflict: {key!r} is already present")
        self.key = key


class InvalidKeyError(IMTError):
    """Raised when a key orders below the sentinel key."""

    def __init__(self, key, sentinel):
        super().__init__(f"invalid key: {key!r} orders below the sentinel {sentinel!r}")
        self.key = key
        self.sentinel = sentinel


class UnknownKeyError(IMTError):
    """Raised when updating a key that is not present."""

    def __init__(self, key):
        super().__init__(f"unknown key: {key!r} does not exist")
        self.key = key
