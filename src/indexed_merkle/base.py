import logging
import struct
from dataclasses import dataclass, replace
from typing import Any

from indexed_merkle.hashing import Hasher
from indexed_merkle.logging_config import get_logger

logger = get_logger("IMT")

WORD_SIZE = 32
INDEX_SIZE = 8


def encode_field(field: Any) -> bytes:
    """
    Encode a key or value for hashing.

    Integers become a fixed 32-byte big-endian word. Variable-length
    fields (bytes, str, objects with ``to_bytes()``) are prefixed with
    their 4-byte big-endian length.

    Raises:
        ValueError: If an integer is negative or does not fit in 32 bytes.
        TypeError: If the field type has no byte encoding.
    """
    if isinstance(field, bool):
        raise TypeError("encode_field(): bool is not a supported field type")
    if isinstance(field, int):
        if field < 0:
            raise ValueError(f"encode_field(): negative integer {field} cannot be encoded")
        try:
            return field.to_bytes(WORD_SIZE, "big")
        except OverflowError:
            raise ValueError(f"encode_field(): integer {field} does not fit in {WORD_SIZE} bytes") from None
    if isinstance(field, (bytes, bytearray)):
        raw = bytes(field)
    elif isinstance(field, str):
        raw = field.encode("utf-8")
    elif hasattr(field, "to_bytes"):
        raw = bytes(field.to_bytes())
    else:
        raise TypeError(f"encode_field(): cannot encode {type(field).__name__}")
    return struct.pack(">I", len(raw)) + raw


@dataclass
class IMTNode:
    """
    One occupied leaf of an indexed Merkle tree.

    Attributes:
        index (int): Leaf position, assigned at insertion and never reused.
        key: The user key.
        value: Payload associated with the key.
        next_key: Key of the successor in key order, or the sentinel key
            when this node holds the greatest key.
    """
    __slots__ = ("index", "key", "value", "next_key")

    index: int
    key: Any
    value: Any
    next_key: Any

    def is_ln_of(self, key, sentinel) -> bool:
        """Return True if this node is the low nullifier of ``key``."""
        return self.key < key and (self.next_key > key or self.next_key == sentinel)

    def to_bytes(self) -> bytes:
        """Serialize the node as fed to the hash function."""
        return (
            self.index.to_bytes(INDEX_SIZE, "big")
            + encode_field(self.key)
            + encode_field(self.value)
            + encode_field(self.next_key)
        )

    def hash(self, hasher: Hasher) -> bytes:
        return hasher(self.to_bytes())

    def copy(self) -> "IMTNode":
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "key": export_field(self.key),
            "value": export_field(self.value),
            "next_key": export_field(self.next_key),
        }

    def __str__(self):
        return f"IMTNode(#{self.index}, key={self.key}, next_key={self.next_key})"


def hex_digest(digest) -> Any:
    """Hex-encode a digest for export, keeping absent digests as None."""
    if digest is None:
        return None
    return "0x" + digest.hex()


def debug_log(message, *args, **kwargs):
    """Log a debug message only if debug logging is enabled"""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(message, *args, **kwargs)


def export_field(field: Any) -> Any:
    """
    JSON-ready form of a key or value: byte strings and objects with
    ``to_bytes()`` become ``0x``-hex, everything else passes through.
    """
    if isinstance(field, (bytes, bytearray)):
        return "0x" + bytes(field).hex()
    if not isinstance(field, int) and hasattr(field, "to_bytes"):
        return "0x" + bytes(field.to_bytes()).hex()
    return field
