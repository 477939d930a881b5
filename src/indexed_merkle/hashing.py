"""
Hash functions usable as the tree's injected hasher.

A hasher is any pure, deterministic ``Callable[[bytes], bytes]``
returning a fixed-size digest. It is used for leaf digests, for
combining siblings and for binding the size into the root.
"""
import hashlib
from typing import Callable, Dict

from Crypto.Hash import keccak

Hasher = Callable[[bytes], bytes]


def keccak256(data: bytes) -> bytes:
    """Keccak-256 (original padding, as used by Ethereum)."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


HASHERS: Dict[str, Hasher] = {
    "keccak256": keccak256,
    "sha256": sha256,
}


def get_hasher(name: str) -> Hasher:
    """
    Look up a hasher by name.

    Parameters:
        name (str): One of the keys of ``HASHERS``.

    Returns:
        Hasher: The hash function.

    Raises:
        ValueError: If the name is not registered.
    """
    try:
        return HASHERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown hash algorithm: {name!r} (expected one of {sorted(HASHERS)})"
        ) from None
