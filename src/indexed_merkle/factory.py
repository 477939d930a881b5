"""Factory for depth-specialised indexed Merkle tree classes"""

import logging
from typing import Optional

from indexed_merkle.config import IMTConfig
from indexed_merkle.hashing import Hasher, get_hasher
from indexed_merkle.imt_base import MAX_DEPTH, IMTBase

# Cache for previously created classes to avoid recreating them
_imt_class_cache: dict[int, type] = {}


def make_imt_class(depth: int) -> type[IMTBase]:
    """
    Factory function to generate an indexed Merkle tree class for a given depth.

    Parameters:
        depth (int): Number of levels above the leaves; the tree holds
            up to ``2**depth - 1`` nodes besides the sentinel.

    Returns:
        Type[IMTBase]: The tree class
    """
    if not isinstance(depth, int) or isinstance(depth, bool) or not 1 <= depth <= MAX_DEPTH:
        raise ValueError(f"depth must be an int in 1..{MAX_DEPTH}, got {depth!r}")

    if depth in _imt_class_cache:
        return _imt_class_cache[depth]

    IMTDepth = type(
        f"IMT_D{depth}",
        (IMTBase,),
        {"DEPTH": depth, "__slots__": ()},
    )

    _imt_class_cache[depth] = IMTDepth
    return IMTDepth


def create_imt(depth: int, hasher: Optional[Hasher] = None) -> IMTBase:
    """
    Create a new indexed Merkle tree holding only the sentinel node.

    Parameters:
        depth (int): Tree depth
        hasher: Hash function; Keccak-256 when omitted

    Returns:
        IMTBase: A new tree
    """
    IMTDepth = make_imt_class(depth)
    return IMTDepth(hasher)


def create_imt_from_config(config: Optional[IMTConfig] = None) -> IMTBase:
    """Create a tree from ``config`` (environment when omitted) and apply its log level."""
    if config is None:
        config = IMTConfig.from_env()
    logging.getLogger("indexed_merkle").setLevel(config.level)
    return create_imt(config.depth, get_hasher(config.hash_algorithm))
