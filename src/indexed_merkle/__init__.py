"""
indexed_merkle: Indexed Merkle trees with mutation proofs.

Quick-start imports::

    from indexed_merkle import create_imt

    tree = create_imt(depth=32)
    proof = tree.insert(5, 100)
"""

from indexed_merkle.base import IMTNode, encode_field
from indexed_merkle.config import IMTConfig
from indexed_merkle.display import print_pretty
from indexed_merkle.errors import (
    IMTError,
    InvalidKeyError,
    KeyConflictError,
    TreeOverflowError,
    UnknownKeyError,
)
from indexed_merkle.factory import create_imt, create_imt_from_config, make_imt_class
from indexed_merkle.hashing import Hasher, get_hasher, keccak256, sha256
from indexed_merkle.imt_base import IMTBase
from indexed_merkle.invariants import InvariantError, assert_imt_invariants_raise
from indexed_merkle.mutate import IMTInsert, IMTMutate, IMTUpdate
from indexed_merkle.tree_stats import Stats, imt_stats_
from indexed_merkle.utils import compute_root

__all__ = [
    # Tree
    "IMTBase",
    "IMTNode",
    "IMTConfig",
    "create_imt",
    "create_imt_from_config",
    "make_imt_class",
    "encode_field",
    "compute_root",
    # Proofs
    "IMTInsert",
    "IMTUpdate",
    "IMTMutate",
    # Errors
    "IMTError",
    "TreeOverflowError",
    "KeyConflictError",
    "InvalidKeyError",
    "UnknownKeyError",
    "InvariantError",
    # Hashing
    "Hasher",
    "keccak256",
    "sha256",
    "get_hasher",
    # Stats & invariants
    "Stats",
    "imt_stats_",
    "assert_imt_invariants_raise",
    "print_pretty",
]
