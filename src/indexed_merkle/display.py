"""Pretty-printing for indexed Merkle trees."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from indexed_merkle.imt_base import IMTBase


# ANSI colour codes
PRIMARY = '\033[32m'    # green
SECONDARY = '\033[33m'  # yellow
RESET = '\033[0m'

END_MARK = "⊥"


def short_hex(digest: Optional[bytes]) -> str:
    """Elide the middle of a digest's hex form for display purposes."""
    if digest is None:
        return "-"
    s = digest.hex()
    return s if len(s) <= 10 else f"{s[:4]}..{s[-4:]}"


def print_pretty(tree: Optional[IMTBase], color: bool = False, max_levels: int = 8) -> str:
    """
    Render an indexed Merkle tree as text:
      • a header with depth, size and root,
      • the linked list in key order, ending in ⊥,
      • one line per cached level (top first) with ``position:digest``
        pairs, showing at most ``max_levels`` levels nearest the leaves.
    """
    from indexed_merkle.imt_base import IMTBase

    if tree is None:
        return "IMT: None"

    if not isinstance(tree, IMTBase):
        raise TypeError(f"print_pretty() expects IMTBase, got {type(tree).__name__}")

    primary, secondary, reset = (PRIMARY, SECONDARY, RESET) if color else ("", "", "")

    lines = [
        f"{type(tree).__name__}: depth={tree.depth} size={tree.size}/{tree.capacity} "
        f"root={short_hex(tree.root)}"
    ]

    chain = " -> ".join(f"{primary}{node.key}{reset}" for node in tree)
    lines.append(f"chain: {chain} -> {END_MARK}")

    first_level = max(0, tree.depth - max_levels + 1)
    if first_level > 0:
        lines.append(f"... {first_level} upper levels omitted")
    for level in range(first_level, tree.depth + 1):
        cells = " | ".join(
            f"{index}:{secondary}{short_hex(tree.cached_digest(level, index))}{reset}"
            for index in tree.cached_positions(level)
        )
        lines.append(f"L{level:<3}{cells}")

    return "\n".join(lines)
