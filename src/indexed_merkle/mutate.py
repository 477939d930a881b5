"""Proof bundles describing how a single mutation changed the tree.

Both bundles hold snapshots: nodes are copies and sibling paths are
fresh lists, so later mutations of the tree never alter them. Sibling
paths are ordered leaf level first; ``None`` marks a sibling subtree
that has never been populated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from indexed_merkle.base import IMTNode, export_field, hex_digest

SiblingPath = List[Optional[bytes]]


def _export_path(path: SiblingPath) -> list:
    return [hex_digest(digest) for digest in path]


@dataclass(frozen=True)
class IMTInsert:
    """
    Proof bundle for an insertion.

    Attributes:
        old_root: Root before the insertion.
        old_size: Node count before the insertion.
        ln_node: The low nullifier as it was before the insertion.
        ln_siblings: Sibling path of the low nullifier before the insertion.
        node: The inserted node.
        node_siblings: Sibling path of the inserted node.
        updated_ln_siblings: Sibling path of the low nullifier after the insertion.
    """

    old_root: bytes
    old_size: int
    ln_node: IMTNode
    ln_siblings: SiblingPath
    node: IMTNode
    node_siblings: SiblingPath
    updated_ln_siblings: SiblingPath

    kind = "insert"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "old_root": hex_digest(self.old_root),
            "old_size": self.old_size,
            "ln_node": self.ln_node.to_dict(),
            "ln_siblings": _export_path(self.ln_siblings),
            "node": self.node.to_dict(),
            "node_siblings": _export_path(self.node_siblings),
            "updated_ln_siblings": _export_path(self.updated_ln_siblings),
        }


@dataclass(frozen=True)
class IMTUpdate:
    """
    Proof bundle for a value update.

    Attributes:
        old_root: Root before the update.
        size: Node count (unchanged by updates).
        node: The updated node, carrying the new value.
        node_siblings: Sibling path of the updated node.
        new_value: The value written.
    """

    old_root: bytes
    size: int
    node: IMTNode
    node_siblings: SiblingPath
    new_value: Any

    kind = "update"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "old_root": hex_digest(self.old_root),
            "size": self.size,
            "node": self.node.to_dict(),
            "node_siblings": _export_path(self.node_siblings),
            "new_value": export_field(self.new_value),
        }


IMTMutate = Union[IMTInsert, IMTUpdate]
