"""Ancestor pedigree layout - positions a binary ancestor tree.

Root at the bottom centre, ancestors fanning upward (negative y), each
generation doubling its slot count. Pure function: identical input always
yields identical coordinates.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from ..config import CONFIG


class TreeLike(Protocol):
    person: Any
    parents: list[Any]


@dataclass
class PositionedNode:
    """A person placed in the abstract layout coordinate space."""
    person: Any
    x: float
    y: float
    parent_ids: list[str] = field(default_factory=list)
    generation: int = 0

    @property
    def id(self) -> str:
        return self.person.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "person_id": self.id,
            "x": self.x,
            "y": self.y,
            "parent_ids": list(self.parent_ids),
            "generation": self.generation,
        }


@dataclass(frozen=True)
class PedigreeLayoutOptions:
    """Pedigree geometry."""
    # Vertical gap between generations
    node_height: float = CONFIG.pedigree_node_height
    # Slot width at the widest (deepest) generation
    horizontal_spacing: float = CONFIG.pedigree_horizontal_spacing
    # Overall width shared by every generation; derived from the tree depth when None
    total_width: float | None = None


@dataclass(frozen=True)
class TreeBounds:
    min_x: float = 0.0
    max_x: float = 0.0
    min_y: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def tree_depth(tree: TreeLike) -> int:
    """Number of ancestor generations above the root (0 for a lone root)."""
    if not tree.parents:
        return 0
    return 1 + max(tree_depth(parent) for parent in tree.parents)


def layout_ancestor_tree(
    tree: TreeLike | None,
    options: PedigreeLayoutOptions | None = None,
) -> list[PositionedNode]:
    """Lay out an ancestor pedigree.

    Slot ``s`` of ``m`` slots at depth ``d`` is placed at
    ``x = (s - (m - 1) / 2) * total_width / m`` and ``y = -d * node_height``.
    A parent of the node in slot ``s`` takes slot ``2s + i`` (``i`` = 0 for the
    first parent, 1 for the second) of ``2m`` slots one generation up.
    Missing parents leave their slot empty.

    Args:
        tree: Recursive ``person`` / ``parents`` structure, or None
        options: Layout geometry

    Returns:
        Flat list of positioned nodes in depth-first order, root first
    """
    if tree is None:
        return []

    opts = options or PedigreeLayoutOptions()
    total_width = opts.total_width
    if total_width is None:
        total_width = opts.horizontal_spacing * 2 ** tree_depth(tree)

    nodes: list[PositionedNode] = []

    def traverse(node: TreeLike, depth: int, slot: int, slots_at_depth: int) -> None:
        slot_width = total_width / slots_at_depth
        x = (slot - (slots_at_depth - 1) / 2) * slot_width or 0.0
        y = -depth * opts.node_height or 0.0

        nodes.append(PositionedNode(
            person=node.person,
            x=x,
            y=y,
            parent_ids=[p.person.id for p in node.parents],
            generation=depth,
        ))

        for index, parent in enumerate(node.parents):
            traverse(parent, depth + 1, slot * 2 + index, slots_at_depth * 2)

    traverse(tree, 0, 0, 1)
    return nodes


def get_tree_bounds(nodes: list[PositionedNode]) -> TreeBounds:
    """Bounding box of positioned nodes; all zeros for an empty list."""
    if not nodes:
        return TreeBounds()
    xs = [n.x for n in nodes]
    ys = [n.y for n in nodes]
    return TreeBounds(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))
