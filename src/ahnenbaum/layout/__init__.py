"""Layout algorithms turning the relationship graph into 2-D coordinates."""
from .family_graph import (
    ConnectionType,
    FamilyGraphLayoutOptions,
    GraphConnection,
    GraphEdge,
    GraphLayout,
    assign_generations,
    layout_family_graph,
)
from .pedigree import (
    PedigreeLayoutOptions,
    PositionedNode,
    TreeBounds,
    get_tree_bounds,
    layout_ancestor_tree,
    tree_depth,
)

__all__ = [
    # Pedigree
    "PedigreeLayoutOptions",
    "PositionedNode",
    "TreeBounds",
    "get_tree_bounds",
    "layout_ancestor_tree",
    "tree_depth",
    # Family graph
    "ConnectionType",
    "FamilyGraphLayoutOptions",
    "GraphConnection",
    "GraphEdge",
    "GraphLayout",
    "assign_generations",
    "layout_family_graph",
]
