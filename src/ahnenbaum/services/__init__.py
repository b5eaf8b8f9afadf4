"""Relationship graph services: CRUD, inference, kinship derivation, trees."""
from .auto_partnership import maybe_create_partner_relationships
from .extended_family import (
    DerivedRelationship,
    ExtendedFamilyMember,
    ExtendedFamilyResult,
    ExtendedFamilyService,
    HopRole,
    KinshipGraph,
    TraversalEdge,
    derive_kinship,
    extract_neighborhood,
    walk,
)
from .relationships import RelationshipPage, RelationshipService
from .tree import (
    AncestorTreeNode,
    FamilyTreeSnapshot,
    build_ancestor_tree,
    get_full_family_tree,
)

__all__ = [
    # Relationship CRUD
    "RelationshipPage",
    "RelationshipService",
    # Inference
    "maybe_create_partner_relationships",
    # Kinship
    "DerivedRelationship",
    "ExtendedFamilyMember",
    "ExtendedFamilyResult",
    "ExtendedFamilyService",
    "HopRole",
    "KinshipGraph",
    "TraversalEdge",
    "derive_kinship",
    "extract_neighborhood",
    "walk",
    # Trees
    "AncestorTreeNode",
    "FamilyTreeSnapshot",
    "build_ancestor_tree",
    "get_full_family_tree",
]
