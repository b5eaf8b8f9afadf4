"""GenealogyEngine - the outbound API of the relationship graph engine.

Wires the store, the relationship service, the auto-partnership hook,
kinship derivation, tree building and both layouts behind one facade.
Every public method returns a ``Result``; unexpected storage exceptions
are logged and converted to ``INTERNAL_ERROR`` instead of propagating.
"""
from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from . import logging as _logging  # noqa: F401  configures structlog on import
from .config import CONFIG, EngineConfig
from .layout.family_graph import FamilyGraphLayoutOptions, GraphLayout, layout_family_graph
from .layout.pedigree import (
    PedigreeLayoutOptions,
    PositionedNode,
    TreeBounds,
    get_tree_bounds,
    layout_ancestor_tree,
)
from .models.relationship import CreateRelationshipInput, Relationship, UpdateRelationshipInput
from .result import ErrorCode, Result, err, ok
from .services.auto_partnership import maybe_create_partner_relationships
from .services.extended_family import ExtendedFamilyResult, ExtendedFamilyService
from .services.relationships import RelationshipPage, RelationshipService
from .services.tree import (
    AncestorTreeNode,
    FamilyTreeSnapshot,
    build_ancestor_tree,
    get_full_family_tree,
)
from .storage.base import RelationshipStore

logger = _logging.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Result[Any]])


def _boundary(method: F) -> F:
    """Convert unexpected exceptions into INTERNAL_ERROR results."""

    @functools.wraps(method)
    def wrapper(self: GenealogyEngine, *args: Any, **kwargs: Any) -> Result[Any]:
        try:
            return method(self, *args, **kwargs)
        except Exception as e:
            logger.exception("engine.internal_error", operation=method.__name__, error=str(e))
            return err(ErrorCode.INTERNAL_ERROR, f"{method.__name__} failed: {e}")

    return wrapper  # type: ignore[return-value]


@dataclass
class RelationshipCreated:
    """A created edge plus the partner edges the inference hook added."""
    relationship: Relationship
    auto_partnerships: list[Relationship] = field(default_factory=list)


class GenealogyEngine:
    """Facade over the relationship graph.

    Example:
        >>> engine = GenealogyEngine(SQLiteStore("./data/ahnenbaum.db"))
        >>> created = engine.create_relationship({
        ...     "person_a_id": mother_id,
        ...     "person_b_id": child_id,
        ...     "type": "biological_parent",
        ... }).unwrap()
        >>> [r.type for r in created.auto_partnerships]
        [<RelationshipType.MARRIAGE: 'marriage'>]
    """

    def __init__(self, store: RelationshipStore, config: EngineConfig = CONFIG) -> None:
        self.store = store
        self.config = config
        self.relationships = RelationshipService(store, config)
        self.kinship = ExtendedFamilyService(store, config)

    # ---------------------------- Relationships ----------------------------

    @_boundary
    def create_relationship(
        self, payload: CreateRelationshipInput | Mapping[str, Any]
    ) -> Result[RelationshipCreated]:
        """Create an edge, then run auto-partnership inference on it."""
        result = self.relationships.create(payload)
        if not result.ok:
            return result
        try:
            inferred = maybe_create_partner_relationships(self.relationships, result.data)
        except Exception as e:
            # Edge is already stored
            logger.exception(
                "engine.auto_partnership_failed", relationship_id=result.data.id, error=str(e)
            )
            inferred = []
        return ok(RelationshipCreated(relationship=result.data, auto_partnerships=inferred))

    @_boundary
    def get_relationship(self, rel_id: str) -> Result[Relationship]:
        return self.relationships.get(rel_id)

    @_boundary
    def list_relationships(self, page: int = 1, limit: int | None = None) -> Result[RelationshipPage]:
        return self.relationships.list(page=page, limit=limit)

    @_boundary
    def update_relationship(
        self, rel_id: str, payload: UpdateRelationshipInput | Mapping[str, Any]
    ) -> Result[Relationship]:
        return self.relationships.update(rel_id, payload)

    @_boundary
    def delete_relationship(self, rel_id: str) -> Result[None]:
        return self.relationships.delete(rel_id)

    @_boundary
    def get_relationships_for_person(self, person_id: str) -> Result[dict[str, list[Relationship]]]:
        return self.relationships.get_for_person(person_id)

    @_boundary
    def get_siblings(self, person_id: str) -> Result[list[str]]:
        return self.relationships.get_siblings(person_id)

    # ------------------------------ Derivation -----------------------------

    @_boundary
    def get_extended_family(self, person_id: str) -> Result[ExtendedFamilyResult]:
        return self.kinship.get_extended_family(person_id)

    @_boundary
    def build_ancestor_tree(
        self, root_id: str, max_generations: int | None = None
    ) -> Result[AncestorTreeNode | None]:
        generations = self.config.tree_generations if max_generations is None else max_generations
        return build_ancestor_tree(self.store, root_id, generations)

    @_boundary
    def get_full_family_tree(self) -> Result[FamilyTreeSnapshot]:
        return get_full_family_tree(self.store)

    # -------------------------------- Layout -------------------------------

    @_boundary
    def layout_ancestor_tree(
        self,
        tree: AncestorTreeNode | None,
        options: PedigreeLayoutOptions | None = None,
    ) -> Result[list[PositionedNode]]:
        opts = options or PedigreeLayoutOptions(
            node_height=self.config.pedigree_node_height,
            horizontal_spacing=self.config.pedigree_horizontal_spacing,
        )
        return ok(layout_ancestor_tree(tree, opts))

    @_boundary
    def layout_family_graph(
        self,
        persons: list[Any],
        edges: list[Any],
        options: FamilyGraphLayoutOptions | None = None,
    ) -> Result[GraphLayout]:
        opts = options or FamilyGraphLayoutOptions(
            horizontal_spacing=self.config.graph_horizontal_spacing,
            vertical_spacing=self.config.graph_vertical_spacing,
            card_half_height=self.config.graph_card_half_height,
        )
        return ok(layout_family_graph(persons, edges, opts))

    @_boundary
    def get_tree_bounds(self, nodes: list[PositionedNode]) -> Result[TreeBounds]:
        return ok(get_tree_bounds(nodes))

    def close(self) -> None:
        self.store.close()
