"""Relationship service - validated CRUD over the typed edge graph.

Invariants enforced here (never by the storage layer alone):
- no self-relationships
- at most one live edge per unordered person pair and type
- soft-deleted edges are invisible to reads and to uniqueness checks

All methods return ``Result``; nothing is raised for expected failures.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError

from ..config import CONFIG, EngineConfig
from ..models.person import utcnow
from ..models.relationship import (
    QUALIFYING_PARENT_TYPES,
    CreateRelationshipInput,
    Relationship,
    RelationshipType,
    UpdateRelationshipInput,
)
from ..result import ErrorCode, Result, err, ok
from ..storage.base import RelationshipQuery, RelationshipStore

logger = structlog.get_logger(__name__)


@dataclass
class RelationshipPage:
    """One page of live relationships."""
    relationships: list[Relationship]
    total: int
    page: int
    limit: int


def validation_error(exc: ValidationError) -> Result[Any]:
    """Convert a pydantic error into a VALIDATION_ERROR result."""
    errors = [
        {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
        for e in exc.errors(include_url=False)
    ]
    return err(ErrorCode.VALIDATION_ERROR, "Invalid relationship payload", {"errors": errors})


class RelationshipService:
    """Create, read, update and soft-delete relationship edges.

    Example:
        >>> service = RelationshipService(store)
        >>> result = service.create({
        ...     "person_a_id": father_id,
        ...     "person_b_id": child_id,
        ...     "type": "biological_parent",
        ... })
        >>> if result.ok:
        ...     print(result.data.id)
    """

    def __init__(self, store: RelationshipStore, config: EngineConfig = CONFIG) -> None:
        self.store = store
        self.config = config

    # ------------------------------- Helpers -------------------------------

    def _person_missing(self, person_id: str) -> Result[Any] | None:
        person = self.store.get_person(person_id)
        if person is None or person.is_deleted:
            return err(ErrorCode.NOT_FOUND, f"Person '{person_id}' not found")
        return None

    def _live_relationship(self, rel_id: str) -> Relationship | None:
        rel = self.store.get_relationship(rel_id)
        if rel is None or rel.is_deleted:
            return None
        return rel

    def find_between(
        self,
        first_id: str,
        second_id: str,
        types: set[RelationshipType] | frozenset[RelationshipType],
    ) -> list[Relationship]:
        """Live edges of the given types joining the unordered pair, either direction."""
        pair = {first_id, second_id}
        candidates = self.store.find_relationships(
            RelationshipQuery(person_a_ids=pair, person_b_ids=pair, types=set(types))
        )
        return [r for r in candidates if r.links(first_id, second_id)]

    # ------------------------------ Operations -----------------------------

    def create(self, payload: CreateRelationshipInput | Mapping[str, Any]) -> Result[Relationship]:
        """Validate and persist a single typed edge."""
        if not isinstance(payload, CreateRelationshipInput):
            try:
                payload = CreateRelationshipInput.model_validate(payload)
            except ValidationError as exc:
                return validation_error(exc)

        if payload.person_a_id == payload.person_b_id:
            return err(
                ErrorCode.VALIDATION_ERROR,
                "Cannot create a relationship between a person and themselves",
            )

        for person_id in (payload.person_a_id, payload.person_b_id):
            missing = self._person_missing(person_id)
            if missing is not None:
                return missing

        if self.find_between(payload.person_a_id, payload.person_b_id, {payload.type}):
            logger.debug(
                "relationship.conflict",
                person_a_id=payload.person_a_id,
                person_b_id=payload.person_b_id,
                type=payload.type.value,
            )
            return err(ErrorCode.CONFLICT, "This relationship already exists")

        now = utcnow()
        rel = Relationship(
            person_a_id=payload.person_a_id,
            person_b_id=payload.person_b_id,
            type=payload.type,
            start_date=payload.start_date,
            end_date=payload.end_date,
            place_id=payload.place_id,
            notes=payload.notes,
            created_at=now,
            updated_at=now,
        )
        self.store.insert_relationship(rel)
        logger.info(
            "relationship.created",
            relationship_id=rel.id,
            person_a_id=rel.person_a_id,
            person_b_id=rel.person_b_id,
            type=rel.type.value,
        )
        return ok(rel)

    def get(self, rel_id: str) -> Result[Relationship]:
        rel = self._live_relationship(rel_id)
        if rel is None:
            return err(ErrorCode.NOT_FOUND, f"Relationship '{rel_id}' not found")
        return ok(rel)

    def list(self, page: int = 1, limit: int | None = None) -> Result[RelationshipPage]:
        """Page through live relationships in creation order."""
        page = max(1, page)
        limit = self.config.list_default_limit if limit is None else limit
        limit = min(self.config.list_max_limit, max(1, limit))

        live = RelationshipQuery()
        total = self.store.count_relationships(live)
        rows = self.store.find_relationships(
            RelationshipQuery(limit=limit, offset=(page - 1) * limit)
        )
        return ok(RelationshipPage(relationships=rows, total=total, page=page, limit=limit))

    def update(
        self, rel_id: str, payload: UpdateRelationshipInput | Mapping[str, Any]
    ) -> Result[Relationship]:
        """Apply a field-level edit. Only fields present in the payload change."""
        if not isinstance(payload, UpdateRelationshipInput):
            try:
                payload = UpdateRelationshipInput.model_validate(payload)
            except ValidationError as exc:
                return validation_error(exc)

        existing = self._live_relationship(rel_id)
        if existing is None:
            return err(ErrorCode.NOT_FOUND, f"Relationship '{rel_id}' not found")

        changes = {name: getattr(payload, name) for name in payload.model_fields_set}
        if "type" in changes:
            if changes["type"] is None:
                return err(ErrorCode.VALIDATION_ERROR, "Relationship type cannot be cleared")
            if changes["type"] != existing.type:
                clashes = [
                    r
                    for r in self.find_between(
                        existing.person_a_id, existing.person_b_id, {changes["type"]}
                    )
                    if r.id != rel_id
                ]
                if clashes:
                    return err(ErrorCode.CONFLICT, "This relationship already exists")

        updated = existing.model_copy(update={**changes, "updated_at": utcnow()})
        self.store.update_relationship(updated)
        logger.info("relationship.updated", relationship_id=rel_id, fields=sorted(changes))
        return ok(updated)

    def delete(self, rel_id: str) -> Result[None]:
        """Soft-delete an edge. History is kept; the edge disappears from traversals."""
        existing = self._live_relationship(rel_id)
        if existing is None:
            return err(ErrorCode.NOT_FOUND, f"Relationship '{rel_id}' not found")
        now = utcnow()
        self.store.update_relationship(
            existing.model_copy(update={"deleted_at": now, "updated_at": now})
        )
        logger.info("relationship.deleted", relationship_id=rel_id)
        return ok(None)

    def get_for_person(self, person_id: str) -> Result[dict[str, list[Relationship]]]:
        """All live edges touching a person, grouped by type value."""
        missing = self._person_missing(person_id)
        if missing is not None:
            return missing

        grouped: dict[str, list[Relationship]] = {}
        for rel in self.store.find_relationships(RelationshipQuery(touching_ids={person_id})):
            grouped.setdefault(rel.type.value, []).append(rel)
        return ok(grouped)

    def get_siblings(self, person_id: str) -> Result[list[str]]:
        """Other children sharing at least one qualifying parent. Half-siblings included."""
        missing = self._person_missing(person_id)
        if missing is not None:
            return missing

        qualifying = set(QUALIFYING_PARENT_TYPES)
        parent_rels = self.store.find_relationships(
            RelationshipQuery(person_b_ids={person_id}, types=qualifying)
        )
        parent_ids = {r.person_a_id for r in parent_rels}
        if not parent_ids:
            return ok([])

        sibling_rels = self.store.find_relationships(
            RelationshipQuery(person_a_ids=parent_ids, types=qualifying)
        )
        siblings = dict.fromkeys(r.person_b_id for r in sibling_rels if r.person_b_id != person_id)
        return ok(list(siblings))
