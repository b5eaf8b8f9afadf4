"""Tree service - ancestor pedigree and full family snapshot.

Reads are set-based: one relationship query per ancestor generation and
three bulk reads (persons, names, events) for resolution.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..config import CONFIG
from ..models.person import PersonWithDetails
from ..models.relationship import QUALIFYING_PARENT_TYPES, Relationship, RelationshipType
from ..result import Result, ok
from ..storage.base import RelationshipQuery, RelationshipStore
from .extended_family import resolve_persons

# A pedigree node holds at most two parents
MAX_PEDIGREE_PARENTS = 2


@dataclass
class AncestorTreeNode:
    """Recursive ancestor tree: a person and up to two parent subtrees."""
    person: PersonWithDetails
    parents: list[AncestorTreeNode] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.person.id

    def count(self) -> int:
        return 1 + sum(p.count() for p in self.parents)

    def to_dict(self) -> dict[str, Any]:
        return {
            "person": self.person.model_dump(mode="json"),
            "parents": [p.to_dict() for p in self.parents],
        }


@dataclass
class FamilyTreeSnapshot:
    """Every live person and relationship, the input of the family graph layout."""
    persons: list[PersonWithDetails]
    relationships: list[Relationship]


def _parent_sort_key(rel: Relationship) -> int:
    return 0 if rel.type == RelationshipType.BIOLOGICAL_PARENT else 1


def build_ancestor_tree(
    store: RelationshipStore,
    root_id: str,
    max_generations: int = CONFIG.tree_generations,
) -> Result[AncestorTreeNode | None]:
    """Build the ancestor tree of ``root_id`` over qualifying parent edges.

    Args:
        store: Person/relationship store
        root_id: Person at the bottom of the pedigree
        max_generations: Generations to include, the root counting as 1

    Returns:
        Result holding the tree, or ``None`` when the root does not exist
        or is soft-deleted. Biological parents are preferred when a person
        has more than two qualifying parents.
    """
    max_generations = max(1, max_generations)
    parents_by_child: dict[str, list[str]] = {}
    layer = [root_id]
    seen = {root_id}

    for _ in range(max_generations - 1):
        if not layer:
            break
        rels = store.find_relationships(
            RelationshipQuery(person_b_ids=set(layer), types=set(QUALIFYING_PARENT_TYPES))
        )
        grouped: dict[str, list[Relationship]] = {}
        for rel in rels:
            grouped.setdefault(rel.person_b_id, []).append(rel)

        next_layer: list[str] = []
        for child_id in layer:
            ordered = sorted(grouped.get(child_id, []), key=_parent_sort_key)
            parent_ids = list(dict.fromkeys(r.person_a_id for r in ordered))
            parents_by_child[child_id] = parent_ids[:MAX_PEDIGREE_PARENTS]
            for parent_id in parents_by_child[child_id]:
                if parent_id not in seen:
                    seen.add(parent_id)
                    next_layer.append(parent_id)
        layer = next_layer

    resolved = resolve_persons(store, seen)

    def build(person_id: str, remaining: int, path: frozenset[str]) -> AncestorTreeNode | None:
        person = resolved.get(person_id)
        if person is None:
            return None
        node = AncestorTreeNode(person=person)
        if remaining <= 1:
            return node
        for parent_id in parents_by_child.get(person_id, []):
            # Guard against malformed cyclic data
            if parent_id in path:
                continue
            parent = build(parent_id, remaining - 1, path | {parent_id})
            if parent is not None:
                node.parents.append(parent)
        return node

    return ok(build(root_id, max_generations, frozenset({root_id})))


def get_full_family_tree(store: RelationshipStore) -> Result[FamilyTreeSnapshot]:
    """All live persons (with names and events) plus all live relationships."""
    persons = store.list_persons()
    names = store.get_names()
    events = store.get_events()

    names_by_person: dict[str, list] = {}
    for name in names:
        names_by_person.setdefault(name.person_id, []).append(name)
    events_by_person: dict[str, list] = {}
    for event in events:
        events_by_person.setdefault(event.person_id, []).append(event)

    enriched = [
        PersonWithDetails(
            person=p,
            names=names_by_person.get(p.id, []),
            events=events_by_person.get(p.id, []),
        )
        for p in persons
    ]
    relationships = store.find_relationships(RelationshipQuery())
    return ok(FamilyTreeSnapshot(persons=enriched, relationships=relationships))
