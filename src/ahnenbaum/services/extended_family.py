"""Extended family derivation by graph traversal.

Grandparents, cousins, in-laws and the rest are never stored. They are
computed per request in two phases:

1. Neighborhood extraction: layered BFS outward from the target person,
   one bulk relationship read per layer, annotating every edge with the
   hop role (``parent``, ``child`` or ``partner``) it plays from its source.
2. Relation algebra: single-hop steps (``parents_of``, ``children_of``,
   ``partners_of``, ``siblings_of``) composed by ``walk`` into one fixed
   chain per derived bucket.

Only qualifying parent types (biological, adoptive, step, foster) take part
in parent/child/sibling hops, so godchildren never surface as cousins.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

import structlog

from ..config import CONFIG, EngineConfig
from ..models.person import PersonWithDetails
from ..models.relationship import RelationshipType, is_partner, is_qualifying_parent
from ..result import ErrorCode, Result, err, ok
from ..storage.base import RelationshipQuery, RelationshipStore

logger = structlog.get_logger(__name__)

Step = Callable[[str], list[str]]


class HopRole(str, Enum):
    """What the target of a traversal edge is to its source."""
    PARENT = "parent"
    CHILD = "child"
    PARTNER = "partner"


class DerivedRelationship(str, Enum):
    """Labels attached to derived family members."""
    GRANDPARENT = "grandparent"
    GREAT_GRANDPARENT = "great_grandparent"
    UNCLE_AUNT = "uncle_aunt"
    GREAT_UNCLE_AUNT = "great_uncle_aunt"
    COUSIN = "cousin"
    NEPHEW_NIECE = "nephew_niece"
    SIBLING_IN_LAW = "sibling_in_law"
    PARENT_IN_LAW = "parent_in_law"
    CHILD_IN_LAW = "child_in_law"
    CO_PARENT_IN_LAW = "co_parent_in_law"


@dataclass(frozen=True)
class TraversalEdge:
    """A directed view of a stored edge, seen from ``source``."""
    source: str
    target: str
    type: RelationshipType
    role: HopRole


class KinshipGraph:
    """Role-annotated subgraph with the single-hop kinship steps."""

    def __init__(self, edges: Iterable[TraversalEdge] = ()) -> None:
        self._by_source: dict[str, list[TraversalEdge]] = defaultdict(list)
        self._seen: set[TraversalEdge] = set()
        for edge in edges:
            self.add(edge)

    def add(self, edge: TraversalEdge) -> None:
        # Deduplicated by (source, target, type, role)
        if edge in self._seen:
            return
        self._seen.add(edge)
        self._by_source[edge.source].append(edge)

    def __len__(self) -> int:
        return len(self._seen)

    def _targets(self, person_id: str, role: HopRole, qualifying_only: bool) -> list[str]:
        targets = (
            e.target
            for e in self._by_source.get(person_id, ())
            if e.role == role and (not qualifying_only or is_qualifying_parent(e.type))
        )
        return list(dict.fromkeys(targets))

    def parents_of(self, person_id: str) -> list[str]:
        return self._targets(person_id, HopRole.PARENT, qualifying_only=True)

    def children_of(self, person_id: str) -> list[str]:
        return self._targets(person_id, HopRole.CHILD, qualifying_only=True)

    def partners_of(self, person_id: str) -> list[str]:
        return self._targets(person_id, HopRole.PARTNER, qualifying_only=False)

    def siblings_of(self, person_id: str) -> list[str]:
        """Children of the person's parents, excluding the person."""
        siblings: dict[str, None] = {}
        for parent_id in self.parents_of(person_id):
            for child_id in self.children_of(parent_id):
                if child_id != person_id:
                    siblings[child_id] = None
        return list(siblings)


def walk(origin: str, start: str | Iterable[str], *steps: Step) -> list[str]:
    """Apply ``steps`` left to right from ``start``, deduplicating at each hop.

    The origin person is removed from the final result.

    >>> walk(me, me, graph.parents_of, graph.parents_of)  # grandparents
    """
    current = [start] if isinstance(start, str) else list(dict.fromkeys(start))
    for step in steps:
        following: dict[str, None] = {}
        for person_id in current:
            for target in step(person_id):
                following[target] = None
        current = list(following)
    return [person_id for person_id in current if person_id != origin]


def extract_neighborhood(
    store: RelationshipStore,
    person_id: str,
    max_depth: int = CONFIG.kinship_max_depth,
) -> KinshipGraph:
    """Breadth-first neighborhood of ``person_id`` up to ``max_depth`` layers.

    Each layer costs one bulk read of the live edges touching it.
    """
    graph = KinshipGraph()
    visited: set[str] = set()
    layer: set[str] = {person_id}
    depth = 0

    while layer and depth < max_depth:
        visited |= layer
        next_layer: set[str] = set()

        for rel in store.find_relationships(RelationshipQuery(touching_ids=layer)):
            partner = is_partner(rel.type)
            if rel.person_a_id in layer:
                graph.add(TraversalEdge(
                    source=rel.person_a_id,
                    target=rel.person_b_id,
                    type=rel.type,
                    role=HopRole.PARTNER if partner else HopRole.CHILD,
                ))
                if rel.person_b_id not in visited:
                    next_layer.add(rel.person_b_id)
            if rel.person_b_id in layer:
                graph.add(TraversalEdge(
                    source=rel.person_b_id,
                    target=rel.person_a_id,
                    type=rel.type,
                    role=HopRole.PARTNER if partner else HopRole.PARENT,
                ))
                if rel.person_a_id not in visited:
                    next_layer.add(rel.person_a_id)

        layer = next_layer
        depth += 1

    return graph


def derive_kinship(graph: KinshipGraph, person_id: str) -> dict[DerivedRelationship, list[str]]:
    """Compute every derived bucket as person-id lists."""
    g = graph
    me = person_id

    grandparents = walk(me, me, g.parents_of, g.parents_of)
    great_grandparents = walk(me, grandparents, g.parents_of)
    uncles_aunts = walk(me, me, g.parents_of, g.siblings_of)
    great_uncles_aunts = walk(me, grandparents, g.siblings_of)
    cousins = walk(me, me, g.parents_of, g.siblings_of, g.children_of)
    nephews_nieces = walk(me, me, g.siblings_of, g.children_of)

    # Partners' siblings, or siblings' partners
    siblings_in_law = list(dict.fromkeys([
        *walk(me, me, g.partners_of, g.siblings_of),
        *walk(me, me, g.siblings_of, g.partners_of),
    ]))
    parents_in_law = walk(me, me, g.partners_of, g.parents_of)
    children_in_law = walk(me, me, g.children_of, g.partners_of)

    # A child-in-law's parents, but not my own partner (my co-parent)
    own_partners = set(g.partners_of(me))
    co_parents_in_law = [
        pid for pid in walk(me, children_in_law, g.parents_of) if pid not in own_partners
    ]

    return {
        DerivedRelationship.GRANDPARENT: grandparents,
        DerivedRelationship.GREAT_GRANDPARENT: great_grandparents,
        DerivedRelationship.UNCLE_AUNT: uncles_aunts,
        DerivedRelationship.GREAT_UNCLE_AUNT: great_uncles_aunts,
        DerivedRelationship.COUSIN: cousins,
        DerivedRelationship.NEPHEW_NIECE: nephews_nieces,
        DerivedRelationship.SIBLING_IN_LAW: siblings_in_law,
        DerivedRelationship.PARENT_IN_LAW: parents_in_law,
        DerivedRelationship.CHILD_IN_LAW: children_in_law,
        DerivedRelationship.CO_PARENT_IN_LAW: co_parents_in_law,
    }


@dataclass
class ExtendedFamilyMember:
    """A resolved person plus how they relate to the target."""
    person: PersonWithDetails
    derived_relationship: DerivedRelationship

    def to_dict(self) -> dict[str, Any]:
        return {
            "person": self.person.model_dump(mode="json"),
            "derived_relationship": self.derived_relationship.value,
        }


@dataclass
class ExtendedFamilyResult:
    """Ten derived buckets for one target person."""
    grandparents: list[ExtendedFamilyMember] = field(default_factory=list)
    great_grandparents: list[ExtendedFamilyMember] = field(default_factory=list)
    uncles_aunts: list[ExtendedFamilyMember] = field(default_factory=list)
    great_uncles_aunts: list[ExtendedFamilyMember] = field(default_factory=list)
    cousins: list[ExtendedFamilyMember] = field(default_factory=list)
    nephews_nieces: list[ExtendedFamilyMember] = field(default_factory=list)
    siblings_in_law: list[ExtendedFamilyMember] = field(default_factory=list)
    parents_in_law: list[ExtendedFamilyMember] = field(default_factory=list)
    children_in_law: list[ExtendedFamilyMember] = field(default_factory=list)
    co_parents_in_law: list[ExtendedFamilyMember] = field(default_factory=list)

    def ids(self, bucket: str) -> list[str]:
        """Person ids of one bucket, in derivation order."""
        return [m.person.id for m in getattr(self, bucket)]

    @property
    def total(self) -> int:
        return sum(len(getattr(self, f.name)) for f in fields(self))

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {f.name: [m.to_dict() for m in getattr(self, f.name)] for f in fields(self)}


_BUCKET_FIELDS: dict[DerivedRelationship, str] = {
    DerivedRelationship.GRANDPARENT: "grandparents",
    DerivedRelationship.GREAT_GRANDPARENT: "great_grandparents",
    DerivedRelationship.UNCLE_AUNT: "uncles_aunts",
    DerivedRelationship.GREAT_UNCLE_AUNT: "great_uncles_aunts",
    DerivedRelationship.COUSIN: "cousins",
    DerivedRelationship.NEPHEW_NIECE: "nephews_nieces",
    DerivedRelationship.SIBLING_IN_LAW: "siblings_in_law",
    DerivedRelationship.PARENT_IN_LAW: "parents_in_law",
    DerivedRelationship.CHILD_IN_LAW: "children_in_law",
    DerivedRelationship.CO_PARENT_IN_LAW: "co_parents_in_law",
}


def resolve_persons(store: RelationshipStore, person_ids: Iterable[str]) -> dict[str, PersonWithDetails]:
    """Batch-resolve live persons with names and events in three bulk reads."""
    ids = list(dict.fromkeys(person_ids))
    if not ids:
        return {}

    persons = [p for p in store.get_persons(ids) if not p.is_deleted]
    names_by_person: dict[str, list] = defaultdict(list)
    for name in store.get_names(ids):
        names_by_person[name.person_id].append(name)
    events_by_person: dict[str, list] = defaultdict(list)
    for event in store.get_events(ids):
        events_by_person[event.person_id].append(event)

    return {
        p.id: PersonWithDetails(
            person=p,
            names=names_by_person.get(p.id, []),
            events=events_by_person.get(p.id, []),
        )
        for p in persons
    }


class ExtendedFamilyService:
    """Derives extended kinship for a person, per request, from the live store."""

    def __init__(self, store: RelationshipStore, config: EngineConfig = CONFIG) -> None:
        self.store = store
        self.config = config

    def get_extended_family(self, person_id: str) -> Result[ExtendedFamilyResult]:
        target = self.store.get_person(person_id)
        if target is None or target.is_deleted:
            return err(ErrorCode.NOT_FOUND, f"Person '{person_id}' not found")

        graph = extract_neighborhood(self.store, person_id, self.config.kinship_max_depth)
        buckets = derive_kinship(graph, person_id)

        resolved = resolve_persons(
            self.store, (pid for ids in buckets.values() for pid in ids)
        )

        result = ExtendedFamilyResult()
        for label, ids in buckets.items():
            members = [
                ExtendedFamilyMember(person=resolved[pid], derived_relationship=label)
                for pid in ids
                if pid in resolved
            ]
            setattr(result, _BUCKET_FIELDS[label], members)

        logger.info(
            "extended_family.derived",
            person_id=person_id,
            edges=len(graph),
            members=result.total,
        )
        return ok(result)
