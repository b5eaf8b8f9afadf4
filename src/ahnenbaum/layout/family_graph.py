"""Family graph layout - Sugiyama-lite layered layout for the full family.

Produces a top-down generational layout for an arbitrary family graph
(several partners, remarriage, disconnected components):

- oldest ancestors at the top (generation 0, lowest y)
- every parent strictly above each of their children
- partners side by side within a generation

Pure function of (persons, edges).
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import structlog

from ..config import CONFIG
from ..models.relationship import is_partner, is_qualifying_parent
from .pedigree import PositionedNode

logger = structlog.get_logger(__name__)


class EdgeLike(Protocol):
    person_a_id: str
    person_b_id: str
    type: Any


class ConnectionType(str, Enum):
    PARENT_CHILD = "parent-child"
    PARTNER = "partner"


@dataclass(frozen=True)
class GraphEdge:
    """Minimal edge shape accepted by the layout (``Relationship`` also fits)."""
    id: str
    person_a_id: str
    person_b_id: str
    type: str


@dataclass(frozen=True)
class GraphConnection:
    """A typed connector segment between two placed persons."""
    x1: float
    y1: float
    x2: float
    y2: float
    type: ConnectionType
    source_id: str
    target_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "type": self.type.value,
            "source_id": self.source_id,
            "target_id": self.target_id,
        }


@dataclass
class GraphLayout:
    nodes: list[PositionedNode] = field(default_factory=list)
    connections: list[GraphConnection] = field(default_factory=list)

    def node(self, person_id: str) -> PositionedNode | None:
        for n in self.nodes:
            if n.id == person_id:
                return n
        return None


@dataclass(frozen=True)
class FamilyGraphLayoutOptions:
    horizontal_spacing: float = CONFIG.graph_horizontal_spacing
    vertical_spacing: float = CONFIG.graph_vertical_spacing
    # Connectors attach this far above/below a node centre
    card_half_height: float = CONFIG.graph_card_half_height


def _type_value(rel_type: Any) -> str:
    return getattr(rel_type, "value", rel_type)


def _link(index: dict[str, dict[str, None]], key: str, value: str) -> None:
    index.setdefault(key, {})[value] = None


class _Adjacency:
    """Parent/child/partner maps; dicts keep supply order for determinism."""

    def __init__(self, person_ids: dict[str, None], edges: list[EdgeLike]) -> None:
        self.parents_of: dict[str, dict[str, None]] = {}
        self.children_of: dict[str, dict[str, None]] = {}
        self.partners_of: dict[str, dict[str, None]] = {}

        for edge in edges:
            a, b = edge.person_a_id, edge.person_b_id
            # Orphan references and self-loops are ignored
            if a not in person_ids or b not in person_ids or a == b:
                continue
            rel_type = _type_value(edge.type)
            if is_qualifying_parent(rel_type):
                _link(self.parents_of, b, a)
                _link(self.children_of, a, b)
            elif is_partner(rel_type):
                _link(self.partners_of, a, b)
                _link(self.partners_of, b, a)

        # Co-parents without an explicit partner edge share a generation.
        # Layout-only; nothing is written back.
        for parents in self.parents_of.values():
            ids = list(parents)
            for i, first in enumerate(ids):
                for second in ids[i + 1:]:
                    if second not in self.partners_of.get(first, {}):
                        _link(self.partners_of, first, second)
                        _link(self.partners_of, second, first)


def assign_generations(person_ids: list[str], adj: _Adjacency) -> dict[str, int]:
    """Longest-path generation numbers with partner alignment.

    Generations start at 0 for persons who are nobody's child. A person's
    generation is the longest root path reaching them; partners are pulled
    to the deeper of the two. A relaxation pass then restores
    "parent exactly above nearest child" after partner pulls.
    """
    generation: dict[str, int] = {}
    # A longest path in a DAG never exceeds the person count; beyond that
    # the input holds a parent-child cycle
    ceiling = len(person_ids)

    queue: deque[tuple[str, int]] = deque(
        (pid, 0) for pid in person_ids if not adj.parents_of.get(pid)
    )
    while queue:
        person_id, gen = queue.popleft()
        if gen > ceiling:
            continue
        existing = generation.get(person_id)
        if existing is not None and existing >= gen:
            continue
        generation[person_id] = gen

        for partner_id in adj.partners_of.get(person_id, {}):
            partner_gen = generation.get(partner_id)
            if partner_gen is None or partner_gen < gen:
                queue.append((partner_id, gen))

        for child_id in adj.children_of.get(person_id, {}):
            child_gen = generation.get(child_id)
            if child_gen is None or child_gen < gen + 1:
                queue.append((child_id, gen + 1))

    _correct_generations(generation, adj, max_passes=2 * len(person_ids) + 10)

    # Persons with no placed relatives default to the top row
    for person_id in person_ids:
        generation.setdefault(person_id, 0)
    return generation


def _correct_generations(generation: dict[str, int], adj: _Adjacency, max_passes: int) -> None:
    changed = True
    passes = 0
    while changed:
        if passes >= max_passes:
            logger.warning(
                "family_graph.correction_cap_reached",
                passes=passes,
                persons=len(generation),
            )
            return
        changed = False
        passes += 1

        # Pull parents down to sit directly above their nearest child
        for parent_id, children in adj.children_of.items():
            parent_gen = generation.get(parent_id)
            if parent_gen is None:
                continue
            child_gens = [generation[c] for c in children if c in generation]
            if child_gens and parent_gen < min(child_gens) - 1:
                generation[parent_id] = min(child_gens) - 1
                changed = True

        # Push children below every parent
        for parent_id, children in adj.children_of.items():
            parent_gen = generation.get(parent_id)
            if parent_gen is None:
                continue
            for child_id in children:
                child_gen = generation.get(child_id)
                if child_gen is not None and child_gen < parent_gen + 1:
                    generation[child_id] = parent_gen + 1
                    changed = True

        # Partners share the deeper generation
        for person_id, partners in adj.partners_of.items():
            person_gen = generation.get(person_id)
            if person_gen is None:
                continue
            for partner_id in partners:
                partner_gen = generation.get(partner_id)
                if partner_gen is not None and partner_gen < person_gen:
                    generation[partner_id] = person_gen
                    changed = True


def _order_rows(person_ids: list[str], generation: dict[str, int], adj: _Adjacency) -> dict[int, list[str]]:
    rows: dict[int, list[str]] = {}
    for person_id in person_ids:
        rows.setdefault(generation[person_id], []).append(person_id)

    ordered_rows: dict[int, list[str]] = {}
    for gen in sorted(rows):
        in_row = set(rows[gen])
        placed: set[str] = set()
        ordered: list[str] = []
        for person_id in rows[gen]:
            if person_id in placed:
                continue
            ordered.append(person_id)
            placed.add(person_id)
            for partner_id in adj.partners_of.get(person_id, {}):
                if partner_id in in_row and partner_id not in placed:
                    ordered.append(partner_id)
                    placed.add(partner_id)
        ordered_rows[gen] = ordered
    return ordered_rows


def layout_family_graph(
    persons: list[Any],
    edges: list[EdgeLike],
    options: FamilyGraphLayoutOptions | None = None,
) -> GraphLayout:
    """Lay out a full family graph.

    Args:
        persons: Objects with an ``id`` (``PersonWithDetails``, ``Person``, ...)
        edges: Objects with ``person_a_id``, ``person_b_id`` and ``type``.
            Guardian and godparent edges do not affect the layout; edges
            naming unknown persons are ignored.
        options: Spacing configuration

    Returns:
        GraphLayout with one node per person and typed connectors
    """
    if not persons:
        return GraphLayout()

    opts = options or FamilyGraphLayoutOptions()
    person_by_id: dict[str, Any] = {}
    for person in persons:
        person_by_id.setdefault(person.id, person)
    person_ids = list(person_by_id)

    adj = _Adjacency(dict.fromkeys(person_ids), edges)
    generation = assign_generations(person_ids, adj)
    rows = _order_rows(person_ids, generation, adj)

    layout = GraphLayout()
    position: dict[str, tuple[float, float]] = {}
    for gen, ids in rows.items():
        y = gen * opts.vertical_spacing
        start_x = -(len(ids) - 1) * opts.horizontal_spacing / 2
        for index, person_id in enumerate(ids):
            x = start_x + index * opts.horizontal_spacing or 0.0
            position[person_id] = (x, y)
            layout.nodes.append(PositionedNode(
                person=person_by_id[person_id],
                x=x,
                y=y,
                parent_ids=list(adj.parents_of.get(person_id, {})),
                generation=gen,
            ))

    seen_pairs: set[frozenset[str]] = set()
    for node in layout.nodes:
        x, y = position[node.id]
        for parent_id in node.parent_ids:
            px, py = position[parent_id]
            layout.connections.append(GraphConnection(
                x1=x,
                y1=y - opts.card_half_height,
                x2=px,
                y2=py + opts.card_half_height,
                type=ConnectionType.PARENT_CHILD,
                source_id=node.id,
                target_id=parent_id,
            ))

        for partner_id in adj.partners_of.get(node.id, {}):
            pair = frozenset((node.id, partner_id))
            if pair in seen_pairs or generation[partner_id] != generation[node.id]:
                continue
            seen_pairs.add(pair)
            px, py = position[partner_id]
            layout.connections.append(GraphConnection(
                x1=x,
                y1=y,
                x2=px,
                y2=py,
                type=ConnectionType.PARTNER,
                source_id=node.id,
                target_id=partner_id,
            ))

    return layout
