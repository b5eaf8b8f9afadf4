"""Relationship models - the typed edge graph.

Each relationship is a first-class edge ``(personA) -[type]-> (personB)``.
For parent-child types personA is the parent and personB the child;
partner types are symmetric. Same-sex relationships are first-class.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .date import GenealogyDate
from .person import new_id, utcnow


class RelationshipType(str, Enum):
    """Types of relationship edges."""
    # Parent-child (personA = parent, personB = child)
    BIOLOGICAL_PARENT = "biological_parent"
    ADOPTIVE_PARENT = "adoptive_parent"
    STEP_PARENT = "step_parent"
    FOSTER_PARENT = "foster_parent"
    GUARDIAN = "guardian"
    GODPARENT = "godparent"

    # Partner (symmetric)
    MARRIAGE = "marriage"
    CIVIL_PARTNERSHIP = "civil_partnership"
    DOMESTIC_PARTNERSHIP = "domestic_partnership"
    COHABITATION = "cohabitation"
    ENGAGEMENT = "engagement"
    CUSTOM = "custom"

    @property
    def is_parent_child(self) -> bool:
        return self in PARENT_CHILD_TYPES

    @property
    def is_partner(self) -> bool:
        return self in PARTNER_TYPES

    @property
    def is_qualifying_parent(self) -> bool:
        return self in QUALIFYING_PARENT_TYPES


PARENT_CHILD_TYPES: frozenset[RelationshipType] = frozenset({
    RelationshipType.BIOLOGICAL_PARENT,
    RelationshipType.ADOPTIVE_PARENT,
    RelationshipType.STEP_PARENT,
    RelationshipType.FOSTER_PARENT,
    RelationshipType.GUARDIAN,
    RelationshipType.GODPARENT,
})

PARTNER_TYPES: frozenset[RelationshipType] = frozenset({
    RelationshipType.MARRIAGE,
    RelationshipType.CIVIL_PARTNERSHIP,
    RelationshipType.DOMESTIC_PARTNERSHIP,
    RelationshipType.COHABITATION,
    RelationshipType.ENGAGEMENT,
    RelationshipType.CUSTOM,
})

# Only these count toward co-parent partner inference and kinship math.
# Guardian and godparent edges are real but excluded.
QUALIFYING_PARENT_TYPES: frozenset[RelationshipType] = frozenset({
    RelationshipType.BIOLOGICAL_PARENT,
    RelationshipType.ADOPTIVE_PARENT,
    RelationshipType.STEP_PARENT,
    RelationshipType.FOSTER_PARENT,
})

# Partner type synthesized between co-parents
AUTO_PARTNER_DEFAULT_TYPE = RelationshipType.MARRIAGE


def is_qualifying_parent(rel_type: RelationshipType | str) -> bool:
    return getattr(rel_type, "value", rel_type) in _QUALIFYING_VALUES


def is_partner(rel_type: RelationshipType | str) -> bool:
    return getattr(rel_type, "value", rel_type) in _PARTNER_VALUES


_QUALIFYING_VALUES = frozenset(t.value for t in QUALIFYING_PARENT_TYPES)
_PARTNER_VALUES = frozenset(t.value for t in PARTNER_TYPES)


class Relationship(BaseModel):
    """A stored relationship edge."""

    id: str = Field(default_factory=new_id)
    person_a_id: str
    person_b_id: str
    type: RelationshipType
    start_date: GenealogyDate | None = None
    end_date: GenealogyDate | None = None
    place_id: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def touches(self, person_id: str) -> bool:
        return person_id in (self.person_a_id, self.person_b_id)

    def links(self, first_id: str, second_id: str) -> bool:
        """True if this edge joins the unordered pair {first_id, second_id}."""
        return {self.person_a_id, self.person_b_id} == {first_id, second_id}


class CreateRelationshipInput(BaseModel):
    """Payload for creating an edge."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    person_a_id: str = Field(min_length=1)
    person_b_id: str = Field(min_length=1)
    type: RelationshipType
    start_date: GenealogyDate | None = None
    end_date: GenealogyDate | None = None
    place_id: str | None = None
    notes: str | None = None


class UpdateRelationshipInput(BaseModel):
    """Partial field-level edit. Unset fields are left untouched."""

    model_config = ConfigDict(extra="forbid")

    type: RelationshipType | None = None
    start_date: GenealogyDate | None = None
    end_date: GenealogyDate | None = None
    place_id: str | None = None
    notes: str | None = None
