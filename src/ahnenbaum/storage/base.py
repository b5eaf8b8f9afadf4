"""Storage query surface consumed by the relationship engine.

The engine only needs set-based bulk reads over persons and relationships
plus single-row relationship writes. Backends: in-memory (tests, embedding)
and SQLite (CLI, single-process deployments).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..models.person import Person, PersonEvent, PersonName
from ..models.relationship import Relationship, RelationshipType


@dataclass
class RelationshipQuery:
    """Filter over relationship rows. Empty filters match everything."""
    # Edge endpoints
    person_a_ids: set[str] = field(default_factory=set)
    person_b_ids: set[str] = field(default_factory=set)
    touching_ids: set[str] = field(default_factory=set)  # either endpoint

    types: set[RelationshipType] = field(default_factory=set)
    include_deleted: bool = False

    # Pagination
    limit: int | None = None
    offset: int = 0

    def matches(self, rel: Relationship) -> bool:
        if not self.include_deleted and rel.is_deleted:
            return False
        if self.types and rel.type not in self.types:
            return False
        if self.person_a_ids and rel.person_a_id not in self.person_a_ids:
            return False
        if self.person_b_ids and rel.person_b_id not in self.person_b_ids:
            return False
        if self.touching_ids and not (
            rel.person_a_id in self.touching_ids or rel.person_b_id in self.touching_ids
        ):
            return False
        return True


class RelationshipStore(ABC):
    """Abstract base class for person/relationship storage."""

    # ------------------------------ Persons ------------------------------

    @abstractmethod
    def add_person(self, person: Person) -> Person:
        """Insert a person row."""
        ...

    @abstractmethod
    def get_person(self, person_id: str) -> Person | None:
        """Get a person by ID, soft-deleted rows included."""
        ...

    @abstractmethod
    def get_persons(self, person_ids: Iterable[str]) -> list[Person]:
        """Bulk-fetch persons by ID, soft-deleted rows included."""
        ...

    @abstractmethod
    def list_persons(self, include_deleted: bool = False) -> list[Person]:
        """All persons in insertion order."""
        ...

    @abstractmethod
    def soft_delete_person(self, person_id: str) -> bool:
        """Mark a person deleted. False if missing or already deleted."""
        ...

    @abstractmethod
    def add_name(self, name: PersonName) -> PersonName:
        ...

    @abstractmethod
    def get_names(self, person_ids: Iterable[str] | None = None) -> list[PersonName]:
        """Names for the given persons (all names when ``None``)."""
        ...

    @abstractmethod
    def add_event(self, event: PersonEvent) -> PersonEvent:
        ...

    @abstractmethod
    def get_events(self, person_ids: Iterable[str] | None = None) -> list[PersonEvent]:
        """Non-deleted events for the given persons (all when ``None``)."""
        ...

    # --------------------------- Relationships ---------------------------

    @abstractmethod
    def insert_relationship(self, rel: Relationship) -> Relationship:
        """Insert a relationship row."""
        ...

    @abstractmethod
    def update_relationship(self, rel: Relationship) -> Relationship:
        """Overwrite an existing relationship row by ID."""
        ...

    @abstractmethod
    def get_relationship(self, rel_id: str) -> Relationship | None:
        """Get a relationship by ID, soft-deleted rows included."""
        ...

    @abstractmethod
    def find_relationships(self, query: RelationshipQuery) -> list[Relationship]:
        """Relationships matching ``query`` in insertion order."""
        ...

    @abstractmethod
    def count_relationships(self, query: RelationshipQuery) -> int:
        """Number of relationships matching ``query``, ignoring pagination."""
        ...

    def close(self) -> None:
        """Release backend resources."""
        return None

    def __enter__(self) -> RelationshipStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
