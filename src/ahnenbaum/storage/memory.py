"""In-memory store for tests and embedding."""
from __future__ import annotations

from collections.abc import Iterable

from ..models.person import Person, PersonEvent, PersonName, utcnow
from ..models.relationship import Relationship
from .base import RelationshipQuery, RelationshipStore


class InMemoryStore(RelationshipStore):
    """Dict-backed storage. Insertion order is preserved for every table."""

    def __init__(self) -> None:
        self._persons: dict[str, Person] = {}
        self._names: dict[str, PersonName] = {}
        self._events: dict[str, PersonEvent] = {}
        self._relationships: dict[str, Relationship] = {}

    def add_person(self, person: Person) -> Person:
        self._persons[person.id] = person.model_copy(deep=True)
        return person

    def get_person(self, person_id: str) -> Person | None:
        person = self._persons.get(person_id)
        return person.model_copy(deep=True) if person else None

    def get_persons(self, person_ids: Iterable[str]) -> list[Person]:
        wanted = set(person_ids)
        return [p.model_copy(deep=True) for pid, p in self._persons.items() if pid in wanted]

    def list_persons(self, include_deleted: bool = False) -> list[Person]:
        return [
            p.model_copy(deep=True)
            for p in self._persons.values()
            if include_deleted or not p.is_deleted
        ]

    def soft_delete_person(self, person_id: str) -> bool:
        person = self._persons.get(person_id)
        if person is None or person.is_deleted:
            return False
        now = utcnow()
        self._persons[person_id] = person.model_copy(update={"deleted_at": now, "updated_at": now})
        return True

    def add_name(self, name: PersonName) -> PersonName:
        self._names[name.id] = name.model_copy(deep=True)
        return name

    def get_names(self, person_ids: Iterable[str] | None = None) -> list[PersonName]:
        wanted = set(person_ids) if person_ids is not None else None
        return [
            n.model_copy(deep=True)
            for n in self._names.values()
            if wanted is None or n.person_id in wanted
        ]

    def add_event(self, event: PersonEvent) -> PersonEvent:
        self._events[event.id] = event.model_copy(deep=True)
        return event

    def get_events(self, person_ids: Iterable[str] | None = None) -> list[PersonEvent]:
        wanted = set(person_ids) if person_ids is not None else None
        return [
            e.model_copy(deep=True)
            for e in self._events.values()
            if e.deleted_at is None and (wanted is None or e.person_id in wanted)
        ]

    def insert_relationship(self, rel: Relationship) -> Relationship:
        if rel.id in self._relationships:
            raise ValueError(f"Relationship {rel.id} already stored")
        self._relationships[rel.id] = rel.model_copy(deep=True)
        return rel

    def update_relationship(self, rel: Relationship) -> Relationship:
        if rel.id not in self._relationships:
            raise KeyError(rel.id)
        self._relationships[rel.id] = rel.model_copy(deep=True)
        return rel

    def get_relationship(self, rel_id: str) -> Relationship | None:
        rel = self._relationships.get(rel_id)
        return rel.model_copy(deep=True) if rel else None

    def find_relationships(self, query: RelationshipQuery) -> list[Relationship]:
        matched = [r for r in self._relationships.values() if query.matches(r)]
        end = None if query.limit is None else query.offset + query.limit
        return [r.model_copy(deep=True) for r in matched[query.offset:end]]

    def count_relationships(self, query: RelationshipQuery) -> int:
        return sum(1 for r in self._relationships.values() if query.matches(r))
