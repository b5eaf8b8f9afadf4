"""Person models.

Persons are owned by the person service; the relationship engine only
reads them (existence, soft-delete state, and display details).
"""
from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_utils import uuid7 as _uuid7


def new_id() -> str:
    """Generate a time-ordered opaque identifier."""
    return str(UUID(str(_uuid7())))


def utcnow() -> datetime:
    return datetime.now(UTC)


class Sex(str, Enum):
    """Biological sex, kept for GEDCOM compatibility. No gendered assumptions."""
    MALE = "male"
    FEMALE = "female"
    INTERSEX = "intersex"
    UNKNOWN = "unknown"


class PrivacyLevel(str, Enum):
    """Who may see a person record."""
    PUBLIC = "public"
    USERS_ONLY = "users_only"
    OWNER_ONLY = "owner_only"


class NameType(str, Enum):
    BIRTH = "birth"
    MARRIED = "married"
    ALIAS = "alias"


class Person(BaseModel):
    """Core person record."""

    id: str = Field(default_factory=new_id)
    sex: Sex = Sex.UNKNOWN
    privacy: PrivacyLevel = PrivacyLevel.PUBLIC
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class PersonName(BaseModel):
    """A name entry. A person may have several; one should be preferred."""

    id: str = Field(default_factory=new_id)
    person_id: str
    given: str = ""
    surname: str = ""
    type: NameType = NameType.BIRTH
    is_preferred: bool = True

    @property
    def display(self) -> str:
        return " ".join(part for part in (self.given, self.surname) if part)


class PersonEvent(BaseModel):
    """A life event (birth, death, residence, ...) attached to a person."""

    id: str = Field(default_factory=new_id)
    person_id: str
    type: str = Field(description="birth, death, baptism, burial, residence, etc.")
    date: str | None = None
    place: str | None = None
    deleted_at: datetime | None = None


class PersonWithDetails(BaseModel):
    """Person enriched with names and events, as returned to the UI."""

    person: Person
    names: list[PersonName] = Field(default_factory=list)
    events: list[PersonEvent] = Field(default_factory=list)

    @property
    def id(self) -> str:
        return self.person.id

    @property
    def preferred_name(self) -> PersonName | None:
        for name in self.names:
            if name.is_preferred:
                return name
        return self.names[0] if self.names else None

    @property
    def display_name(self) -> str:
        name = self.preferred_name
        return name.display if name and name.display else self.person.id
