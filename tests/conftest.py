"""Shared fixtures: both storage backends, services and the engine."""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

from ahnenbaum.engine import GenealogyEngine
from ahnenbaum.models import Person, PersonName, RelationshipType
from ahnenbaum.services import RelationshipService
from ahnenbaum.storage import InMemoryStore, RelationshipStore, SQLiteStore


@pytest.fixture(autouse=True, scope="session")
def _uncached_loggers():
    """Cached loggers would bypass structlog.testing.capture_logs."""
    structlog.configure(cache_logger_on_first_use=False)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path) -> RelationshipStore:
    """Every store-backed test runs against both backends."""
    if request.param == "memory":
        backend: RelationshipStore = InMemoryStore()
    else:
        backend = SQLiteStore(tmp_path / "ahnenbaum.db")
    yield backend
    backend.close()


@pytest.fixture
def service(store: RelationshipStore) -> RelationshipService:
    return RelationshipService(store)


@pytest.fixture
def engine(store: RelationshipStore) -> GenealogyEngine:
    return GenealogyEngine(store)


@pytest.fixture
def make_person(store: RelationshipStore) -> Callable[..., str]:
    """Create a person with a preferred name and return its id."""

    def _make(given: str, surname: str = "") -> str:
        person = store.add_person(Person())
        store.add_name(PersonName(person_id=person.id, given=given, surname=surname))
        return person.id

    return _make


@pytest.fixture
def link(service: RelationshipService) -> Callable[..., str]:
    """Create an edge through the service and return its id."""

    def _link(
        person_a_id: str,
        person_b_id: str,
        rel_type: RelationshipType | str = RelationshipType.BIOLOGICAL_PARENT,
    ) -> str:
        result = service.create({
            "person_a_id": person_a_id,
            "person_b_id": person_b_id,
            "type": rel_type,
        })
        assert result.ok, result.error
        return result.data.id

    return _link
