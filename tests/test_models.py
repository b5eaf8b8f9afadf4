"""Tests for domain models and the Result type."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from ahnenbaum.models import (
    PARENT_CHILD_TYPES,
    PARTNER_TYPES,
    QUALIFYING_PARENT_TYPES,
    GenealogyDate,
    Person,
    PersonName,
    PersonWithDetails,
    Relationship,
    RelationshipType,
    is_partner,
    is_qualifying_parent,
)
from ahnenbaum.result import ErrorCode, ResultError, err, ok


class TestRelationshipTypes:
    """Tests for the relationship type sets."""

    def test_sets_are_disjoint_and_complete(self):
        assert PARENT_CHILD_TYPES.isdisjoint(PARTNER_TYPES)
        assert PARENT_CHILD_TYPES | PARTNER_TYPES == set(RelationshipType)

    def test_qualifying_excludes_godparent_and_guardian(self):
        assert QUALIFYING_PARENT_TYPES < PARENT_CHILD_TYPES
        assert RelationshipType.GODPARENT not in QUALIFYING_PARENT_TYPES
        assert RelationshipType.GUARDIAN not in QUALIFYING_PARENT_TYPES

    def test_predicates_accept_values_and_members(self):
        assert is_qualifying_parent("foster_parent")
        assert is_qualifying_parent(RelationshipType.STEP_PARENT)
        assert not is_qualifying_parent("godparent")
        assert is_partner("cohabitation")
        assert not is_partner("biological_parent")
        assert RelationshipType.CUSTOM.is_partner
        assert RelationshipType.GUARDIAN.is_parent_child

    def test_links_is_unordered(self):
        rel = Relationship(person_a_id="a", person_b_id="b", type=RelationshipType.MARRIAGE)

        assert rel.links("b", "a")
        assert not rel.links("a", "c")
        assert rel.touches("b")


class TestGenealogyDate:
    """Tests for GenealogyDate."""

    def test_range_requires_bounds(self):
        with pytest.raises(ValidationError):
            GenealogyDate(type="range", **{"from": "1850"})

    def test_exact_requires_date(self):
        with pytest.raises(ValidationError):
            GenealogyDate(type="exact")

    @pytest.mark.parametrize(
        ("data", "text"),
        [
            ({"type": "exact", "date": "1901-04-12"}, "1901-04-12"),
            ({"type": "approximate", "date": "1890"}, "about 1890"),
            ({"type": "before", "date": "1900"}, "before 1900"),
            ({"type": "range", "from": "1850", "to": "1860"}, "between 1850 and 1860"),
        ],
    )
    def test_str(self, data, text):
        assert str(GenealogyDate.model_validate(data)) == text

    def test_json_uses_alias(self):
        date = GenealogyDate(type="range", **{"from": "1850", "to": "1860"})

        assert date.to_json() == '{"type":"range","from":"1850","to":"1860"}'


class TestPersonWithDetails:
    """Tests for display helpers."""

    def test_preferred_name(self):
        person = Person()
        details = PersonWithDetails(
            person=person,
            names=[
                PersonName(person_id=person.id, given="Anni", is_preferred=False),
                PersonName(person_id=person.id, given="Anna", surname="Schmidt"),
            ],
        )

        assert details.id == person.id
        assert details.display_name == "Anna Schmidt"

    def test_falls_back_to_id(self):
        person = Person()

        assert PersonWithDetails(person=person).display_name == person.id

    def test_ids_are_unique(self):
        assert Person().id != Person().id


class TestResult:
    """Tests for Result, AppError and ErrorCode."""

    def test_ok(self):
        result = ok(42)

        assert result.ok
        assert result.unwrap() == 42
        assert result.error is None

    def test_err_unwrap_raises(self):
        result = err(ErrorCode.CONFLICT, "exists", {"pair": ["a", "b"]})

        with pytest.raises(ResultError) as exc_info:
            result.unwrap()

        assert exc_info.value.error.code == ErrorCode.CONFLICT
        assert result.error.to_dict() == {
            "code": "CONFLICT",
            "message": "exists",
            "details": {"pair": ["a", "b"]},
        }

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (ErrorCode.NOT_FOUND, 404),
            (ErrorCode.VALIDATION_ERROR, 400),
            (ErrorCode.CONFLICT, 409),
            (ErrorCode.INTERNAL_ERROR, 500),
        ],
    )
    def test_http_status(self, code, status):
        assert code.http_status == status
