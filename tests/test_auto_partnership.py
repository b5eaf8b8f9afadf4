"""Tests for co-parent partner inference."""
from __future__ import annotations

import pytest

from ahnenbaum.models import RelationshipType
from ahnenbaum.services import maybe_create_partner_relationships
from ahnenbaum.storage import RelationshipQuery


def _create(service, parent, child, rel_type="biological_parent"):
    rel = service.create({"person_a_id": parent, "person_b_id": child, "type": rel_type}).data
    return maybe_create_partner_relationships(service, rel)


def _partner_edges(store):
    return store.find_relationships(
        RelationshipQuery(types={t for t in RelationshipType if t.is_partner})
    )


class TestAutoPartnership:
    """Tests for maybe_create_partner_relationships."""

    def test_first_parent_creates_nothing(self, service, make_person):
        created = _create(service, make_person("Mother"), make_person("Child"))

        assert created == []

    def test_second_parent_creates_marriage(self, service, make_person):
        """Adding a second parent partners the two parents."""
        mother = make_person("Mother")
        father = make_person("Father")
        child = make_person("Child")
        _create(service, mother, child)

        created = _create(service, father, child)

        assert len(created) == 1
        assert created[0].type == RelationshipType.MARRIAGE
        assert {created[0].person_a_id, created[0].person_b_id} == {mother, father}

    def test_third_parent_pairs_with_each_existing_parent(self, service, make_person):
        mother = make_person("Mother")
        father = make_person("Father")
        stepfather = make_person("Stepfather")
        child = make_person("Child")
        _create(service, mother, child)
        _create(service, father, child)

        created = _create(service, stepfather, child, "step_parent")

        assert len(created) == 2
        assert {frozenset((r.person_a_id, r.person_b_id)) for r in created} == {
            frozenset((stepfather, mother)),
            frozenset((stepfather, father)),
        }

    def test_existing_partnership_of_any_type_skips(self, service, store, make_person):
        mother = make_person("Mother")
        father = make_person("Father")
        child = make_person("Child")
        service.create({"person_a_id": father, "person_b_id": mother, "type": "cohabitation"})
        _create(service, mother, child)

        created = _create(service, father, child)

        assert created == []
        assert len(_partner_edges(store)) == 1

    def test_existing_marriage_reverse_direction_skips(self, service, store, make_person):
        mother = make_person("Mother")
        father = make_person("Father")
        child = make_person("Child")
        service.create({"person_a_id": mother, "person_b_id": father, "type": "marriage"})
        _create(service, mother, child)

        assert _create(service, father, child) == []
        assert len(_partner_edges(store)) == 1

    @pytest.mark.parametrize("rel_type", ["godparent", "guardian"])
    def test_non_qualifying_new_edge_ignored(self, service, store, make_person, rel_type):
        mother = make_person("Mother")
        godparent = make_person("Godparent")
        child = make_person("Child")
        _create(service, mother, child)

        assert _create(service, godparent, child, rel_type) == []
        assert _partner_edges(store) == []

    def test_non_qualifying_existing_parent_ignored(self, service, store, make_person):
        guardian = make_person("Guardian")
        mother = make_person("Mother")
        child = make_person("Child")
        _create(service, guardian, child, "guardian")

        assert _create(service, mother, child) == []
        assert _partner_edges(store) == []

    def test_parent_listed_under_two_types_partnered_once(self, service, make_person):
        mother = make_person("Mother")
        father = make_person("Father")
        child = make_person("Child")
        _create(service, mother, child)
        _create(service, mother, child, "adoptive_parent")

        created = _create(service, father, child)

        assert len(created) == 1

    def test_partner_edge_is_not_a_trigger(self, service, make_person):
        a = make_person("A")
        b = make_person("B")

        assert _create(service, a, b, "marriage") == []

    def test_deleted_partnership_is_recreated(self, service, make_person):
        mother = make_person("Mother")
        father = make_person("Father")
        child = make_person("Child")
        old = service.create({"person_a_id": mother, "person_b_id": father, "type": "marriage"}).data
        service.delete(old.id)
        _create(service, mother, child)

        created = _create(service, father, child)

        assert len(created) == 1
        assert created[0].id != old.id
