"""Tests for ancestor tree building and the full family snapshot."""
from __future__ import annotations

from ahnenbaum.models import PersonEvent
from ahnenbaum.services import build_ancestor_tree, get_full_family_tree


def _ids(node):
    return [node.id, [_ids(p) for p in node.parents]]


class TestBuildAncestorTree:
    """Tests for build_ancestor_tree."""

    def test_missing_root_is_none(self, store):
        result = build_ancestor_tree(store, "ghost")

        assert result.ok
        assert result.data is None

    def test_deleted_root_is_none(self, store, make_person):
        root = make_person("Root")
        store.soft_delete_person(root)

        assert build_ancestor_tree(store, root).data is None

    def test_root_only(self, store, make_person):
        root = make_person("Root")

        tree = build_ancestor_tree(store, root).data

        assert tree.id == root
        assert tree.parents == []
        assert tree.person.display_name == "Root"

    def test_four_generations_by_default(self, store, make_person, link):
        chain = [make_person(f"Gen {i}") for i in range(6)]
        for parent, child in zip(chain[1:], chain):
            link(parent, child)

        tree = build_ancestor_tree(store, chain[0]).data

        assert tree.count() == 4
        assert _ids(tree) == [chain[0], [[chain[1], [[chain[2], [[chain[3], []]]]]]]]

    def test_single_generation_has_no_parents(self, store, make_person, link):
        root = make_person("Root")
        link(make_person("Father"), root)

        tree = build_ancestor_tree(store, root, max_generations=1).data

        assert tree.parents == []

    def test_both_parents_and_grandparents(self, store, make_person, link):
        root = make_person("Root")
        father = make_person("Father")
        mother = make_person("Mother")
        grandpa = make_person("Grandpa")
        link(father, root)
        link(mother, root)
        link(grandpa, mother)

        tree = build_ancestor_tree(store, root, max_generations=3).data

        assert [p.id for p in tree.parents] == [father, mother]
        assert tree.parents[0].parents == []
        assert [p.id for p in tree.parents[1].parents] == [grandpa]

    def test_excludes_godparents_and_guardians(self, store, make_person, link):
        root = make_person("Root")
        link(make_person("Godparent"), root, "godparent")
        link(make_person("Guardian"), root, "guardian")

        assert build_ancestor_tree(store, root).data.parents == []

    def test_biological_parents_preferred_over_step(self, store, make_person, link):
        root = make_person("Root")
        step = make_person("Stepmother")
        father = make_person("Father")
        mother = make_person("Mother")
        link(step, root, "step_parent")
        link(father, root)
        link(mother, root)

        tree = build_ancestor_tree(store, root).data

        assert [p.id for p in tree.parents] == [father, mother]

    def test_cycle_is_cut(self, store, make_person, link):
        a = make_person("A")
        b = make_person("B")
        link(a, b)
        link(b, a, "adoptive_parent")

        tree = build_ancestor_tree(store, a, max_generations=6).data

        assert _ids(tree) == [a, [[b, []]]]

    def test_tree_to_dict(self, store, make_person, link):
        root = make_person("Root")
        link(make_person("Father"), root)

        data = build_ancestor_tree(store, root).data.to_dict()

        assert data["person"]["person"]["id"] == root
        assert len(data["parents"]) == 1


class TestFullFamilyTree:
    """Tests for get_full_family_tree."""

    def test_snapshot_contains_live_rows_only(self, store, service, make_person, link):
        alive = make_person("Alive")
        gone = make_person("Gone")
        child = make_person("Child")
        kept = link(alive, child)
        dropped = link(gone, child)
        service.delete(dropped)
        store.soft_delete_person(gone)
        store.add_event(PersonEvent(person_id=alive, type="birth", date="1901"))

        snapshot = get_full_family_tree(store).data

        assert [p.id for p in snapshot.persons] == [alive, child]
        assert [r.id for r in snapshot.relationships] == [kept]
        assert snapshot.persons[0].events[0].date == "1901"
        assert snapshot.persons[0].display_name == "Alive"
