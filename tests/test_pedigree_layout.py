"""Tests for the binary ancestor pedigree layout."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from ahnenbaum.layout import (
    PedigreeLayoutOptions,
    TreeBounds,
    get_tree_bounds,
    layout_ancestor_tree,
    tree_depth,
)


@dataclass
class FakePerson:
    id: str


@dataclass
class FakeTree:
    person: FakePerson
    parents: list = field(default_factory=list)


def node(pid: str, *parents: FakeTree) -> FakeTree:
    return FakeTree(person=FakePerson(pid), parents=list(parents))


def by_id(nodes):
    return {n.id: n for n in nodes}


class TestLayoutAncestorTree:
    """Tests for layout_ancestor_tree."""

    def test_none_yields_empty(self):
        assert layout_ancestor_tree(None) == []

    def test_root_only_at_origin(self):
        nodes = layout_ancestor_tree(node("root"))

        assert len(nodes) == 1
        assert (nodes[0].x, nodes[0].y) == (0.0, 0.0)
        assert nodes[0].parent_ids == []

    def test_two_parents_above_root(self):
        nodes = by_id(layout_ancestor_tree(node("root", node("father"), node("mother"))))

        father, mother = nodes["father"], nodes["mother"]
        assert father.y == mother.y < 0
        assert father.x != mother.x
        assert father.x < 0 < mother.x
        assert nodes["root"].parent_ids == ["father", "mother"]

    def test_slot_formula(self):
        opts = PedigreeLayoutOptions(node_height=100, horizontal_spacing=50, total_width=400)
        tree = node("r", node("f", node("ff"), node("fm")), node("m", node("mf"), node("mm")))

        nodes = by_id(layout_ancestor_tree(tree, opts))

        # depth 1: slot width 200; depth 2: slot width 100
        assert nodes["f"].x == -100 and nodes["m"].x == 100
        assert [nodes[k].x for k in ("ff", "fm", "mf", "mm")] == [-150, -50, 50, 150]
        assert nodes["ff"].y == -200
        assert nodes["mm"].generation == 2

    def test_default_width_from_depth(self):
        opts = PedigreeLayoutOptions(node_height=120, horizontal_spacing=200)
        tree = node("r", node("f"), node("m"))

        nodes = by_id(layout_ancestor_tree(tree, opts))

        assert nodes["f"].x == -100
        assert nodes["m"].x == 100
        assert nodes["f"].y == -120

    def test_missing_parent_leaves_slot_empty(self):
        """A lone mother keeps the first-parent slot; her father keeps his."""
        opts = PedigreeLayoutOptions(total_width=400)
        tree = node("r", node("m", node("mf")))

        nodes = layout_ancestor_tree(tree, opts)

        assert [n.id for n in nodes] == ["r", "m", "mf"]
        assert by_id(nodes)["m"].x == -100

    def test_deterministic(self):
        tree = node("r", node("f", node("ff")), node("m"))
        first = [n.to_dict() for n in layout_ancestor_tree(tree)]
        second = [n.to_dict() for n in layout_ancestor_tree(tree)]

        assert first == second

    def test_no_negative_zero(self):
        nodes = layout_ancestor_tree(node("root"))

        assert str(nodes[0].x) == "0.0"
        assert str(nodes[0].y) == "0.0"

    def test_tree_depth(self):
        assert tree_depth(node("r")) == 0
        assert tree_depth(node("r", node("f", node("ff")), node("m"))) == 2


class TestTreeBounds:
    """Tests for get_tree_bounds."""

    def test_empty_is_zero(self):
        assert get_tree_bounds([]) == TreeBounds()

    def test_bounds(self):
        opts = PedigreeLayoutOptions(node_height=100, total_width=400)
        nodes = layout_ancestor_tree(node("r", node("f"), node("m")), opts)

        bounds = get_tree_bounds(nodes)

        assert (bounds.min_x, bounds.max_x) == (-100, 100)
        assert (bounds.min_y, bounds.max_y) == (-100, 0)
        assert bounds.width == 200
        assert bounds.height == pytest.approx(100)
