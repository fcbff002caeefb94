"""Tests for the tidy-tree layout and bounds."""

import xml.etree.ElementTree as ET

from treecanvas.diagram_components import Bounds, DiagramConfig, LayoutEngine, VisibilityState

from .conftest import build, by_label, chain, fan


def _coordinates(roots):
    return [(node.id, node.x, node.y, node.subtree_width) for root in roots for node in root.iter_subtree()]


class TestWidths:
    def test_user_document(self, user_element):
        _, roots = build([user_element])
        LayoutEngine().layout(roots, VisibilityState())

        root = roots[0]
        assert root.subtree_width == 2 * 120 + 20
        assert (root.x, root.y) == (-60, 0)
        assert [(child.x, child.y) for child in root.children] == [(-130, 80), (10, 80)]
        assert by_label(roots, "John").y == 160

    def test_collapsed_node_counts_as_leaf(self, user_element):
        _, roots = build([user_element])
        visibility = VisibilityState()
        visibility.toggle(roots[0].id)
        LayoutEngine().layout(roots, visibility)
        assert roots[0].subtree_width == 120
        assert roots[0].x == -60

    def test_subtree_width_invariants(self):
        element = ET.fromstring("<r><a><x/><y/><z/></a><b/><c><d><e/></d></c></r>")
        _, roots = build([element])
        config = DiagramConfig()
        LayoutEngine(config).layout(roots, VisibilityState())

        for node in roots[0].iter_subtree():
            assert node.subtree_width >= config.node_width
            if node.children:
                needed = sum(child.subtree_width for child in node.children)
                needed += (len(node.children) - 1) * config.node_spacing
                assert node.subtree_width >= needed

    def test_roots_centred_around_origin(self):
        _, roots = build([ET.Element("a"), ET.Element("b")])
        LayoutEngine().layout(roots, VisibilityState())
        assert [root.x for root in roots] == [-130, 10]


class TestDeterminism:
    def test_repeated_layout_is_identical(self):
        _, roots = build([fan(40), chain(12)])
        engine = LayoutEngine()
        visibility = VisibilityState()

        engine.layout(roots, visibility)
        first = _coordinates(roots)
        engine.layout(roots, visibility)
        assert _coordinates(roots) == first

    def test_collapse_then_expand_restores_geometry(self):
        element = ET.fromstring("<r><a><x/><y/></a><b><z><w/></z></b></r>")
        _, roots = build([element])
        engine = LayoutEngine()
        visibility = VisibilityState()

        engine.layout(roots, visibility)
        before = _coordinates(roots)

        target = by_label(roots, "a").id
        visibility.toggle(target)
        engine.layout(roots, visibility)
        assert by_label(roots, "a").y == 80
        visibility.toggle(target)
        engine.layout(roots, visibility)

        assert _coordinates(roots) == before

    def test_empty_roots_is_noop(self):
        LayoutEngine().layout([], VisibilityState())


class TestBounds:
    def test_user_document_bounds(self, user_element):
        _, roots = build([user_element])
        engine = LayoutEngine()
        visibility = VisibilityState()
        engine.layout(roots, visibility)

        assert engine.bounds(roots, visibility) == Bounds(-180, -50, 360, 300)

    def test_bounds_only_cover_visible_nodes(self, user_element):
        _, roots = build([user_element])
        engine = LayoutEngine()
        visibility = VisibilityState()
        visibility.toggle(roots[0].id)
        engine.layout(roots, visibility)

        assert engine.bounds(roots, visibility) == Bounds(-110, -50, 220, 140)

    def test_empty_bounds(self):
        bounds = LayoutEngine().bounds([], VisibilityState())
        assert bounds == Bounds()
        assert bounds.is_empty

    def test_grow_and_center(self):
        bounds = Bounds(0, 0, 100, 50).grow(10)
        assert bounds == Bounds(-10, -10, 120, 70)
        assert bounds.center == (50, 25)
        assert (bounds.max_x, bounds.max_y) == (110, 60)


class TestStatistics:
    def test_user_document_stats(self, user_element):
        _, roots = build([user_element])
        engine = LayoutEngine()
        visibility = VisibilityState()

        assert engine.count_visible(roots, visibility) == 5
        assert engine.max_depth(roots) == 3
        assert engine.max_level_width(roots, visibility) == 2

        visibility.collapse_all(roots)
        assert engine.count_visible(roots, visibility) == 1
        assert engine.max_level_width(roots, visibility) == 1

    def test_empty_stats(self):
        engine = LayoutEngine()
        assert engine.max_depth([]) == 0
        assert engine.max_level_width([], VisibilityState()) == 1
