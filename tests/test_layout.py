"""
Alignment Engine Tests
======================

Align directives move every selected node onto a shared edge or center
line; distribution spaces node centers evenly between the outermost two.
"""

import pytest

from neurograph import AlignDirective, Node, NodeKind, align_nodes
from neurograph.layout import distribute_nodes


def _node(node_id, x=0, y=0, width=140, height=60, kind=NodeKind.LAYER):
    return Node(id=node_id, kind=kind, x=x, y=y, width=width, height=height)


class TestAlign:

    def test_right(self):
        nodes = [_node("a", x=0), _node("b", x=50, y=100)]
        result = align_nodes(nodes, ["a", "b"], AlignDirective.RIGHT)
        assert result == {"a": (50, 0), "b": (50, 100)}

    def test_left(self):
        nodes = [_node("a", x=30, y=0), _node("b", x=10, y=100)]
        assert align_nodes(nodes, ["a", "b"], "left") == {"a": (10, 0), "b": (10, 100)}

    def test_center_x(self):
        nodes = [_node("a", x=0, width=100), _node("b", x=100, y=80, width=200)]
        # centers 50 and 200 -> mean 125
        assert align_nodes(nodes, ["a", "b"], "center-x") == {"a": (75, 0), "b": (25, 80)}

    def test_top(self):
        nodes = [_node("a", y=40), _node("b", x=200, y=10)]
        assert align_nodes(nodes, ["a", "b"], "top") == {"a": (0, 10), "b": (200, 10)}

    def test_bottom(self):
        nodes = [_node("a", y=0, height=60), _node("b", x=200, y=100, height=40)]
        assert align_nodes(nodes, ["a", "b"], "bottom") == {"a": (0, 80), "b": (200, 100)}

    def test_center_y(self):
        nodes = [_node("a", y=0, height=60), _node("b", x=200, y=100, height=20)]
        # centers 30 and 110 -> mean 70
        assert align_nodes(nodes, ["a", "b"], "center-y") == {"a": (0, 40), "b": (200, 60)}

    def test_uses_kind_footprint_without_width(self):
        nodes = [_node("a", x=0), Node(id="op", kind=NodeKind.OPERATION, x=0)]
        result = align_nodes(nodes, ["a", "op"], "right")
        assert result["op"] == (92, 0)

    def test_only_selected_nodes_move(self):
        nodes = [_node("a", x=0), _node("b", x=50), _node("c", x=500)]
        assert set(align_nodes(nodes, ["a", "b"], "right")) == {"a", "b"}

    @pytest.mark.parametrize("directive", list(AlignDirective))
    def test_fewer_than_two_is_noop(self, directive):
        nodes = [_node("a", x=0), _node("b", x=50)]
        assert align_nodes(nodes, ["a"], directive) == {}
        assert align_nodes(nodes, ["a", "missing"], directive) == {}

    def test_invalid_directive(self):
        with pytest.raises(ValueError):
            align_nodes([_node("a"), _node("b")], ["a", "b"], "diagonal")


class TestDistribute:

    def test_two_nodes_is_noop(self):
        nodes = [_node("a", x=0), _node("b", x=300)]
        assert align_nodes(nodes, ["a", "b"], "distribute-h") == {}

    def test_horizontal(self):
        nodes = [_node("a", x=0), _node("b", x=30, y=7), _node("c", x=100)]
        result = align_nodes(nodes, ["a", "b", "c"], AlignDirective.DISTRIBUTE_H)
        # outer centers 70 and 170 -> middle center 120
        assert result == {"a": (0, 0), "b": (50, 7), "c": (100, 0)}

    def test_vertical(self):
        nodes = [_node("a", y=200), _node("b", y=0), _node("c", y=20, x=5)]
        result = align_nodes(nodes, ["a", "b", "c"], AlignDirective.DISTRIBUTE_V)
        # sorted by y: b(0), c(20), a(200); centers 30 and 230 -> 130
        assert result["c"] == (5, 100)
        assert result["b"] == (0, 0)
        assert result["a"] == (0, 200)

    def test_mixed_sizes_spread_centers(self):
        nodes = [_node("a", x=0, width=100), _node("b", x=10, width=20), _node("c", x=400, width=100)]
        result = distribute_nodes(nodes, horizontal=True)
        # centers 50 and 450 -> 250, minus half of 20
        assert result["b"] == (240, 0)
