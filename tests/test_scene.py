"""Tests for the live render model."""

import math

from neurograph import Diagram, Edge, Node, NodeKind, OpSymbol, build_scene


class TestBuildScene:

    def test_starter_scene(self, sample_diagram):
        scene = build_scene(sample_diagram)
        assert [n.id for n in scene.nodes] == ["1", "2", "3"]
        assert [e.id for e in scene.edges] == ["e1", "e2"]
        assert scene.hint is None

    def test_fills_follow_color_tokens(self, sample_diagram):
        fills = {n.id: n.fill for n in build_scene(sample_diagram).nodes}
        assert fills == {"1": "#f9fafb", "2": "#dbeafe", "3": "#fce7f3"}

    def test_terminal_display_size(self, sample_diagram):
        terminal = build_scene(sample_diagram).nodes[0]
        assert (terminal.width, terminal.height) == (120, 40)

        bare = build_scene(Diagram(nodes=(Node(kind=NodeKind.OUTPUT, height=90),))).nodes[0]
        assert (bare.width, bare.height) == (100, 40)

    def test_operation_shows_symbol(self):
        diagram = Diagram(nodes=(
            Node(id="a", kind=NodeKind.OPERATION, label="ignored", symbol=OpSymbol.DOT, width=200),
            Node(id="b", kind=NodeKind.OPERATION),
        ))
        first, second = build_scene(diagram).nodes
        assert (first.text, first.width, first.height) == ("•", 48, 48)
        assert second.text == "+"

    def test_sub_label_only_on_layers_and_notes(self):
        diagram = Diagram(nodes=(
            Node(id="l", kind=NodeKind.LAYER, sub_label="3x3"),
            Node(id="n", kind=NodeKind.NOTE, sub_label="aside"),
            Node(id="i", kind=NodeKind.INPUT, sub_label="hidden"),
        ))
        assert [n.sub_label for n in build_scene(diagram).nodes] == ["3x3", "aside", None]

    def test_garbled_size_falls_back(self):
        node = build_scene(Diagram(nodes=(Node(width=math.nan),))).nodes[0]
        assert (node.width, node.height) == (140, 60)

    def test_selection_flags(self, sample_diagram):
        scene = build_scene(sample_diagram, selected_node_ids=frozenset({"3"}), selected_edge_id="e1")
        assert [n.selected for n in scene.nodes] == [False, False, True]
        assert [e.selected for e in scene.edges] == [True, False]

    def test_edge_geometry_and_label(self, sample_diagram):
        diagram = sample_diagram.model_copy(update={
            "edges": (Edge(id="e1", source="2", target="3", label="x2"),),
        })
        edge = build_scene(diagram).edges[0]
        assert (edge.x1, edge.y1, edge.x2, edge.y2) == (410, 190, 410, 290)
        assert (edge.label, edge.label_x, edge.label_y) == ("x2", 410, 240)

    def test_dangling_edges_are_skipped(self, sample_diagram):
        diagram = sample_diagram.model_copy(update={
            "edges": sample_diagram.edges + (Edge(id="e3", source="ghost", target="1"),),
        })
        assert [e.id for e in build_scene(diagram).edges] == ["e1", "e2"]

    def test_pending_source_missing_has_no_hint(self, sample_diagram):
        assert build_scene(sample_diagram, pending_source="ghost").hint is None

    def test_non_finite_nodes_are_left_out(self, single_node):
        diagram = Diagram(
            nodes=(Node(id="b", x=math.nan, y=200), single_node),
            edges=(Edge(id="e1", source="a", target="b"),),
        )
        scene = build_scene(diagram, pending_source="b")
        assert [n.id for n in scene.nodes] == ["a"]
        assert scene.edges == []
        assert scene.hint is None

    def test_to_dict(self, sample_diagram):
        data = build_scene(sample_diagram).to_dict()
        assert data["nodes"][1]["text"] == "Conv 7x7"
        assert data["edges"][1]["dashed"] is True
        assert data["hint"] is None
