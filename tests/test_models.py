"""
Model Tests
===========

Schema conversion of browser payloads, immutability of diagram values and
numeric coercion in partial update requests.
"""

import math

import pytest
from pydantic import ValidationError

from neurograph import (
    CreateEdgeRequest,
    Diagram,
    Edge,
    Node,
    NodeKind,
    OpSymbol,
    UpdateEdgeRequest,
    UpdateNodeRequest,
    ViewTransform,
)
from neurograph.models import coerce_number, generate_edge_id, generate_node_id


class TestNode:

    def test_defaults(self):
        node = Node()
        assert node.kind == NodeKind.LAYER
        assert node.label == "Node"
        assert node.width is None
        assert node.id.startswith("n")

    def test_browser_field_names_are_converted(self):
        node = Node.model_validate({"type": "operation", "subLabel": "skip", "symbol": "CONCAT"})
        assert node.kind == NodeKind.OPERATION
        assert node.sub_label == "skip"
        assert node.symbol == OpSymbol.CONCAT

    def test_symbol_accepts_glyph(self):
        node = Node.model_validate({"kind": "OPERATION", "symbol": "×"})
        assert node.symbol == OpSymbol.MULT

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(ValidationError):
            Node.model_validate({"kind": "BANANA"})

    def test_non_finite_numbers_dump_as_null(self):
        data = Node(x=math.nan, y=math.inf, width=140).model_dump(mode="json")
        assert (data["x"], data["y"], data["width"]) == (None, None, 140)
        assert math.isnan(Node(x=math.nan).model_dump()["x"])

    def test_nodes_are_frozen(self):
        node = Node(x=10)
        with pytest.raises(ValidationError):
            node.x = 20
        assert node.x == 10


class TestEdge:

    def test_from_to_are_converted(self):
        edge = Edge.model_validate({"from": "a", "to": "b"})
        assert edge.source == "a"
        assert edge.target == "b"
        assert edge.dashed is False

    def test_json_dict_omits_missing_label(self):
        assert "label" not in Edge(source="a", target="b").to_json_dict()
        assert Edge(source="a", target="b", label="skip").to_json_dict()["label"] == "skip"

    def test_create_request_accepts_legacy_names(self):
        request = CreateEdgeRequest.model_validate({"from": "1", "to": "3", "dashed": True})
        assert (request.source, request.target, request.dashed) == ("1", "3", True)


class TestDiagram:

    def test_json_dict_uses_enum_values(self, sample_diagram):
        data = sample_diagram.to_json_dict()
        assert [n["kind"] for n in data["nodes"]] == ["INPUT", "LAYER", "LAYER"]
        assert data["edges"][1] == {"id": "e2", "source": "2", "target": "3", "dashed": True}

    def test_lookups(self, sample_diagram):
        assert sample_diagram.get_node("2").label == "Conv 7x7"
        assert sample_diagram.get_node("missing") is None
        assert sample_diagram.get_edge("e1").target == "2"

    def test_empty_by_default(self):
        assert Diagram().nodes == ()
        assert Diagram().edges == ()


class TestIds:

    def test_generated_ids_are_unique(self):
        assert len({generate_node_id() for _ in range(500)}) == 500
        assert len({generate_edge_id() for _ in range(500)}) == 500


class TestRequests:

    def test_update_changes_only_sent_fields(self):
        assert UpdateNodeRequest(label="A").changes() == {"label": "A"}
        assert UpdateEdgeRequest(dashed=True).changes() == {"dashed": True}

    def test_unparsable_number_becomes_nan(self):
        changes = UpdateNodeRequest.model_validate({"x": "abc", "y": "12.5"}).changes()
        assert math.isnan(changes["x"])
        assert changes["y"] == 12.5

    def test_null_only_clears_optional_fields(self):
        node_changes = UpdateNodeRequest.model_validate({"label": None, "x": None, "sub_label": None}).changes()
        assert node_changes == {"sub_label": None}
        edge_changes = UpdateEdgeRequest.model_validate({"dashed": None, "label": None}).changes()
        assert edge_changes == {"label": None}

    def test_coerce_number(self):
        assert coerce_number(None) is None
        assert coerce_number(3) == 3
        assert coerce_number("4") == 4.0
        assert math.isnan(coerce_number("four"))


class TestViewTransform:

    def test_identity_default(self):
        view = ViewTransform()
        assert (view.pan_x, view.pan_y, view.scale) == (0, 0, 1.0)

    def test_scale_must_be_positive(self):
        with pytest.raises(ValidationError):
            ViewTransform(scale=0)
