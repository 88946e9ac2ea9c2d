"""
SVG Export Tests
================

The exported document is parsed back with ElementTree and checked for
viewport, edge paths, arrowheads and node bodies.
"""

import math
import xml.etree.ElementTree as ET

import pytest

from neurograph import Diagram, Edge, Node, NodeKind, OpSymbol, export_svg, fill_for_token
from neurograph.export import export_filename

SVG_NS = {"svg": "http://www.w3.org/2000/svg"}
XHTML = "{http://www.w3.org/1999/xhtml}"


def _parse(document):
    return ET.fromstring(document.content)


class TestViewport:

    def test_single_node_viewbox(self, single_node):
        document = export_svg(Diagram(nodes=(single_node,)))
        root = _parse(document)
        assert root.get("viewBox") == "50 50 240 160"
        assert (root.get("width"), root.get("height")) == ("240", "160")
        assert document.viewbox == (50, 50, 240, 160)
        assert (document.width, document.height) == (240, 160)

    def test_padding_surrounds_all_nodes(self, sample_diagram):
        # nodes span x 340..480, y 60..320
        assert export_svg(sample_diagram).viewbox == (290, 10, 240, 360)

    def test_empty_diagram_is_not_exported(self):
        assert export_svg(Diagram()) is None

    def test_non_finite_nodes_are_left_out(self, single_node):
        diagram = Diagram(nodes=(Node(id="b", x=math.nan, y=200), single_node))
        document = export_svg(diagram)
        assert document.viewbox == (50, 50, 240, 160)
        assert "nan" not in document.content
        assert len(_parse(document).findall("svg:foreignObject", SVG_NS)) == 1

    def test_only_non_finite_nodes_is_not_exported(self):
        diagram = Diagram(nodes=(Node(x=math.inf), Node(width=math.inf)))
        assert export_svg(diagram) is None


class TestEdges:

    def test_one_path_per_drawable_edge(self, sample_diagram):
        paths = _parse(export_svg(sample_diagram)).findall("svg:path", SVG_NS)
        assert len(paths) == 2
        assert paths[0].get("d") == "M 400 80 L 410 190"
        assert all(p.get("marker-end") == "url(#arrowhead)" for p in paths)

    def test_dashed_edges(self, sample_diagram):
        paths = _parse(export_svg(sample_diagram)).findall("svg:path", SVG_NS)
        assert paths[0].get("stroke-dasharray") is None
        assert paths[1].get("stroke-dasharray") == "5,5"

    def test_dangling_edges_are_omitted(self, sample_diagram):
        diagram = sample_diagram.model_copy(update={
            "edges": sample_diagram.edges + (Edge(id="e3", source="3", target="ghost"),),
        })
        paths = _parse(export_svg(diagram)).findall("svg:path", SVG_NS)
        assert len(paths) == 2

    def test_edges_touching_non_finite_nodes_are_omitted(self, sample_diagram):
        nodes = tuple(n.model_copy(update={"y": math.nan}) if n.id == "3" else n for n in sample_diagram.nodes)
        paths = _parse(export_svg(sample_diagram.model_copy(update={"nodes": nodes}))).findall("svg:path", SVG_NS)
        assert [p.get("d") for p in paths] == ["M 400 80 L 410 190"]

    def test_arrowhead_marker(self, sample_diagram):
        marker = _parse(export_svg(sample_diagram)).find("svg:defs/svg:marker", SVG_NS)
        assert marker.get("id") == "arrowhead"
        assert (marker.get("refX"), marker.get("refY")) == ("9", "3.5")
        assert marker.find("svg:polygon", SVG_NS).get("points") == "0 0, 10 3.5, 0 7"


class TestNodes:

    def test_one_foreign_object_per_node(self, sample_diagram):
        objects = _parse(export_svg(sample_diagram)).findall("svg:foreignObject", SVG_NS)
        assert [(o.get("x"), o.get("y"), o.get("width"), o.get("height")) for o in objects] == [
            ("340", "60", "120", "40"),
            ("340", "160", "140", "60"),
            ("340", "260", "140", "60"),
        ]

    def test_node_body_is_xhtml(self, sample_diagram):
        objects = _parse(export_svg(sample_diagram)).findall("svg:foreignObject", SVG_NS)
        body = objects[1].find(f"{XHTML}div")
        texts = [span.text for span in body.findall(f"{XHTML}span")]
        assert texts == ["Conv 7x7", "64, /2"]
        assert "background-color: #dbeafe" in body.get("style")

    def test_terminal_nodes_are_dashed_pills(self, sample_diagram):
        objects = _parse(export_svg(sample_diagram)).findall("svg:foreignObject", SVG_NS)
        style = objects[0].find(f"{XHTML}div").get("style")
        assert "border: 2px dashed black" in style
        assert "border-radius: 999px" in style
        assert "box-shadow" not in style

    def test_operation_shows_symbol(self):
        diagram = Diagram(nodes=(Node(kind=NodeKind.OPERATION, symbol=OpSymbol.MULT),))
        root = _parse(export_svg(diagram))
        span = root.find(f"svg:foreignObject/{XHTML}div/{XHTML}span", SVG_NS)
        assert span.text == "×"

    def test_labels_are_escaped(self):
        diagram = Diagram(nodes=(Node(label='<Attention & "Norm">'),))
        root = _parse(export_svg(diagram))
        span = root.find(f"svg:foreignObject/{XHTML}div/{XHTML}span", SVG_NS)
        assert span.text == '<Attention & "Norm">'


class TestColorsAndNames:

    @pytest.mark.parametrize("token,fill", [
        ("bg-blue-100", "#dbeafe"),
        ("bg-pink-100", "#fce7f3"),
        ("bg-yellow-100", "#fef9c3"),
        ("bg-gray-50", "#f9fafb"),
        ("bg-green-100", "#ffffff"),
        (None, "#ffffff"),
    ])
    def test_fill_for_token(self, token, fill):
        assert fill_for_token(token) == fill

    def test_filename_uses_epoch_millis(self):
        assert export_filename(1700000000.0) == "architecture_1700000000000.svg"

    def test_document_filename(self, single_node):
        document = export_svg(Diagram(nodes=(single_node,)), now=42.0)
        assert document.filename == "architecture_42000.svg"
