"""
SVG export - turn a diagram into a standalone vector document.

The exported coordinate space equals world space: the viewBox origin is the
padded bounding-box minimum, so node and edge coordinates are written as-is.
Edge geometry comes from the same helpers the live scene uses, so the export
matches the screen exactly.

Nodes are embedded as XHTML inside <foreignObject> so labels wrap and center
the way they do in the browser canvas.
"""

import time
from dataclasses import dataclass
from html import escape
from typing import Optional

from .config import EXPORT_PADDING
from .geometry import bounding_box, edge_endpoints, is_drawable, node_size
from .models import Diagram, Node, NodeKind, OpSymbol

# Color token -> fill. First matching fragment wins.
COLOR_FILLS = (
    ("blue", "#dbeafe"),
    ("pink", "#fce7f3"),
    ("yellow", "#fef9c3"),
    ("gray", "#f9fafb"),
)
DEFAULT_FILL = "#ffffff"

# Per-kind node styling: (border style, border radius, drop shadow)
NODE_STYLES = {
    NodeKind.LAYER: ("solid", "8px", True),
    NodeKind.NOTE: ("solid", "8px", True),
    NodeKind.OPERATION: ("solid", "999px", True),
    NodeKind.INPUT: ("dashed", "999px", False),
    NodeKind.OUTPUT: ("dashed", "999px", False),
}

ARROWHEAD_MARKER = (
    '<marker id="arrowhead" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto">'
    '<polygon points="0 0, 10 3.5, 0 7" fill="black" />'
    '</marker>'
)


@dataclass(frozen=True)
class SvgDocument:
    """A rendered export: SVG text plus the canvas it covers."""
    content: str
    filename: str
    viewbox: tuple[float, float, float, float]  # (min_x, min_y, width, height)

    @property
    def width(self) -> float:
        return self.viewbox[2]

    @property
    def height(self) -> float:
        return self.viewbox[3]


def fill_for_token(token: Optional[str]) -> str:
    """Map an opaque color token (e.g. "bg-blue-100") to a fill color."""
    if token:
        for fragment, fill in COLOR_FILLS:
            if fragment in token:
                return fill
    return DEFAULT_FILL


def export_filename(now: Optional[float] = None) -> str:
    """File name for an export, stamped with epoch milliseconds."""
    if now is None:
        now = time.time()
    return f"architecture_{int(now * 1000)}.svg"


def _num(value: float) -> str:
    # Integral floats print without a trailing ".0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _node_body(node: Node) -> str:
    border, radius, shadow = NODE_STYLES[node.kind]
    style = (
        "width: 100%; height: 100%; "
        f"background-color: {fill_for_token(node.color)}; "
        f"border: 2px {border} black; "
        f"border-radius: {radius}; "
        "display: flex; flex-direction: column; "
        "align-items: center; justify-content: center; "
        + ("box-shadow: 2px 2px 0px 0px rgba(0,0,0,1); " if shadow else "")
        + "box-sizing: border-box; "
        "font-family: 'Times New Roman', serif;"
    )

    if node.kind == NodeKind.OPERATION:
        symbol = (node.symbol or OpSymbol.SUM).value
        content = f'<span style="font-size: 24px; font-weight: bold;">{escape(symbol)}</span>'
    else:
        content = (
            '<span style="font-size: 16px; font-weight: bold; line-height: 1;">'
            f'{escape(node.label)}</span>'
        )
        if node.sub_label:
            content += (
                '<span style="font-size: 10px; color: #4b5563; background: rgba(255,255,255,0.5); '
                'padding: 0 4px; border-radius: 4px; margin-top: 4px; '
                'border: 1px solid rgba(0,0,0,0.1); font-family: sans-serif;">'
                f'{escape(node.sub_label)}</span>'
            )

    return f'<div xmlns="http://www.w3.org/1999/xhtml" style="{style}">{content}</div>'


def export_svg(diagram: Diagram, now: Optional[float] = None) -> Optional[SvgDocument]:
    """
    Render a diagram to a standalone SVG document.

    Args:
        diagram: The diagram to export
        now: Epoch seconds used for the file name (defaults to the clock)

    Returns:
        The document, or None when the diagram has no drawable nodes
    """
    box = bounding_box(diagram.nodes)
    if box is None:
        return None

    min_x = box[0] - EXPORT_PADDING
    min_y = box[1] - EXPORT_PADDING
    width = box[2] + EXPORT_PADDING - min_x
    height = box[3] + EXPORT_PADDING - min_y

    drawable = [n for n in diagram.nodes if is_drawable(n)]
    nodes_by_id = {n.id: n for n in drawable}

    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" height="{_num(height)}" '
        f'viewBox="{_num(min_x)} {_num(min_y)} {_num(width)} {_num(height)}">',
        f'  <defs>{ARROWHEAD_MARKER}</defs>',
        '  <!-- Edges -->',
    ]

    for edge in diagram.edges:
        source = nodes_by_id.get(edge.source)
        target = nodes_by_id.get(edge.target)
        if source is None or target is None:
            continue
        x1, y1, x2, y2 = edge_endpoints(source, target)
        dash = ' stroke-dasharray="5,5"' if edge.dashed else ""
        svg_parts.append(
            f'  <path d="M {_num(x1)} {_num(y1)} L {_num(x2)} {_num(y2)}" stroke="black" '
            f'stroke-width="2" fill="none" marker-end="url(#arrowhead)"{dash} />'
        )

    svg_parts.append('  <!-- Nodes -->')
    for node in drawable:
        w, h = node_size(node)
        svg_parts.append(
            f'  <foreignObject x="{_num(node.x)}" y="{_num(node.y)}" '
            f'width="{_num(w)}" height="{_num(h)}">{_node_body(node)}</foreignObject>'
        )

    svg_parts.append('</svg>')

    return SvgDocument(
        content="\n".join(svg_parts) + "\n",
        filename=export_filename(now),
        viewbox=(min_x, min_y, width, height),
    )
