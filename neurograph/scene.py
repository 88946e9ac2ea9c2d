"""
Live render model for the canvas.

The browser canvas draws exactly what build_scene() returns: node boxes with
their display size and fill, edges as straight segments between node
centers, and selection highlighting. Nodes with a non-finite position or
size are left out, and so is every edge without two drawable endpoints,
just as in the export.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from .config import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    OPERATION_SIZE,
    TARGETING_HINT,
    TARGETING_HINT_OFFSET,
    TERMINAL_DEFAULT_WIDTH,
    TERMINAL_HEIGHT,
)
from .export import fill_for_token
from .geometry import edge_endpoints, is_drawable, or_default
from .models import Diagram, Edge, Node, NodeKind, OpSymbol


@dataclass(frozen=True)
class NodeView:
    id: str
    kind: str
    text: str  # label, or the operator glyph for operation nodes
    sub_label: Optional[str]
    x: float
    y: float
    width: float
    height: float
    fill: str
    selected: bool


@dataclass(frozen=True)
class EdgeView:
    id: str
    x1: float
    y1: float
    x2: float
    y2: float
    dashed: bool
    label: Optional[str]
    label_x: float
    label_y: float
    selected: bool


@dataclass(frozen=True)
class Hint:
    """Text drawn on the canvas, e.g. while picking an edge target."""
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class Scene:
    nodes: list[NodeView]
    edges: list[EdgeView]
    hint: Optional[Hint] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def display_size(node: Node) -> tuple[float, float]:
    """Size a node is drawn at on the canvas."""
    if node.kind == NodeKind.OPERATION:
        return (OPERATION_SIZE, OPERATION_SIZE)
    if node.kind in (NodeKind.INPUT, NodeKind.OUTPUT):
        return (or_default(node.width, TERMINAL_DEFAULT_WIDTH), TERMINAL_HEIGHT)
    return (or_default(node.width, DEFAULT_WIDTH), or_default(node.height, DEFAULT_HEIGHT))


def _node_view(node: Node, selected: bool) -> NodeView:
    width, height = display_size(node)
    if node.kind == NodeKind.OPERATION:
        text = (node.symbol or OpSymbol.SUM).value
        sub_label = None
    else:
        text = node.label
        sub_label = node.sub_label if node.kind in (NodeKind.LAYER, NodeKind.NOTE) else None
    return NodeView(
        id=node.id,
        kind=node.kind.value,
        text=text,
        sub_label=sub_label,
        x=node.x,
        y=node.y,
        width=width,
        height=height,
        fill=fill_for_token(node.color),
        selected=selected,
    )


def _edge_view(edge: Edge, source: Node, target: Node, selected: bool) -> EdgeView:
    x1, y1, x2, y2 = edge_endpoints(source, target)
    return EdgeView(
        id=edge.id,
        x1=x1,
        y1=y1,
        x2=x2,
        y2=y2,
        dashed=edge.dashed,
        label=edge.label or None,
        label_x=(x1 + x2) / 2,
        label_y=(y1 + y2) / 2,
        selected=selected,
    )


def build_scene(
    diagram: Diagram,
    selected_node_ids: frozenset[str] = frozenset(),
    selected_edge_id: Optional[str] = None,
    pending_source: Optional[str] = None
) -> Scene:
    """
    Build the render model for one frame.

    Args:
        diagram: The diagram to draw
        selected_node_ids: Nodes to highlight
        selected_edge_id: Edge to highlight
        pending_source: Source node of an edge being connected (highlighted
            and labeled with a targeting hint)
    """
    drawable = [n for n in diagram.nodes if is_drawable(n)]
    nodes_by_id = {n.id: n for n in drawable}

    node_views = [
        _node_view(n, n.id in selected_node_ids or n.id == pending_source)
        for n in drawable
    ]

    edge_views = []
    for edge in diagram.edges:
        source = nodes_by_id.get(edge.source)
        target = nodes_by_id.get(edge.target)
        if source is None or target is None:
            continue
        edge_views.append(_edge_view(edge, source, target, edge.id == selected_edge_id))

    hint = None
    anchor = nodes_by_id.get(pending_source) if pending_source else None
    if anchor is not None:
        hint = Hint(text=TARGETING_HINT, x=anchor.x, y=anchor.y - TARGETING_HINT_OFFSET)

    return Scene(nodes=node_views, edges=edge_views, hint=hint)
