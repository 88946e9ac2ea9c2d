"""
Node and edge geometry shared by the live scene and the exporter.

Provides:
- Footprint sizes for nodes without explicit width/height
- Grid snapping for dragged positions
- The visual axis snap that straightens nearly vertical/horizontal edges
- Edge endpoints and bounding boxes

Grid snap and axis snap are independent pure functions; the interaction
engine uses the first, edge rendering the second.
"""

import math
from typing import Iterable, Optional

from .config import DEFAULT_HEIGHT, DEFAULT_WIDTH, GRID_SIZE, OPERATION_SIZE, SNAP_THRESHOLD
from .models import Node, NodeKind

# Footprint defaults per kind: (width, height)
FOOTPRINTS = {
    NodeKind.LAYER: (DEFAULT_WIDTH, DEFAULT_HEIGHT),
    NodeKind.OPERATION: (OPERATION_SIZE, OPERATION_SIZE),
    NodeKind.INPUT: (DEFAULT_WIDTH, DEFAULT_HEIGHT),
    NodeKind.OUTPUT: (DEFAULT_WIDTH, DEFAULT_HEIGHT),
    NodeKind.NOTE: (DEFAULT_WIDTH, DEFAULT_HEIGHT),
}


def or_default(value: Optional[float], default: float) -> float:
    # 0 and NaN count as unset, like an empty or garbled numeric field
    if not value or math.isnan(value):
        return default
    return value


def node_size(node: Node) -> tuple[float, float]:
    """Width and height of a node, falling back to its kind's footprint."""
    default_w, default_h = FOOTPRINTS[node.kind]
    return (or_default(node.width, default_w), or_default(node.height, default_h))


def is_drawable(node: Node) -> bool:
    """False when the node's position or size is not a finite number."""
    return all(math.isfinite(v) for v in (node.x, node.y, *node_size(node)))


def node_center(node: Node) -> tuple[float, float]:
    """Get the center point of the node."""
    width, height = node_size(node)
    return (node.x + width / 2, node.y + height / 2)


def node_bounds(node: Node) -> tuple[float, float, float, float]:
    """Get the bounding box (x, y, right, bottom)."""
    width, height = node_size(node)
    return (node.x, node.y, node.x + width, node.y + height)


def snap_to_grid(value: float, grid_size: int = GRID_SIZE) -> float:
    """
    Round a coordinate to the nearest multiple of the grid size.

    Halves round up (25 -> 30, -25 -> -20), like the browser's Math.round.
    """
    if grid_size <= 0 or not math.isfinite(value):
        return value
    return math.floor(value / grid_size + 0.5) * grid_size


def axis_snap(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    threshold: float = SNAP_THRESHOLD
) -> tuple[float, float, float, float]:
    """
    Straighten nearly vertical or horizontal segments.

    If the endpoints differ by less than `threshold` on an axis, both take
    the average on that axis. Applying it twice gives the same result.
    """
    if abs(x1 - x2) < threshold:
        avg_x = (x1 + x2) / 2
        x1 = x2 = avg_x
    if abs(y1 - y2) < threshold:
        avg_y = (y1 + y2) / 2
        y1 = y2 = avg_y
    return (x1, y1, x2, y2)


def edge_endpoints(source: Node, target: Node) -> tuple[float, float, float, float]:
    """Center-to-center segment of an edge after the visual axis snap."""
    x1, y1 = node_center(source)
    x2, y2 = node_center(target)
    return axis_snap(x1, y1, x2, y2)


def bounding_box(nodes: Iterable[Node]) -> Optional[tuple[float, float, float, float]]:
    """
    Bounding box (min_x, min_y, max_x, max_y) over node rectangles.

    Nodes that are not drawable are left out. Returns None when no
    drawable node remains.
    """
    bounds = [node_bounds(n) for n in nodes if is_drawable(n)]
    if not bounds:
        return None
    return (
        min(b[0] for b in bounds),
        min(b[1] for b in bounds),
        max(b[2] for b in bounds),
        max(b[3] for b in bounds),
    )
