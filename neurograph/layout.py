"""
Alignment and distribution of selected nodes.

Provides the directives offered by the toolbar:
- Align: left, right, center-x, top, bottom, center-y
- Distribute: distribute-h, distribute-v (even center-to-center spacing)

Layout functions are pure: they return the new (x, y) of the affected nodes
and never touch the nodes they were given. An empty result means no-op.
"""

from enum import Enum
from typing import Iterable

from .geometry import node_size
from .models import Node

Positions = dict[str, tuple[float, float]]


class AlignDirective(str, Enum):
    """Alignment and distribution directives."""
    LEFT = "left"
    RIGHT = "right"
    CENTER_X = "center-x"
    TOP = "top"
    BOTTOM = "bottom"
    CENTER_Y = "center-y"
    DISTRIBUTE_H = "distribute-h"
    DISTRIBUTE_V = "distribute-v"


def align_nodes(
    nodes: Iterable[Node],
    node_ids: Iterable[str],
    directive: AlignDirective = AlignDirective.LEFT
) -> Positions:
    """
    Compute new positions for the selected nodes under a directive.

    Args:
        nodes: All nodes in the diagram
        node_ids: IDs of the selected nodes
        directive: Alignment or distribution directive

    Returns:
        Mapping of node id to new (x, y), empty if fewer than 2 nodes
        are selected
    """
    wanted = set(node_ids)
    # Find target nodes, keeping diagram order
    targets = [n for n in nodes if n.id in wanted]
    if len(targets) < 2:
        return {}

    directive = AlignDirective(directive)

    if directive in (AlignDirective.DISTRIBUTE_H, AlignDirective.DISTRIBUTE_V):
        return distribute_nodes(targets, horizontal=directive == AlignDirective.DISTRIBUTE_H)

    sizes = {n.id: node_size(n) for n in targets}

    if directive == AlignDirective.LEFT:
        min_x = min(n.x for n in targets)
        return {n.id: (min_x, n.y) for n in targets}

    if directive == AlignDirective.RIGHT:
        max_x = max(n.x + sizes[n.id][0] for n in targets)
        return {n.id: (max_x - sizes[n.id][0], n.y) for n in targets}

    if directive == AlignDirective.CENTER_X:
        center_x = sum(n.x + sizes[n.id][0] / 2 for n in targets) / len(targets)
        return {n.id: (center_x - sizes[n.id][0] / 2, n.y) for n in targets}

    if directive == AlignDirective.TOP:
        min_y = min(n.y for n in targets)
        return {n.id: (n.x, min_y) for n in targets}

    if directive == AlignDirective.BOTTOM:
        max_y = max(n.y + sizes[n.id][1] for n in targets)
        return {n.id: (n.x, max_y - sizes[n.id][1]) for n in targets}

    # center-y
    center_y = sum(n.y + sizes[n.id][1] / 2 for n in targets) / len(targets)
    return {n.id: (n.x, center_y - sizes[n.id][1] / 2) for n in targets}


def distribute_nodes(targets: list[Node], horizontal: bool = True) -> Positions:
    """
    Evenly distribute node centers between the outermost nodes.

    Nodes are sorted by x (or y); the first and last stay in place and
    interior centers are placed at equal steps between theirs.

    Returns:
        Mapping of node id to new (x, y), empty if fewer than 3 nodes
    """
    if len(targets) < 3:
        return {}

    axis = 0 if horizontal else 1

    def position(node: Node) -> float:
        return node.x if horizontal else node.y

    def half(node: Node) -> float:
        return node_size(node)[axis] / 2

    ordered = sorted(targets, key=position)
    first, last = ordered[0], ordered[-1]
    first_center = position(first) + half(first)
    step = (position(last) + half(last) - first_center) / (len(ordered) - 1)

    result: Positions = {}
    for i, node in enumerate(ordered):
        if i == 0 or i == len(ordered) - 1:
            result[node.id] = (node.x, node.y)
            continue
        coord = first_center + step * i - half(node)
        result[node.id] = (coord, node.y) if horizontal else (node.x, coord)

    return result
