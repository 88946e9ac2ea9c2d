"""
View transform math - mapping between screen pixels and world coordinates.

Panning is anchored: the gesture records the screen point and pan offset at
its start, and every move recomputes the pan from those anchors. Repeated or
dropped move events therefore never drift the view.
"""

from .config import MAX_SCALE, MIN_SCALE
from .models import ViewTransform

Point = tuple[float, float]


def world_to_screen(view: ViewTransform, point: Point) -> Point:
    """Map a world-space point to screen pixels."""
    x, y = point
    return (x * view.scale + view.pan_x, y * view.scale + view.pan_y)


def screen_to_world(view: ViewTransform, point: Point) -> Point:
    """Map a screen pixel to world space."""
    x, y = point
    return ((x - view.pan_x) / view.scale, (y - view.pan_y) / view.scale)


def pan_from_anchor(
    view: ViewTransform,
    anchor_pan: Point,
    anchor_screen: Point,
    current_screen: Point
) -> ViewTransform:
    """Pan offset for the current pointer position of a pan gesture."""
    return view.model_copy(update={
        "pan_x": anchor_pan[0] + (current_screen[0] - anchor_screen[0]),
        "pan_y": anchor_pan[1] + (current_screen[1] - anchor_screen[1]),
    })


def zoom_at(view: ViewTransform, factor: float, screen_point: Point) -> ViewTransform:
    """
    Scale the view by `factor` around a screen point.

    The world point under `screen_point` stays under it. The resulting scale
    is clamped to [MIN_SCALE, MAX_SCALE]; a non-positive factor leaves the
    view unchanged.
    """
    if factor <= 0:
        return view

    scale = min(MAX_SCALE, max(MIN_SCALE, view.scale * factor))
    world_x, world_y = screen_to_world(view, screen_point)
    return ViewTransform(
        pan_x=screen_point[0] - world_x * scale,
        pan_y=screen_point[1] - world_y * scale,
        scale=scale,
    )


def visible_center(view: ViewTransform, width: float, height: float) -> Point:
    """World point at the center of a viewport of the given pixel size."""
    return screen_to_world(view, (width / 2, height / 2))
