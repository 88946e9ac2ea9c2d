"""
Interaction controller - the pointer/keyboard state machine of a canvas session.

This module implements:
- Event dispatch for pointer (down/move/up) and key (down/up) events
- Selection (nodes XOR one edge), dragging with grid snap, panning
- Edge creation by shift-clicking a source and then a target node
- Toolbar/properties-panel operations (add node, update, align, export)

The controller is the only thing that mutates its DiagramStore in response
to input. Selection, modifier flags and gesture state are small immutable
values that get replaced on every change.

States:
- IDLE: no gesture in progress
- PANNING: moving the view with the pointer
- DRAGGING_SELECTION: moving the single selected node
- CONNECTING_EDGE: shift held and a source node picked
"""

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Union

from .config import DEFAULT_HEIGHT, DEFAULT_VIEWPORT, DEFAULT_WIDTH, OPERATION_SIZE, PLACEMENT_JITTER
from .export import SvgDocument, export_svg
from .geometry import snap_to_grid
from .layout import AlignDirective, align_nodes
from .models import DEFAULT_COLOR_TOKENS, Diagram, Edge, Node, NodeKind, OpSymbol, ViewTransform
from .scene import Scene, build_scene
from .store import DiagramStore
from .viewport import Point, pan_from_anchor, screen_to_world, visible_center, zoom_at

logger = logging.getLogger(__name__)

LEFT_BUTTON = 0
MIDDLE_BUTTON = 1

DELETE_KEYS = ("Delete", "Backspace")
CTRL_KEYS = ("Control", "Meta")


class ToolMode(str, Enum):
    """Canvas tool selected in the toolbar."""
    SELECT = "select"
    PAN = "pan"


class Gesture(str, Enum):
    """Pointer gesture currently in progress."""
    NONE = "none"
    DRAGGING = "dragging"
    PANNING = "panning"


class InteractionState(str, Enum):
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING_SELECTION = "dragging_selection"
    CONNECTING_EDGE = "connecting_edge"


class PointerAction(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


class KeyAction(str, Enum):
    DOWN = "down"
    UP = "up"


class TargetKind(str, Enum):
    """What the pointer was over when the event fired."""
    CANVAS = "canvas"
    NODE = "node"
    EDGE = "edge"


@dataclass(frozen=True)
class PointerEvent:
    """A mouse event in screen coordinates."""
    action: PointerAction
    x: float
    y: float
    button: int = LEFT_BUTTON
    target: TargetKind = TargetKind.CANVAS
    target_id: Optional[str] = None
    alt: bool = False


@dataclass(frozen=True)
class KeyEvent:
    """A keyboard event; `key` uses DOM key names ("Shift", "Delete", "v")."""
    action: KeyAction
    key: str
    in_text_input: bool = False


Event = Union[PointerEvent, KeyEvent]


@dataclass(frozen=True)
class Selection:
    """Selected node ids XOR a single selected edge id."""
    node_ids: frozenset[str] = frozenset()
    edge_id: Optional[str] = None

    def with_nodes(self, node_ids: Iterable[str]) -> "Selection":
        return Selection(node_ids=frozenset(node_ids))

    def with_edge(self, edge_id: str) -> "Selection":
        return Selection(edge_id=edge_id)

    def toggled(self, node_id: str) -> "Selection":
        return self.with_nodes(self.node_ids ^ {node_id})

    @property
    def single_node_id(self) -> Optional[str]:
        if len(self.node_ids) == 1:
            return next(iter(self.node_ids))
        return None

    def to_dict(self) -> dict:
        return {"node_ids": sorted(self.node_ids), "edge_id": self.edge_id}


@dataclass(frozen=True)
class Modifiers:
    """Modifier keys, tracked from key down/up events."""
    shift: bool = False
    ctrl_or_meta: bool = False
    alt: bool = False


@dataclass(frozen=True)
class GestureState:
    """Anchors recorded when a gesture starts."""
    gesture: Gesture = Gesture.NONE
    drag_node_id: Optional[str] = None
    drag_offset: Point = (0.0, 0.0)  # pointer world position minus node top-left
    anchor_screen: Point = (0.0, 0.0)
    anchor_pan: Point = (0.0, 0.0)


class InteractionController:
    """
    Drives one canvas session from raw input events.

    Owns the session's DiagramStore, view transform, selection, modifier
    flags and gesture state. All handlers run synchronously and recompute
    from the current event plus recorded anchors, so coalesced or dropped
    move events cannot desynchronize the state.
    """

    def __init__(
        self,
        store: Optional[DiagramStore] = None,
        view: Optional[ViewTransform] = None,
        rng: Optional[random.Random] = None
    ):
        self.store = store if store is not None else DiagramStore()
        self.view = view if view is not None else ViewTransform()
        self.tool_mode = ToolMode.SELECT
        self.selection = Selection()
        self.modifiers = Modifiers()
        self.gesture = GestureState()
        self.pending_source: Optional[str] = None
        self._rng = rng if rng is not None else random.Random()

    # --- Properties ---

    @property
    def diagram(self) -> Diagram:
        return self.store.diagram

    @property
    def state(self) -> InteractionState:
        """Current state of the machine."""
        if self.gesture.gesture == Gesture.PANNING:
            return InteractionState.PANNING
        if self.gesture.gesture == Gesture.DRAGGING:
            return InteractionState.DRAGGING_SELECTION
        if self.modifiers.shift and self.pending_source is not None:
            return InteractionState.CONNECTING_EDGE
        return InteractionState.IDLE

    # --- Event Dispatch ---

    def dispatch(self, event: Event) -> None:
        """Route a raw input event to its handler."""
        if isinstance(event, PointerEvent):
            handlers = {
                PointerAction.DOWN: self.pointer_down,
                PointerAction.MOVE: self.pointer_move,
                PointerAction.UP: self.pointer_up,
            }
        else:
            handlers = {
                KeyAction.DOWN: self.key_down,
                KeyAction.UP: self.key_up,
            }
        handlers[event.action](event)

    # --- Pointer Handling ---

    def pointer_down(self, event: PointerEvent) -> None:
        screen = (event.x, event.y)

        if event.button == MIDDLE_BUTTON:
            self._start_pan(screen)
            return

        if event.target == TargetKind.NODE:
            self._node_down(event.target_id, screen)
            return

        if self.tool_mode == ToolMode.PAN:
            self._start_pan(screen)
            return

        if event.target == TargetKind.EDGE:
            if not self.modifiers.shift:
                self.select_edge(event.target_id)
            return

        # Empty canvas in select mode
        if not self.modifiers.shift and not self.modifiers.ctrl_or_meta:
            self.selection = Selection()
            self.pending_source = None
            logger.debug("Canvas click cleared selection")

    def pointer_move(self, event: PointerEvent) -> None:
        screen = (event.x, event.y)

        if self.gesture.gesture == Gesture.PANNING:
            self.view = pan_from_anchor(
                self.view, self.gesture.anchor_pan, self.gesture.anchor_screen, screen
            )
            return

        if self.gesture.gesture != Gesture.DRAGGING:
            return

        # Only single-node drags move anything
        node_id = self.selection.single_node_id
        if node_id is None or node_id != self.gesture.drag_node_id:
            return

        world_x, world_y = screen_to_world(self.view, screen)
        x = world_x - self.gesture.drag_offset[0]
        y = world_y - self.gesture.drag_offset[1]
        if not (event.alt or self.modifiers.alt):
            x = snap_to_grid(x)
            y = snap_to_grid(y)
        self.store.move_nodes({node_id: (x, y)})

    def pointer_up(self, event: Optional[PointerEvent] = None) -> None:
        if self.gesture.gesture != Gesture.NONE:
            logger.debug("Gesture %s ended", self.gesture.gesture.value)
        self.gesture = GestureState()

    def _start_pan(self, screen: Point) -> None:
        self.gesture = GestureState(
            gesture=Gesture.PANNING,
            anchor_screen=screen,
            anchor_pan=(self.view.pan_x, self.view.pan_y),
        )
        logger.debug("Panning from %s", screen)

    def _node_down(self, node_id: Optional[str], screen: Point) -> None:
        node = self.store.get_node(node_id) if node_id else None
        if node is None:
            return

        # Connection logic (shift + click)
        if self.modifiers.shift:
            if self.pending_source is None:
                self.pending_source = node_id
                logger.debug("Connection source set to %s", node_id)
            elif self.pending_source != node_id:
                edge = self.store.add_edge(Edge(source=self.pending_source, target=node_id))
                logger.debug("Connected %s -> %s as %s", edge.source, edge.target, edge.id)
                self.pending_source = None
            return

        if self.tool_mode != ToolMode.SELECT:
            return

        if self.modifiers.ctrl_or_meta:
            self.selection = self.selection.toggled(node_id)
        elif node_id not in self.selection.node_ids:
            self.selection = self.selection.with_nodes([node_id])
        else:
            # Keep the multi-selection, drop any edge selection
            self.selection = self.selection.with_nodes(self.selection.node_ids)

        world_x, world_y = screen_to_world(self.view, screen)
        self.gesture = GestureState(
            gesture=Gesture.DRAGGING,
            drag_node_id=node_id,
            drag_offset=(world_x - node.x, world_y - node.y),
        )
        logger.debug("Dragging %s", node_id)

    # --- Keyboard Handling ---

    def key_down(self, event: KeyEvent) -> None:
        key = event.key
        if key == "Shift":
            self.modifiers = replace(self.modifiers, shift=True)
        elif key in CTRL_KEYS:
            self.modifiers = replace(self.modifiers, ctrl_or_meta=True)
        elif key == "Alt":
            self.modifiers = replace(self.modifiers, alt=True)
        elif key == "v":
            self.tool_mode = ToolMode.SELECT
        elif key == "h":
            self.tool_mode = ToolMode.PAN
        elif key in DELETE_KEYS and not event.in_text_input:
            self.delete_selection()

    def key_up(self, event: KeyEvent) -> None:
        key = event.key
        if key == "Shift":
            self.modifiers = replace(self.modifiers, shift=False)
            self.pending_source = None
        elif key in CTRL_KEYS:
            self.modifiers = replace(self.modifiers, ctrl_or_meta=False)
        elif key == "Alt":
            self.modifiers = replace(self.modifiers, alt=False)

    def delete_selection(self) -> None:
        """Delete the selected nodes (with their edges) and the selected edge."""
        if self.selection.node_ids:
            self.store.remove_node_ids(self.selection.node_ids)
            logger.debug("Deleted nodes %s", sorted(self.selection.node_ids))
            self.selection = replace(self.selection, node_ids=frozenset())

        if self.selection.edge_id is not None:
            self.store.remove_edge(self.selection.edge_id)
            logger.debug("Deleted edge %s", self.selection.edge_id)
            self.selection = replace(self.selection, edge_id=None)

    # --- Selection ---

    def select_nodes(self, node_ids: Iterable[str]) -> Selection:
        self.selection = self.selection.with_nodes(node_ids)
        return self.selection

    def select_edge(self, edge_id: str) -> Selection:
        self.selection = self.selection.with_edge(edge_id)
        return self.selection

    def clear_selection(self) -> Selection:
        self.selection = Selection()
        return self.selection

    def active_node(self) -> Optional[Node]:
        """The node the properties panel edits (exactly one selected)."""
        node_id = self.selection.single_node_id
        return self.store.get_node(node_id) if node_id else None

    def active_edge(self) -> Optional[Edge]:
        """The edge the properties panel edits."""
        if self.selection.edge_id is None:
            return None
        return self.store.get_edge(self.selection.edge_id)

    # --- Toolbar / Properties Panel Operations ---

    def add_node(
        self,
        kind: NodeKind,
        label: str = "Node",
        symbol: Optional[OpSymbol] = None,
        viewport_size: tuple[float, float] = DEFAULT_VIEWPORT,
        **fields
    ) -> Node:
        """
        Add a node near the center of the visible canvas.

        The position gets a small random offset and is snapped to the grid,
        unless `x`/`y` are passed explicitly. Size and color token default
        by kind.
        """
        kind = NodeKind(kind)
        x = fields.pop("x", None)
        y = fields.pop("y", None)
        if x is None or y is None:
            center_x, center_y = visible_center(self.view, *viewport_size)
            if x is None:
                x = snap_to_grid(center_x + self._rng.uniform(-PLACEMENT_JITTER, PLACEMENT_JITTER))
            if y is None:
                y = snap_to_grid(center_y + self._rng.uniform(-PLACEMENT_JITTER, PLACEMENT_JITTER))

        is_operation = kind == NodeKind.OPERATION
        if fields.get("width") is None:
            fields["width"] = OPERATION_SIZE if is_operation else DEFAULT_WIDTH
        if fields.get("height") is None:
            fields["height"] = OPERATION_SIZE if is_operation else DEFAULT_HEIGHT
        if fields.get("color") is None:
            fields["color"] = DEFAULT_COLOR_TOKENS[kind]

        node = self.store.add_node(Node(kind=kind, label=label, symbol=symbol, x=x, y=y, **fields))
        logger.debug("Added %s node %s at (%s, %s)", kind.value, node.id, node.x, node.y)
        return node

    def update_node(self, node_id: str, **fields) -> Optional[Node]:
        return self.store.update_node(node_id, **fields)

    def update_edge(self, edge_id: str, **fields) -> Optional[Edge]:
        return self.store.update_edge(edge_id, **fields)

    def connect(self, source: str, target: str, label: Optional[str] = None, dashed: bool = False) -> Edge:
        """Add an edge directly, without the shift-click gesture."""
        return self.store.add_edge(Edge(source=source, target=target, label=label, dashed=dashed))

    def align(self, directive: AlignDirective) -> bool:
        """
        Align or distribute the selected nodes.

        Returns:
            True if any position was computed, False for a no-op
        """
        if len(self.selection.node_ids) < 2:
            return False
        positions = align_nodes(self.diagram.nodes, self.selection.node_ids, directive)
        if not positions:
            return False
        self.store.move_nodes(positions)
        logger.debug("Applied %s to %d nodes", AlignDirective(directive).value, len(positions))
        return True

    def clear(self) -> None:
        """Empty the diagram and forget the selection."""
        self.store.clear()
        self.selection = Selection()
        self.pending_source = None
        self.gesture = GestureState()

    def zoom(self, factor: float, screen_point: Point) -> ViewTransform:
        self.view = zoom_at(self.view, factor, screen_point)
        return self.view

    def export(self, now: Optional[float] = None) -> Optional[SvgDocument]:
        return export_svg(self.diagram, now=now)

    def scene(self) -> Scene:
        return build_scene(
            self.diagram,
            selected_node_ids=self.selection.node_ids,
            selected_edge_id=self.selection.edge_id,
            pending_source=self.pending_source,
        )

    def snapshot(self) -> dict:
        """Session state for API responses."""
        return {
            "diagram": self.diagram.to_json_dict(),
            "selection": self.selection.to_dict(),
            "view": self.view.model_dump(),
            "tool_mode": self.tool_mode.value,
            "state": self.state.value,
            "pending_source": self.pending_source,
        }
