"""
Session Manager - the single canvas session served by the backend.

This module implements:
- One InteractionController session (diagram, selection, view, tool mode)
- Change callbacks for real-time sync over WebSockets
- Thin request-level operations used by the REST endpoints

There is no persistence and no history: a session lives as long as the
process, and "new" simply starts a fresh one.
"""

import logging
from typing import Callable, Iterable, Optional

from neurograph import (
    AlignDirective,
    CreateEdgeRequest,
    CreateNodeRequest,
    Diagram,
    DiagramStore,
    Edge,
    InteractionController,
    Node,
    starter_diagram,
    validate_diagram,
    validation_summary,
)
from neurograph.config import DEFAULT_VIEWPORT
from neurograph.export import SvgDocument
from neurograph.interaction import Event

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Manages one canvas session and notifies listeners about changes.

    Diagram mutations are reported by the store; changes to the selection,
    view or tool mode caused by input events are reported here.
    """

    def __init__(self, sample: bool = True):
        self._on_change_callbacks: list[Callable] = []
        self._controller = self._new_controller(sample)

    def _new_controller(self, sample: bool) -> InteractionController:
        store = DiagramStore(starter_diagram() if sample else None)
        store.on_change(self._notify_change)
        return InteractionController(store=store)

    # --- Properties ---

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def diagram(self) -> Diagram:
        """Get the current diagram."""
        return self._controller.diagram

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for session changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    def _session_marker(self) -> tuple:
        c = self._controller
        return (c.selection, c.view, c.tool_mode, c.pending_source)

    # --- Session Operations ---

    def new_session(self, sample: bool = True) -> Diagram:
        """Start a fresh session, optionally with the example diagram."""
        self._controller = self._new_controller(sample)
        logger.info("Started new session (sample=%s)", sample)
        self._notify_change()
        return self.diagram

    def clear(self) -> Diagram:
        self._controller.clear()
        self._notify_change()
        return self.diagram

    def dispatch(self, event: Event) -> dict:
        """Feed a raw input event to the session and return the new state."""
        before = self._session_marker()
        self._controller.dispatch(event)
        if self._session_marker() != before:
            self._notify_change()
        return self.get_state()

    def get_state(self) -> dict:
        """Get the full current state for API responses."""
        return self._controller.snapshot()

    # --- Node Operations ---

    def add_node(
        self,
        request: CreateNodeRequest,
        viewport_size: tuple[float, float] = DEFAULT_VIEWPORT
    ) -> Node:
        """Add a node; position defaults to the center of the viewport."""
        fields = request.model_dump(exclude={"kind", "label", "symbol"})
        return self._controller.add_node(
            request.kind,
            label=request.label,
            symbol=request.symbol,
            viewport_size=viewport_size,
            **fields
        )

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._controller.store.get_node(node_id)

    def update_node(self, node_id: str, changes: dict) -> Optional[Node]:
        return self._controller.update_node(node_id, **changes)

    def delete_node(self, node_id: str) -> bool:
        """Delete a node and its connected edges."""
        if self.get_node(node_id) is None:
            return False
        controller = self._controller
        controller.store.remove_node_ids([node_id])
        if node_id in controller.selection.node_ids:
            controller.select_nodes(controller.selection.node_ids - {node_id})
        return True

    # --- Edge Operations ---

    def add_edge(self, request: CreateEdgeRequest) -> Edge:
        return self._controller.connect(
            request.source, request.target, label=request.label, dashed=request.dashed
        )

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self._controller.store.get_edge(edge_id)

    def update_edge(self, edge_id: str, changes: dict) -> Optional[Edge]:
        return self._controller.update_edge(edge_id, **changes)

    def delete_edge(self, edge_id: str) -> bool:
        if self.get_edge(edge_id) is None:
            return False
        controller = self._controller
        controller.store.remove_edge(edge_id)
        if controller.selection.edge_id == edge_id:
            controller.clear_selection()
        return True

    # --- Selection & Layout ---

    def select(self, node_ids: Optional[Iterable[str]] = None, edge_id: Optional[str] = None) -> dict:
        """Select nodes or an edge (an edge wins if both are given)."""
        if edge_id is not None:
            self._controller.select_edge(edge_id)
        else:
            self._controller.select_nodes(node_ids or [])
        self._notify_change()
        return self._controller.selection.to_dict()

    def clear_selection(self) -> dict:
        self._controller.clear_selection()
        self._notify_change()
        return self._controller.selection.to_dict()

    def align(self, directive: AlignDirective, node_ids: Optional[list[str]] = None) -> bool:
        """Align the selection, selecting `node_ids` first when given."""
        if node_ids is not None:
            self._controller.select_nodes(node_ids)
            self._notify_change()
        return self._controller.align(directive)

    def zoom(self, factor: float, x: float, y: float) -> dict:
        view = self._controller.zoom(factor, (x, y))
        self._notify_change()
        return view.model_dump()

    # --- Rendering & Export ---

    def scene(self) -> dict:
        return self._controller.scene().to_dict()

    def export(self) -> Optional[SvgDocument]:
        return self._controller.export()

    def validate(self) -> tuple[list[dict], dict]:
        issues = validate_diagram(self.diagram)
        return [issue.to_dict() for issue in issues], validation_summary(issues)


# Global instance for the application
session_manager = SessionManager()
