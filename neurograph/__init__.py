"""
NeuroGraph Core - Diagram model, interaction engine, alignment and export.

This module provides the core functionality used by both the backend API
and the CLI, ensuring a single source of truth for all diagram logic.
"""

from .models import (
    # Enums
    NodeKind,
    OpSymbol,
    # Core models
    Node,
    Edge,
    Diagram,
    ViewTransform,
    # Request models (for API)
    CreateNodeRequest,
    UpdateNodeRequest,
    CreateEdgeRequest,
    UpdateEdgeRequest,
)

from .store import DiagramStore, starter_diagram
from .geometry import node_size, node_center, snap_to_grid, axis_snap, edge_endpoints, bounding_box
from .layout import AlignDirective, align_nodes
from .scene import Scene, build_scene
from .export import SvgDocument, export_svg, fill_for_token
from .interaction import (
    InteractionController,
    InteractionState,
    ToolMode,
    Selection,
    PointerEvent,
    PointerAction,
    KeyEvent,
    KeyAction,
    TargetKind,
)
from .validation import validate_diagram, validation_summary, ValidationIssue, IssueSeverity

__all__ = [
    # Enums
    "NodeKind",
    "OpSymbol",
    # Models
    "Node",
    "Edge",
    "Diagram",
    "ViewTransform",
    # Request models
    "CreateNodeRequest",
    "UpdateNodeRequest",
    "CreateEdgeRequest",
    "UpdateEdgeRequest",
    # Store
    "DiagramStore",
    "starter_diagram",
    # Geometry
    "node_size",
    "node_center",
    "snap_to_grid",
    "axis_snap",
    "edge_endpoints",
    "bounding_box",
    # Layout
    "AlignDirective",
    "align_nodes",
    # Scene / export
    "Scene",
    "build_scene",
    "SvgDocument",
    "export_svg",
    "fill_for_token",
    # Interaction
    "InteractionController",
    "InteractionState",
    "ToolMode",
    "Selection",
    "PointerEvent",
    "PointerAction",
    "KeyEvent",
    "KeyAction",
    "TargetKind",
    # Validation
    "validate_diagram",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
]
