"""
Core data models for architecture diagrams.

These models define the canonical schema for diagrams:
- Nodes with a kind (layer, operation, input/output terminal, note)
- Edges connecting nodes (using source/target naming convention)
- The view transform of a canvas session

All diagram models are frozen: every edit produces a new value, so a
snapshot handed out earlier never changes underneath its holder.

Field Naming Convention:
- Edges use `source` and `target`
- For compatibility with browser payloads, `from`/`to` are accepted on input
  and converted, as are `type` (for `kind`) and `subLabel` (for `sub_label`)
"""

import math
import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


class NodeKind(str, Enum):
    """Kinds of nodes on the canvas."""
    LAYER = "LAYER"
    OPERATION = "OPERATION"
    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    NOTE = "NOTE"


class OpSymbol(str, Enum):
    """Operator glyphs shown inside operation nodes."""
    SUM = "+"
    MULT = "×"
    CONCAT = "©"
    DOT = "•"


# Color token given to nodes created from the toolbar
DEFAULT_COLOR_TOKENS = {
    NodeKind.LAYER: "bg-blue-100",
    NodeKind.OPERATION: "bg-yellow-100",
    NodeKind.INPUT: "bg-gray-50",
    NodeKind.OUTPUT: "bg-gray-50",
    NodeKind.NOTE: "bg-gray-50",
}


def generate_node_id() -> str:
    """Generate a unique node ID."""
    return f"n{uuid.uuid4().hex[:8]}"


def generate_edge_id() -> str:
    """Generate a unique edge ID."""
    return f"e{uuid.uuid4().hex[:8]}"


def coerce_number(value: Any) -> Any:
    """Turn unparsable numeric input into NaN instead of rejecting it."""
    if value is None or isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _convert_node_fields(data: Any) -> Any:
    """Map browser-style node fields and enum names onto the canonical schema."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    if "type" in data and "kind" not in data:
        data["kind"] = data.pop("type")
    if "subLabel" in data and "sub_label" not in data:
        data["sub_label"] = data.pop("subLabel")
    kind = data.get("kind")
    if isinstance(kind, str) and not isinstance(kind, NodeKind):
        data["kind"] = kind.upper()
    symbol = data.get("symbol")
    if isinstance(symbol, str) and symbol.upper() in OpSymbol.__members__:
        data["symbol"] = OpSymbol[symbol.upper()]
    return data


def _convert_edge_fields(data: Any) -> Any:
    """Convert legacy 'from'/'to' fields to 'source'/'target'."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    # 'from' is a Python keyword, so it only ever arrives as a dict key
    if "from" in data and "source" not in data:
        data["source"] = data.pop("from")
    if "to" in data and "target" not in data:
        data["target"] = data.pop("to")
    return data


class Node(BaseModel):
    """A positioned, typed shape in the diagram."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_node_id)
    kind: NodeKind = NodeKind.LAYER
    label: str = "Node"
    sub_label: Optional[str] = None  # e.g. "3x3, 64"
    symbol: Optional[OpSymbol] = None  # only drawn for operation nodes
    x: float = 0  # world-space top-left
    y: float = 0
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None  # opaque color token, e.g. "bg-blue-100"

    @model_validator(mode="before")
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        return _convert_node_fields(data)

    @field_serializer("x", "y", "width", "height", when_used="json")
    def serialize_number(self, value: Optional[float]) -> Optional[float]:
        # JSON has no NaN/Infinity; garbled numbers go out as null
        if value is None or not math.isfinite(value):
            return None
        return value


class Edge(BaseModel):
    """
    A directed connection between two node ids.

    Uses `source` and `target` as canonical field names.
    Accepts `from`/`to` on input. Endpoints are not required to exist.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_edge_id)
    source: str
    target: str
    label: Optional[str] = None
    dashed: bool = False

    @model_validator(mode="before")
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        return _convert_edge_fields(data)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "dashed": self.dashed,
        }
        # Only include the label if it's set
        if self.label is not None:
            result["label"] = self.label
        return result


class Diagram(BaseModel):
    """
    The complete diagram structure: ordered nodes and ordered edges.

    Order carries no meaning beyond deterministic render/export iteration.
    """
    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with proper field names."""
        return {
            "nodes": [n.model_dump(mode="json") for n in self.nodes],
            "edges": [e.to_json_dict() for e in self.edges],
        }

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(n) - use DiagramStore for indexed access)."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(n) - use DiagramStore for indexed access)."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None


class ViewTransform(BaseModel):
    """Pan offset and scale mapping world space onto the screen."""
    model_config = ConfigDict(frozen=True)

    pan_x: float = 0
    pan_y: float = 0
    scale: float = Field(default=1.0, gt=0)


# --- API Request/Response Models ---

# Fields that can not be set to null by a partial update
NODE_REQUIRED_FIELDS = ("kind", "label", "x", "y")
EDGE_REQUIRED_FIELDS = ("dashed",)


def _drop_nulls(changes: dict, required: tuple[str, ...]) -> dict:
    return {k: v for k, v in changes.items() if v is not None or k not in required}


class CreateNodeRequest(BaseModel):
    """Request to create a new node (position defaults to the view center)."""
    kind: NodeKind = NodeKind.LAYER
    label: str = "Node"
    sub_label: Optional[str] = None
    symbol: Optional[OpSymbol] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        return _convert_node_fields(data)


class UpdateNodeRequest(BaseModel):
    """Request to update an existing node (partial update)."""
    kind: Optional[NodeKind] = None
    label: Optional[str] = None
    sub_label: Optional[str] = None
    symbol: Optional[OpSymbol] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        return _convert_node_fields(data)

    @field_validator("x", "y", "width", "height", mode="before")
    @classmethod
    def parse_number(cls, value: Any) -> Any:
        return coerce_number(value)

    def changes(self) -> dict:
        """
        Only the fields the caller actually sent.

        An explicit null clears optional fields (sub_label, symbol, size,
        color) and is ignored for fields a node always has.
        """
        return _drop_nulls(self.model_dump(exclude_unset=True), NODE_REQUIRED_FIELDS)


class CreateEdgeRequest(BaseModel):
    """Request to create a new edge."""
    source: str
    target: str
    label: Optional[str] = None
    dashed: bool = False

    @model_validator(mode="before")
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        return _convert_edge_fields(data)


class UpdateEdgeRequest(BaseModel):
    """Request to update an existing edge."""
    label: Optional[str] = None
    dashed: Optional[bool] = None

    def changes(self) -> dict:
        """Only the fields the caller actually sent; null clears the label."""
        return _drop_nulls(self.model_dump(exclude_unset=True), EDGE_REQUIRED_FIELDS)
