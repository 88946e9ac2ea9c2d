"""
Diagram store - the canonical node/edge collections.

This module implements:
- Pure transformations on Diagram values (each returns a new Diagram)
- Cascade deletion of edges when their nodes are removed
- A DiagramStore holder with O(1) id lookups and change callbacks

Edges whose endpoints are missing are tolerated: they stay in the store and
come back to life if a node with the same id is added again.
"""

import logging
from typing import Callable, Iterable, Optional

from .models import DEFAULT_COLOR_TOKENS, Diagram, Edge, Node, NodeKind, generate_edge_id, generate_node_id

logger = logging.getLogger(__name__)


def _fresh_id(taken: set[str], generate: Callable[[], str]) -> str:
    new_id = generate()
    while new_id in taken:
        new_id = generate()
    return new_id


# --- Node Operations ---

def add_node(diagram: Diagram, node: Node) -> Diagram:
    """Append a node, re-identifying it if its id is already in use."""
    taken = {n.id for n in diagram.nodes}
    if node.id in taken:
        new_id = _fresh_id(taken, generate_node_id)
        logger.debug("Node id %s already taken, using %s", node.id, new_id)
        node = node.model_copy(update={"id": new_id})
    return diagram.model_copy(update={"nodes": diagram.nodes + (node,)})


def update_node(diagram: Diagram, node_id: str, **fields) -> Diagram:
    """Update fields of a node; unknown ids leave the diagram unchanged."""
    fields.pop("id", None)
    if diagram.get_node(node_id) is None:
        return diagram

    nodes = tuple(
        Node.model_validate({**n.model_dump(), **fields}) if n.id == node_id else n
        for n in diagram.nodes
    )
    return diagram.model_copy(update={"nodes": nodes})


def move_nodes(diagram: Diagram, positions: dict[str, tuple[float, float]]) -> Diagram:
    """Set the (x, y) of several nodes at once."""
    if not positions:
        return diagram
    nodes = tuple(
        n.model_copy(update={"x": positions[n.id][0], "y": positions[n.id][1]})
        if n.id in positions else n
        for n in diagram.nodes
    )
    return diagram.model_copy(update={"nodes": nodes})


def remove_nodes(diagram: Diagram, predicate: Callable[[str], bool]) -> Diagram:
    """Remove nodes whose id matches `predicate` and every edge touching them."""
    removed = {n.id for n in diagram.nodes if predicate(n.id)}
    if not removed:
        return diagram
    return Diagram(
        nodes=tuple(n for n in diagram.nodes if n.id not in removed),
        edges=tuple(
            e for e in diagram.edges
            if e.source not in removed and e.target not in removed
        ),
    )


# --- Edge Operations ---

def add_edge(diagram: Diagram, edge: Edge) -> Diagram:
    """Append an edge, re-identifying it if its id is already in use."""
    taken = {e.id for e in diagram.edges}
    if edge.id in taken:
        new_id = _fresh_id(taken, generate_edge_id)
        logger.debug("Edge id %s already taken, using %s", edge.id, new_id)
        edge = edge.model_copy(update={"id": new_id})
    return diagram.model_copy(update={"edges": diagram.edges + (edge,)})


def update_edge(diagram: Diagram, edge_id: str, **fields) -> Diagram:
    """Update fields of an edge; unknown ids leave the diagram unchanged."""
    fields.pop("id", None)
    if diagram.get_edge(edge_id) is None:
        return diagram

    edges = tuple(
        Edge.model_validate({**e.model_dump(), **fields}) if e.id == edge_id else e
        for e in diagram.edges
    )
    return diagram.model_copy(update={"edges": edges})


def remove_edge(diagram: Diagram, edge_id: str) -> Diagram:
    """Remove a single edge."""
    edges = tuple(e for e in diagram.edges if e.id != edge_id)
    if len(edges) == len(diagram.edges):
        return diagram
    return diagram.model_copy(update={"edges": edges})


def remove_edges_referencing(diagram: Diagram, node_id: str) -> Diagram:
    """Remove every edge whose source or target is `node_id`."""
    edges = tuple(e for e in diagram.edges if node_id not in (e.source, e.target))
    if len(edges) == len(diagram.edges):
        return diagram
    return diagram.model_copy(update={"edges": edges})


def clear(diagram: Diagram) -> Diagram:
    """An empty diagram."""
    return Diagram()


def starter_diagram() -> Diagram:
    """The example a new session opens with: a small input → conv → pool chain."""
    return Diagram(
        nodes=(
            Node(id="1", kind=NodeKind.INPUT, label="Input Image", x=340, y=60,
                 width=120, height=40, color=DEFAULT_COLOR_TOKENS[NodeKind.INPUT]),
            Node(id="2", kind=NodeKind.LAYER, label="Conv 7x7", sub_label="64, /2", x=340, y=160,
                 width=140, height=60, color="bg-blue-100"),
            Node(id="3", kind=NodeKind.LAYER, label="MaxPool", sub_label="3x3, /2", x=340, y=260,
                 width=140, height=60, color="bg-pink-100"),
        ),
        edges=(
            Edge(id="e1", source="1", target="2"),
            Edge(id="e2", source="2", target="3", dashed=True),
        ),
    )


class DiagramStore:
    """
    Holds the current Diagram value.

    Features:
    - O(1) node/edge lookups via index dictionaries
    - Change callbacks fired after every effective mutation

    Every mutation replaces the held value with a new Diagram; snapshots
    returned earlier are never modified.
    """

    def __init__(self, diagram: Optional[Diagram] = None):
        self._diagram = diagram if diagram is not None else Diagram()
        self._on_change_callbacks: list[Callable] = []

        # O(1) lookup indexes
        self._node_index: dict[str, Node] = {}
        self._edge_index: dict[str, Edge] = {}
        self._rebuild_indexes()

    # --- Index Management ---

    def _rebuild_indexes(self):
        """Rebuild all indexes from the current diagram state."""
        self._node_index = {n.id: n for n in self._diagram.nodes}
        self._edge_index = {e.id: e for e in self._diagram.edges}

    def _commit(self, diagram: Diagram) -> Diagram:
        if diagram is self._diagram:
            return diagram
        self._diagram = diagram
        self._rebuild_indexes()
        self._notify_change()
        return diagram

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for diagram changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    # --- Properties ---

    @property
    def diagram(self) -> Diagram:
        """Get the current diagram."""
        return self._diagram

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(1) lookup)."""
        return self._node_index.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(1) lookup)."""
        return self._edge_index.get(edge_id)

    # --- Mutations ---

    def replace(self, diagram: Diagram) -> Diagram:
        """Swap in a whole new diagram."""
        return self._commit(diagram)

    def add_node(self, node: Node) -> Node:
        """Add a node and return it as stored (its id may have been reassigned)."""
        diagram = self._commit(add_node(self._diagram, node))
        return diagram.nodes[-1]

    def update_node(self, node_id: str, **fields) -> Optional[Node]:
        """Update an existing node."""
        self._commit(update_node(self._diagram, node_id, **fields))
        return self._node_index.get(node_id)

    def move_nodes(self, positions: dict[str, tuple[float, float]]) -> Diagram:
        return self._commit(move_nodes(self._diagram, positions))

    def remove_nodes(self, predicate: Callable[[str], bool]) -> Diagram:
        """Delete matching nodes and all connected edges."""
        return self._commit(remove_nodes(self._diagram, predicate))

    def remove_node_ids(self, node_ids: Iterable[str]) -> Diagram:
        ids = set(node_ids)
        return self.remove_nodes(lambda node_id: node_id in ids)

    def add_edge(self, edge: Edge) -> Edge:
        """Add an edge and return it as stored (its id may have been reassigned)."""
        diagram = self._commit(add_edge(self._diagram, edge))
        return diagram.edges[-1]

    def update_edge(self, edge_id: str, **fields) -> Optional[Edge]:
        """Update an existing edge."""
        self._commit(update_edge(self._diagram, edge_id, **fields))
        return self._edge_index.get(edge_id)

    def remove_edge(self, edge_id: str) -> Diagram:
        return self._commit(remove_edge(self._diagram, edge_id))

    def remove_edges_referencing(self, node_id: str) -> Diagram:
        return self._commit(remove_edges_referencing(self._diagram, node_id))

    def clear(self) -> Diagram:
        return self._commit(clear(self._diagram))
