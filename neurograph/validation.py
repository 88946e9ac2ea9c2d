"""
Diagram validation - Check diagrams for structural issues.

Validation only reports; it never repairs. In particular, dangling edges are
legal data (they reappear once their node is re-added) and are reported as
warnings so the user knows why they are not drawn.
"""

import math
from collections import Counter
from dataclasses import dataclass
from enum import Enum

from .models import Diagram, NodeKind


class IssueSeverity(str, Enum):
    ERROR = "error"      # broken invariant (duplicate ids)
    WARNING = "warning"  # drawn wrongly or not at all
    INFO = "info"        # unusual but harmless


@dataclass
class ValidationIssue:
    """One finding, tied to the node and/or edge it concerns."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict:
        """JSON form for the API; ids that do not apply are omitted."""
        refs = {"node_id": self.node_id, "edge_id": self.edge_id}
        return {
            "type": self.severity.value,
            "message": self.message,
            **{key: value for key, value in refs.items() if value},
        }


def _is_finite(value: float | None) -> bool:
    return value is None or math.isfinite(value)


def validate_diagram(diagram: Diagram) -> list[ValidationIssue]:
    """
    Report what would keep an architecture diagram from rendering as drawn.

    Errors are duplicate node or edge ids. Warnings cover blank labels on
    anything but an operator, NaN or infinite geometry (such nodes drop out
    of the canvas and the export), edges whose source or target is gone,
    self loops and repeated source->target pairs. Info covers an empty
    canvas and nodes that no edge connects to another node.
    """
    issues: list[ValidationIssue] = []

    nodes = diagram.nodes
    edges = diagram.edges

    # Quick lookup sets
    node_ids = {n.id for n in nodes}

    # Check for duplicate ids (only possible when bypassing the store)
    for label, items in (("node", nodes), ("edge", edges)):
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Duplicate {label} id {item.id}",
                    **{f"{label}_id": item.id}
                ))
            seen.add(item.id)

    # Check for empty diagram
    if not nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Diagram has no nodes"
        ))

    # Find connected nodes
    connected_nodes: set[str] = set()
    for edge in edges:
        if edge.source in node_ids and edge.target in node_ids:
            connected_nodes.add(edge.source)
            connected_nodes.add(edge.target)

    # Check for orphan nodes (no connections)
    orphans = node_ids - connected_nodes
    if orphans:
        orphan_labels = [f"{n.label} ({n.id})" for n in nodes if n.id in orphans]
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message=f"Orphan nodes (no connections): {', '.join(orphan_labels)}"
        ))

    for node in nodes:
        # Operation nodes show their symbol, not the label
        if node.kind != NodeKind.OPERATION and not node.label.strip():
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Node has an empty label",
                node_id=node.id
            ))

        if not all(_is_finite(v) for v in (node.x, node.y, node.width, node.height)):
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Node has a non-numeric position or size",
                node_id=node.id
            ))

    # Check for dangling edge references
    for edge in edges:
        if edge.source not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references missing source node {edge.source} and is hidden",
                edge_id=edge.id
            ))
        if edge.target not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references missing target node {edge.target} and is hidden",
                edge_id=edge.id
            ))

    # Check for self-referencing edges
    for edge in edges:
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Self-referencing edge (node points to itself)",
                edge_id=edge.id,
                node_id=edge.source
            ))

    # Check for duplicate edges (same source->target)
    seen_pairs: set[tuple[str, str]] = set()
    for edge in edges:
        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate edge from {edge.source} to {edge.target}",
                edge_id=edge.id
            ))
        else:
            seen_pairs.add(pair)

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """Counts per severity; a diagram is valid while it has no errors."""
    counts = Counter(issue.severity for issue in issues)
    return {
        "total": len(issues),
        "errors": counts[IssueSeverity.ERROR],
        "warnings": counts[IssueSeverity.WARNING],
        "info": counts[IssueSeverity.INFO],
        "valid": counts[IssueSeverity.ERROR] == 0,
    }
