"""
Graph validation - Check a loaded graph for structural issues.

None of these problems stop a load; layout copes with all of them. The
issues exist so that what layout silently works around (inert edges,
dropped nodes, an ambiguous root) can be surfaced to the operator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .layout import build_children_index, find_root

if TYPE_CHECKING:
    from .models import Graph


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Layout works around it, should review
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a graph."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_id:
            result["edge_id"] = self.edge_id
        return result


def _reachable_from(root_id: str, children: dict[str, list[str]]) -> set[str]:
    seen: set[str] = set()
    stack = [root_id]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        stack.extend(children.get(current, []))
    return seen


def validate_graph(graph: "Graph", root_id: Optional[str] = None) -> list[ValidationIssue]:
    """
    Validate a graph and return a list of issues.

    Checks for:
    - Empty graph - INFO
    - Duplicate node or edge IDs - ERROR
    - Edges referencing missing nodes (inert for layout) - WARNING
    - Self-referencing edges - WARNING
    - No root, or several root candidates - WARNING
    - Nodes unreachable from the root (not rendered) - WARNING

    Args:
        graph: The graph to validate
        root_id: Explicit root, if one is configured

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []

    nodes = graph.nodes
    edges = graph.edges

    if not nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Graph has no nodes"
        ))
        return issues

    # Duplicate IDs
    seen_nodes: set[str] = set()
    for node in nodes:
        if node.id in seen_nodes:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Duplicate node id: {node.id}",
                node_id=node.id
            ))
        seen_nodes.add(node.id)

    seen_edges: set[str] = set()
    for edge in edges:
        if edge.id in seen_edges:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Duplicate edge id: {edge.id}",
                edge_id=edge.id
            ))
        seen_edges.add(edge.id)

    # Dangling references
    for edge in edges:
        if edge.source not in seen_nodes:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_id=edge.id
            ))
        if edge.target not in seen_nodes:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_id=edge.id
            ))

    for edge in edges:
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Self-referencing edge (node points to itself)",
                edge_id=edge.id,
                node_id=edge.source
            ))

    # Root discovery
    if root_id is None:
        targets = {edge.target for edge in edges}
        candidates = list(dict.fromkeys(n.id for n in nodes if n.id not in targets))
        if len(candidates) > 1:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=(
                    f"Several nodes have no incoming edge ({', '.join(candidates)}); "
                    f"using {candidates[0]} as root"
                ),
                node_id=candidates[0]
            ))

    root = find_root(nodes, edges, root_id)
    if root is None:
        if root_id is not None:
            message = f"Configured root node not found: {root_id}"
        else:
            message = "No root: every node has an incoming edge"
        issues.append(ValidationIssue(
            severity=IssueSeverity.WARNING,
            message=message
        ))
        return issues

    reachable = _reachable_from(root, build_children_index(nodes, edges))
    for node in nodes:
        if node.id not in reachable:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Node not reachable from root {root}",
                node_id=node.id
            ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    return {
        "total": len(issues),
        "errors": len([i for i in issues if i.severity == IssueSeverity.ERROR]),
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": len([i for i in issues if i.severity == IssueSeverity.ERROR]) == 0
    }
