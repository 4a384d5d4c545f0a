"""
Tree layout for graph nodes.

Arranges a single-rooted graph as a tree that grows left-to-right:
- Depth maps to x (one horizontal step per level)
- Siblings are spread vertically in a band centred on their parent

Layout never mutates its inputs and never raises on bad data. Nodes it
cannot reach from the root are reported and, depending on the configured
policy, dropped or parked in a fallback column.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .models import Edge, Node

logger = logging.getLogger(__name__)


# Default layout parameters
HORIZONTAL_SPACING = 500  # Between levels
VERTICAL_SPACING = 450    # Between siblings
DEFAULT_ORIGIN_X = 50
DEFAULT_ORIGIN_Y = 300


class UnreachedPolicy(str, Enum):
    """What to do with nodes the root cannot reach."""
    DROP = "drop"
    FALLBACK_COLUMN = "fallback"


class LayoutConfig(BaseModel):
    """Spacing, origin and root selection for a layout pass."""
    horizontal_spacing: float = HORIZONTAL_SPACING
    vertical_spacing: float = VERTICAL_SPACING
    origin_x: float = DEFAULT_ORIGIN_X
    origin_y: float = DEFAULT_ORIGIN_Y
    root_id: Optional[str] = None  # None = first node without a parent
    unreached: UnreachedPolicy = UnreachedPolicy.DROP


@dataclass
class TreeLayout:
    """Result of a layout pass."""
    nodes: list[Node] = field(default_factory=list)  # DFS order, root first
    root_id: Optional[str] = None
    unreached: list[str] = field(default_factory=list)
    extent: Optional[float] = None  # Lowest y reserved by the root's subtree


@dataclass
class _Walk:
    """Traversal state threaded through one layout pass."""
    nodes_by_id: dict[str, Node]
    children: dict[str, list[str]]
    config: LayoutConfig
    visited: set[str] = field(default_factory=set)
    placed: list[Node] = field(default_factory=list)


def build_children_index(nodes: list[Node], edges: list[Edge]) -> dict[str, list[str]]:
    """
    Map each node id to its child ids, in edge order.

    Edges whose source or target is not in `nodes` are skipped.
    """
    children: dict[str, list[str]] = {n.id: [] for n in nodes}
    for edge in edges:
        if edge.source in children and edge.target in children:
            children[edge.source].append(edge.target)
    return children


def find_root(
    nodes: list[Node],
    edges: list[Edge],
    root_id: Optional[str] = None
) -> Optional[str]:
    """
    Pick the node the layout starts from.

    With an explicit root_id, that node is used if it exists. Otherwise
    the first node (in node order) that is never an edge target wins.

    Returns:
        The root node ID, or None when there is no candidate
    """
    if root_id is not None:
        return root_id if any(n.id == root_id for n in nodes) else None

    targets = {edge.target for edge in edges}
    for node in nodes:
        if node.id not in targets:
            return node.id
    return None


def _place(walk: _Walk, node_id: str, x: float, y: float, level: int) -> float:
    """
    Position a node and its subtree, returning the subtree's vertical extent.

    A node reached a second time (cycle or convergence) is left where it
    was first put and the caller's y is returned as-is.
    """
    if node_id in walk.visited:
        return y

    walk.visited.add(node_id)
    walk.placed.append(walk.nodes_by_id[node_id].with_position(x, y))

    child_ids = walk.children.get(node_id, [])
    if not child_ids:
        return y + walk.config.vertical_spacing

    spacing = walk.config.vertical_spacing
    start_y = y - (len(child_ids) - 1) * spacing / 2
    child_x = x + walk.config.horizontal_spacing

    max_y = y
    for index, child_id in enumerate(child_ids):
        extent = _place(walk, child_id, child_x, start_y + index * spacing, level + 1)
        max_y = max(max_y, extent)

    return max_y


def _park_unreached(walk: _Walk, unreached: list[str]) -> None:
    """Stack unreached nodes in one column right of everything placed."""
    config = walk.config
    if walk.placed:
        x = max(n.position.x for n in walk.placed) + config.horizontal_spacing
    else:
        x = config.origin_x

    for index, node_id in enumerate(unreached):
        y = config.origin_y + index * config.vertical_spacing
        walk.placed.append(walk.nodes_by_id[node_id].with_position(x, y))


def layout_tree(
    nodes: list[Node],
    edges: list[Edge],
    config: Optional[LayoutConfig] = None
) -> TreeLayout:
    """
    Lay out nodes as a horizontally expanding tree.

    The root sits at the configured origin. Each child is one horizontal
    step right of its parent; the children of a node share a vertical band
    centred on the parent's y, one vertical step apart, in edge order.

    Args:
        nodes: Nodes to position (not modified)
        edges: Edges defining parent -> child relations
        config: Spacing, origin, root and unreached-node policy

    Returns:
        TreeLayout with positioned copies of the nodes in visiting order
    """
    config = config or LayoutConfig()

    # Duplicate IDs: the first node with an ID wins
    nodes_by_id: dict[str, Node] = {}
    for node in nodes:
        nodes_by_id.setdefault(node.id, node)

    walk = _Walk(
        nodes_by_id=nodes_by_id,
        children=build_children_index(nodes, edges),
        config=config,
    )

    root_id = find_root(nodes, edges, config.root_id)
    if root_id is None:
        logger.warning("No root node found among %d nodes; layout is empty", len(nodes))
        return TreeLayout()

    extent = _place(walk, root_id, config.origin_x, config.origin_y, 0)

    unreached = [node_id for node_id in nodes_by_id if node_id not in walk.visited]
    if unreached:
        logger.warning(
            "%d node(s) not reachable from root %s: %s",
            len(unreached), root_id, ", ".join(unreached)
        )
        if config.unreached == UnreachedPolicy.FALLBACK_COLUMN:
            _park_unreached(walk, unreached)

    return TreeLayout(
        nodes=walk.placed,
        root_id=root_id,
        unreached=unreached,
        extent=extent,
    )


def horizontal_tree_layout(
    nodes: list[Node],
    edges: list[Edge],
    config: Optional[LayoutConfig] = None
) -> list[Node]:
    """Positioned nodes only; see layout_tree."""
    return layout_tree(nodes, edges, config).nodes
