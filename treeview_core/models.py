"""
Core data models for the tree view.

These models define the canonical in-memory graph:
- Nodes carrying rich-text content and a computed position
- Edges connecting nodes (using source/target naming convention)
- The builder that turns a parsed description into render-ready entities

Field Naming Convention:
- Python attributes are snake_case
- `to_render_dict()` outputs the camelCase records the diagram surface expects
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
import uuid

from .description import GraphDescription


class NodeKind(str, Enum):
    """Rendering variants for nodes on the canvas."""
    CONTENT_CARD = "customNode"


def generate_edge_id() -> str:
    """Generate a unique edge ID."""
    return f"e{uuid.uuid4().hex[:8]}"


class Position(BaseModel):
    """A point on the canvas."""
    x: float
    y: float


class Node(BaseModel):
    """A node in the graph."""
    id: str
    type: NodeKind = NodeKind.CONTENT_CARD
    content: str = ""  # Markdown, opaque to layout
    position: Optional[Position] = None  # Set by the layout engine

    def with_position(self, x: float, y: float) -> "Node":
        """Return a copy of this node placed at (x, y)."""
        return self.model_copy(update={"position": Position(x=x, y=y)})

    def to_render_dict(self) -> dict:
        """Convert to the record handed to the diagram surface."""
        result = {
            "id": self.id,
            "type": self.type.value,
            "data": {"label": self.content},
        }
        if self.position is not None:
            result["position"] = {"x": self.position.x, "y": self.position.y}
        return result


class EdgeStyle(BaseModel):
    """Stroke settings for edges."""
    stroke: str = "#666"
    stroke_width: float = 1


class Edge(BaseModel):
    """
    A directed edge connecting two nodes.

    The source is the parent and the target the child for layout purposes.
    Neither endpoint is checked against the node set here.
    """
    id: str = Field(default_factory=generate_edge_id)
    source: str  # Parent node ID
    target: str  # Child node ID
    source_handle: Optional[str] = None  # None = default handle
    target_handle: Optional[str] = None
    style: EdgeStyle = Field(default_factory=EdgeStyle)

    def to_render_dict(self) -> dict:
        """Convert to the record handed to the diagram surface."""
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "sourceHandle": self.source_handle,
            "targetHandle": self.target_handle,
            "style": {
                "stroke": self.style.stroke,
                "strokeWidth": self.style.stroke_width,
            },
        }


class Graph(BaseModel):
    """The node and edge sequences consumed by layout and rendering."""
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @property
    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(n) - use GraphManager for indexed access)."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(n) - use GraphManager for indexed access)."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None


def build_graph(description: GraphDescription) -> Graph:
    """
    Convert parsed description records into the canonical graph.

    Node labels become content, positions stay unset until layout runs,
    and every edge gets the fixed stroke style. Order is preserved.

    Args:
        description: The decoded graph description

    Returns:
        A new Graph
    """
    nodes = [
        Node(id=record.id, content=record.label)
        for record in description.nodes
    ]
    edges = [
        Edge(id=record.id, source=record.source, target=record.target)
        for record in description.edges
    ]
    return Graph(nodes=nodes, edges=edges)
