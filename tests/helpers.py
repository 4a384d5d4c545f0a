"""Builders for small test graphs."""

from __future__ import annotations

from treeview_core.models import Edge, Node


def make_nodes(*ids: str) -> list[Node]:
    """Content-card nodes with the id as content."""
    return [Node(id=node_id, content=node_id) for node_id in ids]


def make_edges(*pairs: tuple[str, str]) -> list[Edge]:
    """Edges e1..eN for (source, target) pairs, in order."""
    return [
        Edge(id=f"e{i}", source=source, target=target)
        for i, (source, target) in enumerate(pairs, start=1)
    ]


SAMPLE_YAML = """\
nodes:
  - id: root
    label: "# Root"
  - id: left
    label: "Left child"
  - id: right
    label: "Right child"
  - id: loner
    label: "Not connected"
edges:
  - id: e1
    source: root
    target: left
  - id: e2
    source: root
    target: right
"""
