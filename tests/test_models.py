"""Tests for treeview_core.models: graph builder and render records."""

from __future__ import annotations

from treeview_core.description import parse_description
from treeview_core.models import Edge, Graph, Node, NodeKind, build_graph

DESCRIPTION = """\
nodes:
  - {id: a, label: "# A"}
  - {id: b, label: "B"}
edges:
  - {id: e1, source: a, target: b}
  - {id: e2, source: a, target: missing}
"""


class TestBuildGraph:
    def test_nodes(self) -> None:
        graph = build_graph(parse_description(DESCRIPTION))
        assert [n.id for n in graph.nodes] == ["a", "b"]
        node = graph.nodes[0]
        assert node.content == "# A"
        assert node.type == NodeKind.CONTENT_CARD
        assert node.position is None

    def test_edges_kept_as_declared(self) -> None:
        graph = build_graph(parse_description(DESCRIPTION))
        assert [(e.id, e.source, e.target) for e in graph.edges] == [
            ("e1", "a", "b"),
            ("e2", "a", "missing"),
        ]
        assert graph.edges[0].style.stroke == "#666"
        assert graph.edges[0].style.stroke_width == 1

    def test_lookups(self) -> None:
        graph = build_graph(parse_description(DESCRIPTION))
        assert graph.get_node("b").content == "B"
        assert graph.get_node("zzz") is None
        assert graph.get_edge("e2").target == "missing"
        assert graph.node_ids == {"a", "b"}


class TestRenderRecords:
    def test_unpositioned_node(self) -> None:
        record = Node(id="a", content="hi").to_render_dict()
        assert record == {"id": "a", "type": "customNode", "data": {"label": "hi"}}

    def test_positioned_node(self) -> None:
        node = Node(id="a", content="hi").with_position(50, 300)
        assert node.to_render_dict()["position"] == {"x": 50, "y": 300}

    def test_with_position_copies(self) -> None:
        node = Node(id="a")
        moved = node.with_position(1, 2)
        assert node.position is None
        assert (moved.position.x, moved.position.y) == (1, 2)

    def test_edge(self) -> None:
        record = Edge(id="e1", source="a", target="b").to_render_dict()
        assert record == {
            "id": "e1",
            "source": "a",
            "target": "b",
            "sourceHandle": None,
            "targetHandle": None,
            "style": {"stroke": "#666", "strokeWidth": 1},
        }

    def test_generated_edge_id(self) -> None:
        edge = Edge(source="a", target="b")
        assert edge.id.startswith("e")
        assert len(edge.id) == 9

    def test_empty_graph(self) -> None:
        assert Graph().nodes == []
