"""
Graph Manager - Load orchestration and interactive state for the tree view.

This module implements:
- A single load per process: fetch, decode, build, lay out
- The loading / loaded / failed state shown to the diagram surface
- O(1) node/edge lookups via index dictionaries
- Interactive mutations (drag a node, draw or remove a connection)
  that update state directly without re-running layout
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import httpx

from treeview_core.description import (
    DescriptionError,
    DescriptionUnavailableError,
    GraphDescription,
    load_description,
    parse_description,
)
from treeview_core.layout import LayoutConfig, TreeLayout, layout_tree
from treeview_core.models import Edge, Graph, Node, build_graph
from treeview_core.validation import IssueSeverity, ValidationIssue, validate_graph

from .config import DEFAULT_VIEWPORT

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    """Lifecycle of the one graph load."""
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class GraphNotLoadedError(RuntimeError):
    """A mutation was attempted before the graph finished loading."""


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class GraphManager:
    """
    Owns the rendered node and edge sequences.

    The graph is loaded exactly once. Layout runs inside load() and the
    results replace the (empty) sequences in one step, so readers never
    see a half-positioned graph. After that, only user mutations change
    state, and they never trigger a new layout pass.
    """

    def __init__(
        self,
        layout_config: Optional[LayoutConfig] = None,
        title: str = "",
        viewport: Optional[dict] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._layout_config = layout_config or LayoutConfig()
        self._title = title
        self._viewport = dict(viewport or DEFAULT_VIEWPORT)
        self._http_transport = http_transport

        self._state = LoadState.LOADING
        self._load_attempted = False
        self._source: Optional[str] = None
        self._graph = Graph()            # Everything the description declared
        self._layout = TreeLayout()
        self._nodes: list[Node] = []     # Render set: positioned nodes only
        self._edges: list[Edge] = []
        self._on_change_callbacks: list[Callable] = []

        # O(1) lookup indexes
        self._node_index: dict[str, Node] = {}   # node_id -> Node
        self._edge_index: dict[str, Edge] = {}   # edge_id -> Edge

    # --- Index Management ---

    def _rebuild_indexes(self):
        """Rebuild all indexes from the current render set."""
        self._node_index = {node.id: node for node in self._nodes}
        self._edge_index = {edge.id: edge for edge in self._edges}

    # --- Properties ---

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def nodes(self) -> list[Node]:
        return self._nodes

    @property
    def edges(self) -> list[Edge]:
        return self._edges

    @property
    def layout(self) -> TreeLayout:
        return self._layout

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for graph changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    # --- Loading ---

    async def _fetch(self, url: str) -> GraphDescription:
        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._http_transport) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise DescriptionUnavailableError(f"Cannot fetch description {url}: {e}") from e
        return parse_description(response.text)

    async def load(self, source: str | Path) -> LoadState:
        """
        Load, build and lay out the graph. Only one attempt is allowed.

        A description that cannot be read or decoded leaves the graph empty
        and the state FAILED; the error is logged, not raised.

        Args:
            source: Path to a YAML file, or an http(s) URL

        Returns:
            The resulting load state

        Raises:
            RuntimeError: if load() has already been called
        """
        if self._load_attempted:
            raise RuntimeError("Graph load was already attempted; reloading is not supported")
        self._load_attempted = True
        self._source = str(source)

        logger.info("Loading graph description from %s", self._source)
        try:
            if _is_url(self._source):
                description = await self._fetch(self._source)
            else:
                description = load_description(self._source)
        except DescriptionError as e:
            logger.error("Error loading graph data: %s", e)
            self._state = LoadState.FAILED
            self._notify_change()
            return self._state

        self._apply_description(description)
        return self._state

    def _apply_description(self, description: GraphDescription):
        """Build, check and lay out a decoded description, then publish it."""
        graph = build_graph(description)

        for issue in validate_graph(graph, self._layout_config.root_id):
            if issue.severity == IssueSeverity.INFO:
                logger.info("Graph check: %s", issue.message)
            else:
                logger.warning("Graph check: %s", issue.message)

        result = layout_tree(graph.nodes, graph.edges, self._layout_config)

        self._graph = graph
        self._layout = result
        self._nodes = result.nodes
        self._edges = list(graph.edges)
        self._rebuild_indexes()
        self._state = LoadState.LOADED

        logger.info(
            "Graph loaded: %d of %d nodes positioned, %d edges",
            len(self._nodes), len(graph.nodes), len(self._edges)
        )
        self._notify_change()

    def _require_loaded(self):
        if self._state != LoadState.LOADED:
            raise GraphNotLoadedError(f"Graph is not loaded (state: {self._state.value})")

    # --- State ---

    def get_state(self) -> dict:
        """Get the full state handed to the diagram surface."""
        return {
            "status": self._state.value,
            "title": self._title,
            "viewport": dict(self._viewport),
            "root_id": self._layout.root_id,
            "unreached": list(self._layout.unreached),
            "nodes": [n.to_render_dict() for n in self._nodes],
            "edges": [e.to_render_dict() for e in self._edges],
        }

    def issues(self) -> list[ValidationIssue]:
        """Validation issues for the graph as declared."""
        return validate_graph(self._graph, self._layout_config.root_id)

    # --- Node Operations ---

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a rendered node by ID (O(1) lookup)."""
        return self._node_index.get(node_id)

    def move_node(self, node_id: str, x: float, y: float) -> Optional[Node]:
        """Move a node, e.g. after a drag. Layout is not re-run."""
        self._require_loaded()

        node = self._node_index.get(node_id)
        if node is None:
            return None

        moved = node.with_position(x, y)
        self._nodes = [moved if n.id == node_id else n for n in self._nodes]
        self._node_index[node_id] = moved
        logger.debug("Moved node %s to (%s, %s)", node_id, x, y)
        self._notify_change()
        return moved

    # --- Edge Operations ---

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(1) lookup)."""
        return self._edge_index.get(edge_id)

    def add_edge(
        self,
        source: str,
        target: str,
        edge_id: Optional[str] = None,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None
    ) -> Edge:
        """
        Add a user-drawn connection between two rendered nodes.

        The new edge is rendered but does not affect node positions.
        """
        self._require_loaded()

        if not source or not target:
            raise ValueError("Both source and target nodes must be specified")
        if source not in self._node_index:
            raise ValueError(f"Source node not found: {source}")
        if target not in self._node_index:
            raise ValueError(f"Target node not found: {target}")
        if edge_id is not None and edge_id in self._edge_index:
            raise ValueError(f"Edge already exists: {edge_id}")

        kwargs = {"id": edge_id} if edge_id is not None else {}
        edge = Edge(
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
            **kwargs
        )
        self._edges = self._edges + [edge]
        self._edge_index[edge.id] = edge
        logger.debug("Added edge %s: %s -> %s", edge.id, source, target)
        self._notify_change()
        return edge

    def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge."""
        self._require_loaded()

        if edge_id not in self._edge_index:
            return False

        self._edges = [e for e in self._edges if e.id != edge_id]
        del self._edge_index[edge_id]
        logger.debug("Deleted edge %s", edge_id)
        self._notify_change()
        return True
