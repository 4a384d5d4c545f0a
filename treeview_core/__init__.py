"""
Tree View Core - Graph description decoding, models, layout and validation.

This module provides the functionality shared by the backend API and the
command line, ensuring a single source of truth for graph logic.
"""

from .description import (
    # Errors
    DescriptionError,
    DescriptionUnavailableError,
    MalformedDescriptionError,
    # Records
    NodeRecord,
    EdgeRecord,
    GraphDescription,
    # Decoding
    parse_description,
    load_description,
)

from .models import (
    NodeKind,
    Position,
    Node,
    EdgeStyle,
    Edge,
    Graph,
    build_graph,
)

from .layout import (
    HORIZONTAL_SPACING,
    VERTICAL_SPACING,
    UnreachedPolicy,
    LayoutConfig,
    TreeLayout,
    build_children_index,
    find_root,
    layout_tree,
    horizontal_tree_layout,
)

from .validation import validate_graph, validation_summary, ValidationIssue, IssueSeverity

__all__ = [
    # Description
    "DescriptionError",
    "DescriptionUnavailableError",
    "MalformedDescriptionError",
    "NodeRecord",
    "EdgeRecord",
    "GraphDescription",
    "parse_description",
    "load_description",
    # Models
    "NodeKind",
    "Position",
    "Node",
    "EdgeStyle",
    "Edge",
    "Graph",
    "build_graph",
    # Layout
    "HORIZONTAL_SPACING",
    "VERTICAL_SPACING",
    "UnreachedPolicy",
    "LayoutConfig",
    "TreeLayout",
    "build_children_index",
    "find_root",
    "layout_tree",
    "horizontal_tree_layout",
    # Validation
    "validate_graph",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
]
