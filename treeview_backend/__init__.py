"""Tree View Backend - load orchestration and HTTP/WebSocket API."""

from .config import Settings
from .graph_manager import GraphManager, GraphNotLoadedError, LoadState

__all__ = ["Settings", "GraphManager", "GraphNotLoadedError", "LoadState"]
