"""
Change notifications for open diagram surfaces.

The backend never pushes graph data over the socket. A surface receives a
small ``graph_updated`` event carrying the load status and refetches
``GET /api/graph`` itself.
"""
import asyncio
import json
import logging
from typing import List, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Tracks the diagram surfaces subscribed to ``/ws``."""

    def __init__(self):
        self._surfaces: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        async with self._lock:
            self._surfaces.add(websocket)
        logger.info("Diagram surface subscribed (%d open)", len(self._surfaces))

    async def disconnect(self, websocket: WebSocket):
        """Forget a surface; unknown sockets are ignored."""
        async with self._lock:
            self._surfaces.discard(websocket)
        logger.info("Diagram surface left (%d open)", len(self._surfaces))

    async def _send_all(self, payload: str) -> List[WebSocket]:
        async with self._lock:
            surfaces = list(self._surfaces)

        dead = []
        for websocket in surfaces:
            try:
                await websocket.send_text(payload)
            except Exception as e:
                logger.debug("Surface stopped accepting events: %s", e)
                dead.append(websocket)
        return dead

    async def broadcast(self, event: dict):
        """Send one event to every surface, dropping any whose send fails."""
        if not self._surfaces:
            return

        dead = await self._send_all(json.dumps(event))
        if dead:
            async with self._lock:
                self._surfaces.difference_update(dead)

    async def notify_graph_updated(self, status: str):
        """Emit ``graph_updated`` after a load or an interactive edit.

        ``status`` is the graph's load state, so a surface that opened while
        the graph was still loading learns when it becomes ``loaded`` or
        ``failed``.
        """
        await self.broadcast({"type": "graph_updated", "status": status})

    @property
    def connection_count(self) -> int:
        return len(self._surfaces)
