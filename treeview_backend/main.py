"""
Tree View Backend - FastAPI Application

This is the main entry point for the tree view backend.
It provides:
- The positioned graph for the diagram surface (loaded once at startup)
- Focus content for a single node
- Interactive mutations (move node, add/remove edge) without re-layout
- WebSocket endpoint for change notifications
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from treeview_core.validation import validation_summary

from .config import Settings
from .graph_manager import GraphManager, GraphNotLoadedError
from .websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)


class MoveNodeRequest(BaseModel):
    x: float
    y: float


class CreateEdgeRequest(BaseModel):
    source: str
    target: str
    id: Optional[str] = None
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None


def create_app(
    settings: Optional[Settings] = None,
    manager: Optional[GraphManager] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (read from the environment if omitted)
        manager: Graph manager to serve; a new one is built from settings
            if omitted. The lifespan loads it unless a load was already
            attempted.
    """
    settings = settings or Settings()
    if manager is None:
        manager = GraphManager(
            layout_config=settings.layout_config(),
            title=settings.title,
        )
    ws_manager = WebSocketManager()

    # --- Async change notification ---
    # Bridge between sync GraphManager callbacks and async WebSocket broadcasts

    change_event = asyncio.Event()

    async def change_broadcaster():
        """Background task that broadcasts changes to WebSocket clients."""
        while True:
            await change_event.wait()
            change_event.clear()
            await ws_manager.notify_graph_updated(manager.state.value)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan handler: start the broadcaster, then load the graph once."""
        manager.on_change(change_event.set)
        broadcaster_task = asyncio.create_task(change_broadcaster())

        if manager.source is None:
            await manager.load(settings.data_source)

        yield

        broadcaster_task.cancel()
        try:
            await broadcaster_task
        except asyncio.CancelledError:
            pass

    app = FastAPI(
        title="Tree View API",
        description="Positioned graph and interaction endpoints for the tree view",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.graph_manager = manager
    app.state.ws_manager = ws_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GraphNotLoadedError)
    async def not_loaded_handler(request: Request, exc: GraphNotLoadedError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "graph": manager.state.value,
            "connections": ws_manager.connection_count
        }

    # --- Graph State ---

    @app.get("/api/graph")
    async def get_graph():
        """Get the positioned graph."""
        return manager.get_state()

    @app.get("/api/graph/issues")
    async def get_issues():
        """Structural issues found in the loaded description."""
        issues = manager.issues()
        return {
            "issues": [i.to_dict() for i in issues],
            "summary": validation_summary(issues)
        }

    # --- Node Operations ---

    @app.get("/api/nodes/{node_id}")
    async def get_node(node_id: str):
        """Get a node's full content for focus presentation."""
        node = manager.get_node(node_id)
        if node:
            return {"success": True, "node": node.to_render_dict()}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.patch("/api/nodes/{node_id}/position")
    async def move_node(node_id: str, request: MoveNodeRequest):
        """Move a node (drag). Does not re-run layout."""
        node = manager.move_node(node_id, request.x, request.y)
        if node:
            return {"success": True, "node": node.to_render_dict()}
        raise HTTPException(status_code=404, detail="Node not found")

    # --- Edge Operations ---

    @app.post("/api/edges")
    async def create_edge(request: CreateEdgeRequest):
        """Create a user-drawn edge. Does not re-run layout."""
        try:
            edge = manager.add_edge(
                source=request.source,
                target=request.target,
                edge_id=request.id,
                source_handle=request.source_handle,
                target_handle=request.target_handle
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"success": True, "edge": edge.to_render_dict()}

    @app.delete("/api/edges/{edge_id}")
    async def delete_edge(edge_id: str):
        """Delete an edge."""
        if manager.delete_edge(edge_id):
            return {"success": True}
        raise HTTPException(status_code=404, detail="Edge not found")

    # --- WebSocket ---

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Push graph_updated events; answers ping with pong."""
        await ws_manager.connect(websocket)
        try:
            while True:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text('{"type": "pong"}')
        except WebSocketDisconnect:
            await ws_manager.disconnect(websocket)
        except Exception as e:
            logger.warning("WebSocket closed after error: %s", e)
            await ws_manager.disconnect(websocket)

    @app.get("/")
    async def index():
        """Placeholder page; the diagram surface is served separately."""
        return HTMLResponse("<h1>Tree View API</h1><p>See /api/graph.</p>")

    return app


# --- Run with uvicorn ---

if __name__ == "__main__":
    import uvicorn
    _settings = Settings()
    logging.basicConfig(level=_settings.log_level)
    uvicorn.run(create_app(_settings), host=_settings.host, port=_settings.port)
