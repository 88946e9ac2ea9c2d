"""
NeuroGraph Backend - FastAPI Application

This is the main entry point for the diagram editor backend.
It provides:
- REST API for the canvas session (nodes/edges, selection, alignment, export)
- Raw input event endpoints that drive the interaction state machine
- WebSocket endpoint for real-time updates
- CORS configuration for local frontend development
"""
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Response, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from neurograph import (
    AlignDirective,
    CreateEdgeRequest,
    CreateNodeRequest,
    KeyAction,
    KeyEvent,
    NodeKind,
    OpSymbol,
    PointerAction,
    PointerEvent,
    TargetKind,
    UpdateEdgeRequest,
    UpdateNodeRequest,
)
from neurograph.config import DEFAULT_VIEWPORT

from .session_manager import session_manager
from .websocket_manager import ws_manager

logger = logging.getLogger(__name__)

HOST = os.environ.get("NEUROGRAPH_HOST", "127.0.0.1")
PORT = int(os.environ.get("NEUROGRAPH_PORT", "8765"))
CORS_ORIGINS = os.environ.get(
    "NEUROGRAPH_CORS_ORIGINS",
    "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"
).split(",")


# --- Async change notification ---
# Bridge between sync session callbacks and async WebSocket broadcasts

# Created per lifespan so it binds to the running event loop
_change_event: Optional[asyncio.Event] = None


def on_session_change():
    """Callback for session changes - sets event for async handler."""
    if _change_event is not None:
        _change_event.set()


async def change_broadcaster(event: asyncio.Event):
    """Background task that broadcasts changes to WebSocket clients."""
    while True:
        await event.wait()
        event.clear()
        await ws_manager.notify_diagram_updated()


session_manager.on_change(on_session_change)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup/shutdown tasks."""
    global _change_event
    _change_event = asyncio.Event()

    # Start background broadcaster
    broadcaster_task = asyncio.create_task(change_broadcaster(_change_event))
    logger.info("NeuroGraph backend ready")

    yield

    # Cleanup
    _change_event = None
    broadcaster_task.cancel()
    try:
        await broadcaster_task
    except asyncio.CancelledError:
        pass


# --- FastAPI App ---

app = FastAPI(
    title="NeuroGraph API",
    description="Backend API for the neural network architecture diagram editor",
    version="1.0.0",
    lifespan=lifespan
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "connections": ws_manager.connection_count}


# --- Session State ---

@app.get("/api/diagram")
async def get_diagram():
    """Get the current session state."""
    return session_manager.get_state()


@app.post("/api/diagram/new")
async def new_diagram(sample: bool = Query(default=True)):
    """Start a new session, with the example diagram unless sample=false."""
    diagram = session_manager.new_session(sample=sample)
    return {"success": True, "diagram": diagram.to_json_dict()}


@app.post("/api/diagram/clear")
async def clear_diagram():
    """Remove every node and edge."""
    diagram = session_manager.clear()
    return {"success": True, "diagram": diagram.to_json_dict()}


# --- Node Operations ---

@app.post("/api/nodes")
async def create_node(
    request: CreateNodeRequest,
    viewport_width: float = Query(default=DEFAULT_VIEWPORT[0], gt=0),
    viewport_height: float = Query(default=DEFAULT_VIEWPORT[1], gt=0)
):
    """Create a new node (placed at the viewport center unless x/y are given)."""
    node = session_manager.add_node(request, viewport_size=(viewport_width, viewport_height))
    return {"success": True, "node": node.model_dump(mode="json")}


@app.get("/api/nodes/{node_id}")
async def get_node(node_id: str):
    """Get a specific node."""
    node = session_manager.get_node(node_id)
    if node:
        return {"success": True, "node": node.model_dump(mode="json")}
    raise HTTPException(status_code=404, detail="Node not found")


@app.patch("/api/nodes/{node_id}")
async def update_node(node_id: str, request: UpdateNodeRequest):
    """Update a node."""
    node = session_manager.update_node(node_id, request.changes())
    if node:
        return {"success": True, "node": node.model_dump(mode="json")}
    raise HTTPException(status_code=404, detail="Node not found")


@app.delete("/api/nodes/{node_id}")
async def delete_node(node_id: str):
    """Delete a node and its connected edges."""
    if session_manager.delete_node(node_id):
        return {"success": True}
    raise HTTPException(status_code=404, detail="Node not found")


# --- Edge Operations ---

@app.post("/api/edges")
async def create_edge(request: CreateEdgeRequest):
    """Create a new edge (endpoints need not exist yet)."""
    edge = session_manager.add_edge(request)
    return {"success": True, "edge": edge.to_json_dict()}


@app.get("/api/edges/{edge_id}")
async def get_edge(edge_id: str):
    """Get a specific edge."""
    edge = session_manager.get_edge(edge_id)
    if edge:
        return {"success": True, "edge": edge.to_json_dict()}
    raise HTTPException(status_code=404, detail="Edge not found")


@app.patch("/api/edges/{edge_id}")
async def update_edge(edge_id: str, request: UpdateEdgeRequest):
    """Update an edge."""
    edge = session_manager.update_edge(edge_id, request.changes())
    if edge:
        return {"success": True, "edge": edge.to_json_dict()}
    raise HTTPException(status_code=404, detail="Edge not found")


@app.delete("/api/edges/{edge_id}")
async def delete_edge(edge_id: str):
    """Delete an edge."""
    if session_manager.delete_edge(edge_id):
        return {"success": True}
    raise HTTPException(status_code=404, detail="Edge not found")


# --- Selection ---

class SelectionRequest(BaseModel):
    node_ids: list[str] = Field(default_factory=list)
    edge_id: Optional[str] = None


@app.post("/api/selection")
async def set_selection(request: SelectionRequest):
    """Select nodes, or a single edge."""
    selection = session_manager.select(node_ids=request.node_ids, edge_id=request.edge_id)
    return {"success": True, "selection": selection}


@app.delete("/api/selection")
async def clear_selection():
    """Clear the selection."""
    return {"success": True, "selection": session_manager.clear_selection()}


# --- Layout ---

class AlignRequest(BaseModel):
    directive: AlignDirective
    node_ids: Optional[list[str]] = None  # replaces the selection when given


@app.post("/api/layout/align")
async def align_nodes(request: AlignRequest):
    """Align or distribute the selected nodes."""
    changed = session_manager.align(request.directive, node_ids=request.node_ids)
    return {"success": True, "changed": changed}


# --- Input Events ---

class PointerEventRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    action: PointerAction
    x: float
    y: float
    button: int = 0  # 0 = left, 1 = middle
    target: TargetKind = TargetKind.CANVAS
    target_id: Optional[str] = None
    alt: bool = False


class KeyEventRequest(BaseModel):
    action: KeyAction
    key: str
    in_text_input: bool = False


@app.post("/api/events/pointer")
async def pointer_event(request: PointerEventRequest):
    """Forward a raw pointer event (screen coordinates) to the session."""
    return session_manager.dispatch(PointerEvent(**request.model_dump()))


@app.post("/api/events/key")
async def key_event(request: KeyEventRequest):
    """Forward a raw keyboard event to the session."""
    return session_manager.dispatch(KeyEvent(**request.model_dump()))


class ZoomRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    factor: float = Field(gt=0)
    x: float = 0
    y: float = 0


@app.post("/api/view/zoom")
async def zoom_view(request: ZoomRequest):
    """Zoom around a screen point."""
    return {"success": True, "view": session_manager.zoom(request.factor, request.x, request.y)}


# --- Rendering & Export ---

@app.get("/api/scene")
async def get_scene():
    """Render model for the canvas: visible nodes and edges."""
    return session_manager.scene()


@app.get("/api/export/svg")
async def export_svg():
    """Export the diagram as a standalone SVG file."""
    document = session_manager.export()
    if document is None:
        raise HTTPException(status_code=400, detail="Nothing to export: the diagram has no nodes")
    return Response(
        content=document.content,
        media_type="image/svg+xml",
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


# --- Analysis & Validation ---

@app.get("/api/diagram/validate")
async def validate_current_diagram():
    """
    Validate the current diagram for structural issues.

    Returns a list of issues (errors, warnings, info) and a summary.
    """
    issues, summary = session_manager.validate()
    return {"success": True, "issues": issues, "summary": summary}


# --- Enums for Frontend ---

@app.get("/api/enums/kinds")
async def get_kinds():
    """Get available node kinds."""
    return {"kinds": [k.value for k in NodeKind]}


@app.get("/api/enums/symbols")
async def get_symbols():
    """Get available operator symbols."""
    return {"symbols": {s.name: s.value for s in OpSymbol}}


@app.get("/api/enums/directives")
async def get_directives():
    """Get available alignment directives."""
    return {"directives": [d.value for d in AlignDirective]}


# --- WebSocket ---

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time updates.

    Clients connect here to receive diagram_updated events.
    """
    await ws_manager.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text('{"type": "pong"}')
    except WebSocketDisconnect:
        await ws_manager.disconnect(websocket)


@app.get("/")
async def root():
    """Placeholder page; the canvas frontend is served separately."""
    return HTMLResponse("<h1>NeuroGraph API</h1><p>See /docs for the REST API.</p>")


def run():
    """Run the backend with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("NEUROGRAPH_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=HOST, port=PORT)


# --- Run with uvicorn ---

if __name__ == "__main__":
    run()
