"""
Folder Canvas Backend - FastAPI + Socket.io entry point.
Hosts the layout reconciliation engine and relays its events to the rendering client.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from api import register_routes
from db import get_layout_config
from engine import AsyncioScheduler, LayoutEngine

logger = logging.getLogger(__name__)

# Socket.io
sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")

# Single engine instance: owns tree, snapshot, manual placements and interaction state
engine = LayoutEngine(scheduler=AsyncioScheduler())


def _relay_event(event: str, payload: dict) -> None:
    """Engine events are synchronous; socket emits are scheduled on the running loop."""
    try:
        asyncio.get_running_loop().create_task(sio.emit(event, payload))
    except RuntimeError:
        logger.debug("No running loop, dropped %s event", event)


engine.events.subscribe_all(_relay_event)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = await get_layout_config()
    engine.configure(config)
    logger.info("Layout config loaded: direction=%s", config.direction)
    yield
    engine.close()


app = FastAPI(title="Folder Canvas Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Disable cache for static files (dev: always fetch latest)
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        path = request.url.path
        if path == "/" or path.endswith((".html", ".css", ".js")):
            for k, v in NO_CACHE_HEADERS.items():
                response.headers[k] = v
        return response


app.add_middleware(NoCacheMiddleware)

register_routes(app, sio, engine)

# Frontend static files - MUST come after all API routes
FRONTEND_DIR = Path(__file__).parent.parent / "frontend"
if FRONTEND_DIR.exists():
    app.mount("/", StaticFiles(directory=str(FRONTEND_DIR), html=True), name="static")


# Socket.io events
@sio.event
async def connect(sid, environ, auth):
    logger.info("Client connected: %s", sid)
    await sio.emit(
        "tree-state",
        {
            "nodes": engine.model.to_forest(),
            "visibleNodeIds": engine.model.visible_ids(),
            "state": engine.interaction_state.value,
            "viewport": engine.viewport.to_dict(),
        },
        to=sid,
    )


@sio.event
def disconnect(sid):
    logger.info("Client disconnected: %s", sid)


@sio.on("drag-begin")
async def on_drag_begin(sid, data):
    data = data or {}
    engine.begin_drag(data.get("nodeId"), data.get("selectedIds"))


@sio.on("drag-update")
async def on_drag_update(sid, data):
    data = data or {}
    try:
        engine.update_drag(data.get("nodeId"), data.get("position"))
    except ValueError as e:
        logger.warning("Invalid drag-update from %s: %s", sid, e)


@sio.on("drag-end")
async def on_drag_end(sid, data=None):
    engine.end_drag()


@sio.on("viewport-move")
async def on_viewport_move(sid, data):
    data = data or {}
    try:
        engine.move_viewport(data.get("x", 0), data.get("y", 0), data.get("zoom", 1))
    except (TypeError, ValueError) as e:
        logger.warning("Invalid viewport-move from %s: %s", sid, e)


# ASGI app for uvicorn (Socket.io + FastAPI)
asgi_app = socketio.ASGIApp(sio, app)
