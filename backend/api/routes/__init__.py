"""API route modules."""

from fastapi import FastAPI

from engine import LayoutEngine

from . import interaction, layouts, settings, tree
from ..state import init_api_state


def register_routes(app: FastAPI, sio, engine: LayoutEngine):
    """Register all API routers. Call after app, sio, engine are created."""
    init_api_state(sio, engine)

    app.include_router(tree.router, prefix="/api/tree", tags=["tree"])
    app.include_router(interaction.router, prefix="/api/interaction", tags=["interaction"])
    app.include_router(layouts.router, prefix="/api/layouts", tags=["layouts"])
    app.include_router(settings.router, prefix="/api/settings", tags=["settings"])
