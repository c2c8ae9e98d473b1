"""
API module - routes and schemas.
Routes are split by domain: tree, interaction, layouts, settings.
"""

from .routes import register_routes
from .state import init_api_state

__all__ = ["init_api_state", "register_routes"]
