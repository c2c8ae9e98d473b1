"""Settings API routes. Backend maintains settings.json; the layout section configures the engine."""

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from db import get_layout_config, get_settings, save_layout_config
from layout.config import LayoutConfig

from .. import state as api_state

router = APIRouter()


@router.get("")
async def get_settings_route():
    """Return settings.json contents plus the resolved layout config."""
    settings = await get_settings()
    config = await get_layout_config()
    return {"settings": settings, "layout": config.model_dump(by_alias=True)}


@router.post("")
async def save_settings_route(body: dict = Body(...)):
    """Validate and persist layout settings, then apply them to the running engine."""
    raw = body.get("layout", body)
    try:
        config = LayoutConfig.model_validate(raw)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    result = await save_layout_config(config)
    api_state.get_engine().configure(config)
    return result
