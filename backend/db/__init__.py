"""
Database Module
File-based storage: db/layouts.json holds saved layouts, db/settings.json holds settings
(layout config under the "layout" key). Uses orjson for faster JSON parsing; writes are atomic.
"""

import asyncio
import re
import time
from pathlib import Path

import aiofiles
import json_repair
import orjson
from loguru import logger

from layout.config import LayoutConfig

DB_DIR = Path(__file__).parent
LAYOUTS_FILE = "layouts.json"
SETTINGS_FILE = "settings.json"

_layouts_lock = asyncio.Lock()


def _validate_layout_id(layout_id: str) -> None:
    """Reject path traversal and invalid layout_id. Only alphanumeric and underscore."""
    if not layout_id or not isinstance(layout_id, str):
        raise ValueError("layout_id must be a non-empty string")
    if not re.match(r"^[a-zA-Z0-9_]+$", layout_id):
        raise ValueError("layout_id must contain only letters, digits, and underscores")


async def _read_json(filename: str, default):
    """Read db/{filename}. Missing file -> default; corrupted JSON is repaired or yields default."""
    file_path = DB_DIR / filename
    try:
        async with aiofiles.open(file_path, "rb") as f:
            raw = await f.read()
    except FileNotFoundError:
        return default
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("Invalid JSON in {}: {}, attempting repair", file_path, e)
        try:
            data = json_repair.loads(raw.decode("utf-8", errors="replace"))
        except (ValueError, TypeError) as repair_error:
            logger.warning("Failed to repair {}: {}", file_path, repair_error)
            return default
    return data if isinstance(data, type(default)) else default


async def _write_json(filename: str, data) -> dict:
    """Atomic write: write to .tmp then rename to avoid partial/corrupt files on concurrent access."""
    DB_DIR.mkdir(parents=True, exist_ok=True)
    file_path = DB_DIR / filename
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    content = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")
    async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
        await f.write(content)
    tmp_path.replace(file_path)
    return {"success": True}


# ========== Saved layouts ==========


async def list_layouts() -> list:
    """All saved layouts, newest first."""
    layouts = await _read_json(LAYOUTS_FILE, [])
    layouts = [l for l in layouts if isinstance(l, dict) and l.get("id")]
    layouts.sort(key=lambda l: l.get("updatedAt") or 0, reverse=True)
    return layouts


async def get_layout(layout_id: str):
    """Get one saved layout. Returns dict or None."""
    _validate_layout_id(layout_id)
    for layout in await list_layouts():
        if layout["id"] == layout_id:
            return layout
    return None


async def create_layout(layout: dict) -> dict:
    """Store a layout produced by export_layout. Assigns id and timestamps."""
    if not isinstance(layout, dict) or not layout.get("name"):
        raise ValueError("layout must have a name")
    now = int(time.time() * 1000)
    stored = dict(layout)
    stored["id"] = f"layout_{now}"
    stored["createdAt"] = now
    stored["updatedAt"] = now
    async with _layouts_lock:
        layouts = await _read_json(LAYOUTS_FILE, [])
        existing = {l.get("id") for l in layouts if isinstance(l, dict)}
        while stored["id"] in existing:
            now += 1
            stored["id"] = f"layout_{now}"
        layouts.append(stored)
        await _write_json(LAYOUTS_FILE, layouts)
    logger.info("Saved layout {} ({})", stored["id"], stored["name"])
    return stored


async def delete_layout(layout_id: str) -> bool:
    """Remove a saved layout. Returns True if deleted."""
    _validate_layout_id(layout_id)
    async with _layouts_lock:
        layouts = await _read_json(LAYOUTS_FILE, [])
        kept = [l for l in layouts if not (isinstance(l, dict) and l.get("id") == layout_id)]
        if len(kept) == len(layouts):
            return False
        await _write_json(LAYOUTS_FILE, kept)
    return True


# ========== Settings ==========


async def get_settings() -> dict:
    """Get full settings from db/settings.json. For frontend and other modules."""
    return await _read_json(SETTINGS_FILE, {})


async def save_settings(settings: dict) -> dict:
    """Save settings to db/settings.json. Atomic write to avoid corruption."""
    return await _write_json(SETTINGS_FILE, settings or {})


async def get_layout_config() -> LayoutConfig:
    """Resolve LayoutConfig from settings["layout"]. Invalid values fall back to defaults."""
    raw = (await get_settings()).get("layout") or {}
    try:
        return LayoutConfig.model_validate(raw)
    except ValueError as e:
        logger.warning("Invalid layout settings, using defaults: {}", e)
        return LayoutConfig()


async def save_layout_config(config: LayoutConfig) -> dict:
    """Write config under settings["layout"], keeping other settings keys."""
    settings = await get_settings()
    settings["layout"] = config.model_dump(by_alias=True)
    await save_settings(settings)
    return {"success": True, "layout": settings["layout"]}
