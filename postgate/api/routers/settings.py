"""Settings API endpoints.

Writes are limited to the keys of ``SettingKey``.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from postgate.api.deps import get_settings_store
from postgate.api.schemas.common import success_body
from postgate.core.settings_store import SettingsStore

router = APIRouter(prefix="/settings", tags=["settings"])


def _entry(setting) -> dict:
    return {"key": setting.key, "value": setting.value}


@router.get("")
async def list_settings(store: SettingsStore = Depends(get_settings_store)):
    """All stored settings as a key/value map."""
    return success_body(store.all())


@router.put("")
async def update_settings(
    payload: Any = Body(...),
    store: SettingsStore = Depends(get_settings_store),
):
    """Update several settings at once; unknown keys are skipped."""
    data = store.bulk_update(payload)
    return success_body(data, message="Settings updated successfully")


@router.get("/{key}")
async def get_setting(key: str, store: SettingsStore = Depends(get_settings_store)):
    """Get a single setting."""
    return success_body(_entry(store.get_entry(key)))


@router.put("/{key}")
async def update_setting(
    key: str,
    payload: Any = Body(...),
    store: SettingsStore = Depends(get_settings_store),
):
    """Create or overwrite a single setting."""
    value = payload.get("value") if isinstance(payload, dict) else None
    setting = store.update(key, value)
    return success_body(_entry(setting), message="Setting updated successfully")
