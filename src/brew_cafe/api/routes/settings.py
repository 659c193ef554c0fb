from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import get_order_events, get_settings_cache, require_admin
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.catalog import SettingsRead, SettingsUpdate
from brew_cafe.services.realtime import SETTINGS_CHANNEL, OrderEventBroker
from brew_cafe.services.settings_cache import SettingsCache

router = APIRouter(tags=["settings"])


@router.get("/settings", response_model=SettingsRead)
async def read_settings(
    db: AsyncSession = Depends(get_async_session),
    cache: SettingsCache = Depends(get_settings_cache),
):
    """
    Название и логотип кафе. Пока настройки не сохранены, отдаются значения по умолчанию.
    """
    return await cache.get(db)


@router.put("/admin/settings", response_model=SettingsRead, dependencies=[Depends(require_admin)])
async def save_settings_endpoint(
    settings_in: SettingsUpdate,
    db: AsyncSession = Depends(get_async_session),
    cache: SettingsCache = Depends(get_settings_cache),
    events: OrderEventBroker = Depends(get_order_events),
):
    """
    Сохраняет настройки; кэши остальных воркеров сбрасываются через канал cafe_settings.
    """
    saved = await cache.save(db, settings_in)
    await events.broadcast(SETTINGS_CHANNEL, {"event": "UPDATE", "table": SETTINGS_CHANNEL})
    return saved
