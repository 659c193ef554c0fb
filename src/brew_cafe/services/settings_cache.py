import asyncio
import time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.crud.settings import get_settings_row, save_settings
from brew_cafe.schemas.catalog import SettingsRead, SettingsUpdate


class SettingsCache:
    """
    Кэш настроек кафе с чтением из базы при промахе.
    Если строки ещё нет, отдаёт значения по умолчанию с configured=False.
    Значение живёт ttl секунд; другие воркеры сбрасывают его через
    канал cafe_settings (см. OrderEventBroker).
    """

    def __init__(self, default_name: str, ttl: Optional[float] = 30.0):
        self.default_name = default_name
        self.ttl = ttl
        self._value: Optional[SettingsRead] = None
        self._loaded_at = 0.0
        self._lock = asyncio.Lock()

    def defaults(self) -> SettingsRead:
        return SettingsRead(cafe_name=self.default_name, logo_url="", configured=False)

    def _fresh(self) -> bool:
        if self._value is None:
            return False
        return self.ttl is None or time.monotonic() - self._loaded_at < self.ttl

    async def get(self, db: AsyncSession) -> SettingsRead:
        if self._fresh():
            return self._value
        async with self._lock:
            if not self._fresh():
                row = await get_settings_row(db)
                self._store(self._to_read(row) if row else self.defaults())
        return self._value

    async def save(self, db: AsyncSession, settings_in: SettingsUpdate) -> SettingsRead:
        row = await save_settings(db, settings_in)
        return self._store(self._to_read(row))

    def invalidate(self, payload: Optional[dict] = None) -> None:
        self._value = None

    def _store(self, value: SettingsRead) -> SettingsRead:
        self._value = value
        self._loaded_at = time.monotonic()
        return value

    def _to_read(self, row) -> SettingsRead:
        return SettingsRead(
            id=row.id,
            cafe_name=row.cafe_name or self.default_name,
            logo_url=row.logo_url or "",
            configured=True,
            updated_at=row.updated_at,
        )
