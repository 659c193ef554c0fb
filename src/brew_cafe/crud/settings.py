from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.models import CafeSettings
from brew_cafe.schemas.catalog import SettingsUpdate


async def get_settings_row(db: AsyncSession) -> Optional[CafeSettings]:
    result = await db.execute(select(CafeSettings).order_by(CafeSettings.id).limit(1))
    return result.scalars().first()


async def save_settings(db: AsyncSession, settings_in: SettingsUpdate) -> CafeSettings:
    """
    Обновляет единственную строку настроек, при первом сохранении создаёт её.
    """
    row = await get_settings_row(db)
    if row is None:
        row = CafeSettings(cafe_name=settings_in.cafe_name, logo_url=settings_in.logo_url)
        db.add(row)
    else:
        row.cafe_name = settings_in.cafe_name
        row.logo_url = settings_in.logo_url
    await db.commit()
    await db.refresh(row)
    return row
