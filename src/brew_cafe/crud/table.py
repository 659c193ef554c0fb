from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.models import CafeTable
from brew_cafe.schemas.catalog import TableCreate, TableUpdate


async def list_tables(db: AsyncSession) -> List[CafeTable]:
    result = await db.execute(select(CafeTable).order_by(CafeTable.table_number))
    return result.scalars().all()


async def get_table(db: AsyncSession, table_id: int) -> Optional[CafeTable]:
    return await db.get(CafeTable, table_id)


async def create_table(db: AsyncSession, table_in: TableCreate) -> CafeTable:
    table = CafeTable(**table_in.model_dump())
    db.add(table)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError(f"Table {table_in.table_number} already exists")
    await db.refresh(table)
    return table


async def update_table(db: AsyncSession, table_id: int, table_in: TableUpdate) -> Optional[CafeTable]:
    table = await db.get(CafeTable, table_id)
    if not table:
        return None
    for key, value in table_in.model_dump(exclude_unset=True).items():
        setattr(table, key, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError(f"Table {table_in.table_number} already exists")
    await db.refresh(table)
    return table


async def toggle_table_availability(db: AsyncSession, table_id: int) -> Optional[CafeTable]:
    table = await db.get(CafeTable, table_id)
    if not table:
        return None
    table.is_available = not table.is_available
    await db.commit()
    await db.refresh(table)
    return table


async def delete_table(db: AsyncSession, table_id: int) -> bool:
    table = await db.get(CafeTable, table_id)
    if not table:
        return False
    await db.delete(table)
    await db.commit()
    return True
