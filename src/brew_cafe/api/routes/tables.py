from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import require_admin
from brew_cafe.crud.table import (
    create_table,
    delete_table,
    list_tables,
    toggle_table_availability,
    update_table,
)
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.catalog import TableCreate, TableRead, TableUpdate

router = APIRouter(prefix="/tables", tags=["tables"])
admin_router = APIRouter(prefix="/admin/tables", tags=["admin tables"], dependencies=[Depends(require_admin)])


@router.get("/", response_model=List[TableRead])
async def list_tables_endpoint(db: AsyncSession = Depends(get_async_session)):
    """
    Столы по номеру. Доступность только подсказка, стол не бронируется.
    """
    return await list_tables(db)


@admin_router.post("/", response_model=TableRead, status_code=201)
async def create_table_endpoint(table_in: TableCreate, db: AsyncSession = Depends(get_async_session)):
    try:
        return await create_table(db, table_in)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@admin_router.patch("/{table_id}", response_model=TableRead)
async def update_table_endpoint(
    table_id: int,
    table_in: TableUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    try:
        table = await update_table(db, table_id, table_in)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    return table


@admin_router.post("/{table_id}/toggle", response_model=TableRead)
async def toggle_table_endpoint(table_id: int, db: AsyncSession = Depends(get_async_session)):
    table = await toggle_table_availability(db, table_id)
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    return table


@admin_router.delete("/{table_id}", status_code=204)
async def delete_table_endpoint(table_id: int, db: AsyncSession = Depends(get_async_session)):
    if not await delete_table(db, table_id):
        raise HTTPException(status_code=404, detail="Table not found")
