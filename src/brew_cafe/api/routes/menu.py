from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import require_admin
from brew_cafe.crud.menu import (
    create_category,
    create_menu_item,
    delete_category,
    delete_menu_item,
    get_menu,
    toggle_menu_item_availability,
    update_category,
    update_menu_item,
)
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.catalog import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    CategoryWithItems,
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
)

router = APIRouter(prefix="/menu", tags=["menu"])
admin_router = APIRouter(prefix="/admin/menu", tags=["admin menu"], dependencies=[Depends(require_admin)])


@router.get("/", response_model=List[CategoryWithItems])
async def read_menu(db: AsyncSession = Depends(get_async_session)):
    """
    Меню для клиента: категории по порядку, только доступные позиции.
    """
    return await get_menu(db, available_only=True)


@admin_router.get("/", response_model=List[CategoryWithItems])
async def read_full_menu(db: AsyncSession = Depends(get_async_session)):
    return await get_menu(db, available_only=False)


@admin_router.post("/categories", response_model=CategoryRead, status_code=201)
async def create_category_endpoint(category_in: CategoryCreate, db: AsyncSession = Depends(get_async_session)):
    return await create_category(db, category_in)


@admin_router.patch("/categories/{category_id}", response_model=CategoryRead)
async def update_category_endpoint(
    category_id: int,
    category_in: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    category = await update_category(db, category_id, category_in)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@admin_router.delete("/categories/{category_id}", status_code=204)
async def delete_category_endpoint(category_id: int, db: AsyncSession = Depends(get_async_session)):
    """
    Удаляет категорию и все её позиции.
    """
    try:
        deleted = await delete_category(db, category_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")


@admin_router.post("/items", response_model=MenuItemRead, status_code=201)
async def create_item_endpoint(item_in: MenuItemCreate, db: AsyncSession = Depends(get_async_session)):
    try:
        return await create_menu_item(db, item_in)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@admin_router.patch("/items/{item_id}", response_model=MenuItemRead)
async def update_item_endpoint(
    item_id: int,
    item_in: MenuItemUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    try:
        item = await update_menu_item(db, item_id, item_in)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@admin_router.post("/items/{item_id}/toggle", response_model=MenuItemRead)
async def toggle_item_endpoint(item_id: int, db: AsyncSession = Depends(get_async_session)):
    item = await toggle_menu_item_availability(db, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@admin_router.delete("/items/{item_id}", status_code=204)
async def delete_item_endpoint(item_id: int, db: AsyncSession = Depends(get_async_session)):
    try:
        deleted = await delete_menu_item(db, item_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Menu item not found")
