from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from brew_cafe.models import Category, MenuItem
from brew_cafe.schemas.catalog import CategoryCreate, CategoryUpdate, MenuItemCreate, MenuItemUpdate


async def get_menu(db: AsyncSession, available_only: bool = True) -> List[dict]:
    """
    Категории по sort_order вместе с позициями.
    Для клиентского меню показываются только доступные позиции.
    """
    result = await db.execute(
        select(Category)
        .options(selectinload(Category.items))
        .order_by(Category.sort_order, Category.id)
    )
    categories = result.scalars().all()

    menu = []
    for category in categories:
        items = [i for i in category.items if i.available or not available_only]
        menu.append({
            "id": category.id,
            "name": category.name,
            "description": category.description,
            "sort_order": category.sort_order,
            "menu_items": items,
        })
    return menu


async def get_menu_items_by_ids(db: AsyncSession, ids: Iterable[int]) -> dict[int, MenuItem]:
    ids = set(ids)
    if not ids:
        return {}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(ids)))
    return {item.id: item for item in result.scalars().all()}


async def create_category(db: AsyncSession, category_in: CategoryCreate) -> Category:
    category = Category(**category_in.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def update_category(
    db: AsyncSession, category_id: int, category_in: CategoryUpdate
) -> Optional[Category]:
    category = await db.get(Category, category_id)
    if not category:
        return None
    for key, value in category_in.model_dump(exclude_unset=True).items():
        setattr(category, key, value)
    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: int) -> bool:
    """
    Удаляет категорию вместе с её позициями одной транзакцией.
    """
    result = await db.execute(
        select(Category)
        .where(Category.id == category_id)
        .options(selectinload(Category.items))
    )
    category = result.scalars().first()
    if not category:
        return False
    await db.delete(category)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError("Category has items that were already ordered; mark them unavailable instead")
    return True


async def create_menu_item(db: AsyncSession, item_in: MenuItemCreate) -> MenuItem:
    if not await db.get(Category, item_in.category_id):
        raise ValueError(f"Category with id={item_in.category_id} not found")
    item = MenuItem(**item_in.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def update_menu_item(
    db: AsyncSession, item_id: int, item_in: MenuItemUpdate
) -> Optional[MenuItem]:
    item = await db.get(MenuItem, item_id)
    if not item:
        return None

    update_data = item_in.model_dump(exclude_unset=True)
    if "category_id" in update_data and not await db.get(Category, update_data["category_id"]):
        raise ValueError(f"Category with id={update_data['category_id']} not found")

    for key, value in update_data.items():
        setattr(item, key, value)
    await db.commit()
    await db.refresh(item)
    return item


async def toggle_menu_item_availability(db: AsyncSession, item_id: int) -> Optional[MenuItem]:
    item = await db.get(MenuItem, item_id)
    if not item:
        return None
    item.available = not item.available
    await db.commit()
    await db.refresh(item)
    return item


async def delete_menu_item(db: AsyncSession, item_id: int) -> bool:
    item = await db.get(MenuItem, item_id)
    if not item:
        return False
    await db.delete(item)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError("Menu item was already ordered; mark it unavailable instead")
    return True
