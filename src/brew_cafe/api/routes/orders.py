from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import get_current_user, get_order_events, require_admin
from brew_cafe.crud.order import (
    advance_order_status,
    delete_order,
    get_display_orders,
    get_order_by_id,
    get_orders,
    get_orders_for_user,
    get_orders_summary_stats,
    get_top_menu_items,
)
from brew_cafe.db.deps import get_async_session
from brew_cafe.models import OrderStatusEnum
from brew_cafe.schemas.order import MyOrdersResponse, OrderRead, StatusAdvanceResponse
from brew_cafe.services.identity import AuthenticatedUser
from brew_cafe.services.order_status import TERMINAL_STATUSES
from brew_cafe.services.realtime import OrderEventBroker


router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin", tags=["admin orders"], dependencies=[Depends(require_admin)])


@router.get("/mine", response_model=MyOrdersResponse)
async def list_my_orders(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Заказы текущего пользователя: активные и завершённые.
    """
    orders = [OrderRead.from_orm_with_name(o) for o in await get_orders_for_user(db, user.id)]
    terminal = {s.value for s in TERMINAL_STATUSES}
    return MyOrdersResponse(
        active=[o for o in orders if o.status not in terminal],
        past=[o for o in orders if o.status in terminal],
    )


@router.get("/display", response_model=List[OrderRead])
async def list_display_orders(db: AsyncSession = Depends(get_async_session)):
    """
    Экран на кухне: заказы в статусах preparing и ready.
    """
    return [OrderRead.from_orm_with_name(o) for o in await get_display_orders(db)]


@router.get("/{order_id}", response_model=OrderRead)
async def get_my_order(
    order_id: int = Path(..., description="ID заказа"),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Подтверждение заказа для клиента. Чужие заказы не видны.
    """
    order = await get_order_by_id(db, order_id)
    if not order or order.user_id != user.id:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderRead.from_orm_with_name(order)


@admin_router.get("/orders/", response_model=List[OrderRead])
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Фильтр по статусу"),
    date_from: Optional[datetime] = Query(None, description="Начальная дата"),
    date_to: Optional[datetime] = Query(None, description="Конечная дата"),
    limit: Optional[int] = Query(None, ge=1, description="Количество записей для вывода"),
    offset: Optional[int] = Query(None, ge=0, description="Смещение для пагинации"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает список заказов.
    Поддерживает фильтрацию по статусу и диапазону дат и пагинацию.
    """
    orders = await get_orders(
        db, status=status, date_from=date_from, date_to=date_to, limit=limit, offset=offset
    )
    return [OrderRead.from_orm_with_name(o) for o in orders]


@admin_router.get("/orders/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: int = Path(..., description="ID заказа"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Возвращает детализацию заказа по id.
    """
    order = await get_order_by_id(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderRead.from_orm_with_name(order)


@admin_router.post("/orders/{order_id}/advance", response_model=StatusAdvanceResponse)
async def advance_order_endpoint(
    order_id: int,
    db: AsyncSession = Depends(get_async_session),
    events: OrderEventBroker = Depends(get_order_events),
):
    """
    Переводит заказ на следующий статус: pending -> preparing -> ready -> served.
    Для served ничего не меняет.
    """
    try:
        result = await advance_order_status(db, order_id)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not result:
        raise HTTPException(status_code=404, detail="Order not found")

    order, previous, changed = result
    if changed:
        await events.publish("UPDATE", order.id)

    return StatusAdvanceResponse(
        order=OrderRead.from_orm_with_name(order),
        previous_status=previous.value,
        changed=changed,
    )


@admin_router.delete("/orders/{order_id}", status_code=204)
async def remove_order(
    order_id: int,
    session: AsyncSession = Depends(get_async_session),
    events: OrderEventBroker = Depends(get_order_events),
):
    """
    Удаляет заказ вместе с позициями.
    """
    deleted = await delete_order(session, order_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Order not found")
    await events.publish("DELETE", order_id)


@admin_router.get("/stats/summary")
async def get_orders_summary(
    date_from: Optional[datetime] = Query(None, description="Начальная дата (ISO)"),
    date_to: Optional[datetime] = Query(None, description="Конечная дата (ISO)"),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Общая статистика по заказам:
    - количество заказов
    - общая выручка
    - средний чек
    - уникальные клиенты
    - количество заказов по статусам
    """
    return await get_orders_summary_stats(db, date_from, date_to)


@admin_router.get("/stats/top-items")
async def get_top_items(
    limit: int = Query(5, ge=1),
    db: AsyncSession = Depends(get_async_session)
):
    """
    Топ самых популярных блюд (по количеству заказанных порций).
    """
    items = await get_top_menu_items(db, limit)
    return {"top_items": items}
