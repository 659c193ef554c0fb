import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, func, update, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from brew_cafe.crud.coupon import redeem_coupon
from brew_cafe.errors import (
    CouponLimitReachedError,
    DuplicatePaymentError,
    OrderCommitError,
    PartialCommitError,
)
from brew_cafe.models import MenuItem, Order, OrderItem, OrderStatusEnum, PaymentStatusEnum
from brew_cafe.services.order_status import ACTIVE_STATUSES, STATUS_FLOW, next_status
from brew_cafe.services.pricing import CartLine, Pricing, money

logger = logging.getLogger(__name__)


def _with_details(stmt):
    return stmt.options(
        selectinload(Order.items).selectinload(OrderItem.menu_item),
        selectinload(Order.user),
        selectinload(Order.table),
    )


def format_order_number(order_id: int) -> str:
    return f"ORD-{order_id:06d}"


async def get_orders(
    db: AsyncSession,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Order]:
    """
    Возвращает список заказов с опциональной фильтрацией по статусу и дате.
    Подгружаем items, menu_item, user и table.
    Сортируем по created_at (новые первыми).
    """
    stmt = _with_details(select(Order)).order_by(Order.created_at.desc(), Order.id.desc())

    if status:
        stmt = stmt.where(Order.status == status)
    if date_from:
        stmt = stmt.where(Order.created_at >= date_from)
    if date_to:
        stmt = stmt.where(Order.created_at <= date_to)
    if limit:
        stmt = stmt.limit(limit)
    if offset:
        stmt = stmt.offset(offset)

    result = await db.execute(stmt)
    return result.scalars().unique().all()


async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
    """
    Возвращает заказ по ID с подгруженными связями.
    Предотвращает MissingGreenlet при сериализации.
    """
    result = await db.execute(_with_details(select(Order)).where(Order.id == order_id))
    return result.scalars().unique().first()


async def get_order_by_payment_id(db: AsyncSession, payment_id: str) -> Optional[Order]:
    result = await db.execute(select(Order).where(Order.payment_id == payment_id))
    return result.scalars().first()


async def get_orders_for_user(db: AsyncSession, user_id: str) -> List[Order]:
    stmt = (
        _with_details(select(Order))
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    result = await db.execute(stmt)
    return result.scalars().unique().all()


async def get_display_orders(db: AsyncSession) -> List[Order]:
    """
    Заказы для экрана на кухне: готовятся и готовы, старые первыми.
    """
    stmt = (
        _with_details(select(Order))
        .where(Order.status.in_([OrderStatusEnum.preparing, OrderStatusEnum.ready]))
        .order_by(Order.created_at, Order.id)
    )
    result = await db.execute(stmt)
    return result.scalars().unique().all()


async def _rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except SQLAlchemyError as exc:
        logger.critical("Rollback of order transaction failed: %s", exc)
        raise PartialCommitError() from exc


async def create_paid_order(
    db: AsyncSession,
    *,
    user_id: str,
    table_id: Optional[int],
    coupon_id: Optional[int],
    lines: Sequence[CartLine],
    pricing: Pricing,
    payment_id: str,
) -> Order:
    """
    Записывает оплаченный заказ, его позиции и использование купона
    одной транзакцией. Либо появляется заказ со всеми позициями и
    увеличенным счётчиком купона, либо ничего.
    """
    order = Order(
        user_id=user_id,
        table_id=table_id,
        coupon_id=coupon_id,
        subtotal=money(pricing.subtotal),
        discount=money(pricing.discount),
        total=money(pricing.total),
        status=OrderStatusEnum.pending,
        payment_id=payment_id,
        payment_status=PaymentStatusEnum.completed,
    )

    try:
        db.add(order)
        await db.flush()
        order.order_number = format_order_number(order.id)

        db.add_all([
            OrderItem(
                order_id=order.id,
                menu_item_id=line.menu_item_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in lines
        ])

        if coupon_id is not None and not await redeem_coupon(db, coupon_id):
            raise CouponLimitReachedError()

        await db.commit()
    except CouponLimitReachedError:
        await _rollback(db)
        raise
    except IntegrityError as exc:
        await _rollback(db)
        # параллельный запрос с тем же payment_id успел записать заказ
        existing = await get_order_by_payment_id(db, payment_id)
        if existing is not None:
            raise DuplicatePaymentError(existing) from exc
        logger.error("Order transaction for payment %s failed: %s", payment_id, exc)
        raise OrderCommitError() from exc
    except SQLAlchemyError as exc:
        logger.error("Order transaction for payment %s failed: %s", payment_id, exc)
        await _rollback(db)
        raise OrderCommitError() from exc

    return order


async def advance_order_status(db: AsyncSession, order_id: int) -> Optional[Tuple[Order, OrderStatusEnum, bool]]:
    """
    Переводит заказ на следующий статус.
    Возвращает (заказ, прежний статус, изменился ли статус) или None.
    Для конечного статуса ничего не меняет.
    """
    order = await db.get(Order, order_id)
    if not order:
        return None

    current = OrderStatusEnum(order.status)
    target = next_status(current)
    if target == current:
        return await get_order_by_id(db, order_id), current, False

    # условие на текущий статус: два одновременных нажатия не перепрыгнут шаг
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == current)
        .values(status=target)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise ValueError(f"Order {order_id} status changed concurrently")
    await db.commit()

    db.expire_all()
    return await get_order_by_id(db, order_id), current, True


async def delete_order(db: AsyncSession, order_id: int) -> bool:
    """
    Удаляет заказ вместе с позициями одной транзакцией.
    """
    result = await db.execute(
        select(Order).where(Order.id == order_id).options(selectinload(Order.items))
    )
    order = result.scalars().first()
    if not order:
        return False
    await db.delete(order)
    await db.commit()
    return True


async def count_orders_by_status(db: AsyncSession) -> dict:
    result = await db.execute(
        select(Order.status, func.count(Order.id)).group_by(Order.status)
    )
    counts = {status.value: 0 for status in STATUS_FLOW}
    for status, count in result.all():
        counts[getattr(status, "value", status)] = int(count)
    return counts


async def get_orders_summary_stats(
    db: AsyncSession,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> dict:
    """
    Возвращает сводную статистику по заказам с опциональной фильтрацией по дате.
    """
    if not date_to:
        date_to = datetime.utcnow()
    if not date_from:
        # по умолчанию за последние 30 дней
        date_from = date_to - timedelta(days=30)

    stmt = (
        select(
            func.count(Order.id).label("count_orders"),
            func.sum(Order.total).label("total_revenue"),
            func.count(func.distinct(Order.user_id)).label("unique_users"),
        )
        .where(Order.created_at.between(date_from, date_to))
    )

    result = await db.execute(stmt)
    row = result.first()

    count_orders = row.count_orders or 0
    total_revenue = Decimal(str(row.total_revenue or 0)).quantize(Decimal("0.01"))
    avg_check = (total_revenue / count_orders).quantize(Decimal("0.01")) if count_orders else Decimal("0.00")

    return {
        "date_from": date_from.date().isoformat(),
        "date_to": date_to.date().isoformat(),
        "count_orders": count_orders,
        "total_revenue": total_revenue,
        "avg_check": avg_check,
        "unique_users": row.unique_users or 0,
        "active_orders": await _count_active(db),
        "by_status": await count_orders_by_status(db),
    }


async def _count_active(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(Order.id)).where(Order.status.in_(ACTIVE_STATUSES))
    )
    return int(result.scalar() or 0)


async def get_top_menu_items(
    db: AsyncSession,
    limit: int = 5
) -> list[dict]:
    """
    Возвращает топ самых популярных блюд по количеству заказанных позиций.
    """
    stmt = (
        select(
            MenuItem.id.label("menu_item_id"),
            MenuItem.name.label("menu_item_name"),
            func.sum(OrderItem.quantity).label("total_sold"),
        )
        .join(MenuItem, MenuItem.id == OrderItem.menu_item_id)
        .group_by(MenuItem.id, MenuItem.name)
        .order_by(desc("total_sold"), MenuItem.id)
        .limit(limit)
    )

    result = await db.execute(stmt)
    return [
        {
            "menu_item_id": row.menu_item_id,
            "menu_item_name": row.menu_item_name,
            "total_sold": int(row.total_sold or 0),
        }
        for row in result.all()
    ]
