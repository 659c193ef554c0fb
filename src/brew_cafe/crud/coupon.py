from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.models import Coupon
from brew_cafe.schemas.coupon import CouponCreate, CouponUpdate


async def get_coupon_by_code(
    db: AsyncSession, code: str, active_only: bool = False
) -> Optional[Coupon]:
    """
    Ищет купон по нормализованному коду (коды хранятся в верхнем регистре).
    """
    stmt = select(Coupon).where(Coupon.code == code.strip().upper())
    if active_only:
        stmt = stmt.where(Coupon.is_active.is_(True))
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_coupon(db: AsyncSession, coupon_id: int) -> Optional[Coupon]:
    return await db.get(Coupon, coupon_id)


async def list_coupons(db: AsyncSession) -> List[Coupon]:
    result = await db.execute(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()))
    return result.scalars().all()


async def create_coupon(db: AsyncSession, coupon_in: CouponCreate) -> Coupon:
    """
    Создаёт купон со счётчиком использований 0.
    """
    coupon = Coupon(**coupon_in.model_dump(), used_count=0)
    db.add(coupon)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError(f"Coupon code {coupon_in.code} already exists")
    await db.refresh(coupon)
    return coupon


async def update_coupon(db: AsyncSession, coupon_id: int, coupon_in: CouponUpdate) -> Optional[Coupon]:
    coupon = await db.get(Coupon, coupon_id)
    if not coupon:
        return None

    update_data = coupon_in.model_dump(exclude_unset=True)
    if "max_uses" in update_data and update_data["max_uses"] < coupon.used_count:
        raise ValueError("max_uses cannot be lower than the number of uses already recorded")

    discount_type = update_data.get("discount_type", coupon.discount_type)
    discount_value = update_data.get("discount_value", coupon.discount_value)
    if getattr(discount_type, "value", discount_type) == "percent" and discount_value > 100:
        raise ValueError("Percent discount cannot exceed 100")

    for key, value in update_data.items():
        setattr(coupon, key, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValueError(f"Coupon code {update_data.get('code')} already exists")
    await db.refresh(coupon)
    return coupon


async def toggle_coupon_active(db: AsyncSession, coupon_id: int) -> Optional[Coupon]:
    coupon = await db.get(Coupon, coupon_id)
    if not coupon:
        return None
    coupon.is_active = not coupon.is_active
    await db.commit()
    await db.refresh(coupon)
    return coupon


async def delete_coupon(db: AsyncSession, coupon_id: int) -> bool:
    coupon = await db.get(Coupon, coupon_id)
    if not coupon:
        return False
    await db.delete(coupon)
    await db.commit()
    return True


async def redeem_coupon(db: AsyncSession, coupon_id: int) -> bool:
    """
    Атомарно увеличивает счётчик использований, только пока он ниже лимита.
    Не коммитит: вызывается внутри транзакции оформления заказа.
    Возвращает False, если ни одна строка не обновилась (лимит исчерпан
    или купон выключен).
    """
    stmt = (
        update(Coupon)
        .where(
            Coupon.id == coupon_id,
            Coupon.is_active.is_(True),
            Coupon.used_count < Coupon.max_uses,
        )
        .values(used_count=Coupon.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount == 1
