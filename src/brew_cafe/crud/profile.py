from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.models import Order, Profile, RoleEnum


async def get_profile(db: AsyncSession, user_id: str) -> Optional[Profile]:
    return await db.get(Profile, user_id)


async def ensure_profile(db: AsyncSession, user_id: str, email: Optional[str]) -> Profile:
    """
    Возвращает профиль пользователя, при отсутствии создаёт профиль покупателя.
    Не коммитит.
    """
    profile = await db.get(Profile, user_id)
    if profile is None:
        profile = Profile(
            id=user_id,
            email=email,
            full_name=_default_name(email, "Customer"),
            role=RoleEnum.customer,
        )
        db.add(profile)
        await db.flush()
    return profile


def _default_name(email: Optional[str], fallback: str) -> str:
    if email and email.split("@")[0]:
        return email.split("@")[0]
    return fallback


async def promote_to_admin(db: AsyncSession, user_id: str, email: Optional[str]) -> Tuple[Profile, str]:
    """
    Создаёт профиль администратора или повышает существующий.
    Возвращает профиль и что было сделано: created | promoted | unchanged.
    """
    profile = await db.get(Profile, user_id)
    if profile is None:
        profile = Profile(
            id=user_id,
            email=email,
            full_name=_default_name(email, "Admin"),
            role=RoleEnum.admin,
        )
        db.add(profile)
        outcome = "created"
    elif profile.role == RoleEnum.admin:
        return profile, "unchanged"
    else:
        profile.role = RoleEnum.admin
        outcome = "promoted"

    await db.commit()
    await db.refresh(profile)
    return profile, outcome


async def get_customers_with_summary(db: AsyncSession) -> List[dict]:
    """
    Профили (новые первыми) с количеством заказов и суммой покупок.
    """
    totals = (
        select(
            Order.user_id.label("user_id"),
            func.count(Order.id).label("order_count"),
            func.coalesce(func.sum(Order.total), 0).label("total_spent"),
        )
        .group_by(Order.user_id)
        .subquery()
    )
    stmt = (
        select(Profile, totals.c.order_count, totals.c.total_spent)
        .outerjoin(totals, totals.c.user_id == Profile.id)
        .order_by(Profile.created_at.desc(), Profile.id)
    )
    result = await db.execute(stmt)

    return [
        {
            "id": profile.id,
            "email": profile.email,
            "full_name": profile.full_name,
            "role": profile.role,
            "created_at": profile.created_at,
            "order_count": int(order_count or 0),
            "total_spent": Decimal(str(total_spent or 0)).quantize(Decimal("0.01")),
        }
        for profile, order_count, total_spent in result.all()
    ]
