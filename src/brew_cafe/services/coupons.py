"""
Проверка купона. Единственная реализация правил, её используют
расчёт корзины, эндпоинт проверки и оформление заказа.

Порядок проверок фиксирован, первая неудачная определяет результат:
NOT_FOUND -> LIMIT_REACHED -> EXPIRED -> BELOW_MINIMUM -> ELIGIBLE.
"""
import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.crud.coupon import get_coupon_by_code
from brew_cafe.errors import ValidationError
from brew_cafe.models.coupon import Coupon


class CouponStatus(str, enum.Enum):
    ELIGIBLE = "ELIGIBLE"
    NOT_FOUND = "NOT_FOUND"
    LIMIT_REACHED = "LIMIT_REACHED"
    EXPIRED = "EXPIRED"
    BELOW_MINIMUM = "BELOW_MINIMUM"


MESSAGES = {
    CouponStatus.NOT_FOUND: "Invalid or expired coupon code",
    CouponStatus.LIMIT_REACHED: "This coupon has reached its usage limit",
    CouponStatus.EXPIRED: "This coupon has expired",
}


@dataclass(frozen=True)
class CouponVerdict:
    status: CouponStatus
    coupon: Optional[Coupon] = None
    amount_needed: Optional[Decimal] = None

    @property
    def eligible(self) -> bool:
        return self.status == CouponStatus.ELIGIBLE

    @property
    def message(self) -> str:
        if self.status == CouponStatus.BELOW_MINIMUM:
            return f"Add {self.amount_needed} more to use this coupon"
        if self.status == CouponStatus.ELIGIBLE:
            value = self.coupon.discount_value
            if _kind(self.coupon) == "percent":
                return f"{value}% discount applied!"
            return f"{value} discount applied!"
        return MESSAGES[self.status]


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _kind(coupon) -> str:
    return getattr(coupon.discount_type, "value", coupon.discount_type)


def _as_utc(moment: datetime) -> datetime:
    # sqlite отдаёт naive datetime, считаем его UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def evaluate_coupon(
    coupon: Optional[Coupon],
    subtotal: Decimal,
    now: Optional[datetime] = None,
) -> CouponVerdict:
    if coupon is None or not coupon.is_active:
        return CouponVerdict(CouponStatus.NOT_FOUND)

    if coupon.used_count >= coupon.max_uses:
        return CouponVerdict(CouponStatus.LIMIT_REACHED, coupon)

    now = now or datetime.now(timezone.utc)
    if coupon.expires_at is not None and _as_utc(coupon.expires_at) < _as_utc(now):
        return CouponVerdict(CouponStatus.EXPIRED, coupon)

    min_order = Decimal(str(coupon.min_order or 0))
    subtotal = Decimal(str(subtotal))
    if subtotal < min_order:
        return CouponVerdict(CouponStatus.BELOW_MINIMUM, coupon, amount_needed=min_order - subtotal)

    return CouponVerdict(CouponStatus.ELIGIBLE, coupon)


async def validate_coupon_code(
    db: AsyncSession,
    code: str,
    subtotal: Decimal,
    now: Optional[datetime] = None,
) -> CouponVerdict:
    normalized = normalize_code(code)
    if not normalized:
        raise ValidationError("Coupon code is required")

    coupon = await get_coupon_by_code(db, normalized, active_only=True)
    return evaluate_coupon(coupon, subtotal, now)
