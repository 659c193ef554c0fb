"""
Оформление заказа: платёжное намерение, проверка подписи оплаты и запись
заказа.

Порядок в verify_and_commit важен, каждый шаг является условием следующего:
аутентификация -> подпись -> сверка сумм -> транзакция (заказ, позиции,
купон) -> уведомление подписчиков. До транзакции ничего не пишется.
"""
import logging
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.crud.coupon import get_coupon
from brew_cafe.crud.menu import get_menu_items_by_ids
from brew_cafe.crud.order import create_paid_order, get_order_by_payment_id
from brew_cafe.crud.profile import ensure_profile
from brew_cafe.crud.table import get_table
from brew_cafe.errors import (
    CafeError,
    CouponRejectedError,
    DuplicatePaymentError,
    InvalidAmountError,
    InvalidSignatureError,
    NotFoundError,
    TotalsMismatchError,
    ValidationError,
)
from brew_cafe.models import Order
from brew_cafe.schemas.payment import OrderData
from brew_cafe.services.coupons import CouponVerdict, evaluate_coupon, validate_coupon_code
from brew_cafe.services.identity import AuthenticatedUser
from brew_cafe.services.payments import GatewayIntent, PaymentGateway, verify_payment_signature
from brew_cafe.services.pricing import TAX_RATE, CartLine, Pricing, calculate_pricing, money, to_minor_units
from brew_cafe.services.realtime import OrderEventBroker

logger = logging.getLogger(__name__)

TOTALS_TOLERANCE = Decimal("0.01")
MINOR_UNITS_TOLERANCE = 1


@dataclass(frozen=True)
class Quote:
    lines: List[CartLine]
    pricing: Pricing
    verdict: Optional[CouponVerdict] = None


def parse_amount(value: Any) -> Decimal:
    """Положительная конечная сумма из JSON-значения, иначе InvalidAmountError."""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidAmountError()
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError()
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()
    return amount


async def create_payment_intent(
    gateway: PaymentGateway,
    amount: Any,
    currency: Optional[str] = None,
    receipt: Optional[str] = None,
    notes: Optional[Dict[str, Any]] = None,
    default_currency: str = "INR",
) -> GatewayIntent:
    """
    Намерение создаётся только у шлюза, локальных записей нет,
    поэтому повтор после ошибки безопасен.
    """
    amount = parse_amount(amount)

    return await gateway.create_intent(
        amount=to_minor_units(amount),
        currency=currency or default_currency,
        receipt=receipt or f"order_{int(time.time() * 1000)}",
        notes=notes,
    )


async def price_lines(db: AsyncSession, requested: Sequence[tuple]) -> List[CartLine]:
    """
    Строит позиции корзины по текущим ценам меню.
    requested: пары (menu_item_id, quantity).
    """
    menu_items = await get_menu_items_by_ids(db, [item_id for item_id, _ in requested])

    quantities: Dict[int, int] = {}
    for item_id, quantity in requested:
        quantities[item_id] = quantities.get(item_id, 0) + quantity

    lines = []
    for item_id, quantity in quantities.items():
        menu_item = menu_items.get(item_id)
        if menu_item is None or not menu_item.available:
            raise ValidationError(f"Menu item {item_id} is not available")
        lines.append(
            CartLine(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                unit_price=money(menu_item.price),
                quantity=quantity,
                image_url=menu_item.image_url,
            )
        )
    return lines


async def quote_cart(
    db: AsyncSession,
    requested: Sequence[tuple],
    coupon_code: Optional[str] = None,
    tax_rate: Decimal = TAX_RATE,
) -> Quote:
    lines = await price_lines(db, requested)
    subtotal = calculate_pricing(lines, None, tax_rate).subtotal

    verdict = None
    coupon = None
    if coupon_code is not None and coupon_code.strip():
        verdict = await validate_coupon_code(db, coupon_code, subtotal)
        if verdict.eligible:
            coupon = verdict.coupon

    return Quote(lines=lines, pricing=calculate_pricing(lines, coupon, tax_rate), verdict=verdict)


def _check_declared_totals(declared: OrderData, pricing: Pricing) -> None:
    for name in ("subtotal", "discount", "total"):
        expected = getattr(pricing, name)
        actual = Decimal(str(getattr(declared, name)))
        if abs(expected - actual) > TOTALS_TOLERANCE:
            raise TotalsMismatchError(
                f"Order {name} {actual} does not match computed {money(expected)}"
            )


def _replayed(existing: Order, user: AuthenticatedUser, payment_id: str) -> Order:
    if existing.user_id != user.id:
        logger.warning(
            "User %s replayed payment %s that belongs to user %s",
            user.id, payment_id, existing.user_id,
        )
        raise NotFoundError("Order not found")
    logger.info("Payment %s already recorded as order %s", payment_id, existing.id)
    return existing


async def verify_and_commit(
    db: AsyncSession,
    *,
    user: AuthenticatedUser,
    gateway: PaymentGateway,
    events: OrderEventBroker,
    secret: str,
    intent_id: str,
    payment_id: str,
    signature: str,
    order_data: OrderData,
    verify_intent_amount: bool = True,
    tax_rate: Decimal = TAX_RATE,
) -> Order:
    if not verify_payment_signature(intent_id, payment_id, signature, secret):
        logger.warning(
            "Rejected payment %s for intent %s from user %s: signature mismatch",
            payment_id, intent_id, user.id,
        )
        raise InvalidSignatureError()

    existing = await get_order_by_payment_id(db, payment_id)
    if existing is not None:
        return _replayed(existing, user, payment_id)

    try:
        order = await _commit_verified(
            db,
            user=user,
            gateway=gateway,
            intent_id=intent_id,
            payment_id=payment_id,
            order_data=order_data,
            verify_intent_amount=verify_intent_amount,
            tax_rate=tax_rate,
        )
    except DuplicatePaymentError as exc:
        return _replayed(exc.order, user, payment_id)
    except CafeError as exc:
        # оплата уже подтверждена шлюзом, а заказа нет
        logger.error(
            "Payment %s for intent %s from user %s verified but order rejected: %s (%s)",
            payment_id, intent_id, user.id, exc.message, exc.code,
        )
        raise
    logger.info("Order %s committed for payment %s", order.order_number, payment_id)

    await events.publish("INSERT", order.id)
    return order


async def _commit_verified(
    db: AsyncSession,
    *,
    user: AuthenticatedUser,
    gateway: PaymentGateway,
    intent_id: str,
    payment_id: str,
    order_data: OrderData,
    verify_intent_amount: bool,
    tax_rate: Decimal,
) -> Order:
    if order_data.table_id is not None and await get_table(db, order_data.table_id) is None:
        raise ValidationError(f"Table {order_data.table_id} not found")

    lines = await price_lines(db, [(line.id, line.quantity) for line in order_data.items])
    subtotal = calculate_pricing(lines, None, tax_rate).subtotal

    coupon = None
    if order_data.coupon_id is not None:
        coupon = await get_coupon(db, order_data.coupon_id)
        verdict = evaluate_coupon(coupon, subtotal)
        if not verdict.eligible:
            raise CouponRejectedError(verdict.status.value, verdict.message)

    pricing = calculate_pricing(lines, coupon, tax_rate)
    _check_declared_totals(order_data, pricing)

    if verify_intent_amount:
        intent = await gateway.fetch_intent(intent_id)
        if abs(intent.amount - to_minor_units(pricing.total)) > MINOR_UNITS_TOLERANCE:
            raise TotalsMismatchError(
                f"Paid amount {intent.amount} does not match order total {money(pricing.total)}"
            )

    await ensure_profile(db, user.id, user.email)
    return await create_paid_order(
        db,
        user_id=user.id,
        table_id=order_data.table_id,
        coupon_id=coupon.id if coupon is not None else None,
        lines=lines,
        pricing=pricing,
        payment_id=payment_id,
    )
