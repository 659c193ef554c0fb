"""
Расчёт стоимости корзины: подытог, скидка по купону, налог, итог.

Чистые функции без побочных эффектов. Все суммы в Decimal и считаются
точно: tax == TAX_RATE * (subtotal - discount),
total == subtotal - discount + tax. Округление до копеек (money)
выполняется только на выходе: запись в базу, ответ API, сумма для шлюза.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Protocol

from brew_cafe.errors import PricingError

TAX_RATE = Decimal("0.05")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class DiscountSource(Protocol):
    discount_type: str
    discount_value: Decimal


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Сумма в копейках/пайсах для платёжного шлюза."""
    return int((Decimal(str(amount)) * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CartLine:
    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1
    image_url: Optional[str] = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")

    @property
    def line_total(self) -> Decimal:
        return Decimal(str(self.unit_price)) * self.quantity


@dataclass(frozen=True)
class Pricing:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


def _discount_type(coupon: DiscountSource) -> str:
    value = coupon.discount_type
    return getattr(value, "value", value)


def calculate_discount(subtotal: Decimal, coupon: Optional[DiscountSource]) -> Decimal:
    if coupon is None:
        return Decimal("0")

    value = Decimal(str(coupon.discount_value))
    if _discount_type(coupon) == "percent":
        if value > HUNDRED:
            raise PricingError(f"Percent discount {value} exceeds 100%")
        return subtotal * value / HUNDRED

    # фиксированная скидка не может превышать подытог
    return min(value, subtotal)


def calculate_pricing(
    lines: Iterable[CartLine],
    coupon: Optional[DiscountSource] = None,
    tax_rate: Decimal = TAX_RATE,
) -> Pricing:
    subtotal = sum((line.line_total for line in lines), Decimal("0"))
    discount = calculate_discount(subtotal, coupon)
    tax = (subtotal - discount) * tax_rate
    total = subtotal - discount + tax
    return Pricing(subtotal=subtotal, discount=discount, tax=tax, total=total)


@dataclass
class Cart:
    """Корзина клиента: позиции, выбранный стол и применённый купон."""

    lines: List[CartLine] = field(default_factory=list)
    table_id: Optional[int] = None
    coupon: Optional[DiscountSource] = None

    def _find(self, menu_item_id: int) -> Optional[int]:
        for index, line in enumerate(self.lines):
            if line.menu_item_id == menu_item_id:
                return index
        return None

    def add_item(self, menu_item_id: int, name: str, unit_price, image_url: Optional[str] = None) -> None:
        index = self._find(menu_item_id)
        if index is None:
            self.lines.append(
                CartLine(menu_item_id, name, Decimal(str(unit_price)), 1, image_url)
            )
        else:
            line = self.lines[index]
            self.lines[index] = replace(line, quantity=line.quantity + 1)

    def update_quantity(self, menu_item_id: int, quantity: int) -> None:
        if quantity < 0:
            raise ValueError("quantity must not be negative")
        index = self._find(menu_item_id)
        if index is None:
            return
        if quantity == 0:
            del self.lines[index]
        else:
            self.lines[index] = replace(self.lines[index], quantity=quantity)

    def remove_item(self, menu_item_id: int) -> None:
        self.lines = [line for line in self.lines if line.menu_item_id != menu_item_id]

    def set_table(self, table_id: int) -> None:
        self.table_id = table_id

    def set_coupon(self, coupon: Optional[DiscountSource]) -> None:
        self.coupon = coupon

    def clear(self) -> None:
        self.lines = []
        self.table_id = None
        self.coupon = None

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def pricing(self, tax_rate: Decimal = TAX_RATE) -> Pricing:
        return calculate_pricing(self.lines, self.coupon, tax_rate)
