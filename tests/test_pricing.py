from decimal import Decimal
from types import SimpleNamespace

import pytest

from brew_cafe.errors import PricingError
from brew_cafe.services.pricing import Cart, CartLine, calculate_pricing, money, to_minor_units


def coupon(kind, value):
    return SimpleNamespace(discount_type=kind, discount_value=Decimal(str(value)))


LINES = [CartLine(menu_item_id=1, name="Latte", unit_price=Decimal("100"), quantity=2)]


def test_fixed_coupon_scenario():
    pricing = calculate_pricing(LINES, coupon("fixed", 50))

    assert pricing.subtotal == Decimal("200")
    assert pricing.discount == Decimal("50")
    assert pricing.tax == Decimal("7.5")
    assert pricing.total == Decimal("157.5")


def test_percent_coupon_scenario():
    pricing = calculate_pricing(LINES, coupon("percent", 20))

    assert pricing.discount == Decimal("40")
    assert pricing.tax == Decimal("8")
    assert pricing.total == Decimal("168")


def test_no_coupon():
    pricing = calculate_pricing(LINES)

    assert pricing.discount == Decimal("0")
    assert pricing.tax == Decimal("10")
    assert pricing.total == Decimal("210")


def test_fixed_discount_is_clamped_to_subtotal():
    lines = [CartLine(1, "Espresso", Decimal("30"), 1)]
    pricing = calculate_pricing(lines, coupon("fixed", 50))

    assert pricing.discount == Decimal("30")
    assert pricing.tax == Decimal("0")
    assert pricing.total == Decimal("0")


def test_percent_over_hundred_is_a_configuration_error():
    with pytest.raises(PricingError):
        calculate_pricing(LINES, coupon("percent", 120))


def test_enum_discount_type_is_accepted():
    from brew_cafe.models import DiscountTypeEnum

    pricing = calculate_pricing(LINES, coupon(DiscountTypeEnum.percent, 10))
    assert pricing.discount == Decimal("20")


@pytest.mark.parametrize(
    "lines, applied",
    [
        ([CartLine(1, "A", Decimal("33.33"), 3)], coupon("percent", 15)),
        ([CartLine(1, "A", Decimal("19.99"), 7), CartLine(2, "B", Decimal("4.5"), 1)], coupon("fixed", 12.34)),
        ([CartLine(1, "A", Decimal("0.99"), 1)], coupon("percent", 100)),
        ([CartLine(1, "A", Decimal("250"), 4)], None),
    ],
)
def test_total_reconciles(lines, applied):
    pricing = calculate_pricing(lines, applied)

    assert pricing.total == pricing.subtotal - pricing.discount + pricing.tax
    assert pricing.tax == Decimal("0.05") * (pricing.subtotal - pricing.discount)
    assert pricing == calculate_pricing(lines, applied)


def test_cart_line_requires_positive_quantity():
    with pytest.raises(ValueError):
        CartLine(1, "Latte", Decimal("100"), 0)


def test_cart_add_bumps_existing_line():
    cart = Cart()
    cart.add_item(1, "Latte", "100")
    cart.add_item(1, "Latte", "100")
    cart.add_item(2, "Sandwich", "150")

    assert [(line.menu_item_id, line.quantity) for line in cart.lines] == [(1, 2), (2, 1)]
    assert cart.item_count == 3
    assert cart.subtotal == Decimal("350")


def test_cart_update_quantity_zero_removes_line():
    cart = Cart()
    cart.add_item(1, "Latte", "100")
    cart.add_item(2, "Sandwich", "150")

    cart.update_quantity(1, 5)
    cart.update_quantity(2, 0)

    assert [(line.menu_item_id, line.quantity) for line in cart.lines] == [(1, 5)]
    with pytest.raises(ValueError):
        cart.update_quantity(1, -1)


def test_cart_clear_drops_table_and_coupon():
    cart = Cart()
    cart.add_item(1, "Latte", "100")
    cart.set_table(3)
    cart.set_coupon(coupon("fixed", 10))

    assert cart.pricing().total == Decimal("94.5")

    cart.clear()
    assert cart.lines == []
    assert cart.table_id is None
    assert cart.coupon is None


def test_cart_remove_item():
    cart = Cart()
    cart.add_item(1, "Latte", "100")
    cart.remove_item(1)
    cart.remove_item(42)

    assert cart.lines == []


def test_minor_units():
    assert to_minor_units(Decimal("157.5")) == 15750
    assert to_minor_units("0.015") == 2
    assert to_minor_units(168) == 16800


def test_calculator_keeps_sub_cent_precision():
    pricing = calculate_pricing([CartLine(1, "Tea", Decimal("10.01"), 1)])

    assert pricing.tax == Decimal("0.5005")
    assert pricing.total == Decimal("10.5105")
    assert money(pricing.total) == Decimal("10.51")
    assert to_minor_units(pricing.total) == 1051


def test_percent_discount_is_not_rounded():
    lines = [CartLine(1, "Scone", Decimal("33.33"), 1)]
    pricing = calculate_pricing(lines, coupon("percent", 15))

    assert pricing.discount == Decimal("4.9995")
    assert pricing.tax == Decimal("0.05") * (Decimal("33.33") - Decimal("4.9995"))
