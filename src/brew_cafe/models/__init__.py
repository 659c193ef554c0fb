from .profile import Profile, RoleEnum
from .category import Category
from .menu_item import MenuItem
from .cafe_table import CafeTable
from .coupon import Coupon, DiscountTypeEnum
from .order import Order, OrderStatusEnum, PaymentStatusEnum
from .order_item import OrderItem
from .cafe_settings import CafeSettings

__all__ = [
    "Profile",
    "RoleEnum",
    "Category",
    "MenuItem",
    "CafeTable",
    "Coupon",
    "DiscountTypeEnum",
    "Order",
    "OrderStatusEnum",
    "PaymentStatusEnum",
    "OrderItem",
    "CafeSettings",
]
