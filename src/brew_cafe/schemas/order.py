from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class OrderItemRead(BaseModel):
    id: int
    menu_item_id: int
    quantity: int
    unit_price: Decimal
    menu_item_name: str | None = None

    @classmethod
    def from_orm_with_name(cls, item):
        return cls(
            id=item.id,
            menu_item_id=item.menu_item_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            menu_item_name=item.menu_item.name if item.menu_item else None
        )

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    order_number: Optional[str] = None
    user_id: str
    customer_name: Optional[str] = None
    table_id: Optional[int] = None
    table_number: Optional[int] = None
    coupon_id: Optional[int] = None
    status: str
    payment_id: Optional[str] = None
    payment_status: str
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    created_at: datetime
    items: List[OrderItemRead] = []
    count_items: int

    @classmethod
    def from_orm_with_name(cls, order):
        customer_name = None
        if getattr(order, "user", None):
            customer_name = order.user.full_name or order.user.email

        table = getattr(order, "table", None)

        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            customer_name=customer_name,
            table_id=order.table_id,
            table_number=table.table_number if table else None,
            coupon_id=order.coupon_id,
            status=getattr(order.status, "value", order.status),
            payment_id=order.payment_id,
            payment_status=getattr(order.payment_status, "value", order.payment_status),
            subtotal=order.subtotal,
            discount=order.discount,
            total=order.total,
            created_at=order.created_at,
            items=[OrderItemRead.from_orm_with_name(i) for i in order.items],
            count_items=sum(item.quantity for item in order.items),
        )

    class Config:
        from_attributes = True


class MyOrdersResponse(BaseModel):
    active: List[OrderRead]
    past: List[OrderRead]


class StatusAdvanceResponse(BaseModel):
    order: OrderRead
    previous_status: str
    changed: bool
