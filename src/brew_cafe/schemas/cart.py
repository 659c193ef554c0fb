from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from brew_cafe.schemas.coupon import CouponValidateResponse


class CartLineIn(BaseModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1)


class CartQuoteRequest(BaseModel):
    items: List[CartLineIn] = Field(..., min_length=1)
    coupon_code: Optional[str] = None


class CartLineOut(BaseModel):
    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    image_url: Optional[str] = None


class CartQuoteResponse(BaseModel):
    items: List[CartLineOut]
    item_count: int
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    coupon: Optional[CouponValidateResponse] = None
