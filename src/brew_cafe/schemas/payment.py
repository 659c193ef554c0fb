from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


class CreateIntentRequest(BaseModel):
    # сырое значение, разбирается в parse_amount
    amount: Any = None
    currency: Optional[str] = None
    receipt: Optional[str] = None
    notes: Optional[Dict[str, Any]] = None


class IntentOut(BaseModel):
    id: str
    amount: int  # в минимальных единицах валюты
    currency: str
    receipt: Optional[str] = None


class CreateIntentResponse(BaseModel):
    success: bool = True
    order: IntentOut


class OrderLineData(BaseModel):
    id: int = Field(..., validation_alias=AliasChoices("id", "menu_item_id"))
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., validation_alias=AliasChoices("price", "unit_price"))
    name: Optional[str] = None


class OrderData(BaseModel):
    items: List[OrderLineData] = Field(..., min_length=1)
    table_id: Optional[int] = Field(None, validation_alias=AliasChoices("tableId", "table_id"))
    coupon_id: Optional[int] = Field(None, validation_alias=AliasChoices("couponId", "coupon_id"))
    subtotal: Decimal
    discount: Decimal = Decimal("0")
    total: Decimal


class VerifyPaymentRequest(BaseModel):
    intent_id: str = Field(
        ..., validation_alias=AliasChoices("intentId", "razorpay_order_id", "intent_id")
    )
    payment_id: str = Field(
        ..., validation_alias=AliasChoices("paymentId", "razorpay_payment_id", "payment_id")
    )
    signature: str = Field(
        ..., validation_alias=AliasChoices("signature", "razorpay_signature")
    )
    order_data: OrderData


class CommittedOrderOut(BaseModel):
    id: int
    order_number: str


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    order: CommittedOrderOut
