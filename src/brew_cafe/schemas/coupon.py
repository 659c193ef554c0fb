from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from brew_cafe.models.coupon import DiscountTypeEnum


class CouponRead(BaseModel):
    id: int
    code: str
    discount_type: DiscountTypeEnum
    discount_value: Decimal
    min_order: Decimal
    max_uses: int
    used_count: int
    is_active: bool
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    discount_type: DiscountTypeEnum = DiscountTypeEnum.percent
    discount_value: Decimal = Field(..., gt=0)
    min_order: Decimal = Field(Decimal("0"), ge=0)
    max_uses: int = Field(100, gt=0)
    is_active: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Code is required")
        return value

    @model_validator(mode="after")
    def check_percent(self):
        if self.discount_type == DiscountTypeEnum.percent and self.discount_value > 100:
            raise ValueError("Percent discount cannot exceed 100")
        return self


class CouponUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=64)
    discount_type: Optional[DiscountTypeEnum] = None
    discount_value: Optional[Decimal] = Field(None, gt=0)
    min_order: Optional[Decimal] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value is not None else None

    class Config:
        extra = "forbid"


class CouponValidateRequest(BaseModel):
    code: str
    subtotal: Decimal = Field(..., ge=0)


class CouponValidateResponse(BaseModel):
    status: str
    valid: bool
    message: str
    amount_needed: Optional[Decimal] = None
    coupon: Optional[CouponRead] = None
