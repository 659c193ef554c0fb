import enum
from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, CheckConstraint, Enum as SAEnum, func,
)
from sqlalchemy.orm import relationship
from ..db.base import Base


class DiscountTypeEnum(str, enum.Enum):
    percent = "percent"
    fixed = "fixed"


class Coupon(Base):
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("used_count >= 0", name="ck_coupons_used_count_non_negative"),
        CheckConstraint("used_count <= max_uses", name="ck_coupons_used_count_within_cap"),
        CheckConstraint("max_uses > 0", name="ck_coupons_max_uses_positive"),
        CheckConstraint("discount_value > 0", name="ck_coupons_discount_value_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), nullable=False, unique=True, index=True)  # всегда в верхнем регистре
    discount_type = Column(SAEnum(DiscountTypeEnum, name="discount_type"), nullable=False)
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_order = Column(Numeric(10, 2), nullable=False, default=0)
    max_uses = Column(Integer, nullable=False, default=100)
    used_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    orders = relationship("Order", back_populates="coupon", passive_deletes=True)
