import enum
from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, ForeignKey, Enum as SAEnum, func,
)
from sqlalchemy.orm import relationship
from ..db.base import Base


class OrderStatusEnum(str, enum.Enum):
    pending = "pending"
    preparing = "preparing"
    ready = "ready"
    served = "served"


class PaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), nullable=True, unique=True)  # выставляется после flush
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("cafe_tables.id", ondelete="SET NULL"), nullable=True)
    coupon_id = Column(Integer, ForeignKey("coupons.id", ondelete="SET NULL"), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(
        SAEnum(OrderStatusEnum, name="order_status"),
        nullable=False,
        default=OrderStatusEnum.pending,
        index=True,
    )
    payment_id = Column(String(64), nullable=True, unique=True)
    payment_status = Column(
        SAEnum(PaymentStatusEnum, name="payment_status"),
        nullable=False,
        default=PaymentStatusEnum.pending,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    # связи
    user = relationship("Profile", back_populates="orders")
    table = relationship("CafeTable")
    coupon = relationship("Coupon", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
