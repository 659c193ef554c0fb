import enum
from sqlalchemy import Column, String, DateTime, func, Enum
from sqlalchemy.orm import relationship
from ..db.base import Base


class RoleEnum(str, enum.Enum):
    customer = "customer"
    admin = "admin"


class Profile(Base):
    __tablename__ = "profiles"

    # id пользователя у провайдера аутентификации
    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True)
    full_name = Column(String(128), nullable=True)
    role = Column(Enum(RoleEnum, name="user_role"), nullable=False, default=RoleEnum.customer)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # связь с заказами
    orders = relationship("Order", back_populates="user")
