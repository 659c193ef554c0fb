from sqlalchemy import Column, Integer, Boolean, CheckConstraint
from ..db.base import Base


class CafeTable(Base):
    __tablename__ = "cafe_tables"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_cafe_tables_capacity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    table_number = Column(Integer, nullable=False, unique=True)
    capacity = Column(Integer, nullable=False, default=2)
    # только подсказка для клиента, стол не резервируется
    is_available = Column(Boolean, default=True, nullable=False)
