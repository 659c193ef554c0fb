from sqlalchemy import Column, Integer, String, DateTime, func
from ..db.base import Base


class CafeSettings(Base):
    """Единственная строка с настройками кафе. Отсутствие строки значит "значения по умолчанию"."""

    __tablename__ = "cafe_settings"

    id = Column(Integer, primary_key=True)
    cafe_name = Column(String(128), nullable=False)
    logo_url = Column(String(512), nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
