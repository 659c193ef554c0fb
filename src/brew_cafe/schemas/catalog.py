from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class MenuItemRead(BaseModel):
    id: int
    category_id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    available: bool

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    category_id: int
    name: str = Field(..., min_length=1, max_length=128)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    image_url: Optional[str] = None
    available: bool = True


class MenuItemUpdate(BaseModel):
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    image_url: Optional[str] = None
    available: Optional[bool] = None

    class Config:
        extra = "forbid"


class CategoryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    sort_order: int

    class Config:
        from_attributes = True


class CategoryWithItems(CategoryRead):
    menu_items: List[MenuItemRead] = []


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = None
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=64)
    description: Optional[str] = None
    sort_order: Optional[int] = None

    class Config:
        extra = "forbid"


class TableRead(BaseModel):
    id: int
    table_number: int
    capacity: int
    is_available: bool

    class Config:
        from_attributes = True


class TableCreate(BaseModel):
    table_number: int = Field(..., gt=0)
    capacity: int = Field(2, gt=0)
    is_available: bool = True


class TableUpdate(BaseModel):
    table_number: Optional[int] = Field(None, gt=0)
    capacity: Optional[int] = Field(None, gt=0)
    is_available: Optional[bool] = None

    class Config:
        extra = "forbid"


class SettingsRead(BaseModel):
    id: int = 0
    cafe_name: str
    logo_url: str = ""
    configured: bool = False
    updated_at: Optional[datetime] = None


class SettingsUpdate(BaseModel):
    cafe_name: str = Field(..., min_length=1, max_length=128)
    logo_url: str = ""
