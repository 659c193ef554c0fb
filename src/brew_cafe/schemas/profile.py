from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional

from brew_cafe.models.profile import RoleEnum


class ProfileOut(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: RoleEnum
    created_at: datetime

    class Config:
        from_attributes = True


class CustomerOut(ProfileOut):
    order_count: int = 0
    total_spent: Decimal = Decimal("0.00")


class SetupAdminResponse(BaseModel):
    message: str
    profile: ProfileOut
