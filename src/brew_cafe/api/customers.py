from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ..db.deps import get_async_session
from ..crud.profile import get_customers_with_summary
from ..schemas.profile import CustomerOut
from .deps import require_admin

router = APIRouter(prefix="/admin/customers", tags=["customers"], dependencies=[Depends(require_admin)])

@router.get("/", response_model=List[CustomerOut])
async def list_customers(session: AsyncSession = Depends(get_async_session)):
    """
    Профили клиентов с количеством заказов и суммой покупок.
    """
    return await get_customers_with_summary(session)
