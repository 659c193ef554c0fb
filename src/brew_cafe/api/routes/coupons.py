from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import require_admin
from brew_cafe.crud.coupon import (
    create_coupon,
    delete_coupon,
    list_coupons,
    toggle_coupon_active,
    update_coupon,
)
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.coupon import (
    CouponCreate,
    CouponRead,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
)
from brew_cafe.services.coupons import CouponVerdict, validate_coupon_code

router = APIRouter(prefix="/coupons", tags=["coupons"])
admin_router = APIRouter(prefix="/admin/coupons", tags=["admin coupons"], dependencies=[Depends(require_admin)])


def verdict_response(verdict: CouponVerdict) -> CouponValidateResponse:
    return CouponValidateResponse(
        status=verdict.status.value,
        valid=verdict.eligible,
        message=verdict.message,
        amount_needed=verdict.amount_needed,
        coupon=CouponRead.model_validate(verdict.coupon) if verdict.eligible else None,
    )


@router.post("/validate", response_model=CouponValidateResponse)
async def validate_coupon_endpoint(
    body: CouponValidateRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Проверяет, можно ли применить купон к корзине с данным подытогом.
    """
    verdict = await validate_coupon_code(db, body.code, body.subtotal)
    return verdict_response(verdict)


@admin_router.get("/", response_model=List[CouponRead])
async def list_coupons_endpoint(db: AsyncSession = Depends(get_async_session)):
    return await list_coupons(db)


@admin_router.post("/", response_model=CouponRead, status_code=201)
async def create_coupon_endpoint(coupon_in: CouponCreate, db: AsyncSession = Depends(get_async_session)):
    try:
        return await create_coupon(db, coupon_in)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@admin_router.patch("/{coupon_id}", response_model=CouponRead)
async def update_coupon_endpoint(
    coupon_id: int,
    coupon_in: CouponUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    try:
        coupon = await update_coupon(db, coupon_id, coupon_in)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@admin_router.post("/{coupon_id}/toggle", response_model=CouponRead)
async def toggle_coupon_endpoint(coupon_id: int, db: AsyncSession = Depends(get_async_session)):
    coupon = await toggle_coupon_active(db, coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@admin_router.delete("/{coupon_id}", status_code=204)
async def delete_coupon_endpoint(coupon_id: int, db: AsyncSession = Depends(get_async_session)):
    if not await delete_coupon(db, coupon_id):
        raise HTTPException(status_code=404, detail="Coupon not found")
