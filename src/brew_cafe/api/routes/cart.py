from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.routes.coupons import verdict_response
from brew_cafe.config import settings
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.cart import CartLineOut, CartQuoteRequest, CartQuoteResponse
from brew_cafe.services.checkout import quote_cart
from brew_cafe.services.pricing import money

router = APIRouter(prefix="/cart", tags=["cart"])


@router.post("/quote", response_model=CartQuoteResponse)
async def quote_cart_endpoint(body: CartQuoteRequest, db: AsyncSession = Depends(get_async_session)):
    """
    Считает корзину по текущим ценам меню: подытог, скидку, налог и итог.
    """
    quote = await quote_cart(
        db,
        [(line.menu_item_id, line.quantity) for line in body.items],
        coupon_code=body.coupon_code,
        tax_rate=settings.TAX_RATE,
    )
    return CartQuoteResponse(
        items=[
            CartLineOut(
                menu_item_id=line.menu_item_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                line_total=money(line.line_total),
                image_url=line.image_url,
            )
            for line in quote.lines
        ],
        item_count=sum(line.quantity for line in quote.lines),
        subtotal=money(quote.pricing.subtotal),
        discount=money(quote.pricing.discount),
        tax=money(quote.pricing.tax),
        total=money(quote.pricing.total),
        coupon=verdict_response(quote.verdict) if quote.verdict else None,
    )
