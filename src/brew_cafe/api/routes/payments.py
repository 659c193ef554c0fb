from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.api.deps import get_current_user, get_order_events, get_payment_gateway
from brew_cafe.config import settings
from brew_cafe.db.deps import get_async_session
from brew_cafe.schemas.payment import (
    CommittedOrderOut,
    CreateIntentRequest,
    CreateIntentResponse,
    IntentOut,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from brew_cafe.services.checkout import create_payment_intent, verify_and_commit
from brew_cafe.services.identity import AuthenticatedUser
from brew_cafe.services.payments import PaymentGateway
from brew_cafe.services.realtime import OrderEventBroker

router = APIRouter(prefix="/api/razorpay", tags=["payments"])


@router.post("/create-order", response_model=CreateIntentResponse)
async def create_order_endpoint(
    body: CreateIntentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Создаёт платёжное намерение у шлюза. Сумма приходит в рупиях,
    шлюзу уходит в пайсах.
    """
    intent = await create_payment_intent(
        gateway,
        body.amount,
        currency=body.currency,
        receipt=body.receipt,
        notes=body.notes,
        default_currency=settings.DEFAULT_CURRENCY,
    )
    return CreateIntentResponse(
        order=IntentOut(
            id=intent.id,
            amount=intent.amount,
            currency=intent.currency,
            receipt=intent.receipt,
        )
    )


@router.post("/verify-payment", response_model=VerifyPaymentResponse)
async def verify_payment_endpoint(
    body: VerifyPaymentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    events: OrderEventBroker = Depends(get_order_events),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Проверяет подпись оплаты и записывает заказ.
    """
    order = await verify_and_commit(
        db,
        user=user,
        gateway=gateway,
        events=events,
        secret=settings.RAZORPAY_KEY_SECRET,
        intent_id=body.intent_id,
        payment_id=body.payment_id,
        signature=body.signature,
        order_data=body.order_data,
        verify_intent_amount=settings.PAYMENT_VERIFY_INTENT_AMOUNT,
        tax_rate=settings.TAX_RATE,
    )
    return VerifyPaymentResponse(
        order=CommittedOrderOut(id=order.id, order_number=order.order_number)
    )
