import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..api.deps import get_order_events
from ..db.deps import get_async_session
from ..services.realtime import OrderEventBroker

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health", summary="Health check")
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    events: OrderEventBroker = Depends(get_order_events),
):
    """
    Health-check: доступность базы и число подписчиков на заказы.
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error("Health check database ping failed: %s", exc)
        database = "unavailable"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "order_subscribers": events.subscriber_count,
        "timestamp": datetime.now(timezone.utc),
    }
