import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from brew_cafe.api.deps import get_order_events
from brew_cafe.services.realtime import OrderEventBroker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/orders")
async def orders_feed(websocket: WebSocket, events: OrderEventBroker = Depends(get_order_events)):
    """
    Поток уведомлений об изменениях заказов. Клиент перечитывает данные
    на каждое уведомление.
    """
    await websocket.accept()
    queue = events.subscribe()

    async def forward():
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    async def drain():
        # входящие сообщения не используются, ждём отключения клиента
        while True:
            await websocket.receive_text()

    tasks = [asyncio.create_task(forward()), asyncio.create_task(drain())]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc
    finally:
        for task in tasks:
            task.cancel()
        events.unsubscribe(queue)
        logger.debug("Orders subscriber disconnected")
