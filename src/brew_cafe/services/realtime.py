"""
Канал изменений заказов. Каждое изменение строки в orders публикуется
всем подписчикам (панель администратора, список заказов, экран кухни,
страница клиента). Уведомление это только сигнал "перечитай данные",
полезная нагрузка не является полным диффом.

Без REDIS_URL события живут внутри процесса. С REDIS_URL события идут
через pub/sub: каждый воркер слушает каналы и раздаёт сообщения своим
подписчикам, поэтому локально публикующий воркер их не дублирует.
"""
import asyncio
import json
import logging
from typing import Callable, Dict, List, Optional, Set

from redis import asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

ORDERS_CHANNEL = "orders"
SETTINGS_CHANNEL = "cafe_settings"


class OrderEventBroker:
    def __init__(self, redis_url: Optional[str] = None, max_queue: int = 100):
        self.redis_url = redis_url
        self.max_queue = max_queue
        self._subscribers: Set[asyncio.Queue] = set()
        self._handlers: Dict[str, List[Callable[[dict], None]]] = {}
        self._redis = None
        self._pubsub = None
        self._listener: Optional[asyncio.Task] = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def listening(self) -> bool:
        return self._listener is not None and not self._listener.done()

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    def on(self, channel: str, handler: Callable[[dict], None]) -> None:
        """Обработчик сообщений канала. Регистрировать до start()."""
        self._handlers.setdefault(channel, []).append(handler)

    async def start(self) -> None:
        """Подписка на каналы redis. Без REDIS_URL ничего не делает."""
        if not self.redis_url or self.listening:
            return
        channels = [ORDERS_CHANNEL, *(c for c in self._handlers if c != ORDERS_CHANNEL)]
        try:
            pubsub = self._client().pubsub()
            await pubsub.subscribe(*channels)
        except (RedisError, OSError) as exc:
            logger.error("Redis subscribe to %s failed, events stay local: %s", channels, exc)
            return
        self._pubsub = pubsub
        self._listener = asyncio.create_task(self._listen(pubsub))
        logger.info("Listening for events on redis channels %s", channels)

    async def publish(self, event: str, order_id: Optional[int] = None) -> dict:
        message = {"event": event, "table": ORDERS_CHANNEL, "order_id": order_id}
        await self.broadcast(ORDERS_CHANNEL, message)
        return message

    async def broadcast(self, channel: str, payload: dict) -> None:
        if self.redis_url:
            published = await self._publish_redis(channel, payload)
            # свой слушатель доставит сообщение локально
            if published and self.listening:
                return
        self._dispatch(channel, payload)

    def _dispatch(self, channel: str, payload: dict) -> None:
        if channel == ORDERS_CHANNEL:
            for queue in list(self._subscribers):
                try:
                    queue.put_nowait(payload)
                except asyncio.QueueFull:
                    # медленный подписчик отключается, издатель не ждёт
                    logger.warning("Dropping slow orders subscriber")
                    self._subscribers.discard(queue)

        for handler in self._handlers.get(channel, []):
            handler(payload)

    def _client(self):
        if self._redis is None:
            self._redis = aioredis.from_url(self.redis_url, decode_responses=True)
        return self._redis

    async def _publish_redis(self, channel: str, payload: dict) -> bool:
        try:
            await self._client().publish(channel, json.dumps(payload))
        except (RedisError, OSError) as exc:
            logger.warning("Redis publish to %s failed: %s", channel, exc)
            return False
        return True

    async def _listen(self, pubsub) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    payload = json.loads(message["data"])
                except (TypeError, ValueError):
                    logger.warning("Ignoring malformed message on %s", message.get("channel"))
                    continue
                self._dispatch(message["channel"], payload)
        except (RedisError, OSError) as exc:
            logger.error("Redis listener stopped, events fall back to local delivery: %s", exc)

    async def close(self) -> None:
        self._subscribers.clear()
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
