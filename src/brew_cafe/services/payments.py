"""
Платёжный шлюз Razorpay: создание платёжного намерения ("order" в терминах
Razorpay), получение его по id и проверка подписи подтверждения оплаты.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from brew_cafe.errors import ConfigurationError, GatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayIntent:
    id: str
    amount: int  # минимальные единицы валюты (пайсы)
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None
    notes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "GatewayIntent":
        notes = payload.get("notes") or {}
        return cls(
            id=payload["id"],
            amount=int(payload["amount"]),
            currency=payload.get("currency", ""),
            receipt=payload.get("receipt"),
            status=payload.get("status"),
            notes=notes if isinstance(notes, dict) else {},
        )


def sign_payment(intent_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 (hex) от "{intent_id}|{payment_id}" на секрете шлюза."""
    message = f"{intent_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(intent_id: str, payment_id: str, signature: str, secret: str) -> bool:
    if not secret:
        raise ConfigurationError("Payment gateway secret is not configured")
    expected = sign_payment(intent_id, payment_id, secret)
    return hmac.compare_digest(expected.encode(), (signature or "").encode())


class PaymentGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.key_id or not self.key_secret:
            raise ConfigurationError("Payment gateway keys are not configured")
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.key_id, self.key_secret),
            transport=self._transport,
        )

    async def create_intent(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> GatewayIntent:
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        async with self._client() as client:
            try:
                response = await client.post("/orders", json=payload)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("Razorpay order creation failed: %s", exc)
                raise GatewayError(_describe(exc)) from exc

        intent = GatewayIntent.from_payload(response.json())
        logger.info("Created gateway intent %s for %s %s", intent.id, intent.amount, intent.currency)
        return intent

    async def fetch_intent(self, intent_id: str) -> GatewayIntent:
        async with self._client() as client:
            try:
                response = await client.get(f"/orders/{intent_id}")
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("Razorpay order %s lookup failed: %s", intent_id, exc)
                raise GatewayError("Failed to fetch payment order") from exc
        return GatewayIntent.from_payload(response.json())


def _describe(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            description = exc.response.json().get("error", {}).get("description")
        except ValueError:
            description = None
        if description:
            return description
    return "Failed to create order"
