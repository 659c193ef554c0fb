"""
Клиент провайдера аутентификации: по bearer-токену сессии
возвращает текущего пользователя (GET /auth/v1/user).
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from brew_cafe.errors import IdentityProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None


class IdentityProvider:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._transport = transport

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """
        None, если токен недействителен или истёк.
        """
        headers = {"Authorization": f"Bearer {access_token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        async with httpx.AsyncClient(base_url=self.base_url, transport=self._transport) as client:
            try:
                response = await client.get("/auth/v1/user", headers=headers)
            except httpx.HTTPError as exc:
                logger.error("Identity provider request failed: %s", exc)
                raise IdentityProviderError() from exc

        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            logger.error("Identity provider answered %s", response.status_code)
            raise IdentityProviderError()

        data = response.json()
        if not data.get("id"):
            return None
        return AuthenticatedUser(id=str(data["id"]), email=data.get("email"))
