from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from brew_cafe.config import settings
from brew_cafe.crud.profile import get_profile
from brew_cafe.db.deps import get_async_session
from brew_cafe.errors import ForbiddenError, UnauthenticatedError
from brew_cafe.models import Profile, RoleEnum
from brew_cafe.services.identity import AuthenticatedUser, IdentityProvider
from brew_cafe.services.payments import PaymentGateway
from brew_cafe.services.realtime import SETTINGS_CHANNEL, OrderEventBroker
from brew_cafe.services.settings_cache import SettingsCache

bearer_scheme = HTTPBearer(auto_error=False)

identity_provider = IdentityProvider(settings.AUTH_URL, settings.AUTH_API_KEY)
payment_gateway = PaymentGateway(
    settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET, settings.RAZORPAY_API_URL
)
order_events = OrderEventBroker(settings.REDIS_URL)
settings_cache = SettingsCache(settings.DEFAULT_CAFE_NAME, settings.SETTINGS_CACHE_TTL)
order_events.on(SETTINGS_CHANNEL, settings_cache.invalidate)


def get_identity_provider() -> IdentityProvider:
    return identity_provider


def get_payment_gateway() -> PaymentGateway:
    return payment_gateway


def get_order_events() -> OrderEventBroker:
    return order_events


def get_settings_cache() -> SettingsCache:
    return settings_cache


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> AuthenticatedUser:
    """
    Текущий пользователь по токену сессии. Без валидной сессии 401.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    user = await provider.get_user(credentials.credentials)
    if user is None:
        raise UnauthenticatedError()
    return user


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> Profile:
    profile = await get_profile(db, user.id)
    if profile is None or profile.role != RoleEnum.admin:
        raise ForbiddenError()
    return profile
