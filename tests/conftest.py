import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_secret")

from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from brew_cafe.api.deps import (
    get_identity_provider,
    get_order_events,
    get_payment_gateway,
    get_settings_cache,
)
from brew_cafe.config import settings
from brew_cafe.db.base import Base
from brew_cafe.db.deps import get_async_session
from brew_cafe.errors import GatewayError
from brew_cafe.main import app
from brew_cafe.models import (
    CafeTable,
    Category,
    Coupon,
    DiscountTypeEnum,
    MenuItem,
    Profile,
    RoleEnum,
)
from brew_cafe.services.identity import AuthenticatedUser
from brew_cafe.services.payments import GatewayIntent, sign_payment
from brew_cafe.services.realtime import OrderEventBroker
from brew_cafe.services.settings_cache import SettingsCache

ADMIN_TOKEN = "admin-token"
CUSTOMER_TOKEN = "customer-token"
OTHER_TOKEN = "other-token"


class FakeIdentityProvider:
    def __init__(self):
        self.users = {}

    def add(self, token, user_id, email=None):
        self.users[token] = AuthenticatedUser(id=user_id, email=email)

    async def get_user(self, access_token):
        return self.users.get(access_token)


class FakeGateway:
    def __init__(self):
        self.intents = {}
        self.fail = False

    async def create_intent(self, amount, currency, receipt, notes=None):
        if self.fail:
            raise GatewayError("Gateway unavailable")
        intent = GatewayIntent(
            id=f"order_test{len(self.intents) + 1}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
            notes=notes or {},
        )
        self.intents[intent.id] = intent
        return intent

    async def fetch_intent(self, intent_id):
        if intent_id not in self.intents:
            raise GatewayError("Failed to fetch payment order")
        return self.intents[intent_id]

    def register(self, intent_id, amount, currency="INR"):
        self.intents[intent_id] = GatewayIntent(id=intent_id, amount=amount, currency=currency)


def sign(intent_id, payment_id):
    return sign_payment(intent_id, payment_id, settings.RAZORPAY_KEY_SECRET)


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity():
    provider = FakeIdentityProvider()
    provider.add(ADMIN_TOKEN, "admin-1", "boss@brew.test")
    provider.add(CUSTOMER_TOKEN, "cust-1", "alice@brew.test")
    provider.add(OTHER_TOKEN, "cust-2", "bob@brew.test")
    return provider


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def events():
    return OrderEventBroker()


@pytest.fixture
def settings_cache():
    return SettingsCache("The Brew")


@pytest_asyncio.fixture
async def client(session_factory, identity, gateway, events, settings_cache):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_order_events] = lambda: events
    app.dependency_overrides[get_settings_cache] = lambda: settings_cache

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seed(db):
    """Меню, стол, купоны и профиль администратора."""
    drinks = Category(name="Drinks", sort_order=1)
    food = Category(name="Food", sort_order=2)
    db.add_all([drinks, food])
    await db.flush()

    latte = MenuItem(category_id=drinks.id, name="Latte", price=Decimal("100.00"), available=True)
    sandwich = MenuItem(category_id=food.id, name="Sandwich", price=Decimal("150.00"), available=True)
    muffin = MenuItem(category_id=food.id, name="Muffin", price=Decimal("80.00"), available=False)
    table = CafeTable(table_number=4, capacity=2, is_available=True)
    flat50 = Coupon(
        code="FLAT50",
        discount_type=DiscountTypeEnum.fixed,
        discount_value=Decimal("50"),
        min_order=Decimal("0"),
        max_uses=10,
        used_count=0,
        is_active=True,
    )
    save20 = Coupon(
        code="SAVE20",
        discount_type=DiscountTypeEnum.percent,
        discount_value=Decimal("20"),
        min_order=Decimal("0"),
        max_uses=10,
        used_count=0,
        is_active=True,
    )
    admin = Profile(id="admin-1", email="boss@brew.test", full_name="boss", role=RoleEnum.admin)
    db.add_all([latte, sandwich, muffin, table, flat50, save20, admin])
    await db.commit()

    return SimpleNamespace(
        drinks=drinks,
        food=food,
        latte=latte,
        sandwich=sandwich,
        muffin=muffin,
        table=table,
        flat50=flat50,
        save20=save20,
        admin=admin,
    )
