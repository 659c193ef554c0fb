from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    REDIS_URL: Optional[str] = None
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # hosted identity provider (session lookup by bearer token)
    AUTH_URL: str = "http://localhost:54321"
    AUTH_API_KEY: str = ""

    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"
    PAYMENT_VERIFY_INTENT_AMOUNT: bool = True
    DEFAULT_CURRENCY: str = "INR"

    TAX_RATE: Decimal = Decimal("0.05")
    DEFAULT_CAFE_NAME: str = "The Brew"
    SETTINGS_CACHE_TTL: float = 30.0

    class Config:
        env_file = ".env"


settings = Settings()
