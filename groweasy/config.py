from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str

    # Database Connection Pool Settings
    DB_POOL_SIZE: int = 10  # Base number of connections in pool
    DB_MAX_OVERFLOW: int = 20  # Extra connections allowed beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes

    # JWT Settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # App Settings
    APP_NAME: str = "GrowEasy Marketplace"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Razorpay Payment Gateway
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_ACCOUNT_NUMBER: str = ""  # RazorpayX account used as payout source
    RAZORPAY_API_BASE: str = "https://api.razorpay.com/v1"
    RAZORPAY_TIMEOUT_SECONDS: float = 30.0

    # Site (admin "general" settings defaults)
    SITE_NAME: str = "GrowEasy"
    SITE_DESCRIPTION: str = "Modern Multi-Vendor E-commerce Platform"
    SITE_URL: str = "https://groweasy.com"
    ADMIN_EMAIL: str = "admin@groweasy.com"
    SUPPORT_EMAIL: str = "support@groweasy.com"
    CURRENCY: str = "INR"
    TIMEZONE: str = "Asia/Kolkata"
    LANGUAGE: str = "en"

    # Payouts & pricing
    MINIMUM_PAYOUT_AMOUNT: float = 100
    PAYOUT_SCHEDULE: str = "weekly"  # daily, weekly, monthly
    PLATFORM_COMMISSION_RATE: float = 15  # Percent kept by the marketplace
    TAX_RATE: float = 18  # GST percent applied on the discounted subtotal
    SHIPPING_FEE: float = 50
    FREE_SHIPPING_THRESHOLD: float = 500

    # Feature flags (admin "features" settings defaults)
    ALLOW_SELLER_REGISTRATION: bool = True
    REQUIRE_SELLER_APPROVAL: bool = True
    ENABLE_AFFILIATE_PROGRAM: bool = True
    ENABLE_COUPONS: bool = True
    ENABLE_REVIEWS: bool = True
    ENABLE_WISHLIST: bool = True

    # Background jobs
    SCHEDULER_ENABLED: bool = True
    COUPON_EXPIRY_INTERVAL_MINUTES: int = 60

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('PAYOUT_SCHEDULE')
    @classmethod
    def validate_payout_schedule(cls, v: str) -> str:
        if v not in ("daily", "weekly", "monthly"):
            raise ValueError("PAYOUT_SCHEDULE must be daily, weekly or monthly")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return self.CORS_ORIGINS

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
