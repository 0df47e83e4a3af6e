"""Small helpers shared by models and services."""
import math
import secrets
import string
import time
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
import uuid

TWO_PLACES = Decimal("0.01")
_UPPER_ALNUM = string.ascii_uppercase + string.digits


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_decimal(value: Union[Decimal, float, int, str, None]) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Union[Decimal, float, int]) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percent_of(amount: Union[Decimal, float, int], rate: Union[Decimal, float, int]) -> Decimal:
    """amount * rate / 100, rounded to paise."""
    return round_money(to_decimal(amount) * to_decimal(rate) / Decimal(100))


def to_paise(amount: Union[Decimal, float, int]) -> int:
    """Razorpay expects integer amounts in the smallest currency unit."""
    return int(round_money(amount) * 100)


def _timestamp_tail(length: int = 6) -> str:
    return str(int(time.time() * 1000))[-length:]


def generate_order_number() -> str:
    """ORD-<last 6 digits of epoch ms>-<5 random uppercase alphanumerics>."""
    suffix = "".join(secrets.choice(_UPPER_ALNUM) for _ in range(5))
    return f"ORD-{_timestamp_tail()}-{suffix}"


def generate_ticket_number() -> str:
    """TKT<last 6 digits of epoch ms><3 random uppercase alphanumerics>."""
    suffix = "".join(secrets.choice(_UPPER_ALNUM) for _ in range(3))
    return f"TKT{_timestamp_tail()}{suffix}"


def generate_affiliate_code(seller_id: uuid.UUID, product_id: uuid.UUID) -> str:
    """<last 6 of seller id>-<last 6 of product id>-<last 6 digits of epoch ms>."""
    return f"{seller_id.hex[-6:]}-{product_id.hex[-6:]}-{_timestamp_tail()}"


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
