"""Money helpers, identifiers, pricing rules and scheduler intervals."""
import re
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from groweasy.core.utils import (
    as_utc,
    generate_affiliate_code,
    generate_order_number,
    generate_ticket_number,
    percent_of,
    round_money,
    to_paise,
    total_pages,
)
from groweasy.jobs.scheduler import payout_interval_days
from groweasy.models.coupon import Coupon, DiscountType
from groweasy.services.coupon_service import calculate_discount
from groweasy.services.order_service import calculate_totals, seller_share


def test_round_money_half_up():
    assert round_money(Decimal("10.005")) == Decimal("10.01")
    assert round_money(2.675) == Decimal("2.68")
    assert round_money(7) == Decimal("7.00")


def test_percent_of_and_paise():
    assert percent_of(Decimal("999.99"), 18) == Decimal("180.00")
    assert to_paise(Decimal("1180")) == 118000
    assert to_paise(Decimal("0.5")) == 50


def test_as_utc_handles_naive_values():
    naive = datetime(2026, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo == timezone.utc
    ist = timezone(timedelta(hours=5, minutes=30))
    assert as_utc(datetime(2026, 1, 1, 17, 30, tzinfo=ist)) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert as_utc(None) is None


def test_identifier_formats():
    assert re.fullmatch(r"ORD-\d{6}-[A-Z0-9]{5}", generate_order_number())
    assert re.fullmatch(r"TKT\d{6}[A-Z0-9]{3}", generate_ticket_number())

    seller_id, product_id = uuid.uuid4(), uuid.uuid4()
    code = generate_affiliate_code(seller_id, product_id)
    assert re.fullmatch(rf"{seller_id.hex[-6:]}-{product_id.hex[-6:]}-\d{{6}}", code)


def test_total_pages():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def _coupon(discount_type, value, cap=None):
    return Coupon(
        code="TEST",
        name="Test",
        discount_type=discount_type.value,
        discount_value=Decimal(str(value)),
        maximum_discount_amount=Decimal(str(cap)) if cap is not None else None,
    )


@pytest.mark.parametrize("discount_type, value, cap, cart, expected", [
    (DiscountType.PERCENTAGE, 10, None, "1000", "100.00"),
    (DiscountType.PERCENTAGE, 10, 50, "1000", "50.00"),
    (DiscountType.PERCENTAGE, 12.5, None, "99.99", "12.50"),
    (DiscountType.FIXED, 200, None, "1000", "200.00"),
    (DiscountType.FIXED, 200, None, "150", "150.00"),
])
def test_calculate_discount(discount_type, value, cap, cart, expected):
    assert calculate_discount(_coupon(discount_type, value, cap), Decimal(cart)) == Decimal(expected)


def test_calculate_totals():
    assert calculate_totals(Decimal("1000"), Decimal("0")) == {
        "subtotal": Decimal("1000.00"),
        "discount": Decimal("0.00"),
        "tax": Decimal("180.00"),
        "shipping": Decimal("0.00"),
        "total": Decimal("1180.00"),
    }

    small = calculate_totals(Decimal("400"), Decimal("0"))
    assert small["shipping"] == Decimal("50.00")
    assert small["total"] == Decimal("522.00")

    # Free shipping is judged before the discount
    discounted = calculate_totals(Decimal("500"), Decimal("100"))
    assert discounted["shipping"] == Decimal("0.00")
    assert discounted["tax"] == Decimal("72.00")
    assert discounted["total"] == Decimal("472.00")

    # Discount never exceeds the subtotal
    capped = calculate_totals(Decimal("300"), Decimal("1000"))
    assert capped["discount"] == Decimal("300.00")
    assert capped["total"] == Decimal("50.00")


def test_seller_share():
    assert seller_share(Decimal("1000")) == Decimal("850.00")
    assert seller_share(Decimal("99.99")) == Decimal("84.99")


def test_payout_interval_days():
    assert payout_interval_days("daily") == 1
    assert payout_interval_days("weekly") == 7
    assert payout_interval_days("monthly") == 30
    assert payout_interval_days("fortnightly") == 7
