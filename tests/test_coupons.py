"""Coupon administration, checkout validation and expiry."""
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from groweasy.jobs.scheduler import expire_coupons
from groweasy.models.audit_log import AuditLog
from groweasy.models.coupon import Coupon, CouponUsage

from conftest import SHIPPING_ADDRESS, fetch_all, fetch_one


def _days(n: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=n)).isoformat()


def _coupon(**overrides):
    body = {
        "code": "save10",
        "name": "Save 10%",
        "discount_type": "percentage",
        "discount_value": 10,
        "minimum_order_amount": 500,
        "maximum_discount_amount": 150,
        "valid_until": _days(30),
    }
    body.update(overrides)
    return body


async def _create(client, admin, **overrides):
    response = await client.post("/api/admin/coupons", json=_coupon(**overrides), headers=admin["headers"])
    assert response.status_code == 201, response.text
    return response.json()


async def _validate(client, code, cart_total, **extra):
    response = await client.post("/api/coupons/validate", json={"code": code, "cart_total": cart_total, **extra})
    assert response.status_code == 200
    return response.json()


async def test_percentage_coupon_capped(client, admin):
    coupon = await _create(client, admin)
    assert coupon["code"] == "SAVE10"
    assert coupon["is_active"] is True
    assert coupon["is_expired"] is False

    applied = await _validate(client, "save10", 1000)
    assert applied == {
        "valid": True,
        "code": "SAVE10",
        "message": "Coupon applied successfully",
        "discount_amount": 100.0,
        "discount_type": "percentage",
        "discount_value": 10.0,
    }

    capped = await _validate(client, "SAVE10", 5000)
    assert capped["discount_amount"] == 150.0


async def test_fixed_coupon_never_exceeds_cart(client, admin):
    await _create(client, admin, code="FLAT300", discount_type="fixed", discount_value=300,
                  minimum_order_amount=0, maximum_discount_amount=None)

    result = await _validate(client, "FLAT300", 250)

    assert result["valid"] is True
    assert result["discount_amount"] == 250.0


async def test_validation_failures(client, admin, make_product):
    scoped = await make_product(category="Books")
    await _create(client, admin)
    await _create(client, admin, code="OLD", valid_from=_days(-10), valid_until=_days(-1))
    await _create(client, admin, code="SOON", valid_from=_days(2), valid_until=_days(10))
    await _create(client, admin, code="BOOKS", minimum_order_amount=0, applicable_categories=["books"])
    await _create(client, admin, code="ONLYONE", minimum_order_amount=0,
                  applicable_products=[str(scoped.id)])

    assert (await _validate(client, "NOPE", 1000))["message"] == "Invalid coupon code"
    assert (await _validate(client, "OLD", 1000))["message"] == "Coupon has expired"
    assert (await _validate(client, "SOON", 1000))["message"] == "Coupon is not yet valid"

    too_small = await _validate(client, "SAVE10", 300)
    assert too_small["valid"] is False
    assert too_small["message"].startswith("Minimum order amount of ₹500")
    assert too_small["discount_amount"] == 0.0
    assert too_small["discount_type"] is None

    wrong_category = await _validate(client, "BOOKS", 1000, categories=["Electronics"])
    assert wrong_category["message"] == "Coupon is not applicable to these categories"
    assert (await _validate(client, "BOOKS", 1000, categories=["Books"]))["valid"] is True

    wrong_product = await _validate(
        client, "ONLYONE", 1000, product_ids=["00000000-0000-0000-0000-000000000001"]
    )
    assert wrong_product["message"] == "Coupon is not applicable to the products in your cart"


async def test_checkout_applies_coupon_and_records_usage(client, admin, customer, make_product, checkout):
    await _create(client, admin, usage_limit=5)
    product = await make_product(price=1000)

    order = await checkout([(product, 1)], headers=customer["headers"], coupon_code="save10")

    assert order["coupon_code"] == "SAVE10"
    assert order["discount"] == 100.0
    assert order["tax"] == 162.0
    assert order["shipping"] == 0.0
    assert order["total"] == 1062.0

    coupon = await fetch_one(select(Coupon))
    assert coupon.used_count == 1
    usage = await fetch_one(select(CouponUsage))
    assert str(usage.order_id) == order["id"]
    assert usage.customer_id == customer["user"].id

    again = await _validate(client, "SAVE10", 1000, customer_id=str(customer["user"].id))
    assert again["message"] == "You have already used this coupon"

    rejected = await client.post("/api/orders/create", json={
        "items": [{"product_id": str(product.id), "quantity": 1}],
        "shipping_address": SHIPPING_ADDRESS,
        "coupon_code": "SAVE10",
    }, headers=customer["headers"])
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "You have already used this coupon"


async def test_usage_limit(client, admin, make_product, checkout):
    await _create(client, admin, code="FIRST1", usage_limit=1)
    product = await make_product(price=1000)

    await checkout([(product, 1)], coupon_code="FIRST1")

    assert (await _validate(client, "FIRST1", 1000))["message"] == "Coupon usage limit reached"


async def test_unpaid_checkout_does_not_consume_coupon(client, admin, make_product, checkout):
    await _create(client, admin)
    product = await make_product(price=1000)

    await checkout([(product, 1)], pay=False, coupon_code="SAVE10")

    coupon = await fetch_one(select(Coupon))
    assert coupon.used_count == 0


async def test_coupons_disabled(client, admin):
    await _create(client, admin)
    await client.put("/api/admin/settings", json={"features": {"enable_coupons": False}}, headers=admin["headers"])

    response = await client.post("/api/coupons/validate", json={"code": "SAVE10", "cart_total": 1000})

    assert response.status_code == 403


async def test_admin_coupon_management(client, admin):
    headers = admin["headers"]
    coupon = await _create(client, admin)

    duplicate = await client.post("/api/admin/coupons", json=_coupon(code="Save10"), headers=headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Coupon code already exists"

    too_generous = await client.post(
        "/api/admin/coupons", json=_coupon(code="HUGE", discount_value=150), headers=headers
    )
    assert too_generous.status_code == 422

    updated = await client.put(
        f"/api/admin/coupons/{coupon['id']}",
        json={"name": "Festive 10%", "usage_limit": 100},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Festive 10%"
    assert updated.json()["usage_limit"] == 100

    bad_window = await client.put(
        f"/api/admin/coupons/{coupon['id']}", json={"valid_until": _days(-400)}, headers=headers
    )
    assert bad_window.status_code == 422
    assert bad_window.json()["detail"] == "valid_until must be after valid_from"

    fetched = await client.get(f"/api/admin/coupons/{coupon['id']}", headers=headers)
    assert fetched.json()["code"] == "SAVE10"

    searched = (await client.get("/api/admin/coupons", params={"search": "save"}, headers=headers)).json()
    assert searched["pagination"]["total"] == 1

    deleted = await client.delete(f"/api/admin/coupons/{coupon['id']}", headers=headers)
    assert deleted.json() == {"message": "Coupon deleted successfully"}
    assert (await client.get(f"/api/admin/coupons/{coupon['id']}", headers=headers)).status_code == 404

    actions = [log.action for log in await fetch_all(select(AuditLog).order_by(AuditLog.created_at))]
    assert actions == ["CREATE_COUPON", "UPDATE_COUPON", "DELETE_COUPON"]


async def test_coupon_window_starts_now_when_unset(client, admin):
    response = await client.post(
        "/api/admin/coupons", json=_coupon(code="STALE", valid_until=_days(-5)), headers=admin["headers"]
    )

    assert response.status_code == 422
    assert await fetch_all(select(Coupon)) == []


async def test_coupon_update_rules(client, admin):
    headers = admin["headers"]
    coupon = await _create(client, admin)
    flat = await _create(client, admin, code="FLAT300", discount_type="fixed", discount_value=300,
                         maximum_discount_amount=None)

    for field in ("valid_until", "name", "discount_value", "is_active"):
        cleared = await client.put(f"/api/admin/coupons/{coupon['id']}", json={field: None}, headers=headers)
        assert cleared.status_code == 422, field

    too_generous = await client.put(
        f"/api/admin/coupons/{coupon['id']}", json={"discount_value": 150}, headers=headers
    )
    assert too_generous.status_code == 422
    assert too_generous.json()["detail"] == "Percentage discount cannot exceed 100"

    switched = await client.put(
        f"/api/admin/coupons/{flat['id']}", json={"discount_type": "percentage"}, headers=headers
    )
    assert switched.status_code == 422
    assert switched.json()["detail"] == "Percentage discount cannot exceed 100"

    stored = {c.code: (c.discount_type, c.valid_until is not None) for c in await fetch_all(select(Coupon))}
    assert stored == {"SAVE10": ("percentage", True), "FLAT300": ("fixed", True)}


async def test_expire_coupons_job(client, admin):
    await _create(client, admin)
    await _create(client, admin, code="GONE", valid_from=_days(-10), valid_until=_days(-1))

    expired = (await client.get(
        "/api/admin/coupons", params={"status": "expired"}, headers=admin["headers"]
    )).json()
    assert [c["code"] for c in expired["items"]] == ["GONE"]

    assert await expire_coupons() == 1
    assert await expire_coupons() == 0

    coupons = {c.code: c.is_active for c in await fetch_all(select(Coupon))}
    assert coupons == {"SAVE10": True, "GONE": False}

    active = (await client.get(
        "/api/admin/coupons", params={"status": "active"}, headers=admin["headers"]
    )).json()
    assert [c["code"] for c in active["items"]] == ["SAVE10"]
