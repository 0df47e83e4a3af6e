"""Affiliate links: creation, click tracking and commission on paid orders."""
from sqlalchemy import select

from groweasy.models.product import ProductStatus
from groweasy.models.wallet import WalletTransaction

from conftest import fetch_one


async def _create_link(client, seller, product):
    return await client.post(
        "/api/seller/affiliate-links",
        json={"product_id": str(product.id)},
        headers=seller["headers"],
    )


async def test_create_affiliate_link(client, seller, make_product):
    product = await make_product(name="Smart Watch", affiliate_percentage=12)

    response = await _create_link(client, seller, product)

    assert response.status_code == 201
    link = response.json()
    assert link["product_id"] == str(product.id)
    assert link["commission_rate"] == 12.0
    assert link["clicks"] == 0
    assert link["conversion_rate"] == 0.0
    assert link["product"]["name"] == "Smart Watch"
    assert link["url"] == f"https://groweasy.com/products/{product.id}?ref={link['affiliate_code']}"
    assert link["affiliate_code"].startswith(seller["user"].id.hex[-6:] + "-" + product.id.hex[-6:] + "-")

    listed = (await client.get("/api/seller/affiliate-links", headers=seller["headers"])).json()
    assert [item["id"] for item in listed["items"]] == [link["id"]]


async def test_one_link_per_product(client, seller, make_product):
    product = await make_product()

    assert (await _create_link(client, seller, product)).status_code == 201
    again = await _create_link(client, seller, product)

    assert again.status_code == 400
    assert again.json()["detail"] == "Affiliate link already exists for this product"


async def test_inactive_product_cannot_be_promoted(client, seller, make_product):
    product = await make_product(status=ProductStatus.INACTIVE)

    response = await _create_link(client, seller, product)

    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found or not active"


async def test_links_blocked_while_program_disabled(client, seller, admin, make_product):
    product = await make_product()
    switched = await client.put(
        "/api/admin/settings",
        json={"features": {"enable_affiliate_program": False}},
        headers=admin["headers"],
    )
    assert switched.status_code == 200

    response = await _create_link(client, seller, product)

    assert response.status_code == 403
    assert response.json()["detail"] == "This feature is currently disabled: enable_affiliate_program"


async def test_click_tracking(client, seller, make_product):
    product = await make_product()
    code = (await _create_link(client, seller, product)).json()["affiliate_code"]

    for _ in range(3):
        followed = await client.get(f"/api/affiliate/{code}")
        assert followed.status_code == 200

    assert followed.json() == {
        "affiliate_code": code,
        "product_id": str(product.id),
        "redirect_url": f"https://groweasy.com/products/{product.id}?ref={code}",
    }
    link = (await client.get("/api/seller/affiliate-links", headers=seller["headers"])).json()["items"][0]
    assert link["clicks"] == 3

    missing = await client.get("/api/affiliate/does-not-exist")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Affiliate link not found"


async def test_conversion_credits_commission(client, seller, customer, make_product, checkout):
    promoted = await make_product(price=1000, affiliate_percentage=10)
    other = await make_product(price=400)
    code = (await _create_link(client, seller, promoted)).json()["affiliate_code"]
    await client.get(f"/api/affiliate/{code}")

    order = await checkout([(promoted, 2), (other, 1)], headers=customer["headers"], affiliate_code=code)

    assert order["affiliate_link_id"] is not None
    link = (await client.get("/api/seller/affiliate-links", headers=seller["headers"])).json()["items"][0]
    assert link["conversions"] == 1
    assert link["earnings"] == 200.0
    assert link["conversion_rate"] == 100.0

    credit = await fetch_one(select(WalletTransaction))
    assert credit.status == "pending"
    assert str(credit.order_id) == order["id"]

    wallet = (await client.get("/api/seller/wallet", headers=seller["headers"])).json()["wallet"]
    assert wallet["pending_earnings"] == 200.0
    assert wallet["balance"] == 0.0


async def test_unknown_affiliate_code_is_ignored_at_checkout(client, make_product, checkout):
    product = await make_product()

    order = await checkout([(product, 1)], affiliate_code="nobody-000000-000000")

    assert order["affiliate_link_id"] is None
    assert order["payment_status"] == "completed"
