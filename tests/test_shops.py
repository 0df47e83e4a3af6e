"""Seller shop pages: setup, public view, visits and shop orders."""
from groweasy.models.product import ProductStatus
from groweasy.models.user import UserRole

from conftest import BANK_DETAILS, auth_headers


async def test_default_shop_created_on_first_access(client, seller):
    response = await client.get("/api/seller/shop", headers=seller["headers"])

    assert response.status_code == 200
    shop = response.json()
    assert shop["shop_name"] == "Asha's Shop"
    assert shop["shop_description"] == "Welcome to my shop!"
    assert shop["customization"] == {"primaryColor": "#3B82F6", "secondaryColor": "#1F2937", "theme": "light"}
    assert shop["product_ids"] == []

    again = (await client.get("/api/seller/shop", headers=seller["headers"])).json()
    assert again["id"] == shop["id"]


async def test_update_shop_merges_customization(client, seller, make_product):
    product = await make_product()

    response = await client.put(
        "/api/seller/shop",
        json={
            "shop_name": "Asha Handicrafts",
            "product_ids": [str(product.id)],
            "customization": {"theme": "dark"},
        },
        headers=seller["headers"],
    )

    assert response.status_code == 200
    shop = response.json()
    assert shop["shop_name"] == "Asha Handicrafts"
    assert shop["shop_description"] == "Welcome to my shop!"
    assert shop["product_ids"] == [str(product.id)]
    assert shop["customization"] == {"primaryColor": "#3B82F6", "secondaryColor": "#1F2937", "theme": "dark"}

    bad_colour = await client.put(
        "/api/seller/shop",
        json={"customization": {"primaryColor": "blue"}},
        headers=seller["headers"],
    )
    assert bad_colour.status_code == 422


async def test_public_shop_page(client, make_user, make_product):
    owner = await make_user(
        UserRole.SELLER,
        first_name="Nikhil",
        last_name="Rao",
        business_info={"business_name": "Rao Traders"},
    )
    headers = auth_headers(owner)
    listed = await make_product(name="Brass Lamp")
    hidden = await make_product(name="Old Stock", status=ProductStatus.INACTIVE)
    shop = (await client.put(
        "/api/seller/shop",
        json={"product_ids": [str(listed.id), str(hidden.id)]},
        headers=headers,
    )).json()

    page = await client.get(f"/api/shop/{shop['id']}")
    assert page.status_code == 200
    assert page.json()["seller_name"] == "Nikhil Rao"
    assert page.json()["business_name"] == "Rao Traders"
    assert page.json()["shop"]["shop_name"] == "Nikhil's Shop"

    products = (await client.get(f"/api/shop/{shop['id']}/products")).json()
    assert [p["name"] for p in products["items"]] == ["Brass Lamp"]

    for _ in range(2):
        visit = await client.post(f"/api/shop/{shop['id']}/visit")
        assert visit.json() == {"message": "Visit recorded"}

    stats = (await client.get("/api/seller/shop/stats", headers=headers)).json()
    assert stats["total_visits"] == 2


async def test_inactive_shop_is_hidden(client, seller):
    shop = (await client.put(
        "/api/seller/shop", json={"is_active": False}, headers=seller["headers"]
    )).json()

    assert (await client.get(f"/api/shop/{shop['id']}")).status_code == 404
    assert (await client.post(f"/api/shop/{shop['id']}/visit")).status_code == 404


async def test_shop_order_credits_the_shop_seller(client, seller, customer, make_product, checkout):
    product = await make_product(price=1000)
    shop = (await client.put(
        "/api/seller/shop", json={"product_ids": [str(product.id)]}, headers=seller["headers"]
    )).json()

    order = await checkout([(product, 1)], headers=customer["headers"], shop_id=shop["id"])

    assert order["shop_id"] == shop["id"]
    assert order["items"][0]["seller_id"] == str(seller["user"].id)
    assert order["total"] == 1180.0

    stats = (await client.get("/api/seller/shop/stats", headers=seller["headers"])).json()
    assert stats["total_orders"] == 1
    assert stats["total_revenue"] == 1180.0

    wallet = (await client.get("/api/seller/wallet", headers=seller["headers"])).json()
    assert wallet["wallet"]["pending_earnings"] == 850.0
    assert wallet["bank_details"]["ifsc_code"] == BANK_DETAILS["ifsc_code"]

    shop_orders = (await client.get(
        "/api/seller/orders", params={"source": "shop"}, headers=seller["headers"]
    )).json()
    assert [o["id"] for o in shop_orders["items"]] == [order["id"]]
    affiliate_orders = (await client.get(
        "/api/seller/orders", params={"source": "affiliate"}, headers=seller["headers"]
    )).json()
    assert affiliate_orders["items"] == []
