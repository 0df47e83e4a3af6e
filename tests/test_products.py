"""Storefront catalog and admin product management."""
from sqlalchemy import select

from groweasy.models.audit_log import AuditLog
from groweasy.models.product import ProductStatus

from conftest import fetch_all


async def test_storefront_lists_only_active_products(client, make_product):
    await make_product(name="Steel Bottle", price=450)
    await make_product(name="Copper Jug", price=900)
    await make_product(name="Hidden Draft", status=ProductStatus.INACTIVE)

    response = await client.get("/api/products", params={"sort": "price", "order": "asc"})

    assert response.status_code == 200
    data = response.json()
    assert [p["name"] for p in data["items"]] == ["Steel Bottle", "Copper Jug"]
    assert data["items"][0]["price"] == 450.0
    assert data["pagination"] == {"page": 1, "limit": 12, "total": 2, "pages": 1}


async def test_storefront_filters_and_search(client, make_product):
    await make_product(name="Yoga Mat", category="Fitness", tags=["eco", "rubber"], featured=True)
    await make_product(name="Dumbbell Set", category="Fitness")
    await make_product(name="Desk Lamp", category="Home", description="Warm LED light")

    fitness = (await client.get("/api/products", params={"category": "Fitness"})).json()
    assert {p["name"] for p in fitness["items"]} == {"Yoga Mat", "Dumbbell Set"}

    featured = (await client.get("/api/products", params={"featured": "true"})).json()
    assert [p["name"] for p in featured["items"]] == ["Yoga Mat"]

    by_description = (await client.get("/api/products", params={"search": "led"})).json()
    assert [p["name"] for p in by_description["items"]] == ["Desk Lamp"]

    by_tag = (await client.get("/api/products", params={"search": "rubber"})).json()
    assert [p["name"] for p in by_tag["items"]] == ["Yoga Mat"]


async def test_pagination(client, make_product):
    for price in (100, 200, 300, 400, 500):
        await make_product(price=price)

    response = await client.get("/api/products", params={"sort": "price", "order": "asc", "page": 2, "limit": 2})

    data = response.json()
    assert [p["price"] for p in data["items"]] == [300.0, 400.0]
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}


async def test_categories_with_counts(client, make_product):
    await make_product(category="Kitchen")
    await make_product(category="Kitchen")
    await make_product(category="Garden")
    await make_product(category="Archived", status=ProductStatus.INACTIVE)

    response = await client.get("/api/categories")

    assert response.status_code == 200
    assert response.json()["categories"] == [
        {"name": "Kitchen", "count": 2},
        {"name": "Garden", "count": 1},
    ]


async def test_get_product(client, make_product):
    product = await make_product(name="Tea Kettle")

    found = await client.get(f"/api/products/{product.id}")
    assert found.status_code == 200
    assert found.json()["name"] == "Tea Kettle"

    missing = await client.get("/api/products/00000000-0000-0000-0000-000000000000")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Product not found"


async def test_admin_product_crud_is_audited(client, admin):
    headers = admin["headers"]
    body = {
        "name": "Ceramic Planter",
        "description": "Hand-glazed planter",
        "price": 799,
        "stock": 25,
        "sku": "PLANT-001",
        "category": "Garden",
        "tags": ["ceramic"],
    }

    created = await client.post("/api/admin/products", json=body, headers=headers)
    assert created.status_code == 201
    product = created.json()
    assert product["status"] == "active"
    assert product["seller_id"] is None
    assert product["affiliate_percentage"] == 5.0

    duplicate = await client.post("/api/admin/products", json=body, headers=headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Product with this SKU already exists"

    updated = await client.put(
        f"/api/admin/products/{product['id']}",
        json={"price": 699, "status": "inactive"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == 699.0
    assert updated.json()["status"] == "inactive"

    listed = (await client.get("/api/admin/products", params={"status": "inactive"}, headers=headers)).json()
    assert [p["sku"] for p in listed["items"]] == ["PLANT-001"]

    deleted = await client.delete(f"/api/admin/products/{product['id']}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/products/{product['id']}")).status_code == 404

    actions = [log.action for log in await fetch_all(select(AuditLog).order_by(AuditLog.created_at))]
    assert actions == ["CREATE_PRODUCT", "UPDATE_PRODUCT", "DELETE_PRODUCT"]


async def test_admin_product_validation(client, admin):
    response = await client.post(
        "/api/admin/products",
        json={"name": "Bad", "description": "x", "price": 0, "sku": "BAD", "category": "Misc"},
        headers=admin["headers"],
    )
    assert response.status_code == 422


async def test_admin_update_cannot_clear_required_fields(client, admin, make_product):
    product = await make_product(name="Copper Bottle", price=899)
    url = f"/api/admin/products/{product.id}"

    for field in ("name", "description", "price", "category", "stock", "status"):
        response = await client.put(url, json={field: None}, headers=admin["headers"])
        assert response.status_code == 422, field

    cleared = await client.put(url, json={"subcategory": None, "seo_title": None}, headers=admin["headers"])
    assert cleared.status_code == 200

    stored = (await client.get(f"/api/products/{product.id}")).json()
    assert stored["name"] == "Copper Bottle"
    assert stored["price"] == 899.0
