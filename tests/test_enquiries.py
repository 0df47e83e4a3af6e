"""Seller product enquiries and their admin review."""
from sqlalchemy import select

from groweasy.models.audit_log import AuditLog
from groweasy.models.notification import Notification

from conftest import fetch_all


def _enquiry(**overrides):
    body = {
        "product_name": "Handwoven Basket",
        "description": "Bamboo basket, medium",
        "category": "Home",
        "suggested_price": 650,
    }
    body.update(overrides)
    return body


async def test_available_products_excludes_requested_and_seller_owned(client, seller, make_product):
    curated = await make_product(name="Curated Vase")
    other = await make_product(name="Curated Bowl")
    await make_product(name="Someone Else's", seller_id=seller["user"].id)

    available = (await client.get("/api/seller/available-products", headers=seller["headers"])).json()
    assert {p["name"] for p in available["items"]} == {"Curated Vase", "Curated Bowl"}

    response = await client.post(
        "/api/seller/enquiries",
        json=_enquiry(product_id=str(curated.id), product_name=curated.name),
        headers=seller["headers"],
    )
    assert response.status_code == 201
    assert response.json()["status"] == "pending"

    available = (await client.get("/api/seller/available-products", headers=seller["headers"])).json()
    assert [p["id"] for p in available["items"]] == [str(other.id)]


async def test_duplicate_enquiry_rejected(client, seller, make_product):
    product = await make_product()
    body = _enquiry(product_id=str(product.id))

    assert (await client.post("/api/seller/enquiries", json=body, headers=seller["headers"])).status_code == 201
    again = await client.post("/api/seller/enquiries", json=body, headers=seller["headers"])

    assert again.status_code == 400
    assert again.json()["detail"] == "You have already submitted an enquiry for this product"


async def test_enquiry_for_missing_product(client, seller):
    response = await client.post(
        "/api/seller/enquiries",
        json=_enquiry(product_id="00000000-0000-0000-0000-000000000000"),
        headers=seller["headers"],
    )
    assert response.status_code == 404


async def test_approving_new_product_enquiry_creates_seller_product(client, seller, admin):
    created = await client.post("/api/seller/enquiries", json=_enquiry(), headers=seller["headers"])
    enquiry_id = created.json()["id"]

    approved = await client.put(
        f"/api/admin/enquiries/{enquiry_id}/approve",
        json={"admin_feedback": "Looks great", "stock": 15},
        headers=admin["headers"],
    )
    assert approved.status_code == 200
    data = approved.json()
    assert data["status"] == "approved"
    assert data["admin_feedback"] == "Looks great"
    product_id = data["approved_product_id"]

    product = (await client.get(f"/api/products/{product_id}")).json()
    assert product["name"] == "Handwoven Basket"
    assert product["seller_id"] == str(seller["user"].id)
    assert product["status"] == "active"
    assert product["stock"] == 15
    assert product["price"] == 650.0

    mine = (await client.get("/api/seller/products", headers=seller["headers"])).json()
    assert [p["id"] for p in mine["items"]] == [product_id]

    again = await client.put(f"/api/admin/enquiries/{enquiry_id}/approve", headers=admin["headers"])
    assert again.status_code == 400
    assert again.json()["detail"] == "Enquiry has already been reviewed"

    types = [n.type for n in await fetch_all(
        select(Notification).where(Notification.user_id == seller["user"].id)
    )]
    assert sorted(types) == ["enquiry_approved", "enquiry_submitted"]
    assert [a.action for a in await fetch_all(select(AuditLog))] == ["APPROVE_ENQUIRY"]


async def test_approving_curated_enquiry_links_existing_product(client, seller, admin, make_product):
    product = await make_product()
    created = await client.post(
        "/api/seller/enquiries",
        json=_enquiry(product_id=str(product.id)),
        headers=seller["headers"],
    )

    approved = await client.put(
        f"/api/admin/enquiries/{created.json()['id']}/approve",
        headers=admin["headers"],
    )

    assert approved.status_code == 200
    assert approved.json()["approved_product_id"] == str(product.id)
    catalog = (await client.get("/api/products")).json()
    assert catalog["pagination"]["total"] == 1


async def test_reject_enquiry(client, seller, admin):
    created = await client.post("/api/seller/enquiries", json=_enquiry(), headers=seller["headers"])

    rejected = await client.put(
        f"/api/admin/enquiries/{created.json()['id']}/reject",
        json={"admin_feedback": "Category not supported"},
        headers=admin["headers"],
    )

    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["admin_feedback"] == "Category not supported"

    listed = (await client.get(
        "/api/seller/enquiries", params={"status": "rejected"}, headers=seller["headers"]
    )).json()
    assert listed["pagination"]["total"] == 1

    admin_listed = (await client.get(
        "/api/admin/enquiries", params={"status": "pending"}, headers=admin["headers"]
    )).json()
    assert admin_listed["items"] == []
