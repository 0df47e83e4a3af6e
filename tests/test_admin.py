"""Admin back office: sellers, users, platform settings, audit trail and reporting."""
from sqlalchemy.exc import OperationalError

from groweasy.models.user import UserRole, UserStatus


async def test_seller_queue(client, admin, make_user):
    await make_user(UserRole.SELLER, status=UserStatus.PENDING, email="queue@groweasy.in", first_name="Pooja")
    await make_user(UserRole.SELLER, email="live@groweasy.in")
    await make_user(UserRole.CUSTOMER)

    pending = (await client.get(
        "/api/admin/sellers", params={"status": "pending"}, headers=admin["headers"]
    )).json()
    assert [s["email"] for s in pending["items"]] == ["queue@groweasy.in"]

    searched = (await client.get(
        "/api/admin/sellers", params={"search": "pooja"}, headers=admin["headers"]
    )).json()
    assert searched["pagination"]["total"] == 1

    everyone = (await client.get("/api/admin/sellers", headers=admin["headers"])).json()
    assert everyone["pagination"]["total"] == 2


async def test_approving_a_customer_fails(client, admin, customer):
    response = await client.put(
        f"/api/admin/sellers/{customer['user'].id}/approve", headers=admin["headers"]
    )
    assert response.status_code == 404


async def test_user_listing_and_status(client, admin, customer):
    customers = (await client.get(
        "/api/admin/users", params={"role": "customer"}, headers=admin["headers"]
    )).json()
    assert [u["id"] for u in customers["items"]] == [str(customer["user"].id)]
    assert "password_hash" not in customers["items"][0]

    response = await client.put(
        f"/api/admin/users/{customer['user'].id}/status",
        json={"status": "rejected"},
        headers=admin["headers"],
    )
    assert response.json()["status"] == "rejected"

    logs = (await client.get(
        "/api/admin/audit-logs", params={"action": "UPDATE_USER_STATUS"}, headers=admin["headers"]
    )).json()
    assert logs["pagination"]["total"] == 1
    entry = logs["items"][0]
    assert entry["details"] == {"from": "active", "to": "rejected"}
    assert entry["target_id"] == str(customer["user"].id)
    assert entry["admin_id"] == str(admin["user"].id)


async def test_settings_defaults_hide_secret(client, admin):
    response = await client.get("/api/admin/settings", headers=admin["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["payment"]["razorpay_key_secret"] == "***hidden***"
    assert data["payment"]["razorpay_key_id"] == "rzp_test_groweasy"
    assert data["payment"]["minimum_payout_amount"] == 100.0
    assert data["payment"]["payout_schedule"] == "weekly"
    assert data["features"]["enable_affiliate_program"] is True
    assert data["general"]["currency"] == "INR"
    assert "rzp_test_secret" not in response.text


async def test_settings_update_merges_sections(client, admin):
    headers = admin["headers"]

    first = await client.put(
        "/api/admin/settings",
        json={"general": {"site_name": "GrowEasy Bazaar"}, "payment": {"payout_schedule": "daily"}},
        headers=headers,
    )
    assert first.status_code == 200

    second = await client.put(
        "/api/admin/settings", json={"general": {"support_email": "help@groweasy.in"}}, headers=headers
    )
    data = second.json()
    assert data["general"]["site_name"] == "GrowEasy Bazaar"
    assert data["general"]["support_email"] == "help@groweasy.in"
    assert data["payment"]["payout_schedule"] == "daily"
    assert data["payment"]["razorpay_key_secret"] == "***hidden***"

    rejected = await client.put(
        "/api/admin/settings", json={"payment": {"payout_schedule": "hourly"}}, headers=headers
    )
    assert rejected.status_code == 422

    logs = (await client.get(
        "/api/admin/audit-logs", params={"target": "settings"}, headers=headers
    )).json()
    assert logs["pagination"]["total"] == 2


async def test_admin_dashboard(client, admin, seller, customer, make_user, make_product, checkout):
    await make_user(UserRole.SELLER, status=UserStatus.PENDING)
    product = await make_product(price=1000, seller_id=seller["user"].id)
    order = await checkout([(product, 1)], headers=customer["headers"])
    await client.put(f"/api/admin/orders/{order['id']}", json={"status": "delivered"}, headers=admin["headers"])

    dashboard = (await client.get("/api/admin/dashboard", headers=admin["headers"])).json()

    assert dashboard["total_users"] == 1
    assert dashboard["total_sellers"] == 1
    assert dashboard["pending_sellers"] == 1
    assert dashboard["total_products"] == 1
    assert dashboard["total_orders"] == 1
    assert dashboard["total_revenue"] == 1180.0
    assert [o["order_number"] for o in dashboard["recent_orders"]] == [order["order_number"]]
    assert len(dashboard["recent_sellers"]) == 2


async def test_analytics(client, admin, make_product, checkout):
    mug = await make_product(name="Mug", price=250, category="Kitchen")
    plate = await make_product(name="Plate", price=300, category="Kitchen")
    await make_product(name="Rake", category="Garden")
    await checkout([(mug, 3)])
    await checkout([(plate, 1)])

    analytics = (await client.get("/api/admin/analytics", headers=admin["headers"])).json()

    assert analytics["sales"]["total"] == 0.0
    assert analytics["products"]["total"] == 3
    assert analytics["products"]["by_category"][0] == {"category": "Kitchen", "count": 2}
    assert analytics["products"]["top_selling"][0]["name"] == "Mug"
    assert analytics["products"]["top_selling"][0]["total_sold"] == 3
    assert analytics["users"]["by_role"] == [{"role": "admin", "count": 1}]
    assert analytics["coupons"] == {"total_coupons": 0, "active_coupons": 0, "total_used": 0}
    assert analytics["payouts"] == {"pending": 0.0, "completed": 0.0}


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "connected"


async def test_health_when_database_is_down(client, monkeypatch):
    def unreachable():
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("connect to 10.0.0.5:5432 refused"))

    monkeypatch.setattr("groweasy.main.async_session_factory", unreachable)

    response = await client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
    assert response.json()["database"] == "disconnected"
    assert "10.0.0.5" not in response.text
