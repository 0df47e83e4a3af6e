"""Seller notifications, preferences and dashboard."""
from groweasy.database import async_session_factory
from groweasy.models.notification import NotificationType
from groweasy.models.user import UserRole
from groweasy.services.notification_service import NotificationService

from conftest import auth_headers


async def _notify(user, notification_type, title):
    async with async_session_factory() as session:
        notification = await NotificationService(session).notify(
            user.id, notification_type, title, f"{title} body", {"source": "test"}
        )
        await session.commit()
    return notification


async def test_notifications_inbox(client, seller, make_user):
    user = seller["user"]
    first = await _notify(user, NotificationType.NEW_ORDER, "New order")
    await _notify(user, NotificationType.PAYOUT_COMPLETED, "Payout processed")
    await _notify(user, NotificationType.NEW_ORDER, "Another order")
    headers = seller["headers"]

    inbox = (await client.get("/api/seller/notifications", headers=headers)).json()
    assert inbox["unread_count"] == 3
    assert inbox["pagination"]["total"] == 3

    orders_only = (await client.get(
        "/api/seller/notifications", params={"type": "new_order"}, headers=headers
    )).json()
    assert orders_only["pagination"]["total"] == 2

    marked = await client.put(
        "/api/seller/notifications", json={"notification_id": str(first.id)}, headers=headers
    )
    assert marked.json() == {"message": "Notification marked as read"}

    unread = (await client.get(
        "/api/seller/notifications", params={"unread_only": "true"}, headers=headers
    )).json()
    assert unread["pagination"]["total"] == 2
    assert str(first.id) not in {n["id"] for n in unread["items"]}

    marked_all = await client.put(
        "/api/seller/notifications", json={"mark_all_as_read": True}, headers=headers
    )
    assert marked_all.json() == {"message": "2 notifications marked as read"}

    invalid = await client.put("/api/seller/notifications", json={}, headers=headers)
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "Invalid request"

    deleted = await client.delete(f"/api/seller/notifications/{first.id}", headers=headers)
    assert deleted.json() == {"message": "Notification deleted successfully"}
    assert (await client.delete(f"/api/seller/notifications/{first.id}", headers=headers)).status_code == 404

    inbox = (await client.get("/api/seller/notifications", headers=headers)).json()
    assert inbox["unread_count"] == 0
    assert inbox["pagination"]["total"] == 2


async def test_notifications_are_private(client, seller, make_user):
    other = await make_user(UserRole.SELLER)
    theirs = await _notify(other, NotificationType.SYSTEM, "Welcome")

    response = await client.put(
        "/api/seller/notifications", json={"notification_id": str(theirs.id)}, headers=seller["headers"]
    )
    assert response.status_code == 404

    mine = (await client.get("/api/seller/notifications", headers=auth_headers(other))).json()
    assert mine["unread_count"] == 1


async def test_seller_settings(client, seller):
    defaults = (await client.get("/api/seller/settings", headers=seller["headers"])).json()
    assert defaults["notifications"]["email_notifications"] is True
    assert defaults["notifications"]["sms_notifications"] is False
    assert defaults["preferences"]["currency"] == "INR"
    assert defaults["preferences"]["timezone"] == "Asia/Kolkata"

    updated = await client.put(
        "/api/seller/settings",
        json={
            "notifications": {"sms_notifications": True},
            "preferences": {"auto_approve_orders": True, "minimum_order_amount": 250},
        },
        headers=seller["headers"],
    )
    assert updated.status_code == 200

    stored = (await client.get("/api/seller/settings", headers=seller["headers"])).json()
    assert stored["notifications"]["sms_notifications"] is True
    assert stored["notifications"]["order_alerts"] is True
    assert stored["preferences"]["auto_approve_orders"] is True


async def test_seller_dashboard(client, seller, admin, make_product, checkout):
    product = await make_product(name="Clay Pot", price=600, seller_id=seller["user"].id)
    order = await checkout([(product, 2)])
    await client.put(f"/api/admin/orders/{order['id']}", json={"status": "delivered"}, headers=admin["headers"])
    await client.post(
        "/api/seller/enquiries",
        json={"product_name": "Clay Lamp", "description": "Diya", "category": "Home", "suggested_price": 120},
        headers=seller["headers"],
    )

    dashboard = (await client.get("/api/seller/dashboard", headers=seller["headers"])).json()

    assert dashboard["total_orders"] == 1
    assert dashboard["pending_products"] == 1
    assert dashboard["total_products"] == 0
    assert dashboard["total_earnings"] == 1200.0
    assert dashboard["wallet_balance"] == 1020.0
    assert dashboard["top_products"] == [
        {"product_id": str(product.id), "name": "Clay Pot", "total_sold": 2, "revenue": 1200.0}
    ]
    assert [o["id"] for o in dashboard["recent_orders"]] == [order["id"]]
    assert dashboard["affiliate_stats"]["total_links"] == 0
