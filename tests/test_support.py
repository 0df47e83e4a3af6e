"""Public forms and support tickets."""
import re

from sqlalchemy import select

from groweasy.models.support import ContactMessage, NewsletterSubscriber, SupportTicket

from conftest import fetch_one


async def test_contact_form(client, customer, admin):
    body = {
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "subject": "Bulk order",
        "message": "Do you ship to Pune?",
        "category": "business",
    }

    response = await client.post("/api/contact", json=body, headers=customer["headers"])

    assert response.status_code == 201
    assert response.json() == {"message": "Message sent successfully"}
    stored = await fetch_one(select(ContactMessage))
    assert stored.user_id == customer["user"].id
    assert stored.status == "new"

    listed = (await client.get("/api/admin/contact-messages", headers=admin["headers"])).json()
    assert [m["subject"] for m in listed["items"]] == ["Bulk order"]

    invalid = await client.post("/api/contact", json={**body, "email": "not-an-email"})
    assert invalid.status_code == 422


async def test_feedback_rating_range(client, admin):
    body = {"name": "Meera", "email": "meera@example.com", "message": "Fast delivery", "rating": 5}

    ok = await client.post("/api/feedback", json=body)
    assert ok.status_code == 201
    assert ok.json() == {"message": "Thank you for your feedback"}

    for rating in (0, 6):
        bad = await client.post("/api/feedback", json={**body, "rating": rating})
        assert bad.status_code == 400
        assert bad.json()["detail"] == "Rating must be between 1 and 5"

    listed = (await client.get("/api/admin/feedback", headers=admin["headers"])).json()
    assert [f["rating"] for f in listed["items"]] == [5]


async def test_newsletter_lifecycle(client):
    subscribed = await client.post("/api/newsletter", json={"email": "Reader@Example.com"})
    assert subscribed.status_code == 201
    assert subscribed.json() == {"message": "Subscribed successfully"}

    duplicate = await client.post("/api/newsletter", json={"email": "reader@example.com"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email already subscribed"

    left = await client.delete("/api/newsletter", params={"email": "reader@example.com"})
    assert left.json() == {"message": "Unsubscribed successfully"}
    subscriber = await fetch_one(select(NewsletterSubscriber))
    assert subscriber.is_active is False
    assert subscriber.unsubscribed_at is not None

    back = await client.post("/api/newsletter", json={"email": "reader@example.com"})
    assert back.status_code == 201
    subscriber = await fetch_one(select(NewsletterSubscriber))
    assert subscriber.is_active is True
    assert subscriber.unsubscribed_at is None

    unknown = await client.delete("/api/newsletter", params={"email": "stranger@example.com"})
    assert unknown.status_code == 404
    assert unknown.json()["detail"] == "Email not found"


async def test_support_ticket_flow(client, admin):
    created = await client.post("/api/support/tickets", json={
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "subject": "Refund not received",
        "message": "Order ORD-123456-ABCDE was cancelled last week.",
        "category": "billing",
        "priority": "high",
    })

    assert created.status_code == 201
    data = created.json()
    assert data["message"] == "Support ticket created successfully"
    assert re.fullmatch(r"TKT\d{6}[A-Z0-9]{3}", data["ticket_number"])

    listed = (await client.get(
        "/api/support/tickets", params={"priority": "high", "category": "billing"}, headers=admin["headers"]
    )).json()
    assert listed["pagination"]["total"] == 1
    ticket = listed["items"][0]
    assert ticket["status"] == "open"
    assert [m["sender"] for m in ticket["messages"]] == ["customer"]

    updated = await client.put(
        f"/api/support/tickets/{ticket['id']}",
        json={"status": "resolved", "reply": "Refund has been processed."},
        headers=admin["headers"],
    )
    assert updated.status_code == 200
    resolved = updated.json()
    assert resolved["status"] == "resolved"
    assert resolved["resolved_at"] is not None
    assert [m["sender"] for m in resolved["messages"]] == ["customer", "support"]
    assert resolved["messages"][1]["message"] == "Refund has been processed."

    stored = await fetch_one(select(SupportTicket))
    assert len(stored.messages) == 2

    open_tickets = (await client.get(
        "/api/support/tickets", params={"status": "open"}, headers=admin["headers"]
    )).json()
    assert open_tickets["items"] == []


async def test_ticket_admin_routes_are_guarded(client, customer):
    assert (await client.get("/api/support/tickets")).status_code == 401
    assert (await client.get("/api/support/tickets", headers=customer["headers"])).status_code == 403
