"""Registration, login, seller approval and role guards."""
from sqlalchemy import select

from groweasy.models.audit_log import AuditLog
from groweasy.models.notification import Notification
from groweasy.models.user import UserRole, UserStatus
from groweasy.models.wallet import Wallet

from conftest import PASSWORD, auth_headers, fetch_all


def _register_body(email, role="customer"):
    return {
        "email": email,
        "password": PASSWORD,
        "first_name": "Meera",
        "last_name": "Iyer",
        "role": role,
    }


async def test_customer_registration_returns_token(client):
    response = await client.post("/api/auth/register", json=_register_body("Meera@GrowEasy.in"))

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Registration successful"
    assert data["access_token"]
    assert data["user"]["email"] == "meera@groweasy.in"
    assert data["user"]["role"] == "customer"
    assert data["user"]["status"] == "active"

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "meera@groweasy.in"


async def test_duplicate_email_rejected(client):
    await client.post("/api/auth/register", json=_register_body("dup@groweasy.in"))
    response = await client.post("/api/auth/register", json=_register_body("dup@groweasy.in"))

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


async def test_admin_role_cannot_self_register(client):
    response = await client.post("/api/auth/register", json=_register_body("boss@groweasy.in", role="admin"))
    assert response.status_code == 422


async def test_seller_waits_for_approval_then_logs_in(client, admin):
    response = await client.post("/api/auth/register", json=_register_body("shop@groweasy.in", role="seller"))
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Registration successful. Awaiting approval."
    assert data["access_token"] is None
    assert data["user"]["status"] == "pending"
    seller_id = data["user"]["id"]

    login = await client.post("/api/auth/login", json={"email": "shop@groweasy.in", "password": PASSWORD})
    assert login.status_code == 403
    assert "pending approval" in login.json()["detail"]

    approve = await client.put(f"/api/admin/sellers/{seller_id}/approve", headers=admin["headers"])
    assert approve.status_code == 200
    assert approve.json()["status"] == "approved"

    login = await client.post("/api/auth/login", json={"email": "shop@groweasy.in", "password": PASSWORD})
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "seller"

    wallets = await fetch_all(select(Wallet))
    assert [str(w.seller_id) for w in wallets] == [seller_id]
    notifications = await fetch_all(select(Notification))
    assert [n.type for n in notifications] == ["account_approved"]
    audit = await fetch_all(select(AuditLog))
    assert [a.action for a in audit] == ["APPROVE_SELLER"]


async def test_rejected_seller_cannot_log_in(client, make_user, admin):
    pending = await make_user(UserRole.SELLER, status=UserStatus.PENDING, email="nope@groweasy.in")

    response = await client.put(
        f"/api/admin/sellers/{pending.id}/reject",
        json={"reason": "Incomplete documents"},
        headers=admin["headers"],
    )
    assert response.status_code == 200
    assert response.json()["rejection_reason"] == "Incomplete documents"

    login = await client.post("/api/auth/login", json={"email": "nope@groweasy.in", "password": PASSWORD})
    assert login.status_code == 403
    assert "rejected" in login.json()["detail"]


async def test_invalid_credentials(client, customer):
    response = await client.post(
        "/api/auth/login",
        json={"email": customer["user"].email, "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


async def test_missing_or_bad_token(client):
    assert (await client.get("/api/auth/me")).status_code == 401
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"


async def test_role_guards(client, customer, seller, make_user):
    assert (await client.get("/api/admin/dashboard", headers=customer["headers"])).status_code == 403
    assert (await client.get("/api/seller/dashboard", headers=customer["headers"])).status_code == 403
    assert (await client.get("/api/admin/dashboard", headers=seller["headers"])).status_code == 403

    pending = await make_user(UserRole.SELLER, status=UserStatus.PENDING)
    response = await client.get("/api/seller/dashboard", headers=auth_headers(pending))
    assert response.status_code == 403
    assert "pending approval" in response.json()["detail"]


async def test_profile_update_and_password_change(client, customer):
    headers = customer["headers"]
    response = await client.put(
        "/api/auth/profile",
        json={"first_name": "Kiran", "phone": "9000000000"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["first_name"] == "Kiran"
    assert response.json()["last_name"] == "Sharma"

    wrong = await client.post(
        "/api/auth/change-password",
        json={"current_password": "nope", "new_password": "Another1!"},
        headers=headers,
    )
    assert wrong.status_code == 400

    ok = await client.post(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "Another1!"},
        headers=headers,
    )
    assert ok.status_code == 200

    login = await client.post(
        "/api/auth/login",
        json={"email": customer["user"].email, "password": "Another1!"},
    )
    assert login.status_code == 200


async def test_deactivated_user_is_blocked(client, customer, admin):
    response = await client.put(
        f"/api/admin/users/{customer['user'].id}/status",
        json={"status": "rejected"},
        headers=admin["headers"],
    )
    assert response.status_code == 200

    me = await client.get("/api/auth/me", headers=customer["headers"])
    assert me.status_code == 403
    assert me.json()["detail"] == "User account is deactivated"
