"""
Shared fixtures for the API test suite.

The app runs in-process over httpx's ASGI transport against a throwaway
SQLite database. Razorpay is replaced by in-memory fakes through
FastAPI dependency overrides; signatures are still real HMACs so the
verification path is exercised end to end.
"""
import hashlib
import hmac
import itertools
import os
import tempfile
from decimal import Decimal

_TEST_DIR = tempfile.mkdtemp(prefix="groweasy-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-for-jwt-signing"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_groweasy"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["RAZORPAY_ACCOUNT_NUMBER"] = "2323230041626905"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from groweasy import models  # noqa: E402,F401
from groweasy.core.exceptions import PaymentGatewayError  # noqa: E402
from groweasy.core.security import get_password_hash  # noqa: E402
from groweasy.core.utils import to_paise  # noqa: E402
from groweasy.database import Base, engine, async_session_factory  # noqa: E402
from groweasy.main import app  # noqa: E402
from groweasy.models.product import Product, ProductStatus  # noqa: E402
from groweasy.models.user import User, UserRole, UserStatus  # noqa: E402
from groweasy.services.auth_service import AuthService  # noqa: E402
from groweasy.services.payment_service import PaymentService, get_payment_service  # noqa: E402
from groweasy.services.payout_gateway import get_payout_client  # noqa: E402

PASSWORD = "Passw0rd!"
BANK_DETAILS = {
    "account_number": "123456789012",
    "ifsc_code": "HDFC0001234",
    "account_holder_name": "Asha Sharma",
    "bank_name": "HDFC Bank",
}
SHIPPING_ADDRESS = {
    "first_name": "Ravi",
    "last_name": "Kumar",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zip_code": "560001",
    "country": "India",
    "phone": "9876543210",
}

# Hashing once keeps bcrypt out of every fixture
_PASSWORD_HASH = get_password_hash(PASSWORD)
_counter = itertools.count(1)


def sign(razorpay_order_id: str, razorpay_payment_id: str) -> str:
    return hmac.new(
        os.environ["RAZORPAY_KEY_SECRET"].encode(),
        f"{razorpay_order_id}|{razorpay_payment_id}".encode(),
        hashlib.sha256,
    ).hexdigest()


class FakePaymentService(PaymentService):
    """Razorpay orders without the network."""

    def __init__(self):
        super().__init__()
        self.created = []

    def create_order(self, amount, receipt, currency="INR", notes=None):
        entity = {
            "id": f"order_test{next(_counter):06d}",
            "entity": "order",
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
            "status": "created",
        }
        self.created.append(entity)
        return entity


class FakePayoutClient:
    """RazorpayX payouts without the network; set `fail` to simulate a rejection."""

    def __init__(self):
        self.fail = False
        self.calls = []

    async def create_payout(self, amount, bank_details, reference_id, narration=None, contact=None):
        self.calls.append({"amount": amount, "bank_details": bank_details, "reference_id": reference_id})
        if self.fail:
            raise PaymentGatewayError("Insufficient balance in account", {"code": "BAD_REQUEST_ERROR"})
        return {"id": f"pout_test{next(_counter):06d}", "entity": "payout", "status": "processing"}


@pytest.fixture(autouse=True)
async def setup_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
def payment_service():
    return FakePaymentService()


@pytest.fixture
def payout_client():
    return FakePayoutClient()


@pytest.fixture
async def client(payment_service, payout_client):
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_payout_client] = lambda: payout_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def fetch_all(statement) -> list:
    """Run a select in a fresh session so results reflect committed state."""
    async with async_session_factory() as session:
        return list((await session.execute(statement)).scalars().all())


async def fetch_one(statement):
    rows = await fetch_all(statement)
    assert len(rows) == 1, rows
    return rows[0]


def auth_headers(user: User) -> dict:
    token, _ = AuthService.create_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user():
    async def _make_user(role=UserRole.CUSTOMER, status=None, email=None, **fields) -> User:
        if status is None:
            status = UserStatus.APPROVED if role == UserRole.SELLER else UserStatus.ACTIVE
        async with async_session_factory() as session:
            user = User(
                email=email or f"{role.value}{next(_counter)}@groweasy.in",
                password_hash=_PASSWORD_HASH,
                role=role.value,
                status=status.value,
                first_name=fields.pop("first_name", "Asha"),
                last_name=fields.pop("last_name", "Sharma"),
                documents=[],
                **fields,
            )
            session.add(user)
            await session.commit()
        return user
    return _make_user


@pytest.fixture
async def admin(make_user):
    user = await make_user(UserRole.ADMIN)
    return {"user": user, "headers": auth_headers(user)}


@pytest.fixture
async def seller(make_user):
    user = await make_user(UserRole.SELLER, bank_details=BANK_DETAILS)
    return {"user": user, "headers": auth_headers(user)}


@pytest.fixture
async def customer(make_user):
    user = await make_user(UserRole.CUSTOMER)
    return {"user": user, "headers": auth_headers(user)}


@pytest.fixture
def make_product():
    async def _make_product(**fields) -> Product:
        n = next(_counter)
        async with async_session_factory() as session:
            product = Product(
                name=fields.pop("name", f"Test Product {n}"),
                description=fields.pop("description", "A product used in tests"),
                price=fields.pop("price", Decimal("1000.00")),
                stock=fields.pop("stock", 10),
                sku=fields.pop("sku", f"SKU-{n:05d}"),
                category=fields.pop("category", "Electronics"),
                tags=fields.pop("tags", []),
                images=fields.pop("images", []),
                specifications=fields.pop("specifications", {}),
                affiliate_percentage=fields.pop("affiliate_percentage", Decimal("10.00")),
                status=fields.pop("status", ProductStatus.ACTIVE).value,
                featured=fields.pop("featured", False),
                **fields,
            )
            session.add(product)
            await session.commit()
        return product
    return _make_product


@pytest.fixture
def checkout(client, payment_service):
    """Create an order and (optionally) pay for it. Returns the order JSON."""
    async def _checkout(items, pay=True, headers=None, **extra):
        body = {
            "items": [{"product_id": str(p.id), "quantity": q} for p, q in items],
            "shipping_address": SHIPPING_ADDRESS,
            **extra,
        }
        response = await client.post("/api/orders/create", json=body, headers=headers or {})
        assert response.status_code == 201, response.text
        created = response.json()
        if not pay:
            return created

        payment_id = f"pay_test{next(_counter):06d}"
        verify = await client.post("/api/orders/verify", json={
            "order_id": created["order_id"],
            "razorpay_order_id": created["razorpay_order_id"],
            "razorpay_payment_id": payment_id,
            "razorpay_signature": sign(created["razorpay_order_id"], payment_id),
        })
        assert verify.status_code == 200, verify.text
        return verify.json()["order"]
    return _checkout
