import json
import uuid
from typing import AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.store_service import models as _store_models  # noqa: F401
from services.store_service.app.main import app
from services.store_service.catalog import get_catalog_registry
from services.store_service.razorpay_client import RazorpayClient, get_razorpay_client

settings = get_settings()

USER_ID = "user-asha"
OTHER_USER_ID = "user-ravi"
ADMIN_ID = "admin-meera"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh database per test. SQLite in-memory needs a single shared
    connection (StaticPool) so every session sees the same tables.
    """
    if settings.DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            settings.DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(settings.DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def registry():
    return get_catalog_registry()


# ---------------------------------------------------------------------------
# Razorpay
# ---------------------------------------------------------------------------


class FakeRazorpay:
    """In-memory Razorpay Orders API behind an httpx.MockTransport."""

    key_id = "rzp_test_key"
    key_secret = "rzp_test_secret"
    base_url = "https://razorpay.test/v1"

    def __init__(self):
        self.orders: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: Optional[int] = None

    def add_order(self, amount: int, currency: str = "INR") -> str:
        order_id = f"order_{uuid.uuid4().hex[:14]}"
        self.orders[order_id] = {
            "id": order_id,
            "entity": "order",
            "amount": amount,
            "amount_paid": 0,
            "amount_due": amount,
            "currency": currency,
            "receipt": f"receipt_order_{len(self.orders)}",
            "status": "created",
            "notes": {},
        }
        return order_id

    def sign(self, order_id: str, payment_id: str) -> str:
        return RazorpayClient.expected_signature(order_id, payment_id, self.key_secret)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with:
            return httpx.Response(
                self.fail_with,
                json={
                    "error": {
                        "code": "BAD_REQUEST_ERROR",
                        "description": "The amount must be at least INR 1.00",
                    }
                },
            )

        path = request.url.path
        if request.method == "POST" and path.endswith("/orders"):
            payload = json.loads(request.content)
            order_id = self.add_order(payload["amount"], payload["currency"])
            order = self.orders[order_id]
            order["receipt"] = payload["receipt"]
            order["notes"] = payload.get("notes", {})
            return httpx.Response(200, json=order)

        if request.method == "GET" and "/orders/" in path:
            order_id = path.rsplit("/", 1)[-1]
            if order_id in self.orders:
                return httpx.Response(200, json=self.orders[order_id])
            return httpx.Response(
                400,
                json={
                    "error": {
                        "code": "BAD_REQUEST_ERROR",
                        "description": "The id provided does not exist",
                    }
                },
            )

        return httpx.Response(404, json={})

    def client(self) -> RazorpayClient:
        return RazorpayClient(
            key_id=self.key_id,
            key_secret=self.key_secret,
            base_url=self.base_url,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def razorpay() -> FakeRazorpay:
    return FakeRazorpay()


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def make_token(user_id: str, role: str = "user", email: Optional[str] = None) -> str:
    claims = {"sub": user_id, "role": role}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def bearer(user_id: str, role: str = "user") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def user_headers() -> dict:
    return bearer(USER_ID)


@pytest.fixture
def other_user_headers() -> dict:
    return bearer(OTHER_USER_ID)


@pytest.fixture
def admin_headers() -> dict:
    return bearer(ADMIN_ID, role="admin")


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(db_session, razorpay) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app, the test DB session and the fake
    Razorpay gateway wired in.
    """
    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_razorpay_client] = razorpay.client

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
