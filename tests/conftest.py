import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["TRACING_ENABLED"] = "false"
os.environ["EMAIL_API_URL"] = ""

from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from shared.config.database import Base, create_engine_for, get_db
from shared.security import ActorRole, create_actor_token, limiter
from services.customer_service.models import Address, Buyer
from services.inventory_service.models import Product, Supplier
from services.notification_service.dispatcher import get_notification_dispatcher
from services.notification_service.models import Notification
from services.order_service.models import Order, OrderItem
from services.order_service.main import order_app
from services.payment_service.main import payment_app

limiter.enabled = False

INTERNAL_KEY = os.environ["INTERNAL_API_KEY"]


@pytest.fixture
async def engine(tmp_path):
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class Marketplace:
    """Seeds rows and reads them back through a fresh session."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def _save(self, *rows):
        async with self.session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0]

    async def buyer(self, name="Ada Buyer", email="ada@example.com", phone="+441234567890"):
        return await self._save(Buyer(name=name, email=email, phone_number=phone))

    async def address(self, buyer, is_default=True, **fields):
        values = {
            "name": buyer.name,
            "address": "1 Market Street",
            "city": "Leeds",
            "postcode": "LS1 1AA",
            "phone": "+441234567890",
        }
        values.update(fields)
        return await self._save(Address(buyer_id=buyer.id, is_default=is_default, **values))

    async def supplier(self, name="North Farm"):
        return await self._save(Supplier(name=name))

    async def product(self, supplier=None, name="Heritage Tomatoes", stock=10, price="4.50", images=None):
        return await self._save(Product(
            supplier_id=supplier.id if supplier is not None else None,
            name=name,
            price=Decimal(price),
            stock=stock,
            images=images if images is not None else [],
        ))

    async def order(self, buyer, items=(), status="pending", created_at=None, order_id=None,
                    payment_status="pending", payment_method="card", total_amount=None,
                    deposit_amount=0, notes=None):
        """`items` is a sequence of (product, quantity, line_total)."""
        created_at = created_at or datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)
        total = total_amount
        if total is None:
            total = sum((Decimal(str(line_total)) for _, _, line_total in items), Decimal("0"))
        async with self.session_factory() as session:
            order = Order(
                buyer_id=buyer.id,
                status=status,
                payment_status=payment_status,
                payment_method=payment_method,
                total_amount=total,
                deposit_amount=Decimal(str(deposit_amount)),
                notes=notes,
                created_at=created_at,
                updated_at=created_at,
            )
            if order_id is not None:
                order.id = order_id
            session.add(order)
            await session.flush()
            for product, quantity, line_total in items:
                session.add(OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    supplier_id=product.supplier_id,
                    quantity=quantity,
                    price=Decimal(str(line_total)),
                ))
            await session.commit()
        return order

    async def fetch_order(self, order_id):
        async with self.session_factory() as session:
            return await session.get(Order, order_id)

    async def stock_of(self, product):
        async with self.session_factory() as session:
            return await session.scalar(select(Product.stock).where(Product.id == product.id))

    async def notifications(self):
        async with self.session_factory() as session:
            result = await session.execute(select(Notification).order_by(Notification.id))
            return result.scalars().all()


@pytest.fixture
def marketplace(session_factory):
    return Marketplace(session_factory)


class RecordingDispatcher:
    def __init__(self):
        self.sent = []

    async def dispatch_status_change(self, notification):
        self.sent.append(notification)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


class RecordingEmailSender:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send(self, to, subject, html):
        if self.error is not None:
            raise self.error
        self.sent.append((to, subject, html))


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


def _bind(app, session_factory, dispatcher):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher


@pytest.fixture
async def order_client(session_factory, dispatcher):
    _bind(order_app, session_factory, dispatcher)
    transport = httpx.ASGITransport(app=order_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    order_app.dependency_overrides.clear()


@pytest.fixture
async def payment_client(session_factory, dispatcher):
    _bind(payment_app, session_factory, dispatcher)
    transport = httpx.ASGITransport(app=payment_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    payment_app.dependency_overrides.clear()


def operator_headers(user_id="op-1"):
    return {"Authorization": f"Bearer {create_actor_token(user_id, ActorRole.OPERATOR)}"}


def supplier_headers(supplier_id, user_id="seller-1"):
    token = create_actor_token(user_id, ActorRole.SUPPLIER, supplier_id=supplier_id)
    return {"Authorization": f"Bearer {token}"}


def buyer_headers(buyer):
    return {"Authorization": f"Bearer {create_actor_token(str(buyer.id), ActorRole.BUYER)}"}
