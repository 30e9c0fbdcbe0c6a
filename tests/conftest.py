"""Pytest fixtures for storefront tests."""

import os

# przed importem storefront: settings czyta env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMTP_HOST"] = ""
os.environ["ACTIVITY_LOG_URL"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import storefront.data.models  # noqa: F401
from storefront.api.deps import get_identity_client
from storefront.celery_worker import celery_app
from storefront.data.database import Base, get_db, make_engine
from storefront.data.models import AccountModel, ProductModel, ProductVariantModel
from storefront.domain.errors import Unauthorized
from storefront.domain.principal import Principal
from storefront.main import create_app
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService

celery_app.conf.task_always_eager = True


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_order_confirmation(self, destination, summary, username):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((destination, summary, username))
        return True


class FakeActivityLogger:
    def __init__(self):
        self.entries = []

    def log(self, actor, action, outcome):
        self.entries.append((actor, action, outcome))


class FakeIdentity:
    def __init__(self, tokens):
        self.tokens = tokens

    def resolve(self, token):
        if token not in self.tokens:
            raise Unauthorized("Unauthorized. Invalid or expired token.")
        return self.tokens[token]


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog(db):
    """Konta, produkt i dwa warianty (stan 10 i 5)."""
    alice = AccountModel(username="alice", email="alice@example.com", role="customer")
    bob = AccountModel(username="bob", email="bob@example.com", role="customer")
    staff = AccountModel(username="staff", email="staff@example.com", role="employee")
    admin = AccountModel(username="admin", email="admin@example.com", role="admin")
    tee = ProductModel(name="Classic Tee", price=Decimal("250.00"))
    db.add_all([alice, bob, staff, admin, tee])
    db.flush()

    v = ProductVariantModel(product_id=tee.id, gender="unisex", size="M", quantity=10)
    w = ProductVariantModel(product_id=tee.id, gender="unisex", size="L", quantity=5)
    db.add_all([v, w])
    db.commit()

    return SimpleNamespace(
        alice=Principal(alice.id, "customer"),
        bob=Principal(bob.id, "customer"),
        staff=Principal(staff.id, "employee"),
        admin=Principal(admin.id, "admin"),
        product_id=tee.id,
        v=v.id,
        w=w.id,
    )


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def activity():
    return FakeActivityLogger()


@pytest.fixture
def cart_service(db):
    return CartService(db)


@pytest.fixture
def order_service(db, notifier, activity):
    return OrderService(db, notification_service=notifier, activity_logger=activity)


@pytest.fixture
def place_order(cart_service, order_service):
    """Dodaje wariant do koszyka i sklada zamowienie, zwraca order_id."""

    def _place(principal, variant_id, quantity, note=None):
        cart = cart_service.add_item(principal.account_id, variant_id, quantity)
        item_id = next(i["cart_item_id"] for i in cart["items"] if i["variant_id"] == variant_id)
        snapshot = cart_service.resolve_selection(principal.account_id, [item_id])
        return order_service.commit_order(principal.account_id, snapshot, note)

    return _place


@pytest.fixture
def client(session_factory, catalog):
    app = create_app(with_lifespan=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    identity = FakeIdentity(
        {
            "alice-token": catalog.alice,
            "bob-token": catalog.bob,
            "staff-token": catalog.staff,
        }
    )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client] = lambda: identity

    return TestClient(app)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def naive(dt):
    """sqlite zwraca daty bez strefy, porownujemy bez tzinfo."""
    return dt.replace(tzinfo=None) if dt is not None else None
