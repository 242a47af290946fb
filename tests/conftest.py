"""
Pytest fixtures.

Every test gets a fresh in-memory SQLite database. API tests use a
TestClient whose get_db dependency is bound to that database.
"""
import os

# Must be set before app.database builds the application engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import build_engine, init_db, get_db, unit_of_work
from app.main import app
from app.crud.customer import crud_customer
from app.crud.ledger import crud_ledger
from app.crud.product import crud_product
from app.schemas.order import OrderCreate, OrderItemCreate
from app.services.orders import OrderService


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield engine
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
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def service(db):
    return OrderService(db, strict_transitions=True, timezone_name="UTC")


@pytest.fixture
def make_product(db):
    """Create a product, optionally with an initial STOCK_IN entry."""
    def _make(name="Coxinha", price="5.50", unit="un", stock=0):
        with unit_of_work(db):
            product = crud_product.create(
                db, obj_in={"name": name, "unit": unit, "price": Decimal(price)}
            )
            if stock:
                crud_ledger.record_stock_in(db, product_id=product.id, quantity=stock)
        return product
    return _make


@pytest.fixture
def make_customer(db):
    def _make(name="Maria", contact="555-0100"):
        with unit_of_work(db):
            return crud_customer.create(db, obj_in={"name": name, "contact": contact})
    return _make


@pytest.fixture
def order_payload():
    """Build an OrderCreate from (product, quantity) pairs."""
    def _build(*lines, customer_id=None, delivery_fee=None):
        return OrderCreate(
            customer_id=customer_id,
            delivery_fee=delivery_fee,
            items=[OrderItemCreate(product_id=p.id, quantity=q) for p, q in lines],
        )
    return _build
