from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.context import Context
from core.db import Base, get_db
from models import LineItem, Order, Product, Shop


def _memory_engine():
    # No foreign key pragma here: tests need to plant dangling references
    return create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    engine = _memory_engine()
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    db_session = TestingSessionLocal()
    yield db_session
    db_session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def broken_db():
    """A session on a database whose tables were never created."""
    engine = _memory_engine()
    db_session = sessionmaker(bind=engine)()
    yield db_session
    db_session.close()


@pytest.fixture
def acme(db):
    """Shop 1 "Acme" with one product, one order and one line item.

    Shop 2 has a product of its own and no orders.
    """
    db.add_all([Shop(id=1, name="Acme"), Shop(id=2, name="Bare")])
    db.flush()
    db.add_all([
        Product(id=10, shop_id=1, name="Widget", value=Decimal("2.50")),
        Product(id=20, shop_id=2, name="Sprocket", value=Decimal("1.00")),
        Order(id=100, shop_id=1),
    ])
    db.flush()
    db.add(LineItem(id=1000, product_id=10, order_id=100, quantity=3))
    db.commit()
    return db


@pytest.fixture
def dangling_line_item(acme):
    """A line item of order 100 pointing at a product that does not exist."""
    acme.add(LineItem(id=2000, product_id=999, order_id=100, quantity=2))
    acme.commit()
    return acme


@pytest.fixture
def ctx(db):
    return Context(db=db)


@pytest.fixture
def statements(acme):
    """Record every SQL statement issued on the seeded test engine."""
    issued = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        issued.append(statement)

    engine = acme.get_bind()
    event.listen(engine, "before_cursor_execute", _record)
    yield issued
    event.remove(engine, "before_cursor_execute", _record)


@pytest.fixture()
def client(db):
    """Create a test client with overridden database dependency."""
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
