"""
Shared fixtures: an in-memory SQLite database swapped in for the app's
session dependency, an authenticated user and a product factory.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import slugify
from app.database import Base, get_session, make_engine
from app.main import app
from app.models import Category, Product, ProductVariant, StockStatus, User

TEST_TOKEN = "test-token"


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    with session_factory() as s:
        yield s


@pytest.fixture
def client(session_factory):
    def _get_test_session():
        s = session_factory()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    app.dependency_overrides[get_session] = _get_test_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(session_factory):
    with session_factory() as s:
        u = User(name="Tester", email="tester@example.com", api_token=TEST_TOKEN)
        s.add(u)
        s.commit()
        return u


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def make_product(session_factory, user):
    def _make(name="Test Product", price="10.00", description="A product for tests",
              categories=(), statuses=()):
        with session_factory() as s:
            linked = []
            for category_name in categories:
                category = s.scalar(select(Category).where(Category.name == category_name))
                linked.append(category or Category(name=category_name))
            product = Product(
                owner=s.get(User, user.id),
                name=name,
                slug=slugify(name),
                description=description,
                price=Decimal(str(price)),
                categories=linked,
                variants=[ProductVariant(stock_status=StockStatus(st)) for st in statuses],
            )
            s.add(product)
            s.commit()
            return product

    return _make
