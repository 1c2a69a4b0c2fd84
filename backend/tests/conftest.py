"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("QR_TOKEN_SECRET", "test-qr-secret-key-that-is-long-enough-too")

from datetime import timedelta
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from smart_restaurant.core.config import QrTokenConfig, get_qr_token_config
from smart_restaurant.core.qr_token import QrTokenIssuer
from smart_restaurant.core.rbac import UserRole
from smart_restaurant.core.security import create_access_token, get_password_hash, user_claims
from smart_restaurant.db.base import Base, utcnow
from smart_restaurant.db.session import enable_sqlite_foreign_keys, get_db
from smart_restaurant.main import app
from smart_restaurant.models import (
    CategoryStatus, MenuCategory, MenuItem, MenuItemStatus, Order, OrderItem,
    OrderItemStatus, OrderStatus, Restaurant, Table, User,
)

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable rate limiting during tests to avoid flaky failures
    from smart_restaurant.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


# ============== Tenants and users ==============

@pytest.fixture
def restaurant(db_session: Session) -> Restaurant:
    restaurant = Restaurant(name="Test Bistro")
    db_session.add(restaurant)
    db_session.commit()
    db_session.refresh(restaurant)
    return restaurant


@pytest.fixture
def other_restaurant(db_session: Session) -> Restaurant:
    restaurant = Restaurant(name="Rival Diner")
    db_session.add(restaurant)
    db_session.commit()
    db_session.refresh(restaurant)
    return restaurant


@pytest.fixture
def admin_user(db_session: Session, restaurant: Restaurant) -> User:
    """Create a restaurant admin."""
    user = User(
        restaurant_id=restaurant.id,
        email="admin@example.com",
        password_hash=get_password_hash("testpass123"),
        role=UserRole.ADMIN,
        full_name="Test Admin",
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def token_for(user: User) -> str:
    return create_access_token(data=user_claims(user))


@pytest.fixture
def make_user(db_session: Session):
    """Factory for extra users. Returns (user, auth headers)."""
    def _make(email, role=UserRole.ADMIN, restaurant=None, is_active=True):
        user = User(
            restaurant_id=restaurant.id if restaurant else None,
            email=email,
            password_hash=get_password_hash("testpass123"),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user, {"Authorization": f"Bearer {token_for(user)}"}
    return _make


@pytest.fixture
def auth_token(admin_user: User) -> str:
    """Get an authentication token for the admin user."""
    return token_for(admin_user)


@pytest.fixture
def auth_headers(auth_token: str) -> dict:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {auth_token}"}


# ============== Catalog ==============

class CatalogBuilder:
    """Shortcuts for seeding catalog, table and order rows."""

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def category(self, restaurant, name, display_order=0, status=CategoryStatus.ACTIVE):
        return self._save(MenuCategory(
            restaurant_id=restaurant.id,
            name=name,
            display_order=display_order,
            status=status,
        ))

    def item(self, category, name, price="10.00", status=MenuItemStatus.AVAILABLE,
             chef=False, deleted=False, created_at=None):
        item = MenuItem(
            restaurant_id=category.restaurant_id,
            category_id=category.id,
            name=name,
            price=Decimal(str(price)),
            prep_time_minutes=10,
            status=status,
            is_chef_recommended=chef,
        )
        if created_at is not None:
            item.created_at = created_at
        if deleted:
            item.soft_delete()
        return self._save(item)

    def table(self, restaurant, number="1", capacity=4, location=None):
        return self._save(Table(
            restaurant_id=restaurant.id,
            table_number=number,
            capacity=capacity,
            location=location,
        ))

    def order(self, restaurant, lines, table=None, status=OrderStatus.COMPLETED,
              created_at=None, item_status=OrderItemStatus.SERVED):
        """``lines`` is a list of (menu_item, quantity)."""
        order = Order(
            restaurant_id=restaurant.id,
            table_id=table.id if table else None,
            status=status,
            created_at=created_at or utcnow(),
        )
        for menu_item, quantity in lines:
            order.items.append(OrderItem(
                menu_item_id=menu_item.id,
                quantity=quantity,
                status=item_status,
            ))
        return self._save(order)


@pytest.fixture
def catalog(db_session: Session) -> CatalogBuilder:
    return CatalogBuilder(db_session)


# ============== QR tokens ==============

@pytest.fixture
def qr_config() -> QrTokenConfig:
    return QrTokenConfig(secret="unit-test-qr-secret-0123456789abcdef")


@pytest.fixture
def test_table(catalog: CatalogBuilder, restaurant: Restaurant) -> Table:
    return catalog.table(restaurant, number="T1")


@pytest.fixture
def guest_token(db_session: Session, test_table: Table) -> str:
    """A QR token the running app will accept for ``test_table``."""
    issuer = QrTokenIssuer(db_session, get_qr_token_config())
    return issuer.issue(test_table.id).token


@pytest.fixture
def expired_guest_token(db_session: Session, test_table: Table) -> str:
    issuer = QrTokenIssuer(
        db_session, get_qr_token_config(), clock=lambda: utcnow() - timedelta(hours=2),
    )
    return issuer.issue(test_table.id, expires_in=timedelta(hours=1)).token
