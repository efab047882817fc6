"""
Shared fixtures: in-memory SQLite database, API client with dependency
overrides and seeded master data.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import greenwaste.models  # noqa: F401
from greenwaste.main import app
from greenwaste.db.base import Base
from greenwaste.db.session import get_db
from greenwaste.api.dependencies import get_current_user
from greenwaste.core.security import get_password_hash
from greenwaste.models import ContainerType, Settlement, SettlementTankPricing, User, UserRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Authenticate subsequent requests as the given user."""
    def _act_as(user):
        app.dependency_overrides[get_current_user] = lambda: user
    return _act_as


@pytest.fixture
def settlement(db):
    settlement = Settlement(name="כפר ורדים", contact_person="Dana", contact_phone="054-1234567")
    db.add(settlement)
    db.commit()
    db.refresh(settlement)
    return settlement


@pytest.fixture
def other_settlement(db):
    settlement = Settlement(name="מעלות", contact_phone="052-7654321")
    db.add(settlement)
    db.commit()
    db.refresh(settlement)
    return settlement


@pytest.fixture
def container_type(db):
    container_type = ContainerType(name="מכל 10 קוב", size=Decimal("10"))
    db.add(container_type)
    db.commit()
    db.refresh(container_type)
    return container_type


@pytest.fixture
def pricing(db, settlement, container_type):
    pricing = SettlementTankPricing(
        settlement_id=settlement.id,
        container_type_id=container_type.id,
        price=Decimal("500.00"),
        currency="ILS",
        is_active=True
    )
    db.add(pricing)
    db.commit()
    db.refresh(pricing)
    return pricing


def _make_user(db, email, role, settlement_id=None):
    user = User(
        email=email,
        hashed_password=get_password_hash("password123"),
        role=role,
        settlement_id=settlement_id
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def driver(db):
    return _make_user(db, "driver@example.com", UserRole.DRIVER)


@pytest.fixture
def other_driver(db):
    return _make_user(db, "driver2@example.com", UserRole.DRIVER)


@pytest.fixture
def settlement_user(db, settlement):
    return _make_user(db, "village@example.com", UserRole.SETTLEMENT_USER, settlement.id)
