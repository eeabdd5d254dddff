import os
from datetime import date
from unittest.mock import patch

import pytest

# Must be set before database.py builds the engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("JWT_VERIFICATION_SECRET", None)

from fastapi.testclient import TestClient

from database import SessionLocal, engine
from main import app
from models import Base, Booking, BookingStatus, Gender, Property, User, UserRole, UserType
from utils.security import create_access_token, hash_password

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def mail():
    """Replace outgoing email with mocks; yields them by name."""
    with patch("services.user_service.send_verification_email") as verification, patch(
        "services.user_service.send_password_reset_email"
    ) as reset, patch("services.user_service.send_password_changed_email") as changed:
        yield {"verification": verification, "reset": reset, "changed": changed}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="student", email=None, verified=True, full_name=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            full_name=full_name or f"{role.title()} {n}",
            email=email or f"{role}{n}@example.com",
            phone_number=f"0801000{n:04d}",
            password=hash_password(PASSWORD),
            is_verified=verified,
            university="University of Lagos" if role == "student" else None,
            year_of_study="200" if role == "student" else None,
        )
        db.add(user)
        db.flush()
        db.add(UserType(user_id=user.id, type=UserRole(role)))
        db.commit()
        return user

    return _make


@pytest.fixture
def make_property(db):
    def _make(agent=None, title="Sunrise Hostel"):
        prop = Property(
            title=title,
            location="Akoka, Lagos",
            price=500,
            room_type="single",
            agent_id=agent.id if agent else None,
        )
        db.add(prop)
        db.commit()
        return prop

    return _make


@pytest.fixture
def make_booking(db):
    def _make(prop, tenant, status="pending"):
        booking = Booking(
            property_id=prop.id,
            agent_id=prop.agent_id,
            tenant_id=tenant.id,
            property_type="single",
            move_in_date=date(2026, 9, 1),
            duration="6 months",
            gender=Gender.MALE,
            amount=500,
            status=BookingStatus(status),
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def auth_header():
    def _header(user, role):
        return {"Authorization": f"Bearer {create_access_token(user.id, role)}"}

    return _header
