import os
import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from labbooker.main import app
from labbooker.db import Base, get_db
from labbooker.models import BookingType, BookingTypeResource, LabResource, Reservation, User
from labbooker.models.user import ROLE_ADMIN, ROLE_USER
from labbooker.utils.auth import get_password_hash
from labbooker.utils.timewindow import utcnow

# Test database setup
if not os.path.exists("./out"):
    os.makedirs("./out")

SQLALCHEMY_DATABASE_URL = "sqlite:///./out/tests.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create test tables
Base.metadata.create_all(bind=engine)

# Fixed clock for engine tests: a Monday morning
NOW = datetime(2030, 1, 7, 8, 0)


def at(hour: int, minute: int = 0, day: int = 0) -> datetime:
    """A time on NOW's date, ``day`` days later."""
    return NOW.replace(hour=hour, minute=minute) + timedelta(days=day)


# Dependency override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

client = TestClient(app)


# Fixtures
@pytest.fixture(autouse=True)
def clear_db():
    """Clear all data from all tables before each test"""
    with engine.connect() as conn:
        trans = conn.begin()
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        trans.commit()


@pytest.fixture
def test_db():
    """Provide a database session for testing"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_next_user():
    """Helper function to generate unique usernames"""
    if not hasattr(get_next_user, "user_count"):
        get_next_user.user_count = 0
    get_next_user.user_count += 1
    return get_next_user.user_count


def make_user(db, role=ROLE_USER, password="testpassword"):
    number = get_next_user()
    user = User(
        username=f"user_{number}",
        email=f"user_{number}@example.com",
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_resource(db, name="Lab Server", **fields):
    resource = LabResource(name=name, **fields)
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return resource


def make_booking_type(db, resources=(), name="Development Lab", **fields):
    booking_type = BookingType(name=name, **fields)
    db.add(booking_type)
    db.commit()
    for resource in resources:
        db.add(BookingTypeResource(booking_type_id=booking_type.id, resource_id=resource.id))
        db.commit()
    db.refresh(booking_type)
    return booking_type


def make_reservation(db, user, booking_type, start, end, resource=None, status="scheduled", created_at=None):
    reservation = Reservation(
        user_id=user.id,
        booking_type_id=booking_type.id,
        resource_id=resource.id if resource is not None else None,
        start_time=start,
        end_time=end,
        status=status,
        created_at=created_at or utcnow(),
    )
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


def login(user, password="testpassword"):
    response = client.post(
        "/auth/login",
        data={"username": user.username, "password": password},
    )
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def test_user(test_db):
    """Fixture to create a regular user in the database"""
    return make_user(test_db)


@pytest.fixture
def admin_user(test_db):
    return make_user(test_db, role=ROLE_ADMIN)


@pytest.fixture
def auth_headers(test_user):
    """Fixture to get authentication headers for a regular user"""
    return login(test_user)


@pytest.fixture
def admin_headers(admin_user):
    return login(admin_user)
