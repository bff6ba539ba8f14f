import os
from datetime import date, timedelta
from dotenv import load_dotenv
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Load environment so TEST_DATABASE_URL can be read from .env
load_dotenv()

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("SECRET_KEY", "test-secret")

from hospital_booking.main import app  # noqa: E402
from hospital_booking.database import get_db, Base  # noqa: E402
from hospital_booking.models.catalog import Hospital, Service, Specialty  # noqa: E402
from hospital_booking.models.user import User  # noqa: E402
from hospital_booking.security import create_token, hash_password  # noqa: E402

if make_url(TEST_DATABASE_URL).get_backend_name() == "sqlite":
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(TEST_DATABASE_URL, pool_pre_ping=True)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Override the app's DB dependency to use the test engine/session
def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh schema for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(user):
    return {"Authorization": f"Bearer {create_token(user.id, user.role_type)}"}


@pytest.fixture
def make_user(db):
    """Factory: make_user("doctor", consultation_fee=200000) -> (user, headers)."""
    counter = {"n": 0}

    def _make(role_type="user", password="secret123", **fields):
        counter["n"] += 1
        user = User(
            full_name=fields.pop("full_name", f"{role_type.title()} {counter['n']}"),
            email=fields.pop("email", f"{role_type}{counter['n']}@example.com"),
            password_hash=hash_password(password),
            role_type=role_type,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user, auth_headers(user)

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def patient(make_user):
    return make_user("user")


@pytest.fixture
def specialty(db):
    specialty = Specialty(name="Cardiology", description="Heart")
    db.add(specialty)
    db.commit()
    db.refresh(specialty)
    return specialty


@pytest.fixture
def hospital(db):
    hospital = Hospital(name="Central Hospital", address="1 Main Street")
    db.add(hospital)
    db.commit()
    db.refresh(hospital)
    return hospital


@pytest.fixture
def service(db, specialty):
    service = Service(name="ECG", price=100000, duration=30, specialty_id=specialty.id)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def doctor(make_user, hospital, specialty):
    return make_user(
        "doctor",
        hospital_id=hospital.id,
        specialty_id=specialty.id,
        consultation_fee=200000,
    )


@pytest.fixture
def future_day():
    return date.today() + timedelta(days=3)
