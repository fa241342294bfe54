import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from academy.main import app
from academy.database import Base, get_db
from academy import models  # noqa: F401
from academy.models.profile import Profile, ProfileStatus, UserRole
from academy.services.access import ElevatedAccess
from academy.services.auth import AuthService

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Hashing is slow on purpose; do it once for every fixture account
PASSWORD = "password123"
PASSWORD_HASH = AuthService.get_password_hash(PASSWORD)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def access(db):
    return ElevatedAccess(db=db)


def make_profile(db, email, role, status=ProfileStatus.APPROVED, full_name=None):
    profile = Profile(
        email=email,
        full_name=full_name,
        password_hash=PASSWORD_HASH,
        role=role.value,
        status=status.value,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def auth_headers(profile):
    return {"Authorization": f"Bearer {AuthService.create_token_for(profile)}"}


@pytest.fixture
def admin(db):
    return make_profile(db, "admin@upperhound.academy", UserRole.ADMIN, full_name="Ada Admin")


@pytest.fixture
def course_leader(db):
    return make_profile(db, "leader@upperhound.academy", UserRole.COURSE_LEADER, full_name="Lee Leader")


@pytest.fixture
def other_leader(db):
    return make_profile(db, "other.leader@upperhound.academy", UserRole.COURSE_LEADER)


@pytest.fixture
def pending_leader(db):
    return make_profile(
        db, "pending.leader@upperhound.academy", UserRole.COURSE_LEADER, status=ProfileStatus.PENDING
    )


@pytest.fixture
def student(db):
    return make_profile(db, "student@upperhound.academy", UserRole.STUDENT)


@pytest.fixture
def profile_factory(db):
    def _make(email, role, status=ProfileStatus.APPROVED, full_name=None):
        return make_profile(db, email, role, status=status, full_name=full_name)
    return _make


@pytest.fixture
def headers_for():
    return auth_headers
