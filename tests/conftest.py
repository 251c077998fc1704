import os
import tempfile

# Settings are read once at import time, so the environment has to be in place first
_db_dir = tempfile.mkdtemp(prefix="cinegate-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["JWT_SECRET"] = "test-signing-secret"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin-secret"
os.environ["PLATFORM_PASSWORD"] = "movie-night"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cinegate.main import app  # noqa: E402
from cinegate.application.services.access_code_service import generate_access_code  # noqa: E402
from cinegate.application.services.auth_service import hash_password  # noqa: E402
from cinegate.domain.models.access_code import ADMIN_OWNER, AccessCode  # noqa: E402
from cinegate.domain.models.user import User  # noqa: E402
from cinegate.infrastructure.database import Base, SessionLocal, engine  # noqa: E402
from cinegate.infrastructure.rate_limiter import reset_rate_limiters  # noqa: E402
from cinegate.infrastructure.repositories.access_code_repository import SQLAlchemyAccessCodeRepository  # noqa: E402
from cinegate.infrastructure.repositories.user_repository import SQLAlchemyUserRepository  # noqa: E402

ADMIN_AUTH = ("admin", "admin-secret")


@pytest.fixture(autouse=True)
def _fresh_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    reset_rate_limiters()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    return SQLAlchemyUserRepository(db, User)


@pytest.fixture
def codes(db):
    return SQLAlchemyAccessCodeRepository(db, AccessCode)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(users):
    def _make(username="alice", password="secret123", is_guest=False):
        user = User(username=username, password_hash=hash_password(password), is_guest=is_guest)
        users.add(user)
        users.commit()
        return user
    return _make


@pytest.fixture
def admin_code(codes):
    def _issue():
        return generate_access_code(codes, ADMIN_OWNER).code
    return _issue


@pytest.fixture
def login(client):
    def _login(username="alice", password="secret123"):
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["user"]
    return _login
