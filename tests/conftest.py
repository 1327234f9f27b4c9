"""
Shared pytest fixtures: in-memory SQLite + FastAPI TestClient.
"""
import os
import tempfile

# Settings are read at import time
os.environ.setdefault("ENCRYPTION_KEY", "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="receipts-test-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.analyzer import get_analyzer  # noqa: E402
from app.crypto import hash_secret  # noqa: E402
from app.database import Base, create_db_engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.migrations import Migrator  # noqa: E402
from app.repositories import users  # noqa: E402
from app.schemas import ParsedReceipt  # noqa: E402
from app.session import SessionManager, get_session_manager  # noqa: E402

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_db_engine("sqlite://", poolclass=StaticPool)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)

PASSWORD = "secret"


class FakeAnalyzer:
    """Stands in for Gemini; returns ``result`` or raises ``error``."""

    def __init__(self):
        self.result = ParsedReceipt.model_validate(
            {
                "items": [
                    {"name": "CARROT", "count": 1, "price": 1.27},
                    {"name": "MILK 2L", "count": 1, "price": 5.49},
                ],
                "type": "grocery",
                "storeName": "NOFRILLS",
                "datetime": "2024-03-24 19:23:05",
            }
        )
        self.error = None
        self.calls = []

    def analyze(self, image: bytes, mime_type: str) -> ParsedReceipt:
        self.calls.append((image, mime_type))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def engine():
    return _ENGINE


@pytest.fixture(autouse=True)
def _reset_tables():
    Migrator(_ENGINE).run()
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, username, email):
    user_id = users.create_user(db, username, email, hash_secret(PASSWORD))
    db.commit()
    return users.get_user_by_id(db, user_id)


@pytest.fixture()
def user(db):
    return _make_user(db, "alice", "a@x.com")


@pytest.fixture()
def other_user(db):
    return _make_user(db, "bob", "b@x.com")


@pytest.fixture()
def sessions():
    return SessionManager(ttl_seconds=3600, cache_size=16)


@pytest.fixture()
def analyzer():
    return FakeAnalyzer()


@pytest.fixture()
def client(db, sessions, analyzer):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_session_manager] = lambda: sessions
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def login(client):
    """Log *client* in as the given user; the session cookie stays in its jar."""

    def _login(account, password=PASSWORD):
        resp = client.post("/api/login", json={"email": account.email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp

    return _login
