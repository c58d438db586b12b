import os
import tempfile

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="yuthukama-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from yuthukama import models  # noqa: F401
from yuthukama.api.deps import get_attachment_store
from yuthukama.db.base import Base
from yuthukama.db.session import get_db
from yuthukama.main import app
from yuthukama.security.rate_limit import login_throttle
from yuthukama.services.storage import LocalAttachmentStore, StorageConfig

PASSWORD = "SecurePass123"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def client(engine, upload_dir):
    TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db():
        session = TestSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_attachment_store] = lambda: LocalAttachmentStore(
        StorageConfig(directory=str(upload_dir), max_bytes=1024)
    )
    login_throttle.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        login_throttle.reset()


@pytest.fixture()
def register(client):
    """Register a user and return (user_id, auth headers)."""

    def _register(username: str):
        resp = client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@test.com", "password": PASSWORD},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return data["id"], {"Authorization": f"Bearer {data['token']}"}

    return _register
