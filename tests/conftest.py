# tests/conftest.py
import os
import tempfile

# アプリを import する前にテスト用のDBを向ける
_TMP_DIR = tempfile.mkdtemp(prefix="calendar-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'calendar.db')}"
os.environ["PREFERENCES_DB_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'preferences.db')}"
os.environ.setdefault("TIMEZONE", "UTC")

import pytest
from fastapi.testclient import TestClient

from app.db import models  # noqa: F401
from app.db.database import Base, SessionLocal, engine
from app.main import app
from app.api.v1.endpoints.claims import get_hub
from app.services.claim_hub import ClaimHub
from tests.helpers import FakeBackend


@pytest.fixture(autouse=True)
def reset_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def hub():
    return ClaimHub()


@pytest.fixture
def client(hub):
    app.dependency_overrides[get_hub] = lambda: hub
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_backend():
    return FakeBackend()
