"""
Pytest configuration and shared fixtures.
"""

import os

# Set required environment variables BEFORE importing app modules
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from app.core.locks import RecordLocks
from app.db.db import get_session, init_db, make_engine
from app.main import app
from app.services.verification_service import VerificationService


@pytest.fixture
def engine(tmp_path):
    """
    Fresh SQLite file database per test.

    A file (rather than :memory:) lets several threads open their own
    connections in the concurrency tests.
    """
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def locks():
    return RecordLocks()


@pytest.fixture
def service(session, locks):
    return VerificationService(session, locks=locks)


@pytest.fixture
def sample_questions():
    return [
        {"question": "What colour is the case?", "answer": "Dark blue"},
        {"question": "What sticker is on the back?", "answer": "A cat"},
    ]


@pytest.fixture
def report_item(service, sample_questions):
    """Submit an item report as a finder; returns the pending item."""

    def _report(item_type="Phone", questions=None, reporter_id="finder-1"):
        return service.submit_item_report(
            reporter_id=reporter_id,
            reporter_name="Fiona Finder",
            item_type=item_type,
            location="Library, 2nd floor",
            date_found="2026-10-01",
            time_found="14:30",
            photo_ref="uploads/phone.webp",
            security_questions=questions or sample_questions,
        )

    return _report


@pytest.fixture
def verified_item(service, report_item):
    item = report_item()
    service.decide_item("admin-1", "Ada Admin", item.id, approve=True)
    return item


@pytest.fixture
def make_token():
    def _make(sub="finder-1", name="Fiona Finder", role="finder"):
        return jwt.encode(
            {"sub": sub, "name": name, "role": role},
            os.environ["JWT_SECRET"],
            algorithm="HS256",
        )

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(**kwargs):
        return {"Authorization": f"Bearer {make_token(**kwargs)}"}

    return _headers


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
