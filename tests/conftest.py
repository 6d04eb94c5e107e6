"""
Pytest fixtures: in-memory SQLite database, seed helpers and an API client.

Environment is set before anything from src.webinar_scoring is imported, since
settings and the engine are created at import time.
"""
import os
import sys
import pathlib
from datetime import datetime, timezone

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ.setdefault("APP_ENV", "dev")

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.webinar_scoring.models import Base, Webinar, Registration, LeadScore
from src.webinar_scoring.database import get_db
from src.webinar_scoring.api.deps import get_session_factory
from src.webinar_scoring.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def session_factory():
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def other_db(session_factory):
    """Second session on the same database, for interleaving writers"""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_webinar(db):
    def _make(tenant_id: str = "tenant_a", title: str = "Product launch") -> Webinar:
        webinar = Webinar(tenant_id=tenant_id, title=title)
        db.add(webinar)
        db.commit()
        db.refresh(webinar)
        return webinar
    return _make


@pytest.fixture
def make_registration(db):
    counter = {"n": 0}

    def _make(
        webinar: Webinar,
        email: str | None = None,
        name: str | None = "Test Viewer",
        attended: bool = False,
        watched_replay: bool = False,
        created_at: datetime | None = None,
    ) -> Registration:
        counter["n"] += 1
        registration = Registration(
            webinar_id=webinar.id,
            email=email or f"viewer{counter['n']}@example.com",
            name=name,
            attended=attended,
            watched_replay=watched_replay,
            created_at=created_at or datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc),
        )
        db.add(registration)
        db.commit()
        db.refresh(registration)
        return registration
    return _make


@pytest.fixture
def make_score(db):
    """Insert a LeadScore directly; the whole total is booked as engagement"""
    def _make(registration: Registration, total: int) -> LeadScore:
        score = LeadScore(
            registration_id=registration.id,
            total_score=total,
            engagement_score=total,
            watch_time_score=0,
            interaction_score=0,
            last_calculated_at=datetime(2026, 1, 6, 12, 0, 0, 250000, tzinfo=timezone.utc),
        )
        db.add(score)
        db.commit()
        db.refresh(score)
        return score
    return _make
