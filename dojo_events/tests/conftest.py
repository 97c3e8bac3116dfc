import json
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

# Keep the application engine off disk while the test suite imports it
os.environ.setdefault("DATABASE_URL", "sqlite://")

import fakeredis
import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from dojo_events.client import BackendClient, Notifier, UserSession
from dojo_events.database.db import Base, get_db
from dojo_events.main import app
from dojo_events.models.events import Event
from dojo_events.models.participants import Participant

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Give every test an empty schema."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    """Route the registration lock to fakeredis."""
    monkeypatch.setattr("dojo_events.services.participants.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture(autouse=True)
def confirmation_task():
    """Celery isn't running in tests; capture dispatches instead."""
    with patch("dojo_events.routes.participants.confirm_registration_task") as task:
        yield task


@pytest.fixture
def user_session() -> UserSession:
    return UserSession(user_id="user-1", token="secret-token")


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def api(client: TestClient, user_session: UserSession) -> BackendClient:
    """Backend client wired straight to the FastAPI app."""
    return BackendClient(base_url="http://testserver", session=user_session, http=client)


def in_hours(hours: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=hours)


@pytest.fixture
def make_event(db_session: Session):
    def _make_event(**overrides) -> Event:
        values = {
            "user_id": "user-1",
            "name": "Spring Grading",
            "bio": "Belt grading for all junior students.",
            "capacity": 10,
            "registered_count": 0,
            "prix": 15.0,
            "start_date": in_hours(24),
            "end_date": in_hours(27),
        }
        values.update(overrides)
        event = Event(**values)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def make_participant(db_session: Session):
    def _make_participant(event: Event, **overrides) -> Participant:
        values = {
            "event_id": event.id,
            "first_name": "Bruce",
            "last_name": "Lee",
            "email": "bruce@example.com",
            "phone": "555-0100",
        }
        values.update(overrides)
        participant = Participant(**values)
        event.registered_count += 1
        db_session.add(participant)
        db_session.commit()
        db_session.refresh(participant)
        return participant

    return _make_participant


def make_response(status_code: int, body=None, headers: dict | None = None, content: bytes | None = None):
    """Build a real ``requests.Response`` for driving the client without a server."""
    response = requests.Response()
    response.status_code = status_code
    if content is not None:
        response._content = content
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["content-type"] = "application/json"
    else:
        response._content = b""
    for key, value in (headers or {}).items():
        response.headers[key] = value
    return response
