# tests/conftest.py
from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from wtf_dial.api.v1.dependencies import get_dial_service, get_event_service
from wtf_dial.core.security import create_access_token
from wtf_dial.db.session import Base, configure_sqlite, get_session_factory, make_session_factory
from wtf_dial.main import create_app
from wtf_dial.schemas.dial import DialCreate, DialOut
from wtf_dial.services.dial_service import DialService
from wtf_dial.services.events import Event
from wtf_dial.services.user_service import create_user

FROZEN_NOW = datetime(2026, 10, 19, 12, 0, 15, tzinfo=UTC)


class RecordingEventService:
    """Event service that remembers every publish instead of delivering it."""

    def __init__(self) -> None:
        self.published: list[tuple[int, Event]] = []
        self.fail_for: set[int] = set()
        self._lock = threading.Lock()

    def publish_event(self, user_id: int, event: Event) -> None:
        if user_id in self.fail_for:
            raise RuntimeError(f"delivery to user {user_id} failed")
        with self._lock:
            self.published.append((user_id, event))

    def subscribe(self, user_id: int):  # pragma: no cover - not used by tests
        raise NotImplementedError

    def close(self) -> None:
        pass

    def recipients(self) -> list[int]:
        return sorted(user_id for user_id, _ in self.published)

    def clear(self) -> None:
        with self._lock:
            self.published.clear()


class FrozenClock:
    """Clock returning a fixed time until advanced."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = configure_sqlite(
        create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return make_session_factory(engine)


@pytest.fixture()
def events() -> RecordingEventService:
    return RecordingEventService()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(FROZEN_NOW)


@pytest.fixture()
def dial_service(
    session_factory: sessionmaker[Session],
    events: RecordingEventService,
    clock: FrozenClock,
) -> DialService:
    return DialService(session_factory, events, clock=clock)


def make_user(session_factory: sessionmaker[Session], name: str) -> int:
    with session_factory() as db:
        return create_user(db, name, f"{name.lower()}@example.com").id


@pytest.fixture()
def user_factory(session_factory: sessionmaker[Session]) -> Callable[[str], int]:
    """Return a function creating a user and returning its id."""
    return lambda name: make_user(session_factory, name)


@pytest.fixture()
def owner_id(session_factory: sessionmaker[Session]) -> int:
    return make_user(session_factory, "Owner")


@pytest.fixture()
def member_ids(session_factory: sessionmaker[Session]) -> list[int]:
    return [make_user(session_factory, f"Member{i}") for i in range(1, 3)]


@pytest.fixture()
def outsider_id(session_factory: sessionmaker[Session]) -> int:
    return make_user(session_factory, "Outsider")


@pytest.fixture()
def dial(dial_service: DialService, owner_id: int) -> DialOut:
    """A dial owned by ``owner_id`` with no other members."""
    return dial_service.create_dial(owner_id, DialCreate(name="Release week"))


@pytest.fixture()
def shared_dial(
    dial_service: DialService,
    dial: DialOut,
    member_ids: list[int],
    events: RecordingEventService,
) -> DialOut:
    """``dial`` joined by every user in ``member_ids``; no events recorded yet."""
    for member_id in member_ids:
        dial_service.join_dial(member_id, dial.invite_code)
    events.clear()
    return dial


@pytest.fixture()
def app(
    session_factory: sessionmaker[Session],
    events: RecordingEventService,
    dial_service: DialService,
) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_event_service] = lambda: events
    app.dependency_overrides[get_dial_service] = lambda: dial_service
    return app


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> Callable[[int], dict[str, str]]:
    """Return a function building authorization headers for a user."""

    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
