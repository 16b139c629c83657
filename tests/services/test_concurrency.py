"""Concurrent recomputes against a file-backed SQLite database."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine

from wtf_dial.db.session import Base, configure_sqlite, make_session_factory
from wtf_dial.models import Dial, DialMembership
from wtf_dial.schemas.dial import DialCreate
from wtf_dial.services.aggregator import aggregate
from wtf_dial.services.dial_pipeline import RefreshOutcome
from wtf_dial.services.dial_service import DialService
from wtf_dial.services.user_service import create_user

WORKERS = 8


@pytest.fixture()
def file_session_factory(tmp_path):
    engine = configure_sqlite(
        create_engine(
            f"sqlite:///{tmp_path / 'dials.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield make_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture()
def concurrent_dial(file_session_factory, events):
    service = DialService(file_session_factory, events)
    with file_session_factory() as db:
        user_ids = [create_user(db, f"User{i}").id for i in range(WORKERS)]
    dial = service.create_dial(user_ids[0], DialCreate(name="Contended"))
    for user_id in user_ids[1:]:
        service.join_dial(user_id, dial.invite_code)
    events.clear()
    return service, dial, user_ids


def _stored_state(session_factory, dial_id):
    with session_factory() as db:
        value = db.get(Dial, dial_id).value
        members = db.query(DialMembership).filter_by(dial_id=dial_id).all()
        return value, [m.value for m in members]


def test_concurrent_value_updates_leave_consistent_value(concurrent_dial, file_session_factory) -> None:
    service, dial, user_ids = concurrent_dial
    barrier = threading.Barrier(len(user_ids))

    def set_value(index_and_user):
        index, user_id = index_and_user
        barrier.wait()
        service.set_membership_value(user_id, dial.id, (index * 13) % 101)

    with ThreadPoolExecutor(max_workers=len(user_ids)) as pool:
        list(pool.map(set_value, enumerate(user_ids)))

    value, member_values = _stored_state(file_session_factory, dial.id)
    assert sorted(member_values) == sorted((i * 13) % 101 for i in range(len(user_ids)))
    assert value == aggregate(member_values)


def test_concurrent_recomputes_apply_change_once(concurrent_dial, file_session_factory, events) -> None:
    service, dial, user_ids = concurrent_dial
    with file_session_factory.begin() as db:
        for membership in db.query(DialMembership).filter_by(dial_id=dial.id):
            membership.value = 80

    barrier = threading.Barrier(WORKERS)

    def trigger(_):
        barrier.wait()
        return service.recompute_dial_value(dial.id)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = list(pool.map(trigger, range(WORKERS)))

    assert outcomes.count(RefreshOutcome.CHANGED) == 1
    assert outcomes.count(RefreshOutcome.UNCHANGED) == WORKERS - 1
    assert events.recipients() == sorted(user_ids)
    value, _ = _stored_state(file_session_factory, dial.id)
    assert value == 80
