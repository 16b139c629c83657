"""Per-minute history of dial values."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wtf_dial.core.errors import storage_error
from wtf_dial.db.time import truncate_to_minute
from wtf_dial.db.transaction import Tx
from wtf_dial.models import DialValue

_UPSERT_DIALECTS: dict[str, Any] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def record_sample(tx: Tx, dial_id: int, value: int, timestamp: datetime) -> None:
    """Record ``value`` as the dial's value for the minute containing ``timestamp``.

    A later sample within the same minute overwrites the earlier one, so a
    dial keeps at most one sample per minute however often it changes.
    """
    bucket = truncate_to_minute(timestamp)
    try:
        insert = _UPSERT_DIALECTS.get(tx.session.get_bind().dialect.name)
        if insert is None:
            tx.session.merge(DialValue(dial_id=dial_id, timestamp=bucket, value=value))
            tx.session.flush()
            return

        stmt = insert(DialValue).values(dial_id=dial_id, timestamp=bucket, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DialValue.dial_id, DialValue.timestamp],
            set_={"value": stmt.excluded["value"]},
        )
        tx.session.execute(stmt)
    except SQLAlchemyError as exc:
        raise storage_error("insert historical value", dial_id, exc) from exc


def list_samples(
    session: Session,
    dial_id: int,
    since: datetime | None = None,
) -> list[DialValue]:
    """Return the dial's history samples in chronological order."""
    stmt = select(DialValue).where(DialValue.dial_id == dial_id)
    if since is not None:
        stmt = stmt.where(DialValue.timestamp >= truncate_to_minute(since))
    stmt = stmt.order_by(DialValue.timestamp)
    try:
        return list(session.scalars(stmt))
    except SQLAlchemyError as exc:
        raise storage_error("list historical values", dial_id, exc) from exc
