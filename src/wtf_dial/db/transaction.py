"""Transactional scope shared by every dial operation.

A :class:`Tx` bundles the open session with the logical timestamp of the
transaction, captured once when it begins, so every row written inside it
(dial ``updated_at``, membership timestamps, history samples) agrees on the
time. Pipeline functions receive a ``Tx`` and never begin, commit or roll
back on their own.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from wtf_dial.core.errors import storage_error
from wtf_dial.db.time import utcnow

if TYPE_CHECKING:
    from wtf_dial.services.events import EventService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tx:
    """An open transaction plus its fixed logical timestamp."""

    session: Session
    now: datetime
    events: EventService


@contextmanager
def transaction(
    session_factory: sessionmaker[Session],
    events: EventService,
    clock: Callable[[], datetime] = utcnow,
) -> Iterator[Tx]:
    """Run the enclosed block inside one database transaction.

    Commits when the block exits normally. Any exception, including
    cancellation such as ``KeyboardInterrupt``, rolls back everything
    written in the block. Storage exceptions escaping the block or raised
    by the commit are wrapped as application errors.
    """
    session = session_factory()
    try:
        session.begin()
        yield Tx(session=session, now=clock(), events=events)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.debug("Transaction rolled back after storage error", exc_info=True)
        raise storage_error("transaction", None, exc) from exc
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()
