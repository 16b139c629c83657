"""Recompute, persist and announce a dial's value inside one transaction.

``refresh_dial_value`` is called after every change to a dial's memberships.
It runs inside the caller's transaction and moves through these states::

    Idle -> ValueLoaded -> Recomputed -> Persisted -> Notified -> Done
    Idle -> NotFound -> Done

When the recomputed value equals the stored one it stops after
``Recomputed``: nothing is written and nobody is notified, so calling it
redundantly is harmless. Storage failures abort the caller's transaction;
notification failures are only logged.
"""

from __future__ import annotations

import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from wtf_dial.core.errors import storage_error
from wtf_dial.db.transaction import Tx
from wtf_dial.repositories import DialRepository
from wtf_dial.services.aggregator import recompute
from wtf_dial.services.events import DialValueChangedPayload, Event, EventType
from wtf_dial.services.history import record_sample
from wtf_dial.services.notifier import publish_dial_event

logger = logging.getLogger(__name__)


class RefreshOutcome(str, Enum):
    """How a refresh ended."""

    NOT_FOUND = "not_found"
    UNCHANGED = "unchanged"
    CHANGED = "changed"


def refresh_dial_value(tx: Tx, dial_id: int) -> RefreshOutcome:
    """Recompute the dial's value and, if it changed, store and announce it.

    A dial deleted before the refresh ran is not an error; the trigger may
    simply have raced the deletion.
    """
    recomputation = recompute(tx, dial_id)
    if recomputation is None:
        logger.debug("Dial %d vanished before refresh", dial_id)
        return RefreshOutcome.NOT_FOUND

    if not recomputation.changed:
        logger.debug("Dial %d unchanged at %d", dial_id, recomputation.old_value)
        return RefreshOutcome.UNCHANGED

    new_value = recomputation.new_value
    try:
        DialRepository(tx.session).update_value(dial_id, new_value, tx.now)
    except SQLAlchemyError as exc:
        raise storage_error("update dial value", dial_id, exc) from exc

    record_sample(tx, dial_id, new_value, tx.now)

    notified = publish_dial_event(
        tx,
        dial_id,
        Event(
            type=EventType.DIAL_VALUE_CHANGED,
            payload=DialValueChangedPayload(id=dial_id, value=new_value),
        ),
    )
    logger.debug(
        "Dial %d changed %d -> %d, notified %d members",
        dial_id,
        recomputation.old_value,
        new_value,
        notified,
    )
    return RefreshOutcome.CHANGED
