"""Fan dial events out to every member."""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from wtf_dial.db.transaction import Tx
from wtf_dial.repositories import DialMembershipRepository
from wtf_dial.services.events import Event

logger = logging.getLogger(__name__)


def publish_dial_event(tx: Tx, dial_id: int, event: Event) -> int:
    """Publish ``event`` once to each current member of the dial.

    Members are read inside the caller's transaction, so memberships other
    transactions have not committed yet are not addressed. The member list
    is materialized before any publish call. Notification is best-effort:
    neither a failed member lookup nor a failed publish fails the
    transaction.

    Returns:
        Number of members the event was published to.
    """
    try:
        # Savepoint keeps a failed lookup from poisoning the outer transaction.
        with tx.session.begin_nested():
            user_ids = DialMembershipRepository(tx.session).list_user_ids(dial_id)
    except SQLAlchemyError:
        logger.warning("Could not list members of dial %d to notify", dial_id, exc_info=True)
        return 0

    published = 0
    for user_id in user_ids:
        try:
            tx.events.publish_event(user_id, event)
        except Exception:
            logger.warning(
                "Failed to publish %s to user %d", event.type.value, user_id, exc_info=True
            )
            continue
        published += 1
    return published
