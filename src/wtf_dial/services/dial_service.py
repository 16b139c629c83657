"""Dial and membership operations exposed to the HTTP layer and scripts.

Each public method opens one transaction, performs its change and, when
memberships changed, runs the dial refresh pipeline inside that same
transaction before committing. The acting user's identifier is passed in
explicitly by the caller.
"""
from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from wtf_dial.core.errors import ConflictError, InvalidError, NotFoundError, UnauthorizedError
from wtf_dial.core.settings import settings
from wtf_dial.db.time import utcnow
from wtf_dial.db.transaction import Tx, transaction
from wtf_dial.models import Dial, DialMembership
from wtf_dial.repositories import DialMembershipRepository, DialRepository
from wtf_dial.schemas.dial import (
    DialCreate,
    DialFilter,
    DialList,
    DialMembershipFilter,
    DialMembershipList,
    DialMembershipOut,
    DialOut,
    DialUpdate,
    DialValueOut,
)
from wtf_dial.services.dial_pipeline import RefreshOutcome, refresh_dial_value
from wtf_dial.services.events import EventService
from wtf_dial.services.history import list_samples

logger = logging.getLogger(__name__)

INVITE_CODE_BYTES = 16


def generate_invite_code() -> str:
    """Return a random, URL-safe invite code."""
    return secrets.token_hex(INVITE_CODE_BYTES)


def to_membership_out(membership: DialMembership) -> DialMembershipOut:
    """Convert a DialMembership ORM instance to an API schema."""
    return DialMembershipOut.model_validate(membership)


def to_dial_out(dial: Dial, memberships: list[DialMembership] | None = None) -> DialOut:
    """Convert a Dial ORM instance to an API schema."""
    return DialOut(
        id=dial.id,
        user_id=dial.user_id,
        name=dial.name,
        value=dial.value,
        invite_code=dial.invite_code,
        created_at=dial.created_at,
        updated_at=dial.updated_at,
        memberships=(
            [to_membership_out(m) for m in memberships] if memberships is not None else None
        ),
    )


def validate_membership_value(value: int) -> int:
    """Return ``value`` if it lies within the allowed dial range.

    Raises:
        InvalidError: If the value is not an integer or is out of range.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidError("Dial value must be an integer.")
    if not settings.dial_value_min <= value <= settings.dial_value_max:
        raise InvalidError(
            f"Dial value must be between {settings.dial_value_min} "
            f"and {settings.dial_value_max}."
        )
    return value


def validate_dial_name(name: str | None) -> str:
    """Return the stripped dial name.

    Raises:
        InvalidError: If the name is blank or too long.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidError("Dial name required.")
    if len(name) > settings.dial_name_max_length:
        raise InvalidError(
            f"Dial name too long; must be at most {settings.dial_name_max_length} characters."
        )
    return name


class DialService:
    """Dial CRUD plus the membership changes that drive dial values."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        events: EventService,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session_factory = session_factory
        self.events = events
        self.clock = clock

    @contextmanager
    def _transaction(self) -> Iterator[Tx]:
        with transaction(self.session_factory, self.events, self.clock) as tx:
            yield tx

    # Dials

    def find_dial_by_id(self, user_id: int, dial_id: int) -> DialOut:
        """Return a dial the user belongs to, with its memberships."""
        with self._transaction() as tx:
            dial = DialRepository(tx.session).find_by_id(dial_id, visible_to=user_id)
            memberships, _ = DialMembershipRepository(tx.session).list_memberships(
                DialMembershipFilter(dial_id=dial.id)
            )
            return to_dial_out(dial, memberships)

    def find_dials(self, user_id: int, filter: DialFilter | None = None) -> DialList:
        """Return dials the user belongs to, or the dial matching an invite code."""
        filter = (filter or DialFilter()).model_copy()
        if filter.limit is None:
            filter.limit = settings.dial_list_default_limit
        filter.limit = min(filter.limit, settings.dial_list_max_limit)

        with self._transaction() as tx:
            dials, total = DialRepository(tx.session).find_dials(filter, visible_to=user_id)
            return DialList(dials=[to_dial_out(dial) for dial in dials], n=total)

    def create_dial(self, user_id: int, data: DialCreate) -> DialOut:
        """Create a dial owned by the user, who becomes its first member."""
        name = validate_dial_name(data.name)
        with self._transaction() as tx:
            dial = DialRepository(tx.session).create(
                user_id=user_id,
                name=name,
                invite_code=generate_invite_code(),
                now=tx.now,
            )
            membership = DialMembershipRepository(tx.session).upsert(
                dial.id, user_id, settings.dial_value_min, tx.now
            )
            refresh_dial_value(tx, dial.id)
            tx.session.refresh(dial)
            logger.info("User %d created dial %d", user_id, dial.id)
            return to_dial_out(dial, [membership])

    def update_dial(self, user_id: int, dial_id: int, data: DialUpdate) -> DialOut:
        """Rename a dial. Only the owner may do so."""
        with self._transaction() as tx:
            repo = DialRepository(tx.session)
            dial = repo.find_by_id(dial_id, visible_to=user_id)
            if dial.user_id != user_id:
                raise UnauthorizedError("You must be the owner to update a dial.")
            if data.name is not None:
                dial = repo.rename(dial, validate_dial_name(data.name), tx.now)
            return to_dial_out(dial)

    def delete_dial(self, user_id: int, dial_id: int) -> None:
        """Delete a dial with its memberships and history. Only the owner may do so."""
        with self._transaction() as tx:
            repo = DialRepository(tx.session)
            dial = repo.find_by_id(dial_id, visible_to=user_id)
            if dial.user_id != user_id:
                raise UnauthorizedError("Only the owner can delete a dial.")
            repo.delete(dial)
            logger.info("User %d deleted dial %d", user_id, dial_id)

    def dial_history(
        self,
        user_id: int,
        dial_id: int,
        since: datetime | None = None,
    ) -> list[DialValueOut]:
        """Return the per-minute value history of a dial the user belongs to."""
        with self._transaction() as tx:
            DialRepository(tx.session).find_by_id(dial_id, visible_to=user_id)
            return [DialValueOut.model_validate(s) for s in list_samples(tx.session, dial_id, since)]

    # Memberships

    def join_dial(self, user_id: int, invite_code: str) -> DialOut:
        """Join the dial behind ``invite_code``; joining twice is a no-op."""
        with self._transaction() as tx:
            dials, _ = DialRepository(tx.session).find_dials(DialFilter(invite_code=invite_code))
            if not dials:
                raise NotFoundError("Invalid invite code.")
            dial = dials[0]

            memberships = DialMembershipRepository(tx.session)
            try:
                memberships.find_by_id(dial.id, user_id)
            except NotFoundError:
                memberships.upsert(dial.id, user_id, settings.dial_value_min, tx.now)
                refresh_dial_value(tx, dial.id)
                tx.session.refresh(dial)
                logger.info("User %d joined dial %d", user_id, dial.id)
            return to_dial_out(dial)

    def find_dial_memberships(
        self,
        user_id: int,
        filter: DialMembershipFilter | None = None,
    ) -> DialMembershipList:
        """Return memberships of dials the user belongs to."""
        with self._transaction() as tx:
            memberships, total = DialMembershipRepository(tx.session).list_memberships(
                filter or DialMembershipFilter(), visible_to=user_id
            )
            return DialMembershipList(
                memberships=[to_membership_out(m) for m in memberships],
                n=total,
            )

    def set_membership_value(self, user_id: int, dial_id: int, value: int) -> None:
        """Set the user's value on a dial and refresh the dial's value.

        Raises:
            InvalidError: If ``value`` is out of range.
            NotFoundError: If the dial does not exist or the user is not a member.
        """
        validate_membership_value(value)
        with self._transaction() as tx:
            if not DialRepository(tx.session).exists(dial_id):
                raise NotFoundError("Dial not found.")
            memberships = DialMembershipRepository(tx.session)
            memberships.find_by_id(dial_id, user_id)
            memberships.upsert(dial_id, user_id, value, tx.now)
            refresh_dial_value(tx, dial_id)

    def delete_membership(
        self,
        user_id: int,
        dial_id: int,
        member_user_id: int | None = None,
    ) -> None:
        """Remove a membership and refresh the dial's value.

        Members may leave a dial; the owner may also remove other members.
        The owner's own membership cannot be removed.
        """
        target_user_id = user_id if member_user_id is None else member_user_id
        with self._transaction() as tx:
            dial = DialRepository(tx.session).find_by_id(dial_id, visible_to=user_id)
            if target_user_id != user_id and dial.user_id != user_id:
                raise UnauthorizedError("Only the dial owner can remove other members.")
            if target_user_id == dial.user_id:
                raise ConflictError("The dial owner cannot leave their own dial.")
            DialMembershipRepository(tx.session).delete(dial_id, target_user_id)
            refresh_dial_value(tx, dial_id)
            logger.info("User %d removed user %d from dial %d", user_id, target_user_id, dial_id)

    def recompute_dial_value(self, dial_id: int) -> RefreshOutcome:
        """Re-sync a dial's stored value with its memberships.

        Safe to call at any time: an unchanged value writes nothing and
        notifies nobody, and a missing dial is not an error.
        """
        with self._transaction() as tx:
            return refresh_dial_value(tx, dial_id)
