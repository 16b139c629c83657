"""Data access helpers for dial memberships."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wtf_dial.core.errors import NotFoundError, storage_error
from wtf_dial.models import DialMembership
from wtf_dial.schemas.dial import DialMembershipFilter

__all__ = ["DialMembershipRepository"]


class DialMembershipRepository:
    """Thin wrapper around database access for dial memberships.

    Every method runs in the caller's session and transaction. Storage
    failures surface as ``ConflictError`` (constraint violations) or
    ``InternalError``.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def find_by_id(self, dial_id: int, user_id: int) -> DialMembership:
        """Return the membership of ``user_id`` on ``dial_id``.

        Raises:
            NotFoundError: If the user is not a member of the dial.
        """
        try:
            membership = self.session.get(DialMembership, (dial_id, user_id))
        except SQLAlchemyError as exc:
            raise storage_error("find dial membership", dial_id, exc) from exc
        if membership is None:
            raise NotFoundError("Dial membership not found.")
        return membership

    def list_memberships(
        self,
        filter: DialMembershipFilter,
        visible_to: int | None = None,
    ) -> tuple[list[DialMembership], int]:
        """Return matching memberships and the total number of matches.

        Args:
            filter: Dial/user restrictions plus offset and limit.
            visible_to: When set, only memberships of dials this user belongs
                to are returned.
        """
        conditions = []
        if filter.dial_id is not None:
            conditions.append(DialMembership.dial_id == filter.dial_id)
        if filter.user_id is not None:
            conditions.append(DialMembership.user_id == filter.user_id)
        if visible_to is not None:
            member_dials = select(DialMembership.dial_id).where(
                DialMembership.user_id == visible_to
            )
            conditions.append(DialMembership.dial_id.in_(member_dials.scalar_subquery()))

        stmt = (
            select(DialMembership)
            .where(*conditions)
            .order_by(DialMembership.dial_id, DialMembership.user_id)
            .offset(filter.offset)
        )
        if filter.limit is not None:
            stmt = stmt.limit(filter.limit)

        try:
            total = self.session.scalar(
                select(func.count()).select_from(DialMembership).where(*conditions)
            )
            memberships = list(self.session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise storage_error("list dial memberships", filter.dial_id, exc) from exc
        return memberships, int(total or 0)

    def list_user_ids(self, dial_id: int) -> list[int]:
        """Return the identifiers of every current member of a dial."""
        stmt = (
            select(DialMembership.user_id)
            .where(DialMembership.dial_id == dial_id)
            .order_by(DialMembership.user_id)
        )
        return list(self.session.scalars(stmt))

    def list_values(self, dial_id: int) -> list[int]:
        """Return the value of every current member of a dial."""
        stmt = select(DialMembership.value).where(DialMembership.dial_id == dial_id)
        return list(self.session.scalars(stmt))

    def upsert(self, dial_id: int, user_id: int, value: int, now: datetime) -> DialMembership:
        """Create the membership or overwrite its value."""
        try:
            membership = self.session.get(DialMembership, (dial_id, user_id))
            if membership is None:
                membership = DialMembership(
                    dial_id=dial_id,
                    user_id=user_id,
                    value=value,
                    created_at=now,
                    updated_at=now,
                )
                self.session.add(membership)
            elif membership.value != value:
                membership.value = value
                membership.updated_at = now
            self.session.flush()
        except SQLAlchemyError as exc:
            raise storage_error("upsert dial membership", dial_id, exc) from exc
        return membership

    def delete(self, dial_id: int, user_id: int) -> None:
        """Remove a membership.

        Raises:
            NotFoundError: If the membership does not exist.
        """
        membership = self.find_by_id(dial_id, user_id)
        try:
            self.session.delete(membership)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise storage_error("delete dial membership", dial_id, exc) from exc
