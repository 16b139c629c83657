"""Data access helpers for dials."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wtf_dial.core.errors import NotFoundError, storage_error
from wtf_dial.models import Dial, DialMembership
from wtf_dial.schemas.dial import DialFilter

__all__ = ["DialRepository"]


class DialRepository:
    """Thin wrapper around database access for dial entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def find_by_id(self, dial_id: int, visible_to: int | None = None) -> Dial:
        """Return a dial by identifier.

        Args:
            dial_id: Dial identifier.
            visible_to: When set, the dial is only found if this user is a member.

        Raises:
            NotFoundError: If the dial does not exist or is not visible.
        """
        dials, _ = self.find_dials(DialFilter(id=dial_id), visible_to=visible_to)
        if not dials:
            raise NotFoundError("Dial not found.")
        return dials[0]

    def find_dials(
        self,
        filter: DialFilter,
        visible_to: int | None = None,
    ) -> tuple[list[Dial], int]:
        """Return matching dials and the total number of matches.

        Searching by invite code ignores membership so that non-members can
        find the dial they were invited to; otherwise results are limited to
        dials ``visible_to`` belongs to.
        """
        conditions = []
        if filter.id is not None:
            conditions.append(Dial.id == filter.id)
        if filter.invite_code is not None:
            conditions.append(Dial.invite_code == filter.invite_code)
        elif visible_to is not None:
            member_dials = select(DialMembership.dial_id).where(
                DialMembership.user_id == visible_to
            )
            conditions.append(Dial.id.in_(member_dials.scalar_subquery()))

        stmt = select(Dial).where(*conditions).order_by(Dial.id).offset(filter.offset)
        if filter.limit is not None:
            stmt = stmt.limit(filter.limit)

        try:
            total = self.session.scalar(select(func.count()).select_from(Dial).where(*conditions))
            dials = list(self.session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise storage_error("find dials", filter.id, exc) from exc
        return dials, int(total or 0)

    def exists(self, dial_id: int) -> bool:
        """Return True if the dial exists, regardless of membership."""
        try:
            count = self.session.scalar(
                select(func.count()).select_from(Dial).where(Dial.id == dial_id)
            )
        except SQLAlchemyError as exc:
            raise storage_error("check dial exists", dial_id, exc) from exc
        return bool(count)

    def get_value_for_update(self, dial_id: int) -> int | None:
        """Return the stored value of a dial, locking its row until commit.

        Returns ``None`` when the dial does not exist. Dialects without row
        locks (SQLite) rely on the transaction already holding the write lock.
        """
        stmt = select(Dial.value).where(Dial.id == dial_id).with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def update_value(self, dial_id: int, value: int, now: datetime) -> None:
        """Store a new aggregate value on the dial."""
        self.session.execute(
            update(Dial).where(Dial.id == dial_id).values(value=value, updated_at=now)
        )

    def create(self, *, user_id: int, name: str, invite_code: str, now: datetime) -> Dial:
        """Insert a new dial and return the persisted ORM instance."""
        dial = Dial(
            user_id=user_id,
            name=name,
            value=0,
            invite_code=invite_code,
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(dial)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise storage_error("create dial", None, exc) from exc
        return dial

    def rename(self, dial: Dial, name: str, now: datetime) -> Dial:
        """Change the display name of a dial."""
        dial.name = name
        dial.updated_at = now
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise storage_error("update dial", dial.id, exc) from exc
        return dial

    def delete(self, dial: Dial) -> None:
        """Delete a dial along with its memberships and history."""
        try:
            self.session.delete(dial)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise storage_error("delete dial", dial.id, exc) from exc
