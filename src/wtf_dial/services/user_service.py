"""Lookup and creation of the users that own and join dials."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wtf_dial.core.errors import ConflictError, InvalidError
from wtf_dial.db.time import utcnow
from wtf_dial.models.user import User

__all__ = [
    "get_user",
    "get_user_by_email",
    "create_user",
]


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == email)).first()


def create_user(db: Session, name: str, email: str | None = None) -> User:
    """Persist a new user and commit.

    Raises:
        InvalidError: If the name is blank.
        ConflictError: If another user already has ``email``.
    """
    name = name.strip()
    if not name:
        raise InvalidError("User name required.")

    now = utcnow()
    db_user = User(name=name, email=email or None, created_at=now, updated_at=now)
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Email already in use.") from exc
    db.refresh(db_user)
    return db_user
