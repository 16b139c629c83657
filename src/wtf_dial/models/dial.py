"""SQLAlchemy models for dials, their memberships and value history."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wtf_dial.db.session import Base
from wtf_dial.db.time import utcnow


class Dial(Base):
    """A shared dial whose value is the rounded average of its members' values."""

    __tablename__ = "dials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Owner; always holds a membership on the dial.
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # Last committed aggregate; only the recompute pipeline writes it.
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    invite_code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    memberships: Mapped[list[DialMembership]] = relationship(
        "DialMembership",
        back_populates="dial",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DialMembership.user_id",
    )


class DialMembership(Base):
    """A user's membership on a dial, carrying the value they set."""

    __tablename__ = "dial_memberships"
    __table_args__ = (Index("ix_dial_memberships_user_id", "user_id"),)

    # Composite primary key allows one membership per (dial, user).
    dial_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("dials.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    dial: Mapped[Dial] = relationship("Dial", back_populates="memberships")


class DialValue(Base):
    """One history sample of a dial's value per minute."""

    __tablename__ = "dial_values"

    dial_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("dials.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Truncated to the minute; the composite key makes later samples in the
    # same minute overwrite the earlier one.
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
