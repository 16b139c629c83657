"""Dial-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DialCreate(BaseModel):
    """Schema for creating a new dial."""

    name: str


class DialUpdate(BaseModel):
    """Fields of a dial that may be changed after creation."""

    name: str | None = None


class MembershipValueUpdate(BaseModel):
    """Body of a request setting the caller's value on a dial."""

    value: int


class DialFilter(BaseModel):
    """Filter for dial listings.

    Without ``invite_code`` only dials the caller is a member of match.
    """

    id: int | None = None
    invite_code: str | None = None
    offset: int = Field(default=0, ge=0)
    limit: int | None = Field(default=None, ge=0)


class DialMembershipFilter(BaseModel):
    """Filter for membership listings."""

    dial_id: int | None = None
    user_id: int | None = None
    offset: int = Field(default=0, ge=0)
    limit: int | None = Field(default=None, ge=0)


class DialMembershipOut(BaseModel):
    """A membership returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    dial_id: int
    user_id: int
    value: int
    created_at: datetime
    updated_at: datetime


class DialOut(BaseModel):
    """A dial returned to callers, optionally with its memberships."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    value: int
    invite_code: str
    created_at: datetime
    updated_at: datetime
    memberships: list[DialMembershipOut] | None = None


class DialValueOut(BaseModel):
    """One history sample."""

    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    value: int


class DialList(BaseModel):
    """A page of dials plus the total number of matches."""

    dials: list[DialOut]
    n: int


class DialMembershipList(BaseModel):
    """A page of memberships plus the total number of matches."""

    memberships: list[DialMembershipOut]
    n: int
