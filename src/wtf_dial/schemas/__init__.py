"""Pydantic schemas for the WTF Dial application."""

from .dial import (
    DialCreate,
    DialFilter,
    DialList,
    DialMembershipFilter,
    DialMembershipList,
    DialMembershipOut,
    DialOut,
    DialUpdate,
    DialValueOut,
    MembershipValueUpdate,
)

__all__ = [
    "DialCreate",
    "DialFilter",
    "DialList",
    "DialMembershipFilter",
    "DialMembershipList",
    "DialMembershipOut",
    "DialOut",
    "DialUpdate",
    "DialValueOut",
    "MembershipValueUpdate",
]
