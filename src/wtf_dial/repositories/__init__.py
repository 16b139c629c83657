"""Data access wrappers around the ORM models."""

from .dial_repo import DialRepository
from .membership_repo import DialMembershipRepository

__all__ = ["DialMembershipRepository", "DialRepository"]
