"""SQLAlchemy models for the WTF Dial application."""

from .dial import Dial, DialMembership, DialValue
from .user import User

__all__ = [
    "Dial", "DialMembership", "DialValue",
    "User",
]
