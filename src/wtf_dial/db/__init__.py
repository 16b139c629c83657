"""Database configuration and utilities."""

from .session import Base, SessionLocal, begin_read, get_session_factory
from .transaction import Tx, transaction

__all__ = ["Base", "SessionLocal", "Tx", "begin_read", "get_session_factory", "transaction"]
