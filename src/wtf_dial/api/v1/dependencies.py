"""Shared API dependencies for authentication and services."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from wtf_dial.core.errors import UnauthorizedError
from wtf_dial.core.security import decode_access_token
from wtf_dial.db.session import begin_read, get_session_factory
from wtf_dial.services.dial_service import DialService
from wtf_dial.services.events import EventService
from wtf_dial.services.metrics import ErrorMetrics
from wtf_dial.services.user_service import get_user

# Missing credentials are reported through the application error handler.
bearer_scheme = HTTPBearer(auto_error=False)

SessionFactoryDep = Annotated[sessionmaker[Session], Depends(get_session_factory)]


def get_event_service(request: Request) -> EventService:
    """Return the event service created at application startup."""
    return request.app.state.events


def get_error_metrics(request: Request) -> ErrorMetrics:
    """Return the error counters created at application startup."""
    return request.app.state.error_metrics


EventServiceDep = Annotated[EventService, Depends(get_event_service)]
ErrorMetricsDep = Annotated[ErrorMetrics, Depends(get_error_metrics)]


def get_dial_service(session_factory: SessionFactoryDep, events: EventServiceDep) -> DialService:
    """Return a dial service bound to the request's collaborators."""
    return DialService(session_factory, events)


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session_factory: SessionFactoryDep,
) -> int:
    """Return the identifier of the user named by the bearer token.

    Raises:
        UnauthorizedError: If no valid token is supplied or the user is unknown.
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required.")
    user_id = decode_access_token(credentials.credentials)
    with session_factory() as db:
        begin_read(db)
        if get_user(db, user_id) is None:
            raise UnauthorizedError("User not found.")
    return user_id


DialServiceDep = Annotated[DialService, Depends(get_dial_service)]
CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
