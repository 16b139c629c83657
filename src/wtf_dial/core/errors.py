"""Application error kinds.

Every failure the service reports carries one stable code so outer layers
can render a consistent message and status. Storage exceptions are wrapped
with the operation and dial involved; their raw text never reaches users.
"""

from __future__ import annotations

from typing import Final

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

ECONFLICT: Final[str] = "conflict"
EINTERNAL: Final[str] = "internal"
EINVALID: Final[str] = "invalid"
ENOTFOUND: Final[str] = "not_found"
ENOTIMPLEMENTED: Final[str] = "not_implemented"
EUNAUTHORIZED: Final[str] = "unauthorized"

INTERNAL_ERROR_MESSAGE: Final[str] = "Internal error."

ERROR_STATUS_CODES: Final[dict[str, int]] = {
    ECONFLICT: 409,
    EINVALID: 400,
    ENOTFOUND: 404,
    ENOTIMPLEMENTED: 501,
    EUNAUTHORIZED: 401,
    EINTERNAL: 500,
}


class DialError(Exception):
    """Base exception for all application errors."""

    code: str = EINTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DialError):
    """The requested dial, membership or user does not exist (or is not visible)."""

    code = ENOTFOUND


class InvalidError(DialError):
    """Input failed validation, e.g. a membership value outside the dial range."""

    code = EINVALID


class ConflictError(DialError):
    """The change would violate a uniqueness or ownership rule."""

    code = ECONFLICT


class UnauthorizedError(DialError):
    """The caller is not allowed to perform the operation."""

    code = EUNAUTHORIZED


class NotImplementedFeatureError(DialError):
    """The operation exists in the interface but is not supported."""

    code = ENOTIMPLEMENTED


class InternalError(DialError):
    """Storage or transport failure.

    ``message`` holds diagnostic context for logs; users only ever see
    :data:`INTERNAL_ERROR_MESSAGE`.
    """

    code = EINTERNAL


def storage_error(operation: str, dial_id: int | None, exc: SQLAlchemyError) -> DialError:
    """Wrap a storage exception with the operation and dial it happened in."""
    target = f" (dial {dial_id})" if dial_id is not None else ""
    if isinstance(exc, IntegrityError):
        return ConflictError(f"Conflicting change during {operation}{target}.")
    return InternalError(f"{operation}{target}: {exc.__class__.__name__}: {exc}")


def error_code(exc: BaseException | None) -> str:
    """Return the code of an application error, or ``internal`` for anything else."""
    if exc is None:
        return ""
    if isinstance(exc, DialError):
        return exc.code
    return EINTERNAL


def error_message(exc: BaseException | None) -> str:
    """Return the user-facing message for an error.

    Internal errors always collapse to a generic message.
    """
    if exc is None:
        return ""
    if isinstance(exc, DialError) and exc.code != EINTERNAL:
        return exc.message
    return INTERNAL_ERROR_MESSAGE


def error_status_code(code: str) -> int:
    """Return the HTTP status code associated with an error code."""
    return ERROR_STATUS_CODES.get(code, 500)


def from_error_status_code(status_code: int) -> str:
    """Return the error code associated with an HTTP status code."""
    for code, value in ERROR_STATUS_CODES.items():
        if value == status_code:
            return code
    return EINTERNAL
