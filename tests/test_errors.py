"""Tests for error kinds and their mapping to statuses."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from wtf_dial.core.errors import (
    ECONFLICT,
    EINTERNAL,
    EINVALID,
    ENOTFOUND,
    EUNAUTHORIZED,
    INTERNAL_ERROR_MESSAGE,
    ConflictError,
    InternalError,
    InvalidError,
    NotFoundError,
    error_code,
    error_message,
    error_status_code,
    from_error_status_code,
    storage_error,
)


def test_error_code_of_domain_and_foreign_errors() -> None:
    assert error_code(NotFoundError("Dial not found.")) == ENOTFOUND
    assert error_code(InvalidError("bad")) == EINVALID
    assert error_code(RuntimeError("boom")) == EINTERNAL
    assert error_code(None) == ""


def test_error_message_hides_internal_details() -> None:
    assert error_message(NotFoundError("Dial not found.")) == "Dial not found."
    assert error_message(InternalError("update dial value (dial 3): locked")) == INTERNAL_ERROR_MESSAGE
    assert error_message(RuntimeError("secret")) == INTERNAL_ERROR_MESSAGE


def test_storage_error_classifies_integrity_errors_as_conflicts() -> None:
    exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
    wrapped = storage_error("create dial", None, exc)
    assert isinstance(wrapped, ConflictError)
    assert "UNIQUE" not in wrapped.message


def test_storage_error_keeps_operation_context() -> None:
    exc = OperationalError("SELECT", {}, Exception("database is locked"))
    wrapped = storage_error("load dial value", 7, exc)
    assert isinstance(wrapped, InternalError)
    assert wrapped.message.startswith("load dial value (dial 7)")


@pytest.mark.parametrize(
    ("code", "status"),
    [(ECONFLICT, 409), (EINVALID, 400), (ENOTFOUND, 404), (EUNAUTHORIZED, 401), (EINTERNAL, 500)],
)
def test_status_code_mapping(code, status) -> None:
    assert error_status_code(code) == status
    assert from_error_status_code(status) == code


def test_unknown_codes_map_to_internal() -> None:
    assert error_status_code("weird") == 500
    assert from_error_status_code(418) == EINTERNAL
