"""Tests for configuration parsing."""

import pytest
from pydantic import ValidationError

from wtf_dial.core.settings import Settings


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite:///./wtf.db", "sqlite:///./wtf.db"),
        ("postgres://u:p@db/wtf", "postgresql+psycopg://u:p@db/wtf"),
        ("postgresql://u:p@db/wtf", "postgresql+psycopg://u:p@db/wtf"),
        ("postgresql+asyncpg://u:p@db/wtf", "postgresql+psycopg://u:p@db/wtf"),
    ],
)
def test_database_url_sync(url, expected) -> None:
    assert Settings(SECRET_KEY="x", DATABASE_URL=url).database_url_sync == expected


def test_testing_database_override() -> None:
    configured = Settings(
        SECRET_KEY="x",
        DATABASE_URL="sqlite:///./wtf.db",
        TEST_DATABASE_URL="sqlite:///./test.db",
        USE_TEST_DATABASE=True,
    )
    assert configured.effective_database_url == "sqlite:///./test.db"


def test_unknown_event_backend_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(SECRET_KEY="x", EVENT_BACKEND="carrier-pigeon")


def test_inverted_value_range_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(SECRET_KEY="x", DIAL_VALUE_MIN=50, DIAL_VALUE_MAX=10)
