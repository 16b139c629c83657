"""Runtime configuration for the WTF Dial service.

Every option is read from the environment (or a local ``.env`` file) under
the upper-case alias shown next to it. Only ``SECRET_KEY`` is required.
"""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

POSTGRES_PREFIXES = ("postgres://", "postgresql://", "postgresql+asyncpg://")


class Settings(BaseSettings):
    """Settings for the API process, the token script and migrations."""

    app_name: str = Field(default="WTF Dial", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Bearer tokens
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Storage
    database_url: str = Field(default="sqlite:///./wtf.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # "memory" keeps subscriptions in-process; "redis" publishes onto
    # per-user channels so other processes can relay them.
    event_backend: Literal["memory", "redis"] = Field(default="memory", alias="EVENT_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    event_buffer_size: int = Field(default=100, ge=1, alias="EVENT_BUFFER_SIZE")

    # Dial rules
    dial_value_min: int = Field(default=0, alias="DIAL_VALUE_MIN")
    dial_value_max: int = Field(default=100, alias="DIAL_VALUE_MAX")
    dial_name_max_length: int = Field(default=100, ge=1, alias="DIAL_NAME_MAX_LENGTH")
    dial_list_default_limit: int = Field(default=20, ge=1, alias="DIAL_LIST_DEFAULT_LIMIT")
    dial_list_max_limit: int = Field(default=100, ge=1, alias="DIAL_LIST_MAX_LIMIT")

    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_dial_rules(self) -> "Settings":
        if self.dial_value_min > self.dial_value_max:
            raise ValueError("DIAL_VALUE_MIN must not exceed DIAL_VALUE_MAX")
        if self.dial_list_default_limit > self.dial_list_max_limit:
            raise ValueError("DIAL_LIST_DEFAULT_LIMIT must not exceed DIAL_LIST_MAX_LIMIT")
        return self

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def database_url_sync(self) -> str:
        """Return the effective URL with PostgreSQL pinned to the psycopg driver.

        Storage is synchronous, so bare ``postgres://`` URLs and asyncpg URLs
        both map onto ``postgresql+psycopg://``.
        """
        url = self.effective_database_url
        for prefix in POSTGRES_PREFIXES:
            if url.startswith(prefix):
                return "postgresql+psycopg://" + url[len(prefix):]
        return url


settings = Settings()  # type: ignore[call-arg]
