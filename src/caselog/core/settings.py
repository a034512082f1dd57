"""Application settings and configuration.

This module defines all configuration options for caselog. Settings are loaded
from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AlertMode = Literal["none", "watchers", "always_alert", "watch_and_alert"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="caselog", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./caselog.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Open a case for new warnings on content that has none yet
    report_new_warnings: bool = Field(default=False, alias="REPORT_NEW_WARNINGS")

    # Rendering of reply ban case logs
    board_url: str = Field(default="http://localhost", alias="BOARD_URL")
    reply_ban_title: str = Field(default="Reply banned", alias="REPLY_BAN_TITLE")
    post_in_thread_title: str = Field(
        default="Post in thread '{title}'",
        alias="POST_IN_THREAD_TITLE",
    )

    # Also post newly opened cases as a thread in this forum node
    log_cases_to_forum_node_id: int | None = Field(
        default=None,
        alias="LOG_CASES_TO_FORUM_NODE_ID",
    )
    case_thread_title: str = Field(default="Reported: {title}", alias="CASE_THREAD_TITLE")

    # Alerting
    report_alert_mode: AlertMode = Field(default="watchers", alias="REPORT_ALERT_MODE")
    case_moderator_user_ids: list[int] = Field(
        default_factory=list,
        alias="CASE_MODERATOR_USER_IDS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("board_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
