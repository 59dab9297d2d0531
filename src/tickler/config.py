"""Application configuration via pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tickler.core.cron import validate_cron_expression


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Tickler"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    db_url: str | None = Field(default=None, description="Full async SQLAlchemy URL override")
    db_host: str = "localhost"
    db_port: int = 3306
    db_name: str = "tickler"
    db_user: str = "tickler"
    db_password: str = ""

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        return (
            f"mysql+aiomysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def database_url_sync(self) -> str:
        if self.db_url:
            return self.db_url.replace("+aiomysql", "+pymysql").replace("+aiosqlite", "")
        return (
            f"mysql+pymysql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # Redis (in-app channel + celery fallback)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str | None = None

    @property
    def redis_url(self) -> str:
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Celery
    celery_broker_url: str | None = None
    celery_result_backend: str | None = None

    @property
    def effective_celery_broker(self) -> str:
        return self.celery_broker_url or self.redis_url

    @property
    def effective_celery_backend(self) -> str:
        return self.celery_result_backend or self.redis_url

    # Scheduling
    reminder_tick_seconds: int = Field(default=60, gt=0)
    reminder_batch_size: int = Field(default=500, gt=0)
    task_sweep_cron: str = "0 9 * * *"

    @field_validator("task_sweep_cron")
    @classmethod
    def _check_sweep_cron(cls, value: str) -> str:
        ok, error = validate_cron_expression(value)
        if not ok:
            raise ValueError(error)
        return value.strip()

    # Channels
    enabled_channels: list[str] = ["email", "push", "sms", "in_app"]

    # Email (SMTP)
    email_smtp_host: str | None = None
    email_smtp_port: int = 587
    email_username: str | None = None
    email_password: str | None = None
    email_from: str | None = None
    email_subject: str = "Reminder"

    # Push gateway
    push_gateway_url: str | None = None
    push_gateway_token: str | None = None

    # SMS gateway
    sms_gateway_url: str | None = None
    sms_account_sid: str | None = None
    sms_auth_token: str | None = None
    sms_from_number: str | None = None

    # In-app
    in_app_channel_prefix: str = "tickler:notifications"

    # Outbound HTTP
    http_timeout_seconds: float = 10.0


@lru_cache
def get_settings() -> Settings:
    return Settings()
