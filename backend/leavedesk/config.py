from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "LeaveDesk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    api_prefix: str = "/api"
    database_url: str = "postgresql+asyncpg://leavedesk:leavedesk@db:5432/leavedesk"
    db_timeout_seconds: float = 5.0
    auto_create_tables: bool = True
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:5174"]
    log_level: str = "INFO"

    rate_limit_enabled: bool = True
    rate_limit: str = "100/15minutes"

    # Role assumed when a caller sends no X-Role header.
    default_role: str = "hr"

    # Leave rules
    annual_leave_entitlement: int = 24
    sick_leave_entitlement: int = 12
    min_notice_days: int = 3
    max_working_days: int = 30
    min_reason_length: int = 5
    max_reason_length: int = 500
    min_rejection_comment_length: int = 10
    max_joining_years_back: int = 10
    upcoming_leave_window_days: int = 7


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
