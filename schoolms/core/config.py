from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field("School Management Backend", alias="APP_NAME")
    debug: bool = Field(False, alias="DEBUG")
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")

    database_url: str = Field("sqlite+aiosqlite:///./schoolms.db", alias="DATABASE_URL")
    auto_create_tables: bool = Field(True, alias="AUTO_CREATE_TABLES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(["*"], alias="CORS_ORIGINS")

    # Reject subject schedule writes that double-book a room or teacher
    enforce_schedule_conflicts: bool = Field(True, alias="ENFORCE_SCHEDULE_CONFLICTS")

    # Portal-side client
    api_base_url: str = Field("http://localhost:8000/api/v1", alias="API_BASE_URL")
    poll_interval_seconds: float = Field(30.0, alias="POLL_INTERVAL_SECONDS")
    client_timeout_seconds: float = Field(10.0, alias="CLIENT_TIMEOUT_SECONDS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


settings = Settings()
