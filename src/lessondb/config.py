"""Application settings via pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store configuration loaded from environment variables with LESSONDB_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="LESSONDB_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Store ---
    database_path: str = "data/lesson.db"
    database_url: str = ""  # overrides database_path when set
    sqlite_busy_timeout_seconds: float = 5.0
    echo_sql: bool = False

    # --- Default SUPERADMIN (seeded on first open) ---
    default_admin_email: str = "admin@example.com"
    default_admin_password: str = "admin12345"
    default_admin_name: str = "Super Admin"

    # --- Password policy ---
    password_min_length: int = 8
    password_max_length: int = 128

    def resolved_database_url(self) -> str:
        """SQLAlchemy URL of the embedded store file."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{Path(self.database_path).expanduser()}"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
