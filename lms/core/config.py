from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


def _split_csv(value: str) -> list[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (production uses postgresql+psycopg2://...)
    database_url: str = "sqlite:///./lms.db"
    auto_create_tables: bool = False

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Uploaded materials
    upload_dir: str = "uploads"
    max_upload_mb: int = 50

    # App settings
    app_name: str = "LMS"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
