"""Service configuration settings."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "missing-alert-service"
    environment: str = "development"
    port: int = 5000

    # Database configuration
    database_url: str = "sqlite+aiosqlite:///./missing_alert.db"
    case_storage_type: str = "inmemory"

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Case numbering
    case_number_prefix: str = "MA"

    # CORS configuration
    cors_origins: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def uses_sql_storage(self) -> bool:
        return self.case_storage_type.lower() in ("sql", "postgres", "sqlite")


# Global settings instance
settings = Settings()
