"""Configuration management for the task-list engine."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TASKLIST_",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="data/tasklist.db", description="Path to the SQLite task store")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")

    # Duplicate Detection
    duplicate_similarity_threshold: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Titles scoring strictly above this similarity are treated as duplicates",
    )
    duplicate_max_results: int = Field(
        default=3, ge=1, description="Maximum number of similar tasks attached to a duplicate conflict"
    )

    # Pagination
    default_page_size: int = Field(default=20, ge=1, description="Page size used when a filter omits it")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound accepted for a filter page size")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Task content limits
    TITLE_MAX_LENGTH: int = 500
    DESCRIPTION_MAX_LENGTH: int = 5000
    TARGET_LOCATION_MAX_LENGTH: int = 200

    # Shopping items
    DEFAULT_SHOPPING_QUANTITY: int = 1


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
