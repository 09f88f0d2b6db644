"""Application settings using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from imortal.domain.enums import DatabaseBackend


class Settings(BaseSettings):
    """Settings loaded from ``IMORTAL_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="IMORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Code generation
    database_backend: DatabaseBackend = DatabaseBackend.POSTGRES
    generate_migrations: bool = True
    output_dir: str = "generated"
    migration_version: str = "00000000000001"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
