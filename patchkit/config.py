"""
Application configuration management.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Parsing
    strict_parsing: bool = False  # raise instead of dropping malformed segments
    header_scan_lines: int = 10

    # Application
    strict_offsets: bool = True  # raise when a hunk reaches past the original
    max_workers: int = 3

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PATCHKIT_",
        env_file=".env",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
