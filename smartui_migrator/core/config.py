from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Migrator settings loaded from environment variables.

    Every field can be overridden with a ``SMARTUI_MIGRATOR_`` prefixed
    variable (e.g. ``SMARTUI_MIGRATOR_MULTI_DETECTION=true``) or from a
    ``.env`` file in the working directory.

    Detection tables (marker strings, framework signatures, ignore list)
    live in ``DetectionTables``, not here.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMARTUI_MIGRATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Console renderer at DEBUG when true; JSON at INFO otherwise.
    debug: bool = True

    # Return every candidate for outside selection instead of one result.
    multi_detection: bool = False

    # Content scanner skips files larger than this (bytes).
    max_file_size: int = 512 * 1024

    # Written into the generated SmartUI config.
    smartui_project_name: str = "migrated-project"
    smartui_config_name: str = ".smartui.json"

    @field_validator("max_file_size")
    @classmethod
    def require_positive_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_file_size must be a positive number of bytes")
        return v


def get_settings() -> Settings:
    return Settings()
