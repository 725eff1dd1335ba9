"""Configuration settings for tf_next_build.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OUTPUT_DIR_NAME = ".next-tf"


class Settings(BaseSettings):
    """Build command settings.

    Settings are loaded from environment variables with the TF_NEXT_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="TF_NEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Operational modes
    skip_download: bool = Field(
        default=False,
        description="Build in the working directory instead of a temporary workspace",
    )
    log_level: Literal["verbose", "none"] = Field(
        default="none",
        description="Set to 'verbose' to also log the resolved routes",
    )
    delete_build_cache: bool = Field(
        default=True,
        description="Erase the temporary workspace after the build",
    )

    # Paths
    cwd: Path = Field(
        default_factory=Path.cwd,
        description="Base directory for source files and the output directory",
    )
    tmp_dir: Path | None = Field(
        default=None,
        description="Parent directory for temporary workspaces (uses system default if not set)",
    )
    output_dir_name: str = Field(
        default=DEFAULT_OUTPUT_DIR_NAME,
        description="Name of the output directory, relative to cwd",
    )

    # Build
    builder: str | None = Field(
        default=None,
        description="Import string of the build callable, e.g. 'package.module:build'",
    )

    @property
    def output_dir(self) -> Path:
        """Directory the artifacts and config.json are written to."""
        return self.cwd / self.output_dir_name


def get_settings(**overrides: object) -> Settings:
    """Get the application settings.

    Args:
        **overrides: Values that take precedence over the environment.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings(**overrides)  # type: ignore[arg-type]


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["DEFAULT_OUTPUT_DIR_NAME", "Settings", "get_settings", "print_settings_json"]
