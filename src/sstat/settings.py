"""Settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .parser import MAX_DEPTH, MAX_DEPTH_CEILING


class Settings(BaseSettings):
    """Configuration for the ``sstat`` command line tools.

    Values are read from ``SSTAT_``-prefixed environment variables and from a
    ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="SSTAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"

    # Parsing is not interruptible; its time grows linearly with the input size
    max_source_size: int = Field(default=1_000_000, gt=0)

    # Deepest node nesting accepted before the parse stops with a diagnostic
    max_depth: int = Field(default=MAX_DEPTH, gt=0, le=MAX_DEPTH_CEILING)

    # Extra source lines shown around the offending span in diagnostics
    context_lines: int = Field(default=0, ge=0)
