"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for workflow checks.

    Values are read from ``GHASTLY_``-prefixed environment variables and from
    a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="GHASTLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"

    # Checks
    policy_timeout_seconds: float | None = Field(None, gt=0)  # None: no deadline
    isolate_policy_failures: bool = True  # a crashing policy is reported, not raised
