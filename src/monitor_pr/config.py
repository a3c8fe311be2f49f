"""monitor-pr configuration using pydantic-settings.

This module defines the MonitorSettings class that reads configuration
from environment variables with the MONITOR_PR_ prefix. Every field has a
default, so monitor-pr runs without any environment configuration; command
line arguments override the repository and depth.
"""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MonitorSettings(BaseSettings):
    """monitor-pr configuration from environment variables.

    All environment variables are prefixed with MONITOR_PR_ (e.g.,
    MONITOR_PR_GH_CLI_PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_PR_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Repository
    # -------------------------------------------------------------------------
    # Repository used when --repo is not given
    owner: str = "ambient-labs"
    repo: str = "vst"

    # -------------------------------------------------------------------------
    # Issue discovery
    # -------------------------------------------------------------------------
    # How many levels of issue links to follow from the PR body
    max_depth: int = 3

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------
    # Secret shared with the forwarder; a random one is generated when unset
    webhook_secret: Optional[str] = None

    # -------------------------------------------------------------------------
    # gh CLI
    # -------------------------------------------------------------------------
    gh_cli_path: str = "gh"

    # Timeout for each gh api call
    gh_timeout_seconds: int = 30

    # Grace period for the forwarder to exit after SIGTERM
    forwarder_stop_timeout_seconds: float = 5.0

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("owner", "repo", "gh_cli_path")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate that the value is not blank."""
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v: int) -> int:
        """Validate that max depth is not negative."""
        if v < 0:
            raise ValueError("max_depth must be at least 0")
        return v

    @field_validator("webhook_secret")
    @classmethod
    def validate_webhook_secret(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank secret as unset."""
        if v is None or not v.strip():
            return None
        return v

    @field_validator("gh_timeout_seconds")
    @classmethod
    def validate_gh_timeout(cls, v: int) -> int:
        """Validate that the gh timeout is positive."""
        if v < 1:
            raise ValueError("gh_timeout_seconds must be at least 1")
        return v

    @field_validator("forwarder_stop_timeout_seconds")
    @classmethod
    def validate_forwarder_stop_timeout(cls, v: float) -> float:
        """Validate that the forwarder stop timeout is positive."""
        if v <= 0:
            raise ValueError("forwarder_stop_timeout_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a standard logging level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level


def get_settings() -> MonitorSettings:
    """Create and return a MonitorSettings instance.

    Returns:
        MonitorSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If an environment value is invalid.
    """
    return MonitorSettings()
