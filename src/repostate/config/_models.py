"""Configuration models.

This module provides the frozen Pydantic models for GitHub access and
logging settings.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty writes to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class GitHubSettings(BaseModel):
    """Credentials and identity of the repository fixtures are built in.

    Attributes:
        token: Personal access token with read/write access to the repository.
        owner: Owner of the test repository.
        repo: Name of the test repository.
        api_url: Base URL of the GitHub REST API.
        timeout: Per-request timeout in seconds.
        max_attempts: Attempts per request on connection errors and timeouts.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    token: SecretStr
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    api_url: str = Field(default="https://api.github.com", pattern=r"^https?://")
    timeout: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
