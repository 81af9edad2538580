"""repostate configuration.

Models:
    GitHubSettings: Token and identity of the test repository.
    LoggingConfig: Log level, format and destination.

Functions:
    load_github_settings: Read GitHubSettings from the environment.
    load_logging_config: Read LoggingConfig from the environment.
"""

from repostate.config._load import load_github_settings, load_logging_config
from repostate.config._models import GitHubSettings, LogFormat, LoggingConfig, LogLevel

__all__ = [
    "GitHubSettings",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "load_github_settings",
    "load_logging_config",
]
