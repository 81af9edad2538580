# pyright: reportAny=false, reportExplicitAny=false
"""Configuration loading from environment variables.

GitHub settings:
    GITHUB_PERSONAL_ACCESS_TOKEN: Token with read/write access (required).
    GITHUB_TEST_REPOSITORY_OWNER: Owner of the test repository (required).
    GITHUB_TEST_REPOSITORY_NAME: Name of the test repository (required).
    GITHUB_API_URL: REST API base URL.
    GITHUB_API_TIMEOUT: Per-request timeout in seconds.
    GITHUB_API_MAX_ATTEMPTS: Attempts per request on transport errors.

Logging settings:
    REPOSTATE_DEBUG: If set, forces debug level.
    REPOSTATE_LOG_LEVEL: debug, info, warning or error.
    REPOSTATE_LOG_FORMAT: json or text.
    REPOSTATE_LOG_FILE: Log file path; stderr when empty.
"""

import os
from collections.abc import Mapping
from typing import Any, Final

from pydantic import BaseModel, ValidationError

from repostate.config._models import GitHubSettings, LoggingConfig
from repostate.exceptions import ConfigLoadError, ConfigValidationError

# (field name, environment variable, description) for required settings.
_REQUIRED_GITHUB_VARS: Final = (
    (
        "token",
        "GITHUB_PERSONAL_ACCESS_TOKEN",
        "The token must grant read/write access to the test repository.",
    ),
    (
        "owner",
        "GITHUB_TEST_REPOSITORY_OWNER",
        "Owner of the repository against which the tests will be run.",
    ),
    (
        "repo",
        "GITHUB_TEST_REPOSITORY_NAME",
        "Name of the repository against which the tests will be run.",
    ),
)

_OPTIONAL_GITHUB_VARS: Final = (
    ("api_url", "GITHUB_API_URL"),
    ("timeout", "GITHUB_API_TIMEOUT"),
    ("max_attempts", "GITHUB_API_MAX_ATTEMPTS"),
)

_LOGGING_VARS: Final = (
    ("level", "REPOSTATE_LOG_LEVEL"),
    ("format", "REPOSTATE_LOG_FORMAT"),
    ("file", "REPOSTATE_LOG_FILE"),
)


def _validate[ModelT: BaseModel](
    model: type[ModelT],
    values: dict[str, Any],
    env_names: Mapping[str, str],
) -> ModelT:
    """Validate raw values, mapping Pydantic errors back to variable names.

    Args:
        model: The model class to validate against.
        values: Raw field values.
        env_names: Mapping from field name to environment variable name.

    Returns:
        The validated model.

    Raises:
        ConfigValidationError: For the first invalid field.
    """
    try:
        return model.model_validate(values)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        key = env_names.get(field, field)
        msg = f"Invalid value for {key}: {error['msg']}"
        raise ConfigValidationError(
            msg,
            key=key,
            value=values.get(field),
            expected=str(error.get("ctx", {}).get("expected", error["type"])),
        ) from e


def load_github_settings(environ: Mapping[str, str] | None = None) -> GitHubSettings:
    """Load GitHub settings from environment variables.

    Args:
        environ: Environment to read. Defaults to os.environ.

    Returns:
        The validated settings.

    Raises:
        ConfigLoadError: If required variables are missing; every missing
            variable is reported at once.
        ConfigValidationError: If a value is invalid.
    """
    env = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    missing: list[str] = []
    descriptions: list[str] = []
    for field, name, description in _REQUIRED_GITHUB_VARS:
        value = env.get(name, "").strip()
        if not value:
            missing.append(name)
            descriptions.append(f"    {name}: {description}")
            continue
        values[field] = value

    if missing:
        msg = "Missing environment variables:\n" + "\n".join(descriptions)
        raise ConfigLoadError(msg, missing=missing)

    for field, name in _OPTIONAL_GITHUB_VARS:
        value = env.get(name, "").strip()
        if value:
            values[field] = value

    env_names = {field: name for field, name, _ in _REQUIRED_GITHUB_VARS}
    env_names.update(_OPTIONAL_GITHUB_VARS)
    return _validate(GitHubSettings, values, env_names)


def load_logging_config(environ: Mapping[str, str] | None = None) -> LoggingConfig:
    """Load logging configuration from environment variables.

    REPOSTATE_DEBUG takes precedence over REPOSTATE_LOG_LEVEL.

    Args:
        environ: Environment to read. Defaults to os.environ.

    Returns:
        The validated logging configuration.

    Raises:
        ConfigValidationError: If a value is invalid.
    """
    env = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    for field, name in _LOGGING_VARS:
        value = env.get(name, "").strip()
        if value:
            values[field] = value.lower() if field != "file" else value

    if env.get("REPOSTATE_DEBUG"):
        values["level"] = "debug"

    return _validate(LoggingConfig, values, dict(_LOGGING_VARS))
