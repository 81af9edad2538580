"""Shared utilities for repostate."""

from repostate.utils._concurrency import first_error, leaf_errors
from repostate.utils._logging import create_logger, get_logger

__all__ = ["create_logger", "first_error", "get_logger", "leaf_errors"]
