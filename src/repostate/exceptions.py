"""repostate exceptions."""

from collections.abc import Sequence
from pathlib import Path  # noqa: TC003 - Used in runtime signatures
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from repostate.github._models import RefCleanupResult


class RepoStateError(Exception):
    """Base exception for repostate errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(RepoStateError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when required configuration is missing.

    Attributes:
        missing: Names of the environment variables that were not set.
    """

    def __init__(self, message: str, *, missing: Sequence[str] = ()) -> None:
        """Initialize with error message and the missing variable names."""
        super().__init__(message)
        self.missing: tuple[str, ...] = tuple(missing)


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected


# =============================================================================
# Hosted API Exceptions
# =============================================================================


class GitHubApiError(RepoStateError):
    """Raised when a GitHub API call fails.

    Covers both transport failures (connection errors and timeouts that
    survived the client's retries) and non-success HTTP statuses.

    Attributes:
        method: HTTP method of the failed request.
        url: URL of the failed request.
        status_code: HTTP status, or None for transport failures.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and request context."""
        super().__init__(message)
        self.method: str = method
        self.url: str = url
        self.status_code: int | None = status_code
        self.cause: Exception | None = cause


class GitHubNotFoundError(GitHubApiError):
    """Raised when the GitHub API answers 404 Not Found."""


class RefNotFoundError(GitHubNotFoundError):
    """Raised when a ref lookup finds no such ref.

    Attributes:
        ref: The branch name that was looked up.
    """

    def __init__(
        self,
        message: str,
        *,
        ref: str,
        method: str,
        url: str,
        status_code: int | None = 404,
    ) -> None:
        """Initialize with error message and ref context."""
        super().__init__(message, method=method, url=url, status_code=status_code)
        self.ref: str = ref


class RefCleanupError(RepoStateError):
    """Raised when one or more temporary refs could not be deleted.

    Attributes:
        results: Cleanup outcomes for the refs that failed.
    """

    def __init__(self, message: str, *, results: "Sequence[RefCleanupResult]") -> None:
        """Initialize with error message and failed cleanup results."""
        super().__init__(message)
        self.results: "tuple[RefCleanupResult, ...]" = tuple(results)

    @property
    def refs(self) -> tuple[str, ...]:
        """Names of the refs that leaked."""
        return tuple(result.ref for result in self.results)


# =============================================================================
# Local Git Exceptions
# =============================================================================


class GitCommandError(RepoStateError):
    """Raised when the git binary fails or cannot be executed.

    Attributes:
        git_args: Arguments passed to git.
        returncode: Exit status, or None if the process could not start.
        stderr: Captured standard error.
        directory: Working directory of the invocation.
    """

    def __init__(
        self,
        message: str,
        *,
        args: Sequence[str],
        returncode: int | None,
        stderr: str = "",
        directory: Path | None = None,
    ) -> None:
        """Initialize with error message and process context."""
        super().__init__(message)
        self.git_args: tuple[str, ...] = tuple(args)
        self.returncode: int | None = returncode
        self.stderr: str = stderr
        self.directory: Path | None = directory


# =============================================================================
# State Structure Exceptions
# =============================================================================


class StateStructureError(RepoStateError, ValueError):
    """Raised when a repository state violates the single-file linear model."""


class EmptyRefError(StateStructureError):
    """Raised when a ref is declared without any commits.

    Attributes:
        ref: The declared ref name.
    """

    def __init__(self, message: str, *, ref: str) -> None:
        """Initialize with error message and ref context."""
        super().__init__(message)
        self.ref: str = ref


class MergeCommitError(StateStructureError):
    """Raised when a parent walk reaches a commit with several parents.

    Attributes:
        sha: The merge commit.
        parents: Its parent SHAs.
    """

    def __init__(self, message: str, *, sha: str, parents: Sequence[str]) -> None:
        """Initialize with error message and commit context."""
        super().__init__(message)
        self.sha: str = sha
        self.parents: tuple[str, ...] = tuple(parents)


class PayloadError(StateStructureError):
    """Raised when a commit's tracked file is missing or is not UTF-8 text.

    Attributes:
        ref: The commit or ref whose payload could not be read.
    """

    def __init__(self, message: str, *, ref: str) -> None:
        """Initialize with error message and commit context."""
        super().__init__(message)
        self.ref: str = ref
