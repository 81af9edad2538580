"""GitHub object models.

This module defines the data structures returned by GitHubClient and the
temporary ref manager.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A single entry of a tree to create.

    Attributes:
        path: Path of the entry inside the tree.
        sha: SHA of the blob the entry points at.
        mode: Git file mode.
        type: Git object type of the entry.
    """

    path: str
    sha: str
    mode: str = "100644"
    type: str = "blob"


@dataclass(frozen=True, slots=True)
class GitCommit:
    """A commit object as returned by the Git Data API.

    Attributes:
        sha: Commit SHA.
        message: Complete commit message.
        tree: SHA of the commit's tree.
        parents: SHAs of the parent commits (empty for a root commit).
    """

    sha: str
    message: str
    tree: str
    parents: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CommitIdentity:
    """Author or committer of a commit.

    Attributes:
        name: Identity name, if reported.
        email: Identity email, if reported.
        date: ISO 8601 timestamp, if reported.
    """

    name: str | None = None
    email: str | None = None
    date: str | None = None


@dataclass(frozen=True, slots=True)
class CommitDetails:
    """Commit of a pull request with author and committer details.

    Attributes:
        sha: Commit SHA.
        message: Complete commit message.
        tree: SHA of the commit's tree.
        author: Author identity.
        committer: Committer identity.
    """

    sha: str
    message: str
    tree: str
    author: CommitIdentity | None
    committer: CommitIdentity | None


@dataclass(frozen=True, slots=True)
class TemporaryRef:
    """A uniquely named branch created for test isolation.

    Attributes:
        ref: The generated branch name.
        base_ref: The name the unique name was derived from.
        sha: Commit the branch was created at.
    """

    ref: str
    base_ref: str
    sha: str
    _delete: Callable[[], Awaitable[None]] = field(repr=False, compare=False)

    async def delete(self) -> None:
        """Delete the branch from the repository."""
        await self._delete()


@dataclass(frozen=True, slots=True)
class RefCleanupResult:
    """Outcome of deleting one temporary ref.

    Attributes:
        ref: The temporary branch name.
        error: The failure, or None if the branch was deleted.
    """

    ref: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """True if the ref was deleted."""
        return self.error is None
