"""Declarative git repository fixtures backed by GitHub or a local git binary.

Declare a RepoState, materialize it with repostate.remote.create_refs() or
repostate.local.create_git_repo(), run the code under test against the
resulting branches, then read the branches back and compare them to the
expected state with plain equality.

Example:
    >>> from repostate import Commit, RepoState
    >>> from repostate.local import git_repo, get_ref_commits_from_git_repo
    >>> state = RepoState(
    ...     initial_commit=Commit(lines=("A",), message="init"),
    ...     refs_commits={"feature": [Commit(lines=("A", "B"), message="add B")]},
    ... )
    >>> async with git_repo(state) as directory:
    ...     chain = await get_ref_commits_from_git_repo(directory, "feature")
    >>> chain[1:] == state.refs_commits["feature"]
    True
"""

from repostate.exceptions import (
    ConfigError,
    EmptyRefError,
    GitCommandError,
    GitHubApiError,
    MergeCommitError,
    PayloadError,
    RefCleanupError,
    RefNotFoundError,
    RepoStateError,
    StateStructureError,
)
from repostate.state import Commit, RefDetails, RefState, RepoState

__all__ = [
    "Commit",
    "ConfigError",
    "EmptyRefError",
    "GitCommandError",
    "GitHubApiError",
    "MergeCommitError",
    "PayloadError",
    "RefCleanupError",
    "RefDetails",
    "RefNotFoundError",
    "RefState",
    "RepoState",
    "RepoStateError",
    "StateStructureError",
]
