"""Materialize repository states as local git repositories.

Every step runs strictly in sequence: a repository has one working tree and
one checked-out ref, so neither refs nor commits can be built concurrently.
"""

import os
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Final

import anyio
import anyio.to_thread

from repostate.exceptions import EmptyRefError
from repostate.local._git import checkout, run_git
from repostate.state import FILENAME, Commit, RepoState
from repostate.utils import get_logger

_IDENTITY_NAME: Final = "repostate"
_IDENTITY_EMAIL: Final = "repostate@localhost"


async def create_git_repo_commit(directory: Path, commit: Commit) -> None:
    """Overwrite the tracked file and commit it on the checked-out ref.

    Empty commits are allowed so that a commit repeating its parent's content
    behaves as it does on GitHub.
    """
    payload = commit.content.encode("utf-8")
    _ = await anyio.Path(directory / FILENAME).write_bytes(payload)
    _ = await run_git(directory, "add", FILENAME)
    _ = await run_git(
        directory,
        "commit",
        "--quiet",
        "--no-verify",
        "--allow-empty",
        "--allow-empty-message",
        "--cleanup=verbatim",
        "--message",
        commit.message,
    )


async def _init_repo(directory: Path, default_ref: str) -> None:
    _ = await run_git(directory, "init", "--quiet")
    _ = await run_git(directory, "symbolic-ref", "HEAD", f"refs/heads/{default_ref}")
    _ = await run_git(directory, "config", "user.name", _IDENTITY_NAME)
    _ = await run_git(directory, "config", "user.email", _IDENTITY_EMAIL)
    _ = await run_git(directory, "config", "commit.gpgsign", "false")
    _ = await run_git(directory, "config", "core.autocrlf", "false")
    _ = await run_git(directory, "config", "core.hooksPath", os.devnull)


async def create_git_repo(state: RepoState, directory: Path | None = None) -> Path:
    """Materialize a repository state in a local git repository.

    The repository is initialized on state.default_ref with the initial
    commit. Every other declared ref is branched from the initial commit,
    then each ref is checked out in turn and its commits applied.

    Args:
        state: The state to materialize.
        directory: Existing empty directory to use. A fresh temporary
            directory is created when None.

    Returns:
        The repository's working directory. Removing it is up to the caller.

    Raises:
        EmptyRefError: If a declared ref has no commits.
        GitCommandError: If a git command fails.
    """
    for ref, commits in state.refs_commits.items():
        if not commits:
            msg = f"Ref {ref!r} is declared without commits"
            raise EmptyRefError(msg, ref=ref)

    if directory is None:
        directory = Path(tempfile.mkdtemp(prefix="repostate-"))

    await _init_repo(directory, state.default_ref)
    await create_git_repo_commit(directory, state.initial_commit)

    for ref in state.refs:
        if ref != state.default_ref:
            _ = await run_git(directory, "branch", ref)

    for ref in state.refs:
        await checkout(directory, ref)
        for commit in state.refs_commits[ref]:
            await create_git_repo_commit(directory, commit)

    get_logger().debug("git_repo_created", directory=str(directory), refs=list(state.refs))
    return directory


@asynccontextmanager
async def git_repo(state: RepoState) -> AsyncIterator[Path]:
    """Materialize a repository state in a temporary directory for a block.

    The directory is removed on exit.

    Yields:
        The repository's working directory.
    """
    directory = Path(tempfile.mkdtemp(prefix="repostate-"))
    try:
        yield await create_git_repo(state, directory)
    finally:
        await anyio.to_thread.run_sync(
            lambda: shutil.rmtree(directory, ignore_errors=True)
        )
