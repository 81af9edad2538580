"""Read repository states back from local git repositories."""

from collections.abc import Iterable
from pathlib import Path

import anyio

from repostate.exceptions import PayloadError
from repostate.local._git import checkout, execute_git_command, run_git
from repostate.state import (
    DEFAULT_REF,
    FILENAME,
    Commit,
    RefState,
    RepoState,
    get_lines,
    split_initial_commit,
)


async def get_ref_shas_from_git_repo(directory: Path, ref: str) -> list[str]:
    """List the full SHAs of a ref's commits, oldest first."""
    log = await execute_git_command(directory, ["log", "--format=%H"], ref=ref)
    return list(reversed(log.splitlines()))


async def _read_payload(directory: Path, sha: str) -> str:
    try:
        payload = await anyio.Path(directory / FILENAME).read_bytes()
        return payload.decode("utf-8")
    except FileNotFoundError as e:
        msg = f"Commit {sha} has no {FILENAME}"
        raise PayloadError(msg, ref=sha) from e
    except UnicodeDecodeError as e:
        msg = f"{FILENAME} at commit {sha} is not UTF-8 text"
        raise PayloadError(msg, ref=sha) from e


async def get_ref_commits_from_git_repo(directory: Path, ref: str) -> RefState:
    """Read a ref's history back, root first.

    Each commit is checked out in turn to read the tracked file, so the
    working tree is left detached at the ref's tip.

    Args:
        directory: Working directory of the repository.
        ref: Branch to read.

    Returns:
        The ref's commits, initial commit included.

    Raises:
        GitCommandError: If a git command fails.
        PayloadError: If a commit lacks the tracked file or it is not UTF-8.
    """
    commits: list[Commit] = []
    for sha in await get_ref_shas_from_git_repo(directory, ref):
        await checkout(directory, sha)
        content = await _read_payload(directory, sha)
        message = await run_git(directory, "log", "--format=%B", "--max-count=1")
        commits.append(
            Commit(lines=tuple(get_lines(content)), message=message.rstrip("\n"))
        )
    return tuple(commits)


async def get_repo_state_from_git_repo(
    directory: Path,
    refs: Iterable[str],
    *,
    default_ref: str = DEFAULT_REF,
) -> RepoState:
    """Read several refs back into a RepoState, one after the other.

    Raises:
        StateStructureError: If the refs do not share a root commit.
    """
    chains = {ref: await get_ref_commits_from_git_repo(directory, ref) for ref in refs}
    return split_initial_commit(chains, default_ref=default_ref)
