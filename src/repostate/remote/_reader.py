"""Read repository states back from GitHub.

A ref's history is reconstructed by walking parents from its tip, one commit
at a time, and decoding the tracked file at each commit. The walk is an
explicit loop so long histories do not grow the stack.
"""

from collections.abc import Mapping

import anyio

from repostate.exceptions import MergeCommitError
from repostate.github import GitHubClient, fetch_ref_sha
from repostate.state import (
    DEFAULT_REF,
    FILENAME,
    Commit,
    RefState,
    RepoState,
    get_lines,
    split_initial_commit,
)
from repostate.utils import first_error


async def fetch_commit(client: GitHubClient, sha: str) -> tuple[Commit, tuple[str, ...]]:
    """Fetch one commit's lines, message and parents."""
    content = await client.get_content(FILENAME, ref=sha)
    git_commit = await client.get_commit(sha)
    commit = Commit(lines=tuple(get_lines(content)), message=git_commit.message)
    return commit, git_commit.parents


async def fetch_ref_commits_from_sha(
    client: GitHubClient,
    sha: str,
    *,
    follow_first_parent: bool = False,
) -> RefState:
    """Reconstruct the history ending at a commit, root first.

    Args:
        client: Client of the repository.
        sha: The last commit of the history.
        follow_first_parent: Follow only the first parent of merge commits
            instead of failing on them.

    Returns:
        Every commit from the root commit to sha, root first.

    Raises:
        MergeCommitError: If a commit has several parents and
            follow_first_parent is False.
        GitHubApiError: If an API call fails.
    """
    commits: list[Commit] = []
    current: str | None = sha
    while current is not None:
        commit, parents = await fetch_commit(client, current)
        if len(parents) > 1 and not follow_first_parent:
            msg = f"Commit {current} is a merge commit with {len(parents)} parents"
            raise MergeCommitError(msg, sha=current, parents=parents)
        commits.append(commit)
        current = parents[0] if parents else None
    commits.reverse()
    return tuple(commits)


async def fetch_ref_commits(
    client: GitHubClient,
    ref: str,
    *,
    follow_first_parent: bool = False,
) -> RefState:
    """Reconstruct a branch's history, root first.

    The result includes the initial commit; compare it against
    RepoState.full_ref_state(), or drop element 0 to get the commits
    unique to the branch.

    Args:
        client: Client of the repository.
        ref: Branch name.
        follow_first_parent: Follow only the first parent of merge commits
            instead of failing on them.

    Returns:
        The branch's commits, root first.

    Raises:
        RefNotFoundError: If the branch does not exist.
        MergeCommitError: If a merge commit is reached and
            follow_first_parent is False.
    """
    sha = await fetch_ref_sha(client, ref)
    return await fetch_ref_commits_from_sha(
        client, sha, follow_first_parent=follow_first_parent
    )


async def fetch_repo_state(
    client: GitHubClient,
    refs: Mapping[str, str],
    *,
    default_ref: str = DEFAULT_REF,
) -> RepoState:
    """Read several branches back into a RepoState.

    Branches are read concurrently.

    Args:
        client: Client of the repository.
        refs: Mapping from the name to record in the state to the physical
            branch to read, e.g. {"feature": "feature-<uuid>"}.
        default_ref: Default ref recorded on the resulting state.

    Returns:
        The state the branches describe.

    Raises:
        StateStructureError: If the branches do not share a root commit.
    """
    chains: dict[str, RefState] = {}

    async def read(name: str, branch: str) -> None:
        chains[name] = await fetch_ref_commits(client, branch)

    try:
        async with anyio.create_task_group() as tg:
            for name, branch in refs.items():
                tg.start_soon(read, name, branch)
    except BaseExceptionGroup as group:
        raise first_error(group) from None

    return split_initial_commit(
        {name: chains[name] for name in refs}, default_ref=default_ref
    )
