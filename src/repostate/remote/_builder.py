"""Materialize repository states through the GitHub Git Data API.

Commits are built bottom-up from blob, tree and commit objects. Refs are
built concurrently, but the commits of one ref are created strictly in
order: the API needs a commit's parent SHA before the commit can exist.
Each ref is then published under a temporary branch.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import anyio

from repostate.exceptions import EmptyRefError, RefCleanupError
from repostate.github import (
    GitHubClient,
    RefCleanupResult,
    TemporaryRef,
    TreeEntry,
    create_temporary_ref,
    delete_temporary_refs,
)
from repostate.state import FILENAME, Commit, RefDetails, RepoState
from repostate.utils import first_error, get_logger, leaf_errors


@dataclass(frozen=True, slots=True)
class CreatedRefs:
    """Result of materializing a RepoState on GitHub.

    The temporary branches stay in the repository until delete_refs() is
    awaited; refs_created() does that automatically.

    Attributes:
        refs_details: Physical branch and SHAs per declared ref.
    """

    refs_details: dict[str, RefDetails]
    _temporary_refs: tuple[TemporaryRef, ...] = field(repr=False, compare=False)

    async def delete_refs(self) -> tuple[RefCleanupResult, ...]:
        """Delete every temporary branch concurrently.

        All deletions are attempted even if some fail.

        Returns:
            One outcome per ref, in declaration order.
        """
        return await delete_temporary_refs(self._temporary_refs)


async def create_commit_from_lines_and_message(
    client: GitHubClient,
    commit: Commit,
    *,
    parent: str | None = None,
) -> str:
    """Create a commit whose tree holds only the tracked file.

    Args:
        client: Client of the target repository.
        commit: Lines and message of the commit.
        parent: Parent SHA, or None for a root commit.

    Returns:
        The new commit's SHA.
    """
    blob = await client.create_blob(commit.content)
    tree = await client.create_tree([TreeEntry(path=FILENAME, sha=blob)])
    sha = await client.create_commit(
        message=commit.message,
        tree=tree,
        parents=() if parent is None else (parent,),
    )
    get_logger().debug("commit_created", sha=sha, parent=parent)
    return sha


async def create_refs(client: GitHubClient, state: RepoState) -> CreatedRefs:
    """Materialize a repository state and publish each ref under a temporary branch.

    The initial commit is created first. Every ref's chain is then built in
    its own task, starting from the initial commit.

    If any ref fails, the temporary branches already created by this call are
    deleted before the first failure is re-raised.

    Args:
        client: Client of the target repository.
        state: The state to materialize.

    Returns:
        The created refs and the means to delete them.

    Raises:
        EmptyRefError: If a declared ref has no commits. Nothing is created.
        GitHubApiError: If an API call fails.
    """
    for ref, commits in state.refs_commits.items():
        if not commits:
            msg = f"Ref {ref!r} is declared without commits"
            raise EmptyRefError(msg, ref=ref)

    initial_commit_sha = await create_commit_from_lines_and_message(
        client, state.initial_commit
    )

    temporary_refs: dict[str, TemporaryRef] = {}
    shas_by_ref: dict[str, tuple[str, ...]] = {}

    async def build_ref(ref: str) -> None:
        shas = [initial_commit_sha]
        for commit in state.refs_commits[ref]:
            shas.append(
                await create_commit_from_lines_and_message(
                    client, commit, parent=shas[-1]
                )
            )
        temporary_refs[ref] = await create_temporary_ref(client, ref, shas[-1])
        shas_by_ref[ref] = tuple(shas)

    try:
        async with anyio.create_task_group() as tg:
            for ref in state.refs:
                tg.start_soon(build_ref, ref, name=f"build_ref:{ref}")
    except BaseExceptionGroup as group:
        with anyio.CancelScope(shield=True):
            _ = await delete_temporary_refs(temporary_refs.values())
        errors = leaf_errors(group)
        for error in errors[1:]:
            get_logger().warning("build_ref_failed", error=str(error))
        raise first_error(group) from None

    return CreatedRefs(
        refs_details={
            ref: RefDetails(ref=temporary_refs[ref].ref, shas=shas_by_ref[ref])
            for ref in state.refs
        },
        _temporary_refs=tuple(temporary_refs[ref] for ref in state.refs),
    )


@asynccontextmanager
async def refs_created(
    client: GitHubClient,
    state: RepoState,
) -> AsyncIterator[CreatedRefs]:
    """Materialize a repository state for the duration of a block.

    Temporary branches are deleted on every exit path.

    Args:
        client: Client of the target repository.
        state: The state to materialize.

    Yields:
        The created refs.

    Raises:
        RefCleanupError: If the block succeeded but some branches could not
            be deleted. When the block itself failed, cleanup failures are
            only logged and the block's error propagates.

    Example:
        >>> async with refs_created(client, state) as created:
        ...     branch = created.refs_details["feature"].ref
    """
    created = await create_refs(client, state)
    try:
        yield created
    except BaseException:
        with anyio.CancelScope(shield=True):
            _ = await created.delete_refs()
        raise

    with anyio.CancelScope(shield=True):
        results = await created.delete_refs()
    failed = [result for result in results if not result.ok]
    if failed:
        msg = "Could not delete temporary refs: " + ", ".join(r.ref for r in failed)
        raise RefCleanupError(msg, results=failed)


async def create_pull_request(client: GitHubClient, *, base: str, head: str) -> int:
    """Open a pull request from head into base and return its number."""
    return await client.create_pull_request(base=base, head=head)
