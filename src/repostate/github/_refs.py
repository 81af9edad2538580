"""Branch and temporary ref management.

Fixtures are built in a repository shared by concurrent test runs, so every
branch a fixture creates gets a unique name and is deleted afterwards. No
locking is involved: refs are additive and independently named.
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from uuid import uuid4

import anyio

from repostate.exceptions import GitHubApiError
from repostate.github._client import GitHubClient
from repostate.github._models import CommitDetails, RefCleanupResult, TemporaryRef
from repostate.utils import get_logger


def generate_unique_ref(ref: str) -> str:
    """Derive a collision-resistant branch name from a base name."""
    return f"{ref}-{uuid4()}"


def get_head_ref(ref: str) -> str:
    """Return the API form of a branch, e.g. "heads/main"."""
    return f"heads/{ref}"


def get_fully_qualified_ref(ref: str) -> str:
    """Return the fully qualified form of a branch, e.g. "refs/heads/main"."""
    return f"refs/{get_head_ref(ref)}"


async def fetch_ref_sha(client: GitHubClient, ref: str) -> str:
    """Resolve a branch to its tip SHA.

    Raises:
        RefNotFoundError: If the branch does not exist.
    """
    return await client.get_ref(get_head_ref(ref))


async def create_ref(client: GitHubClient, ref: str, sha: str) -> None:
    """Create a branch pointing at sha."""
    await client.create_ref(get_fully_qualified_ref(ref), sha)


async def update_ref(
    client: GitHubClient,
    ref: str,
    sha: str,
    *,
    force: bool = False,
) -> None:
    """Move a branch to sha."""
    await client.update_ref(get_head_ref(ref), sha, force=force)


async def delete_ref(client: GitHubClient, ref: str) -> None:
    """Delete a branch."""
    await client.delete_ref(get_head_ref(ref))


async def create_temporary_ref(
    client: GitHubClient,
    ref: str,
    sha: str,
) -> TemporaryRef:
    """Create a uniquely named branch derived from ref, pointing at sha.

    Args:
        client: Client of the repository to create the branch in.
        ref: Base name; a unique suffix is appended to it.
        sha: Commit the branch points at.

    Returns:
        The created branch. Call its delete() to remove it.
    """
    temporary_ref = generate_unique_ref(ref)
    await create_ref(client, temporary_ref, sha)
    get_logger().debug("temporary_ref_created", ref=temporary_ref, sha=sha)

    async def delete() -> None:
        await delete_ref(client, temporary_ref)
        get_logger().debug("temporary_ref_deleted", ref=temporary_ref)

    return TemporaryRef(ref=temporary_ref, base_ref=ref, sha=sha, _delete=delete)


async def delete_temporary_refs(
    refs: Iterable[TemporaryRef],
) -> tuple[RefCleanupResult, ...]:
    """Delete several temporary refs concurrently.

    Every deletion is attempted even when others fail. Failures are logged
    and reported in the result rather than raised.

    Args:
        refs: The refs to delete.

    Returns:
        One outcome per ref, in the order given.
    """
    refs = tuple(refs)
    results: dict[str, RefCleanupResult] = {}

    async def delete(temporary_ref: TemporaryRef) -> None:
        try:
            await temporary_ref.delete()
        except GitHubApiError as e:
            get_logger().warning("ref_cleanup_failed", ref=temporary_ref.ref, error=str(e))
            results[temporary_ref.ref] = RefCleanupResult(temporary_ref.ref, error=e)
        else:
            results[temporary_ref.ref] = RefCleanupResult(temporary_ref.ref)

    async with anyio.create_task_group() as tg:
        for temporary_ref in refs:
            tg.start_soon(delete, temporary_ref)

    return tuple(results[temporary_ref.ref] for temporary_ref in refs)


@asynccontextmanager
async def temporary_ref(
    client: GitHubClient,
    ref: str,
    sha: str,
) -> AsyncIterator[str]:
    """Provide a temporary branch for the duration of a block.

    The branch is deleted on every exit path, shielded from cancellation.
    If the block fails and deletion fails too, the deletion failure is
    logged and the block's error propagates.

    Args:
        client: Client of the repository to create the branch in.
        ref: Base name of the branch.
        sha: Commit the branch points at.

    Yields:
        The generated branch name.

    Example:
        >>> async with temporary_ref(client, "feature", sha) as branch:
        ...     await client.create_pull_request(base="main", head=branch)
    """
    created = await create_temporary_ref(client, ref, sha)
    try:
        yield created.ref
    except BaseException:
        with anyio.CancelScope(shield=True):
            try:
                await created.delete()
            except GitHubApiError as e:
                get_logger().warning("ref_cleanup_failed", ref=created.ref, error=str(e))
        raise
    with anyio.CancelScope(shield=True):
        await created.delete()


async def with_temporary_ref[T](
    client: GitHubClient,
    ref: str,
    sha: str,
    action: Callable[[str], Awaitable[T]],
) -> T:
    """Run action against a temporary branch, deleting it afterwards.

    Args:
        client: Client of the repository to create the branch in.
        ref: Base name of the branch.
        sha: Commit the branch points at.
        action: Coroutine function called with the generated branch name.

    Returns:
        The action's result.
    """
    async with temporary_ref(client, ref, sha) as branch:
        return await action(branch)


async def fetch_commits_details(
    client: GitHubClient,
    pull_request_number: int,
) -> list[CommitDetails]:
    """List a pull request's commits with author and committer details."""
    return await client.list_pull_request_commits(pull_request_number)


async def fetch_commits(client: GitHubClient, pull_request_number: int) -> list[str]:
    """List the SHAs of a pull request's commits, oldest first."""
    details = await fetch_commits_details(client, pull_request_number)
    return [commit.sha for commit in details]
