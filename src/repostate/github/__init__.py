"""GitHub access for repostate.

This package wraps the GitHub Git Data REST API and manages the uniquely
named branches fixtures are published under.

Classes:
    GitHubClient: Async client scoped to one owner/repository pair.
    FakeGitHub: In-memory GitHub served through httpx.MockTransport.

Models:
    TreeEntry: Entry of a tree to create.
    GitCommit: Commit message, tree and parents.
    CommitDetails: Pull request commit with author and committer.
    CommitIdentity: Author or committer of a commit.
    TemporaryRef: A created temporary branch.
    RefCleanupResult: Outcome of deleting one temporary branch.

Example:
    >>> async with GitHubClient.from_settings(load_github_settings()) as client:
    ...     async with temporary_ref(client, "feature", sha) as branch:
    ...         number = await client.create_pull_request(base="main", head=branch)
"""

from repostate.github._client import GitHubClient
from repostate.github._fake import FakeGitHub
from repostate.github._models import (
    CommitDetails,
    CommitIdentity,
    GitCommit,
    RefCleanupResult,
    TemporaryRef,
    TreeEntry,
)
from repostate.github._refs import (
    create_ref,
    create_temporary_ref,
    delete_ref,
    delete_temporary_refs,
    fetch_commits,
    fetch_commits_details,
    fetch_ref_sha,
    generate_unique_ref,
    get_fully_qualified_ref,
    get_head_ref,
    temporary_ref,
    update_ref,
    with_temporary_ref,
)

__all__ = [
    "CommitDetails",
    "CommitIdentity",
    "FakeGitHub",
    "GitCommit",
    "GitHubClient",
    "RefCleanupResult",
    "TemporaryRef",
    "TreeEntry",
    "create_ref",
    "create_temporary_ref",
    "delete_ref",
    "delete_temporary_refs",
    "fetch_commits",
    "fetch_commits_details",
    "fetch_ref_sha",
    "generate_unique_ref",
    "get_fully_qualified_ref",
    "get_head_ref",
    "temporary_ref",
    "update_ref",
    "with_temporary_ref",
]
