"""GitHub backend for repository states.

Functions:
    create_refs: Materialize a RepoState under temporary branches.
    refs_created: Context manager around create_refs with guaranteed cleanup.
    create_commit_from_lines_and_message: Create one single-file commit.
    create_pull_request: Open a pull request between two branches.
    fetch_ref_commits: Read a branch's history back, root first.
    fetch_ref_commits_from_sha: Read the history ending at a commit.
    fetch_repo_state: Read several branches back into a RepoState.

Example:
    >>> async with refs_created(client, state) as created:
    ...     details = created.refs_details["feature"]
    ...     chain = await fetch_ref_commits(client, details.ref)
    ...     assert chain == state.full_ref_state("feature")
"""

from repostate.remote._builder import (
    CreatedRefs,
    create_commit_from_lines_and_message,
    create_pull_request,
    create_refs,
    refs_created,
)
from repostate.remote._reader import (
    fetch_commit,
    fetch_ref_commits,
    fetch_ref_commits_from_sha,
    fetch_repo_state,
)

__all__ = [
    "CreatedRefs",
    "create_commit_from_lines_and_message",
    "create_pull_request",
    "create_refs",
    "fetch_commit",
    "fetch_ref_commits",
    "fetch_ref_commits_from_sha",
    "fetch_repo_state",
    "refs_created",
]
