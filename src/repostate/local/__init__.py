"""Local git backend for repository states.

Functions:
    create_git_repo: Materialize a RepoState in a local repository.
    git_repo: Context manager creating and removing such a repository.
    create_git_repo_commit: Commit new file content on the checked-out ref.
    get_ref_shas_from_git_repo: List a ref's SHAs, oldest first.
    get_ref_commits_from_git_repo: Read a ref's history back, root first.
    get_repo_state_from_git_repo: Read several refs back into a RepoState.
    execute_git_command: Check out a ref and run a git command on it.
    run_git: Run git in a directory.

Example:
    >>> async with git_repo(state) as directory:
    ...     chain = await get_ref_commits_from_git_repo(directory, "feature")
    ...     assert chain == state.full_ref_state("feature")
"""

from repostate.local._builder import create_git_repo, create_git_repo_commit, git_repo
from repostate.local._git import checkout, execute_git_command, run_git
from repostate.local._reader import (
    get_ref_commits_from_git_repo,
    get_ref_shas_from_git_repo,
    get_repo_state_from_git_repo,
)

__all__ = [
    "checkout",
    "create_git_repo",
    "create_git_repo_commit",
    "execute_git_command",
    "get_ref_commits_from_git_repo",
    "get_ref_shas_from_git_repo",
    "get_repo_state_from_git_repo",
    "git_repo",
    "run_git",
]
