"""Declarative repository state.

Models:
    Commit: Lines of the tracked file plus a message.
    RefState: Ordered commits of a ref, oldest first.
    RepoState: Initial commit plus commits per ref.
    RefDetails: Physical ref name and SHAs produced by a build.

Functions:
    get_content: Join logical lines into file content.
    get_lines: Split file content into logical lines.
    split_initial_commit: Rebuild a RepoState from read-back chains.
"""

from repostate.state._models import (
    DEFAULT_REF,
    FILENAME,
    LINE_SEPARATOR,
    Commit,
    RefDetails,
    RefState,
    RepoState,
    get_content,
    get_lines,
    split_initial_commit,
)

__all__ = [
    "DEFAULT_REF",
    "FILENAME",
    "LINE_SEPARATOR",
    "Commit",
    "RefDetails",
    "RefState",
    "RepoState",
    "get_content",
    "get_lines",
    "split_initial_commit",
]
