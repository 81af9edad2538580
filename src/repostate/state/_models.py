"""Declarative repository state models.

This module defines the value types describing a repository fixture: an
initial commit shared by every branch, plus an ordered list of commits per
branch. Each commit carries the content of a single tracked file, stored as
logical lines so that comparisons do not depend on join mechanics.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from repostate.exceptions import StateStructureError

# Paragraph-style separator between logical lines of the tracked file.
LINE_SEPARATOR: Final = "\n\n"

# The single file every commit writes.
FILENAME: Final = "file.txt"

DEFAULT_REF: Final = "main"


def get_content(lines: Iterable[str]) -> str:
    """Join logical lines into the raw content of the tracked file.

    Args:
        lines: Logical lines, none of which may contain LINE_SEPARATOR.

    Returns:
        The file content. An empty sequence yields an empty string.
    """
    return LINE_SEPARATOR.join(lines)


def get_lines(content: str) -> list[str]:
    """Split raw file content back into logical lines.

    Inverse of get_content() for non-empty line sequences. Note the boundary:
    get_lines("") is [""], not [].

    Args:
        content: Raw content of the tracked file.

    Returns:
        The logical lines.
    """
    return content.split(LINE_SEPARATOR)


@dataclass(frozen=True, slots=True)
class Commit:
    """A single commit in a declared repository state.

    Attributes:
        lines: Logical lines of the tracked file at this commit.
        message: Commit message.
    """

    lines: tuple[str, ...]
    message: str

    def __post_init__(self) -> None:
        lines = tuple(self.lines)
        for line in lines:
            if LINE_SEPARATOR in line:
                msg = f"Line {line!r} contains the line separator and cannot round-trip"
                raise StateStructureError(msg)
        # A newline next to a separator shifts the split, e.g. ("a\n", "b").
        if lines and tuple(get_lines(get_content(lines))) != lines:
            msg = f"Lines {lines!r} do not survive joining and splitting on the separator"
            raise StateStructureError(msg)
        object.__setattr__(self, "lines", lines)

    @property
    def content(self) -> str:
        """Raw content of the tracked file at this commit."""
        return get_content(self.lines)


# Commits unique to a branch, oldest first.
type RefState = tuple[Commit, ...]


@dataclass(frozen=True, slots=True)
class RepoState:
    """Declared state of a whole repository.

    Every ref in refs_commits is rooted at initial_commit. The default ref
    names the branch a local repository is initialized with; it does not
    have to appear in refs_commits, in which case it holds only the
    initial commit.

    Attributes:
        initial_commit: Root commit shared by every ref.
        refs_commits: Read-only mapping from ref name to the commits unique
            to it.
        default_ref: Name of the repository's initial branch.

    Example:
        >>> state = RepoState(
        ...     initial_commit=Commit(lines=("A",), message="init"),
        ...     refs_commits={"feature": [Commit(lines=("A", "B"), message="add B")]},
        ... )
        >>> len(state.full_ref_state("feature"))
        2
    """

    initial_commit: Commit
    refs_commits: Mapping[str, RefState] = field(default_factory=dict)
    default_ref: str = DEFAULT_REF

    def __post_init__(self) -> None:
        refs_commits = MappingProxyType(
            {ref: tuple(commits) for ref, commits in self.refs_commits.items()}
        )
        object.__setattr__(self, "refs_commits", refs_commits)

    def __hash__(self) -> int:
        # Mapping equality ignores order, so the hash must too.
        return hash(
            (self.initial_commit, frozenset(self.refs_commits.items()), self.default_ref)
        )

    @property
    def refs(self) -> tuple[str, ...]:
        """Declared ref names in declaration order."""
        return tuple(self.refs_commits)

    def full_ref_state(self, ref: str) -> RefState:
        """Return a ref's complete chain, initial commit included.

        This is the shape both readers return, so it can be compared to
        read-back results directly.

        Args:
            ref: A declared ref, or the default ref.

        Returns:
            The initial commit followed by the ref's own commits.

        Raises:
            KeyError: If the ref is neither declared nor the default ref.
        """
        if ref not in self.refs_commits and ref != self.default_ref:
            raise KeyError(ref)
        return (self.initial_commit, *self.refs_commits.get(ref, ()))


@dataclass(frozen=True, slots=True)
class RefDetails:
    """Physical result of materializing one declared ref.

    Attributes:
        ref: Physical ref name (a generated temporary name on GitHub).
        shas: Commit SHAs from root to tip; element 0 is the initial commit.
    """

    ref: str
    shas: tuple[str, ...]

    @property
    def tip(self) -> str:
        """SHA the ref points at."""
        return self.shas[-1]


def split_initial_commit(
    chains: Mapping[str, Sequence[Commit]],
    *,
    default_ref: str = DEFAULT_REF,
) -> RepoState:
    """Rebuild a RepoState from full ref chains read back from a backend.

    Args:
        chains: Mapping from ref name to its root-first chain, initial commit
            included.
        default_ref: Default ref recorded on the resulting state.

    Returns:
        A RepoState whose initial commit is the chains' shared root.

    Raises:
        StateStructureError: If there are no chains, a chain is empty, or the
            chains do not share the same root commit.
    """
    if not chains:
        msg = "Cannot rebuild a repository state without any ref"
        raise StateStructureError(msg)

    for ref, chain in chains.items():
        if not chain:
            msg = f"Ref {ref!r} has no commits"
            raise StateStructureError(msg)

    initial_commit = next(iter(chains.values()))[0]
    refs_commits: dict[str, RefState] = {}
    for ref, chain in chains.items():
        root, *rest = chain
        if root != initial_commit:
            msg = f"Ref {ref!r} is not rooted at the same initial commit"
            raise StateStructureError(msg)
        refs_commits[ref] = tuple(rest)

    return RepoState(
        initial_commit=initial_commit,
        refs_commits=refs_commits,
        default_ref=default_ref,
    )
