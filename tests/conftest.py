"""Shared test fixtures for repostate tests."""

from collections.abc import AsyncIterator

import httpx
import pytest

from repostate import Commit, RepoState
from repostate.github import FakeGitHub, GitHubClient


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_github() -> FakeGitHub:
    """Create an empty in-memory GitHub repository."""
    return FakeGitHub()


@pytest.fixture
async def github_client(
    anyio_backend: str, fake_github: FakeGitHub
) -> AsyncIterator[GitHubClient]:
    """Create a client talking to fake_github, without retry backoff."""
    http = httpx.AsyncClient(
        base_url="https://api.github.test", transport=fake_github.transport
    )
    async with GitHubClient(
        http, owner=fake_github.owner, repo=fake_github.repo, retry_wait=0
    ) as client:
        yield client


@pytest.fixture
def repo_state() -> RepoState:
    """A state with a default ref and a feature branch of two commits.

    Structure:
        initial: A
        main:    A, B
        feature: A, C  ->  A, C, D
    """
    return RepoState(
        initial_commit=Commit(lines=("A",), message="initial"),
        refs_commits={
            "main": (Commit(lines=("A", "B"), message="add B"),),
            "feature": (
                Commit(lines=("A", "C"), message="add C"),
                Commit(lines=("A", "C", "D"), message="add D\n\nwith a body"),
            ),
        },
    )
