"""Unit tests for materializing repository states on GitHub."""

import re

import pytest

from repostate.exceptions import EmptyRefError, GitHubApiError, RefCleanupError
from repostate.github import FakeGitHub, GitHubClient, fetch_commits
from repostate.remote import (
    create_commit_from_lines_and_message,
    create_pull_request,
    create_refs,
    fetch_ref_commits,
    refs_created,
)
from repostate.state import Commit, RepoState

pytestmark = pytest.mark.anyio


class TestCreateCommitFromLinesAndMessage:
    async def test_commit_holds_only_tracked_file(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        sha = await create_commit_from_lines_and_message(
            github_client, Commit(lines=("A", "B"), message="add B")
        )

        tree = fake_github.trees[fake_github.commits[sha].tree]
        assert list(tree) == ["file.txt"]
        assert fake_github.file_content(sha, "file.txt") == b"A\n\nB"
        assert fake_github.commits[sha].message == "add B"
        assert fake_github.commits[sha].parents == ()

    async def test_commit_with_parent(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        root = await create_commit_from_lines_and_message(
            github_client, Commit(lines=("A",), message="initial")
        )

        child = await create_commit_from_lines_and_message(
            github_client, Commit(lines=("A", "B"), message="add B"), parent=root
        )

        assert fake_github.commits[child].parents == (root,)


class TestCreateRefs:
    async def test_round_trips_every_ref(
        self, github_client: GitHubClient, repo_state: RepoState
    ) -> None:
        created = await create_refs(github_client, repo_state)

        for ref in repo_state.refs:
            branch = created.refs_details[ref].ref
            chain = await fetch_ref_commits(github_client, branch)
            assert chain == repo_state.full_ref_state(ref)

    async def test_refs_details_describe_chains(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        created = await create_refs(github_client, repo_state)

        assert list(created.refs_details) == list(repo_state.refs)
        roots = {details.shas[0] for details in created.refs_details.values()}
        assert len(roots) == 1
        for ref, details in created.refs_details.items():
            assert re.match(rf"^{ref}-", details.ref)
            assert len(details.shas) == 1 + len(repo_state.refs_commits[ref])
            assert all(re.fullmatch(r"[0-9a-f]{40}", sha) for sha in details.shas)
            for parent, child in zip(details.shas, details.shas[1:], strict=False):
                assert fake_github.commits[child].parents == (parent,)
            assert fake_github.refs[f"refs/heads/{details.ref}"] == details.tip

    async def test_branches_stay_until_deleted(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        created = await create_refs(github_client, repo_state)
        assert fake_github.branches() == {
            details.ref for details in created.refs_details.values()
        }

        results = await created.delete_refs()

        assert all(result.ok for result in results)
        assert fake_github.branches() == set()

    async def test_delete_refs_attempts_every_ref(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        created = await create_refs(github_client, repo_state)
        leaked = created.refs_details["main"].ref
        fake_github.inject_failure("DELETE", re.escape(leaked))

        results = await created.delete_refs()

        assert {result.ref: result.ok for result in results} == {
            leaked: False,
            created.refs_details["feature"].ref: True,
        }
        assert fake_github.branches() == {leaked}

    async def test_state_without_refs(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        state = RepoState(initial_commit=Commit(lines=("A",), message="initial"))

        created = await create_refs(github_client, state)

        assert created.refs_details == {}
        assert len(fake_github.commits) == 1
        assert fake_github.branches() == set()

    async def test_identical_commits_on_different_refs(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        commit = Commit(lines=("A", "B"), message="add B")
        state = RepoState(
            initial_commit=Commit(lines=("A",), message="initial"),
            refs_commits={"one": (commit,), "two": (commit,)},
        )

        created = await create_refs(github_client, state)

        one, two = created.refs_details["one"], created.refs_details["two"]
        assert one.shas == two.shas
        assert one.ref != two.ref
        assert len(fake_github.branches()) == 2

    async def test_empty_ref_fails_before_any_request(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        state = RepoState(
            initial_commit=Commit(lines=("A",), message="initial"),
            refs_commits={"full": (Commit(lines=("B",), message="b"),), "empty": ()},
        )

        with pytest.raises(EmptyRefError) as exc_info:
            _ = await create_refs(github_client, state)

        assert exc_info.value.ref == "empty"
        assert fake_github.requests == []

    async def test_failed_ref_cleans_up_created_branches(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        fake_github.inject_failure("POST", r"^/git/refs$", status_code=500)

        with pytest.raises(GitHubApiError) as exc_info:
            _ = await create_refs(github_client, repo_state)

        assert exc_info.value.status_code == 500
        assert fake_github.branches() == set()

    async def test_failed_commit_surfaces_single_error(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        fake_github.inject_failure("POST", r"^/git/commits$", status_code=500, times=10)

        with pytest.raises(GitHubApiError):
            _ = await create_refs(github_client, repo_state)

        assert fake_github.branches() == set()


class TestRefsCreated:
    async def test_deletes_branches_on_exit(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        async with refs_created(github_client, repo_state) as created:
            assert len(fake_github.branches()) == len(repo_state.refs)
            chain = await fetch_ref_commits(
                github_client, created.refs_details["feature"].ref
            )
            assert chain == repo_state.full_ref_state("feature")

        assert fake_github.branches() == set()

    async def test_deletes_branches_when_block_fails(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        with pytest.raises(AssertionError, match="under test"):
            async with refs_created(github_client, repo_state):
                raise AssertionError("under test")

        assert fake_github.branches() == set()

    async def test_block_error_wins_over_cleanup_failure(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        with pytest.raises(AssertionError, match="under test"):
            async with refs_created(github_client, repo_state):
                fake_github.inject_failure("DELETE", r"/git/refs/", times=10)
                raise AssertionError("under test")

    async def test_cleanup_failure_after_success_raises(
        self,
        fake_github: FakeGitHub,
        github_client: GitHubClient,
        repo_state: RepoState,
    ) -> None:
        with pytest.raises(RefCleanupError) as exc_info:
            async with refs_created(github_client, repo_state) as created:
                leaked = created.refs_details["feature"].ref
                fake_github.inject_failure("DELETE", re.escape(leaked))

        assert exc_info.value.refs == (leaked,)
        assert fake_github.branches() == {leaked}


class TestCreatePullRequest:
    async def test_pull_request_between_created_refs(
        self, github_client: GitHubClient, repo_state: RepoState
    ) -> None:
        async with refs_created(github_client, repo_state) as created:
            base = created.refs_details["main"]
            head = created.refs_details["feature"]

            number = await create_pull_request(
                github_client, base=base.ref, head=head.ref
            )

            assert await fetch_commits(github_client, number) == list(head.shas[1:])
