"""Unit tests for the GitHub client, run against the in-memory fake."""

import base64
from collections.abc import Sequence

import httpx
import pytest

from repostate.config import GitHubSettings
from repostate.exceptions import (
    GitHubApiError,
    GitHubNotFoundError,
    PayloadError,
    RefNotFoundError,
)
from repostate.github import FakeGitHub, GitHubClient, TreeEntry

pytestmark = pytest.mark.anyio


async def make_commit(
    client: GitHubClient,
    content: str,
    message: str,
    parents: Sequence[str] = (),
) -> str:
    blob = await client.create_blob(content)
    tree = await client.create_tree([TreeEntry(path="file.txt", sha=blob)])
    return await client.create_commit(message=message, tree=tree, parents=parents)


def make_client(transport: httpx.AsyncBaseTransport, *, max_attempts: int = 3) -> GitHubClient:
    http = httpx.AsyncClient(base_url="https://api.github.test", transport=transport)
    return GitHubClient(
        http, owner="octo", repo="fixtures", max_attempts=max_attempts, retry_wait=0
    )


class TestFromSettings:
    async def test_sends_token_and_api_headers(self, fake_github: FakeGitHub) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return fake_github.handle(request)

        settings = GitHubSettings.model_validate(
            {"token": "ghp_secret", "owner": fake_github.owner, "repo": fake_github.repo}
        )
        async with GitHubClient.from_settings(
            settings, transport=httpx.MockTransport(handler)
        ) as client:
            _ = await client.create_blob("hello\n")

        request = seen[0]
        assert request.headers["Authorization"] == "token ghp_secret"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert request.url.host == "api.github.com"
        assert request.url.path == "/repos/octo/fixtures/git/blobs"

    async def test_scopes_client_to_repository(self, fake_github: FakeGitHub) -> None:
        settings = GitHubSettings.model_validate(
            {"token": "t", "owner": "someone", "repo": "elsewhere"}
        )
        async with GitHubClient.from_settings(
            settings, transport=fake_github.transport
        ) as client:
            assert (client.owner, client.repo) == ("someone", "elsewhere")

            with pytest.raises(GitHubNotFoundError):
                _ = await client.create_blob("x")


class TestObjects:
    async def test_blob_sha_matches_git(self, github_client: GitHubClient) -> None:
        sha = await github_client.create_blob("hello\n")

        assert sha == "ce013625030ba8dba906f756967f9e9ca394464a"

    async def test_empty_tree_sha_matches_git(self, github_client: GitHubClient) -> None:
        sha = await github_client.create_tree([])

        assert sha == "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

    async def test_tree_with_unknown_blob_fails(self, github_client: GitHubClient) -> None:
        with pytest.raises(GitHubApiError) as exc_info:
            _ = await github_client.create_tree([TreeEntry(path="file.txt", sha="0" * 40)])

        assert exc_info.value.status_code == 422

    async def test_commit_round_trip(self, github_client: GitHubClient) -> None:
        root = await make_commit(github_client, "A", "initial")
        child = await make_commit(github_client, "A\n\nB", "add B", parents=[root])

        commit = await github_client.get_commit(child)

        assert commit.sha == child
        assert commit.message == "add B"
        assert commit.parents == (root,)
        assert (await github_client.get_commit(root)).parents == ()

    async def test_missing_commit_raises_not_found(self, github_client: GitHubClient) -> None:
        with pytest.raises(GitHubNotFoundError) as exc_info:
            _ = await github_client.get_commit("f" * 40)

        assert exc_info.value.status_code == 404
        assert exc_info.value.method == "GET"


class TestRefs:
    async def test_create_and_get_ref(self, github_client: GitHubClient) -> None:
        sha = await make_commit(github_client, "A", "initial")

        await github_client.create_ref("refs/heads/feature", sha)

        assert await github_client.get_ref("heads/feature") == sha

    async def test_get_missing_ref_raises_ref_not_found(
        self, github_client: GitHubClient
    ) -> None:
        with pytest.raises(RefNotFoundError) as exc_info:
            _ = await github_client.get_ref("heads/missing")

        assert exc_info.value.ref == "heads/missing"
        assert exc_info.value.status_code == 404
        assert isinstance(exc_info.value, GitHubNotFoundError)

    async def test_create_existing_ref_fails(self, github_client: GitHubClient) -> None:
        sha = await make_commit(github_client, "A", "initial")
        await github_client.create_ref("refs/heads/feature", sha)

        with pytest.raises(GitHubApiError) as exc_info:
            await github_client.create_ref("refs/heads/feature", sha)

        assert exc_info.value.status_code == 422
        assert "already exists" in str(exc_info.value)

    async def test_update_ref_fast_forward(self, github_client: GitHubClient) -> None:
        root = await make_commit(github_client, "A", "initial")
        child = await make_commit(github_client, "B", "b", parents=[root])
        await github_client.create_ref("refs/heads/feature", root)

        await github_client.update_ref("heads/feature", child)

        assert await github_client.get_ref("heads/feature") == child

    async def test_update_ref_rejects_non_fast_forward(
        self, github_client: GitHubClient
    ) -> None:
        root = await make_commit(github_client, "A", "initial")
        child = await make_commit(github_client, "B", "b", parents=[root])
        await github_client.create_ref("refs/heads/feature", child)

        with pytest.raises(GitHubApiError) as exc_info:
            await github_client.update_ref("heads/feature", root)

        assert exc_info.value.status_code == 422

        await github_client.update_ref("heads/feature", root, force=True)
        assert await github_client.get_ref("heads/feature") == root

    async def test_delete_ref(self, github_client: GitHubClient) -> None:
        sha = await make_commit(github_client, "A", "initial")
        await github_client.create_ref("refs/heads/feature", sha)

        await github_client.delete_ref("heads/feature")

        with pytest.raises(RefNotFoundError):
            _ = await github_client.get_ref("heads/feature")

    async def test_delete_missing_ref_fails(self, github_client: GitHubClient) -> None:
        with pytest.raises(GitHubApiError) as exc_info:
            await github_client.delete_ref("heads/missing")

        assert exc_info.value.status_code == 422


class TestContents:
    async def test_decodes_wrapped_base64(self, github_client: GitHubClient) -> None:
        content = "\n\n".join(f"line {i} " + "x" * 50 for i in range(5))
        sha = await make_commit(github_client, content, "long")

        assert await github_client.get_content("file.txt", ref=sha) == content

    async def test_reads_at_branch(self, github_client: GitHubClient) -> None:
        sha = await make_commit(github_client, "A", "initial")
        await github_client.create_ref("refs/heads/main", sha)

        assert await github_client.get_content("file.txt", ref="main") == "A"

    async def test_non_utf8_content_raises_payload_error(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        blob = "1" * 40
        fake_github.blobs[blob] = b"\xff\xfe"
        tree = await github_client.create_tree([TreeEntry(path="file.txt", sha=blob)])
        sha = await github_client.create_commit(message="binary", tree=tree)

        with pytest.raises(PayloadError) as exc_info:
            _ = await github_client.get_content("file.txt", ref=sha)

        assert exc_info.value.ref == sha

    async def test_missing_file_raises_not_found(self, github_client: GitHubClient) -> None:
        tree = await github_client.create_tree([])
        sha = await github_client.create_commit(message="empty", tree=tree)

        with pytest.raises(GitHubNotFoundError):
            _ = await github_client.get_content("file.txt", ref=sha)

    async def test_plain_encoding_is_accepted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"content": "plain", "encoding": "none"})

        async with make_client(httpx.MockTransport(handler)) as client:
            assert await client.get_content("file.txt", ref="main") == "plain"

    async def test_base64_payload_from_response(self) -> None:
        encoded = base64.b64encode("café".encode()).decode()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"content": encoded, "encoding": "base64"})

        async with make_client(httpx.MockTransport(handler)) as client:
            assert await client.get_content("file.txt", ref="main") == "café"


class TestPullRequests:
    async def test_lists_commits_across_pages(self, github_client: GitHubClient) -> None:
        root = await make_commit(github_client, "A", "initial")
        await github_client.create_ref("refs/heads/main", root)
        shas: list[str] = []
        parent = root
        for i in range(5):
            parent = await make_commit(github_client, f"A\n\n{i}", f"c{i}", parents=[parent])
            shas.append(parent)
        await github_client.create_ref("refs/heads/feature", parent)

        number = await github_client.create_pull_request(base="main", head="feature")
        commits = await github_client.list_pull_request_commits(number, per_page=2)

        assert [commit.sha for commit in commits] == shas
        assert [commit.message for commit in commits] == [f"c{i}" for i in range(5)]
        assert commits[0].author is not None
        assert commits[0].author.name == "repostate"

    async def test_pull_request_numbers_increase(self, github_client: GitHubClient) -> None:
        root = await make_commit(github_client, "A", "initial")
        await github_client.create_ref("refs/heads/main", root)
        await github_client.create_ref("refs/heads/feature", root)

        first = await github_client.create_pull_request(base="main", head="feature")
        second = await github_client.create_pull_request(base="main", head="feature")

        assert (first, second) == (1, 2)

    async def test_pull_request_needs_existing_branches(
        self, github_client: GitHubClient
    ) -> None:
        with pytest.raises(GitHubApiError) as exc_info:
            _ = await github_client.create_pull_request(base="main", head="missing")

        assert exc_info.value.status_code == 422


class TestRetries:
    async def test_retries_connection_errors(self, fake_github: FakeGitHub) -> None:
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return fake_github.handle(request)

        async with make_client(httpx.MockTransport(handler)) as client:
            sha = await client.create_blob("hello\n")

        assert attempts == 2
        assert sha in fake_github.blobs

    async def test_gives_up_after_max_attempts(self) -> None:
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(httpx.MockTransport(handler), max_attempts=3) as client:
            with pytest.raises(GitHubApiError) as exc_info:
                _ = await client.create_blob("x")

        assert attempts == 3
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    async def test_does_not_retry_error_statuses(
        self, fake_github: FakeGitHub, github_client: GitHubClient
    ) -> None:
        fake_github.inject_failure("POST", r"^/git/blobs$", status_code=502)

        with pytest.raises(GitHubApiError) as exc_info:
            _ = await github_client.create_blob("x")

        assert exc_info.value.status_code == 502
        assert fake_github.requests == [("POST", "/repos/octo/fixtures/git/blobs")]
