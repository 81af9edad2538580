# pyright: reportAny=false
"""Async client for the GitHub Git Data REST API.

This module provides GitHubClient, a thin wrapper around httpx.AsyncClient
scoped to a single owner/repository pair. It exposes the low level object
operations (blobs, trees, commits, refs) fixtures are built from, plus the
pull request calls consumers of those fixtures need.

Connection errors and timeouts are retried with exponential backoff. Every
other failure surfaces as a GitHubApiError.
"""

import base64
from collections.abc import Iterable, Sequence
from types import TracebackType
from typing import Any, Final, Self

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from repostate.config import GitHubSettings
from repostate.exceptions import (
    GitHubApiError,
    GitHubNotFoundError,
    PayloadError,
    RefNotFoundError,
)
from repostate.github._models import (
    CommitDetails,
    CommitIdentity,
    GitCommit,
    TreeEntry,
)
from repostate.utils import get_logger

_API_VERSION: Final = "2022-11-28"

_RETRYABLE_ERRORS: Final = (httpx.ConnectError, httpx.TimeoutException)


def _error_message(response: httpx.Response) -> str:
    """Extract GitHub's error message from a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return response.text


def _parse_identity(data: dict[str, Any] | None) -> CommitIdentity | None:
    if data is None:
        return None
    return CommitIdentity(
        name=data.get("name"),
        email=data.get("email"),
        date=data.get("date"),
    )


class GitHubClient:
    """Client for one GitHub repository.

    The client owns its httpx.AsyncClient and closes it when used as an
    async context manager.

    Attributes:
        owner: Owner of the repository.
        repo: Name of the repository.

    Example:
        >>> async with GitHubClient.from_settings(load_github_settings()) as client:
        ...     sha = await client.get_ref("heads/main")
    """

    __slots__: Final = ("_http", "_max_attempts", "_retry_wait", "owner", "repo")

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        owner: str,
        repo: str,
        max_attempts: int = 3,
        retry_wait: float = 0.5,
    ) -> None:
        """Initialize the client.

        Args:
            http: The httpx client requests are sent through. Its base URL
                must point at the REST API root.
            owner: Owner of the repository.
            repo: Name of the repository.
            max_attempts: Attempts per request on connection errors and
                timeouts.
            retry_wait: Initial backoff between attempts, in seconds.
        """
        self._http = http
        self._max_attempts = max_attempts
        self._retry_wait = retry_wait
        self.owner = owner
        self.repo = repo

    @classmethod
    def from_settings(
        cls,
        settings: GitHubSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from loaded settings.

        Args:
            settings: Token, repository identity and request policy.
            transport: Optional transport override, e.g. FakeGitHub.transport.

        Returns:
            A new client.
        """
        http = httpx.AsyncClient(
            base_url=settings.api_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {settings.token.get_secret_value()}",
                "X-GitHub-Api-Version": _API_VERSION,
            },
            timeout=settings.timeout,
            transport=transport,
        )
        return cls(
            http,
            owner=settings.owner,
            repo=settings.repo,
            max_attempts=settings.max_attempts,
        )

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._http.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,  # pyright: ignore[reportExplicitAny]
        params: dict[str, str | int] | None = None,
    ) -> httpx.Response:
        """Send a request relative to the repository URL.

        Args:
            method: HTTP method.
            path: Path below /repos/{owner}/{repo}.
            json: Optional JSON body.
            params: Optional query parameters.

        Returns:
            The successful response.

        Raises:
            GitHubNotFoundError: If GitHub answers 404.
            GitHubApiError: On any other failure.
        """
        url = f"/repos/{self.owner}/{self.repo}{path}"
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(_RETRYABLE_ERRORS),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_wait,
                min=self._retry_wait,
                max=self._retry_wait * 4,
            ),
            reraise=True,
        )

        try:
            response: httpx.Response = await retrying(
                self._http.request, method, url, json=json, params=params
            )
        except httpx.HTTPError as e:
            msg = f"{method} {url} failed: {e}"
            raise GitHubApiError(msg, method=method, url=url, cause=e) from e

        get_logger().debug(
            "github_request",
            method=method,
            url=url,
            status_code=response.status_code,
        )

        if response.is_success:
            return response

        msg = f"{method} {url} returned {response.status_code}: {_error_message(response)}"
        if response.status_code == httpx.codes.NOT_FOUND:
            raise GitHubNotFoundError(
                msg, method=method, url=url, status_code=response.status_code
            )
        raise GitHubApiError(
            msg, method=method, url=url, status_code=response.status_code
        )

    # =========================================================================
    # Git Data API
    # =========================================================================

    async def create_blob(self, content: str) -> str:
        """Create a blob and return its SHA."""
        response = await self._request(
            "POST", "/git/blobs", json={"content": content, "encoding": "utf-8"}
        )
        return str(response.json()["sha"])

    async def create_tree(self, entries: Iterable[TreeEntry]) -> str:
        """Create a tree from scratch and return its SHA."""
        tree = [
            {"path": entry.path, "mode": entry.mode, "type": entry.type, "sha": entry.sha}
            for entry in entries
        ]
        response = await self._request("POST", "/git/trees", json={"tree": tree})
        return str(response.json()["sha"])

    async def create_commit(
        self,
        *,
        message: str,
        tree: str,
        parents: Sequence[str] = (),
    ) -> str:
        """Create a commit and return its SHA.

        Args:
            message: Commit message.
            tree: SHA of the commit's tree.
            parents: Parent SHAs; empty for a root commit.

        Returns:
            The new commit's SHA.
        """
        response = await self._request(
            "POST",
            "/git/commits",
            json={"message": message, "tree": tree, "parents": list(parents)},
        )
        return str(response.json()["sha"])

    async def get_commit(self, sha: str) -> GitCommit:
        """Fetch a commit's message, tree and parents."""
        response = await self._request("GET", f"/git/commits/{sha}")
        data = response.json()
        return GitCommit(
            sha=str(data["sha"]),
            message=str(data["message"]),
            tree=str(data["tree"]["sha"]),
            parents=tuple(str(parent["sha"]) for parent in data["parents"]),
        )

    async def get_ref(self, ref: str) -> str:
        """Resolve a ref to the SHA it points at.

        Args:
            ref: Ref below refs/, e.g. "heads/main".

        Returns:
            The SHA of the object the ref points at.

        Raises:
            RefNotFoundError: If the ref does not exist.
        """
        try:
            response = await self._request("GET", f"/git/ref/{ref}")
        except GitHubNotFoundError as e:
            msg = f"Ref {ref!r} not found in {self.owner}/{self.repo}"
            raise RefNotFoundError(msg, ref=ref, method=e.method, url=e.url) from e
        return str(response.json()["object"]["sha"])

    async def create_ref(self, ref: str, sha: str) -> None:
        """Create a ref.

        Args:
            ref: Fully qualified ref, e.g. "refs/heads/feature".
            sha: SHA the ref points at.
        """
        _ = await self._request("POST", "/git/refs", json={"ref": ref, "sha": sha})

    async def update_ref(self, ref: str, sha: str, *, force: bool = False) -> None:
        """Move a ref.

        Args:
            ref: Ref below refs/, e.g. "heads/feature".
            sha: New SHA.
            force: Allow non fast-forward updates.
        """
        _ = await self._request(
            "PATCH", f"/git/refs/{ref}", json={"sha": sha, "force": force}
        )

    async def delete_ref(self, ref: str) -> None:
        """Delete a ref given below refs/, e.g. "heads/feature"."""
        _ = await self._request("DELETE", f"/git/refs/{ref}")

    # =========================================================================
    # Contents and Pull Requests
    # =========================================================================

    async def get_content(self, path: str, *, ref: str) -> str:
        """Fetch a file's content at a ref or commit, decoded as UTF-8.

        Raises:
            PayloadError: If the content is not valid UTF-8.
        """
        response = await self._request(
            "GET", f"/contents/{path}", params={"ref": ref}
        )
        data = response.json()
        raw = (
            base64.b64decode(data["content"])
            if data.get("encoding") == "base64"
            else str(data["content"]).encode()
        )
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"Content of {path!r} at {ref} is not UTF-8 text"
            raise PayloadError(msg, ref=ref) from e

    async def create_pull_request(
        self,
        *,
        base: str,
        head: str,
        title: str = "Untitled",
    ) -> int:
        """Open a pull request and return its number."""
        response = await self._request(
            "POST", "/pulls", json={"base": base, "head": head, "title": title}
        )
        return int(response.json()["number"])

    async def list_pull_request_commits(
        self,
        pull_request_number: int,
        *,
        per_page: int = 100,
    ) -> list[CommitDetails]:
        """List every commit of a pull request, following pagination."""
        commits: list[CommitDetails] = []
        page = 1
        while True:
            response = await self._request(
                "GET",
                f"/pulls/{pull_request_number}/commits",
                params={"per_page": per_page, "page": page},
            )
            items = response.json()
            commits.extend(
                CommitDetails(
                    sha=str(item["sha"]),
                    message=str(item["commit"]["message"]),
                    tree=str(item["commit"]["tree"]["sha"]),
                    author=_parse_identity(item["commit"].get("author")),
                    committer=_parse_identity(item["commit"].get("committer")),
                )
                for item in items
            )
            if len(items) < per_page:
                return commits
            page += 1
