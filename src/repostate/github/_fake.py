# pyright: reportAny=false, reportExplicitAny=false
"""Fake GitHub for testing.

This module provides FakeGitHub, an in-memory implementation of the parts of
the GitHub REST API that GitHubClient uses. It is exposed as an
httpx.MockTransport so the real client code runs unchanged against it.

Object ids are computed the way git computes them, and errors use GitHub's
status codes: 404 for a missing ref lookup, 422 for creating an existing ref,
deleting or updating a missing ref, and non fast-forward updates.
"""

import base64
import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import Any, Final

import httpx

_IDENTITY: Final = {
    "name": "repostate",
    "email": "repostate@localhost",
    "date": "2019-05-01T00:00:00Z",
}

_REPO_PATH: Final = re.compile(r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)(?P<rest>/.*)$")


def _json(status_code: int, data: Any = None) -> httpx.Response:
    if data is None:
        return httpx.Response(status_code)
    return httpx.Response(status_code, json=data)


def _error(status_code: int, message: str) -> httpx.Response:
    return _json(status_code, {"message": message})


def _hash_object(type_: str, body: bytes) -> str:
    header = f"{type_} {len(body)}\x00".encode()
    return hashlib.sha1(header + body, usedforsecurity=False).hexdigest()


@dataclass(slots=True)
class _FakeCommit:
    message: str
    tree: str
    parents: tuple[str, ...]


@dataclass(slots=True)
class _Failure:
    method: str
    pattern: re.Pattern[str]
    status_code: int
    remaining: int


@dataclass(slots=True)
class FakeGitHub:
    """In-memory GitHub repository served through httpx.MockTransport.

    The fake keeps its object graph in plain dictionaries that tests can
    inspect directly:
    - blobs, trees and commits are keyed by SHA
    - refs maps fully qualified ref names to SHAs
    - requests records every (method, path) received

    Example:
        >>> fake = FakeGitHub()
        >>> settings = GitHubSettings(token="t", owner=fake.owner, repo=fake.repo)
        >>> client = GitHubClient.from_settings(settings, transport=fake.transport)
    """

    owner: str = "octo"
    repo: str = "fixtures"
    blobs: dict[str, bytes] = field(default_factory=dict)
    trees: dict[str, dict[str, tuple[str, str, str]]] = field(default_factory=dict)
    commits: dict[str, _FakeCommit] = field(default_factory=dict)
    refs: dict[str, str] = field(default_factory=dict)
    pulls: dict[int, tuple[str, str]] = field(default_factory=dict)
    requests: list[tuple[str, str]] = field(default_factory=list)
    _failures: list[_Failure] = field(default_factory=list)

    @property
    def transport(self) -> httpx.MockTransport:
        """Transport to pass to GitHubClient.from_settings()."""
        return httpx.MockTransport(self.handle)

    # =========================================================================
    # Test Helpers
    # =========================================================================

    def inject_failure(
        self,
        method: str,
        path_pattern: str,
        *,
        status_code: int = 500,
        times: int = 1,
    ) -> None:
        """Make matching requests fail.

        Args:
            method: HTTP method to match.
            path_pattern: Regular expression searched in the path below
                /repos/{owner}/{repo}.
            status_code: Status to answer with.
            times: Number of matching requests to fail.
        """
        self._failures.append(
            _Failure(method, re.compile(path_pattern), status_code, times)
        )

    def branches(self) -> set[str]:
        """Names of all branches."""
        return {
            name.removeprefix("refs/heads/")
            for name in self.refs
            if name.startswith("refs/heads/")
        }

    def file_content(self, sha: str, path: str) -> bytes:
        """Content of a file in a commit's tree."""
        _, _, blob = self.trees[self.commits[sha].tree][path]
        return self.blobs[blob]

    # =========================================================================
    # Request Handling
    # =========================================================================

    def handle(self, request: httpx.Request) -> httpx.Response:
        """Answer a request the way GitHub would."""
        path = request.url.path
        self.requests.append((request.method, path))

        match = _REPO_PATH.match(path)
        if match is None or (match["owner"], match["repo"]) != (self.owner, self.repo):
            return _error(404, "Not Found")
        rest = match["rest"]

        for failure in self._failures:
            if (
                failure.remaining > 0
                and failure.method == request.method
                and failure.pattern.search(rest)
            ):
                failure.remaining -= 1
                return _error(failure.status_code, "Injected failure")

        body: dict[str, Any] = json.loads(request.content) if request.content else {}
        params = dict(request.url.params)

        routes = (
            ("POST", r"/git/blobs", self._create_blob),
            ("POST", r"/git/trees", self._create_tree),
            ("POST", r"/git/commits", self._create_commit),
            ("GET", r"/git/commits/(?P<sha>[0-9a-f]{40})", self._get_commit),
            ("GET", r"/git/ref/(?P<ref>.+)", self._get_ref),
            ("POST", r"/git/refs", self._create_ref),
            ("PATCH", r"/git/refs/(?P<ref>.+)", self._update_ref),
            ("DELETE", r"/git/refs/(?P<ref>.+)", self._delete_ref),
            ("GET", r"/contents/(?P<path>.+)", self._get_content),
            ("POST", r"/pulls", self._create_pull),
            ("GET", r"/pulls/(?P<number>\d+)/commits", self._list_pull_commits),
        )
        for method, pattern, handler in routes:
            route = re.fullmatch(pattern, rest)
            if method == request.method and route is not None:
                return handler(body=body, params=params, **route.groupdict())
        return _error(404, "Not Found")

    def _create_blob(self, *, body: dict[str, Any], **_: Any) -> httpx.Response:
        content = str(body["content"])
        data = (
            base64.b64decode(content)
            if body.get("encoding") == "base64"
            else content.encode()
        )
        sha = _hash_object("blob", data)
        self.blobs[sha] = data
        return _json(201, {"sha": sha, "url": f"/git/blobs/{sha}"})

    def _create_tree(self, *, body: dict[str, Any], **_: Any) -> httpx.Response:
        entries: dict[str, tuple[str, str, str]] = {}
        for entry in body["tree"]:
            if entry["sha"] not in self.blobs:
                return _error(422, "Invalid tree info")
            entries[entry["path"]] = (entry["mode"], entry["type"], entry["sha"])
        serialized = b"".join(
            f"{mode} {path}\x00".encode() + bytes.fromhex(sha)
            for path, (mode, _, sha) in sorted(entries.items())
        )
        sha = _hash_object("tree", serialized)
        self.trees[sha] = entries
        return _json(201, {"sha": sha})

    def _create_commit(self, *, body: dict[str, Any], **_: Any) -> httpx.Response:
        tree = str(body["tree"])
        parents = tuple(str(parent) for parent in body.get("parents", []))
        if tree not in self.trees or any(p not in self.commits for p in parents):
            return _error(422, "Object does not exist")
        message = str(body["message"])
        identity = f"{_IDENTITY['name']} <{_IDENTITY['email']}> 1556668800 +0000"
        serialized = "".join(
            [
                f"tree {tree}\n",
                *(f"parent {parent}\n" for parent in parents),
                f"author {identity}\n",
                f"committer {identity}\n",
                f"\n{message}",
            ]
        ).encode()
        sha = _hash_object("commit", serialized)
        self.commits[sha] = _FakeCommit(message=message, tree=tree, parents=parents)
        return _json(201, self._commit_payload(sha))

    def _commit_payload(self, sha: str) -> dict[str, Any]:
        commit = self.commits[sha]
        return {
            "sha": sha,
            "message": commit.message,
            "tree": {"sha": commit.tree},
            "parents": [{"sha": parent} for parent in commit.parents],
            "author": dict(_IDENTITY),
            "committer": dict(_IDENTITY),
        }

    def _get_commit(self, *, sha: str, **_: Any) -> httpx.Response:
        if sha not in self.commits:
            return _error(404, "Not Found")
        return _json(200, self._commit_payload(sha))

    def _get_ref(self, *, ref: str, **_: Any) -> httpx.Response:
        name = f"refs/{ref}"
        if name not in self.refs:
            return _error(404, "Not Found")
        return _json(
            200,
            {"ref": name, "object": {"sha": self.refs[name], "type": "commit"}},
        )

    def _create_ref(self, *, body: dict[str, Any], **_: Any) -> httpx.Response:
        name = str(body["ref"])
        sha = str(body["sha"])
        if not name.startswith("refs/") or name.count("/") < 2:
            return _error(422, "Reference name must start with 'refs/'")
        if name in self.refs:
            return _error(422, "Reference already exists")
        if sha not in self.commits:
            return _error(422, "Object does not exist")
        self.refs[name] = sha
        return _json(201, {"ref": name, "object": {"sha": sha, "type": "commit"}})

    def _update_ref(self, *, ref: str, body: dict[str, Any], **_: Any) -> httpx.Response:
        name = f"refs/{ref}"
        sha = str(body["sha"])
        if name not in self.refs:
            return _error(422, "Reference does not exist")
        if sha not in self.commits:
            return _error(422, "Object does not exist")
        if not body.get("force", False) and self.refs[name] not in self._ancestors(sha):
            return _error(422, "Update is not a fast forward")
        self.refs[name] = sha
        return _json(200, {"ref": name, "object": {"sha": sha, "type": "commit"}})

    def _delete_ref(self, *, ref: str, **_: Any) -> httpx.Response:
        name = f"refs/{ref}"
        if name not in self.refs:
            return _error(422, "Reference does not exist")
        del self.refs[name]
        return _json(204)

    def _resolve(self, ref: str) -> str | None:
        if ref in self.commits:
            return ref
        for name in (f"refs/heads/{ref}", f"refs/{ref}", ref):
            if name in self.refs:
                return self.refs[name]
        return None

    def _get_content(
        self, *, path: str, params: dict[str, str], **_: Any
    ) -> httpx.Response:
        sha = self._resolve(params.get("ref", "heads/main"))
        if sha is None:
            return _error(404, f"No commit found for the ref {params.get('ref')}")
        entry = self.trees[self.commits[sha].tree].get(path)
        if entry is None:
            return _error(404, "Not Found")
        data = self.blobs[entry[2]]
        encoded = base64.b64encode(data).decode()
        # GitHub wraps base64 content at 60 characters.
        wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
        return _json(
            200,
            {
                "type": "file",
                "path": path,
                "sha": entry[2],
                "encoding": "base64",
                "content": wrapped + "\n",
            },
        )

    def _create_pull(self, *, body: dict[str, Any], **_: Any) -> httpx.Response:
        base = str(body["base"])
        head = str(body["head"])
        if f"refs/heads/{base}" not in self.refs or f"refs/heads/{head}" not in self.refs:
            return _error(422, "Validation Failed")
        number = len(self.pulls) + 1
        self.pulls[number] = (base, head)
        return _json(201, {"number": number, "base": {"ref": base}, "head": {"ref": head}})

    def _list_pull_commits(
        self, *, number: str, params: dict[str, str], **_: Any
    ) -> httpx.Response:
        if int(number) not in self.pulls:
            return _error(404, "Not Found")
        base, head = self.pulls[int(number)]
        base_ancestors = self._ancestors(self.refs[f"refs/heads/{base}"])
        chain: list[str] = []
        sha: str | None = self.refs[f"refs/heads/{head}"]
        while sha is not None and sha not in base_ancestors:
            chain.append(sha)
            parents = self.commits[sha].parents
            sha = parents[0] if parents else None
        chain.reverse()

        per_page = int(params.get("per_page", 30))
        page = int(params.get("page", 1))
        selected = chain[(page - 1) * per_page : page * per_page]
        return _json(
            200,
            [
                {
                    "sha": sha,
                    "commit": {
                        "message": self.commits[sha].message,
                        "tree": {"sha": self.commits[sha].tree},
                        "author": dict(_IDENTITY),
                        "committer": dict(_IDENTITY),
                    },
                }
                for sha in selected
            ],
        )

    def _ancestors(self, sha: str) -> set[str]:
        seen: set[str] = set()
        pending = [sha]
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self.commits[current].parents)
        return seen
