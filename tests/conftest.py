"""Shared fixtures: an on-disk portfolio checkout and an in-memory GitHub contents API."""

import base64
import hashlib
import io
import json
import threading
import urllib.error
import urllib.parse

import pytest

from config import PortfolioConfig
from services.backends import GitHubBackend

SAMPLE_POST = """\
---
title: 'Hello'
date: '2024-01-01'
tags: [a, b]
draft: false
summary: 'A greeting'
---

Hello body.
"""

SAMPLE_PROJECTS = """\
// Projects shown on the /projects page
const projectsData = [
  {
    title: 'Alpha',
    description: 'First project',
    imgSrc: '/static/images/alpha.png',
    href: 'https://example.com/alpha',
    tech1: 'Python',
  },
  {
    title: 'Beta',
    description: "Second project",
    imgSrc: '/static/images/beta.png',
    href: 'https://example.com/beta',
  },
];

export default projectsData;
"""


class _Response:
    def __init__(self, payload):
        self._raw = json.dumps(payload).encode()

    def read(self):
        return self._raw

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeGitHub:
    """Minimal stand-in for the GitHub contents API, used as a urlopen replacement."""

    def __init__(self):
        self.files: dict[str, tuple[str, str]] = {}
        self.calls: list[tuple[str, str]] = []
        self._counter = 0
        self._lock = threading.Lock()

    def _sha(self, content: str) -> str:
        self._counter += 1
        return hashlib.sha1(f"{self._counter}:{content}".encode()).hexdigest()

    def put(self, path: str, content: str) -> str:
        """Set a file directly, as if someone pushed to the branch. Returns the new sha."""
        with self._lock:
            sha = self._sha(content)
            self.files[path] = (content, sha)
            return sha

    def sha(self, path: str) -> str:
        return self.files[path][1]

    def _error(self, url: str, code: int, message: str):
        body = io.BytesIO(json.dumps({"message": message}).encode())
        return urllib.error.HTTPError(url, code, message, None, body)

    def __call__(self, req, timeout=None):
        url = req.full_url
        method = req.get_method()
        parsed = urllib.parse.urlparse(url)
        path = urllib.parse.unquote(parsed.path.split("/contents/", 1)[1])
        body = json.loads(req.data) if req.data else {}

        with self._lock:
            self.calls.append((method, path))

            if method == "GET":
                if path in self.files:
                    content, sha = self.files[path]
                    encoded = base64.b64encode(content.encode()).decode()
                    return _Response({"type": "file", "name": path, "content": encoded, "sha": sha})
                prefix = path.rstrip("/") + "/"
                children = sorted(
                    p[len(prefix):] for p in self.files if p.startswith(prefix)
                )
                children = [c for c in children if "/" not in c]
                if children:
                    return _Response([{"name": c, "type": "file"} for c in children])
                raise self._error(url, 404, "Not Found")

            if method == "PUT":
                current = self.files.get(path)
                if current is not None and "sha" not in body:
                    raise self._error(url, 422, '"sha" wasn\'t supplied')
                if current is not None and body["sha"] != current[1]:
                    raise self._error(url, 409, f"{path} does not match {body['sha']}")
                content = base64.b64decode(body["content"]).decode()
                sha = self._sha(content)
                self.files[path] = (content, sha)
                return _Response({"content": {"name": path, "sha": sha}})

            if method == "DELETE":
                current = self.files.get(path)
                if current is None:
                    raise self._error(url, 404, "Not Found")
                if body.get("sha") != current[1]:
                    raise self._error(url, 409, f"{path} does not match {body.get('sha')}")
                del self.files[path]
                return _Response({"commit": {}})

        raise self._error(url, 405, "Method Not Allowed")


@pytest.fixture()
def portfolio(tmp_path):
    """A local portfolio checkout with one post and a two-project file."""
    posts = tmp_path / "data" / "posts"
    posts.mkdir(parents=True)
    (posts / "hello.mdx").write_text(SAMPLE_POST)
    (tmp_path / "data" / "projectsData.js").write_text(SAMPLE_PROJECTS)
    return tmp_path


@pytest.fixture()
def local_config(portfolio):
    return PortfolioConfig(backend="local", portfolio_path=str(portfolio))


@pytest.fixture()
def fake_github():
    gh = FakeGitHub()
    gh.put("data/posts/hello.mdx", SAMPLE_POST)
    gh.put("data/projectsData.js", SAMPLE_PROJECTS)
    return gh


@pytest.fixture()
def github_backend(fake_github):
    return GitHubBackend("octo", "site", token="ghp_test", opener=fake_github)
