"""Storage backends: the local portfolio checkout, or a GitHub repository.

Both expose the same contract. Every read returns ``(content, token)``; the
token is the GitHub blob sha for the remote variant and ``None`` locally.
Writes and deletes against GitHub must carry the token from the latest read
of that path, and GitHub rejects them if the file changed since.
"""

import base64
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

from services.errors import BackendError, Conflict, NotFound, ValidationError

log = logging.getLogger(__name__)

DEFAULT_GITHUB_API_URL = "https://api.github.com"
_USER_AGENT = "portfolio-content/1.0"


class ContentBackend(ABC):
    name = "abstract"

    @abstractmethod
    def read_file(self, path: str) -> tuple[str, str | None]:
        """Return (content, token). Raises NotFound if the path does not exist."""

    @abstractmethod
    def write_file(
        self, path: str, content: str, token: str | None = None, message: str | None = None
    ) -> str | None:
        """Create or overwrite ``path``. Returns the new token."""

    @abstractmethod
    def delete_file(self, path: str, token: str | None = None, message: str | None = None) -> None:
        """Delete ``path``. Raises NotFound if it does not exist."""

    @abstractmethod
    def list_files(self, directory: str) -> list[str]:
        """Return the file names (not paths) directly inside ``directory``."""

    def read_files(self, paths: list[str]) -> list[tuple[str, str | None]]:
        """Read several paths; fails as a whole if any single read fails."""
        return [self.read_file(p) for p in paths]


class LocalBackend(ContentBackend):
    """Files under a local directory. Tokens are always None; last writer wins."""

    name = "local"

    def __init__(self, root: str):
        self.root = root

    def _safe_path(self, rel_path: str) -> str:
        """Resolve ``rel_path`` under root, rejecting anything that escapes it."""
        abs_path = os.path.realpath(os.path.join(self.root, rel_path))
        root_real = os.path.realpath(self.root)
        if abs_path != root_real and not abs_path.startswith(root_real + os.sep):
            raise ValidationError(f"Path traversal detected: {rel_path}")
        return abs_path

    def read_file(self, path: str) -> tuple[str, None]:
        abs_path = self._safe_path(path)
        if not os.path.isfile(abs_path):
            raise NotFound(f"File not found: {path}")
        try:
            with open(abs_path, encoding="utf-8") as f:
                return f.read(), None
        except OSError as e:
            raise BackendError(f"Failed to read {path}: {e}") from e

    def write_file(self, path, content, token=None, message=None):
        abs_path = self._safe_path(path)
        try:
            os.makedirs(os.path.dirname(abs_path), exist_ok=True)
            with open(abs_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise BackendError(f"Failed to write {path}: {e}") from e
        return None

    def delete_file(self, path, token=None, message=None):
        abs_path = self._safe_path(path)
        if not os.path.isfile(abs_path):
            raise NotFound(f"File not found: {path}")
        try:
            os.unlink(abs_path)
        except OSError as e:
            raise BackendError(f"Failed to delete {path}: {e}") from e

    def list_files(self, directory: str) -> list[str]:
        abs_dir = self._safe_path(directory)
        if not os.path.isdir(abs_dir):
            raise NotFound(f"Directory not found: {directory}")
        try:
            return sorted(
                name for name in os.listdir(abs_dir) if os.path.isfile(os.path.join(abs_dir, name))
            )
        except OSError as e:
            raise BackendError(f"Failed to list {directory}: {e}") from e


class GitHubBackend(ContentBackend):
    """Files in a GitHub repository branch, via the REST contents API.

    Each write is a commit on ``branch``. ``opener`` defaults to
    ``urllib.request.urlopen`` and is swappable for tests.
    """

    name = "github"

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        branch: str = "main",
        api_url: str = DEFAULT_GITHUB_API_URL,
        opener=None,
        timeout: int = 30,
        max_workers: int = 8,
    ):
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self._token = token
        self._opener = opener or urllib.request.urlopen
        self._timeout = timeout
        self._max_workers = max_workers

    def _url(self, path: str, ref: bool = False) -> str:
        url = (
            f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/"
            f"{urllib.parse.quote(path.strip('/'))}"
        )
        if ref:
            url += "?" + urllib.parse.urlencode({"ref": self.branch})
        return url

    def _request(self, method: str, path: str, body: dict | None = None, ref: bool = False):
        url = self._url(path, ref=ref)
        data = json.dumps(body).encode() if body is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers={
                "Authorization": f"Bearer {self._token}",
                "Accept": "application/vnd.github+json",
                "Content-Type": "application/json",
                "User-Agent": _USER_AGENT,
            },
        )
        log.debug("GitHub %s %s", method, url)
        try:
            with self._opener(req, timeout=self._timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            error_body = e.read() if e.fp else b""
            detail = error_body.decode("utf-8", "replace") or str(e.reason)
            sent_sha = bool(body and body.get("sha"))
            raise self._http_error(method, path, e.code, detail, sent_sha) from e
        except urllib.error.URLError as e:
            raise BackendError(f"GitHub API unreachable: {e.reason}") from e
        return json.loads(raw) if raw else {}

    def _http_error(
        self, method: str, path: str, status: int, detail: str, sent_sha: bool
    ) -> Exception:
        if status == 404:
            return NotFound(f"Not found: {path}")
        # 409: sha does not match the branch head; 422 with a sha: sha rejected.
        if method in ("PUT", "DELETE") and (status == 409 or (status == 422 and sent_sha)):
            return Conflict(f"{path} changed since it was read; re-read and retry ({detail})")
        return BackendError(f"GitHub API {status}: {detail}", upstream_status=status)

    def read_file(self, path: str) -> tuple[str, str]:
        data = self._request("GET", path, ref=True)
        if not isinstance(data, dict) or data.get("type") != "file":
            raise BackendError(f"Not a file: {path}")
        content = base64.b64decode(data.get("content", "")).decode("utf-8")
        return content, data["sha"]

    def write_file(self, path, content, token=None, message=None):
        body = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self.branch,
        }
        if token:
            body["sha"] = token
        data = self._request("PUT", path, body=body)
        return data["content"]["sha"]

    def delete_file(self, path, token=None, message=None):
        body = {"message": message or f"Delete {path}", "branch": self.branch}
        if token:
            body["sha"] = token
        self._request("DELETE", path, body=body)

    def list_files(self, directory: str) -> list[str]:
        data = self._request("GET", directory, ref=True)
        if not isinstance(data, list):
            raise BackendError(f"Not a directory: {directory}")
        return sorted(entry["name"] for entry in data if entry.get("type") == "file")

    def read_files(self, paths):
        if not paths:
            return []
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(pool.map(self.read_file, paths))
