"""Working-tree status and the two-phase commit/push gate.

``commit_and_push`` never publishes on the first call: without
``confirmed=True`` it only reports what it would commit. Pushing is the one
operation that cannot be undone from this service.
"""

import logging
import subprocess

from services.errors import ValidationError, VersionControlError

log = logging.getLogger(__name__)


def _parse_porcelain(output: str) -> dict[str, list[str]]:
    """Group ``git status --porcelain -z`` entries by change kind."""
    groups: dict[str, list[str]] = {"created": [], "modified": [], "deleted": [], "renamed": []}
    entries = iter(output.split("\0"))
    for entry in entries:
        if len(entry) < 4:
            continue
        code, path = entry[:2], entry[3:]
        if "R" in code or "C" in code:
            next(entries, None)  # -z puts the source path in its own field
        if code == "??" or "A" in code or "C" in code:
            groups["created"].append(path)
        elif "R" in code:
            groups["renamed"].append(path)
        elif "D" in code:
            groups["deleted"].append(path)
        elif code.strip():
            groups["modified"].append(path)
    return groups


class GitGate:
    def __init__(self, repo_path: str, remote: str = "origin", branch: str = "main"):
        self.repo_path = repo_path
        self.remote = remote
        self.branch = branch

    def _git(self, *args: str) -> str:
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise VersionControlError(f"Could not run git: {e}") from e
        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout).strip()
            raise VersionControlError(f"git {args[0]} failed: {detail}")
        return proc.stdout

    def status(self) -> dict:
        """Pending paths in the working tree. Observational only."""
        groups = _parse_porcelain(self._git("status", "--porcelain", "-z", "--untracked-files=all"))
        files = []
        for kind in ("created", "modified", "deleted", "renamed"):
            for path in groups[kind]:
                if path not in files:
                    files.append(path)
        return {"files": files, "has_changes": bool(files)}

    def commit_and_push(self, message: str, confirmed: bool = False) -> dict:
        pending = self.status()["files"]
        if not pending:
            return {
                "success": True,
                "dry_run": False,
                "pending": 0,
                "message": "No changes to commit",
            }

        if not message or not message.strip():
            raise ValidationError("Commit message is required")

        if not confirmed:
            log.info("Dry run: %d pending file(s)", len(pending))
            return {
                "success": False,
                "dry_run": True,
                "pending": len(pending),
                "files": pending,
                "message": (
                    f'Dry run: would commit {len(pending)} file(s) with message: "{message}". '
                    "Call again with confirmed: true to execute."
                ),
            }

        self._git("add", "-A")
        self._git("commit", "-m", message)
        self._git("push", self.remote, self.branch)
        log.info("Committed and pushed %d file(s) to %s/%s", len(pending), self.remote, self.branch)
        return {
            "success": True,
            "dry_run": False,
            "pending": len(pending),
            "message": f'Successfully committed and pushed: "{message}"',
        }
