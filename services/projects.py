"""Portfolio project operations.

The project list lives in one JS module. Every mutation reads the full list,
changes one record, and writes the full list back with the token from that
read, so a concurrent remote edit surfaces as Conflict instead of being lost.
"""

import logging

from services.backends import ContentBackend
from services.errors import AlreadyExists, NotFound, ValidationError
from services.literal_array import parse_projects, render_projects
from services.schema import validate_project

log = logging.getLogger(__name__)


def _find(projects: list[dict], title: str) -> int:
    for i, project in enumerate(projects):
        if project.get("title") == title:
            return i
    raise NotFound(f"Project not found: {title}")


class ProjectStore:
    def __init__(self, backend: ContentBackend, projects_file: str):
        self.backend = backend
        self.projects_file = projects_file

    def _read(self) -> tuple[list[dict], str | None]:
        try:
            raw, token = self.backend.read_file(self.projects_file)
        except NotFound as e:
            raise NotFound(f"Projects file not found: {self.projects_file}") from e
        return parse_projects(raw), token

    def _write(self, projects: list[dict], token: str | None, message: str) -> None:
        self.backend.write_file(
            self.projects_file, render_projects(projects), token=token, message=message
        )

    def list_projects(self) -> list[dict]:
        projects, _token = self._read()
        return projects

    def create_project(self, project: dict) -> dict:
        errors = validate_project(project)
        if errors:
            raise ValidationError("Project validation failed", errors)

        projects, token = self._read()
        if any(p.get("title") == project["title"] for p in projects):
            raise AlreadyExists(f"Project already exists: {project['title']}")

        record = dict(project)
        projects.append(record)
        self._write(projects, token, f"Create project: {record['title']}")
        log.info("Created project %r", record["title"])
        return record

    def update_project(self, title: str, updates: dict) -> dict:
        """Shallow-merge ``updates`` into the project named ``title``."""
        errors = validate_project(updates, partial=True)
        if errors:
            raise ValidationError("Project validation failed", errors)

        projects, token = self._read()
        index = _find(projects, title)

        new_title = updates.get("title", title)
        if new_title != title and any(p.get("title") == new_title for p in projects):
            raise AlreadyExists(f"Project already exists: {new_title}")

        updated = {**projects[index], **updates}
        projects[index] = updated
        self._write(projects, token, f"Update project: {title}")
        log.info("Updated project %r", title)
        return updated

    def delete_project(self, title: str) -> None:
        projects, token = self._read()
        index = _find(projects, title)
        del projects[index]
        self._write(projects, token, f"Delete project: {title}")
        log.info("Deleted project %r", title)
