"""ProjectStore tests against both backends."""

import pytest

from services.backends import LocalBackend
from services.errors import AlreadyExists, Conflict, FormatError, NotFound, ValidationError
from services.projects import ProjectStore

NEW_PROJECT = {
    "title": "Gamma",
    "description": "Third project",
    "imgSrc": "/static/images/gamma.png",
    "href": "https://example.com/gamma",
    "github": "https://github.com/me/gamma",
}


@pytest.fixture(params=["local", "github"])
def projects(request, portfolio, github_backend):
    backend = LocalBackend(str(portfolio)) if request.param == "local" else github_backend
    return ProjectStore(backend, "data/projectsData.js")


def _titles(store):
    return [p["title"] for p in store.list_projects()]


def test_list_projects(projects):
    assert _titles(projects) == ["Alpha", "Beta"]


def test_create_appends(projects):
    created = projects.create_project(NEW_PROJECT)
    assert created == NEW_PROJECT
    assert _titles(projects) == ["Alpha", "Beta", "Gamma"]
    assert projects.list_projects()[2]["github"] == "https://github.com/me/gamma"


def test_create_duplicate_title(projects):
    with pytest.raises(AlreadyExists):
        projects.create_project({**NEW_PROJECT, "title": "Alpha"})
    assert _titles(projects) == ["Alpha", "Beta"]


def test_create_missing_required(projects):
    record = dict(NEW_PROJECT)
    del record["href"]
    with pytest.raises(ValidationError):
        projects.create_project(record)


def test_create_rejects_array_terminator(projects):
    with pytest.raises(ValidationError):
        projects.create_project({**NEW_PROJECT, "description": "arr = [1];"})


def test_create_rejects_unknown_field(projects):
    with pytest.raises(ValidationError):
        projects.create_project({**NEW_PROJECT, "tech4": "Rust"})


def test_update_preserves_untouched_fields(projects):
    projects.create_project({"title": "X", "description": "d", "imgSrc": "i", "href": "h"})
    updated = projects.update_project("X", {"description": "d2"})
    assert updated == {"title": "X", "description": "d2", "imgSrc": "i", "href": "h"}
    stored = next(p for p in projects.list_projects() if p["title"] == "X")
    assert stored == {"title": "X", "description": "d2", "imgSrc": "i", "href": "h"}


def test_update_keeps_position(projects):
    projects.update_project("Alpha", {"tech2": "Flask"})
    assert _titles(projects) == ["Alpha", "Beta"]
    assert projects.list_projects()[0]["tech1"] == "Python"
    assert projects.list_projects()[0]["tech2"] == "Flask"


def test_update_missing(projects):
    with pytest.raises(NotFound):
        projects.update_project("Nope", {"description": "x"})


def test_rename_onto_existing_title(projects):
    with pytest.raises(AlreadyExists):
        projects.update_project("Alpha", {"title": "Beta"})
    assert _titles(projects) == ["Alpha", "Beta"]


def test_rename(projects):
    projects.update_project("Alpha", {"title": "Alpha 2"})
    assert _titles(projects) == ["Alpha 2", "Beta"]


def test_delete(projects):
    projects.delete_project("Alpha")
    assert _titles(projects) == ["Beta"]


def test_delete_missing(projects):
    with pytest.raises(NotFound):
        projects.delete_project("Nope")


def test_titles_stay_unique_across_operations(projects):
    projects.create_project(NEW_PROJECT)
    projects.update_project("Gamma", {"title": "Delta"})
    projects.create_project(NEW_PROJECT)
    projects.delete_project("Beta")
    titles = _titles(projects)
    assert sorted(titles) == ["Alpha", "Delta", "Gamma"]
    assert len(titles) == len(set(titles))


# ---------------------------------------------------------------------------
# Backend specifics
# ---------------------------------------------------------------------------


def test_missing_projects_file(tmp_path):
    store = ProjectStore(LocalBackend(str(tmp_path)), "data/projectsData.js")
    with pytest.raises(NotFound):
        store.list_projects()


def test_malformed_projects_file(portfolio):
    (portfolio / "data" / "projectsData.js").write_text("export default [];\n")
    store = ProjectStore(LocalBackend(str(portfolio)), "data/projectsData.js")
    with pytest.raises(FormatError):
        store.list_projects()


def test_local_write_regenerates_file(portfolio):
    store = ProjectStore(LocalBackend(str(portfolio)), "data/projectsData.js")
    store.delete_project("Beta")
    text = (portfolio / "data" / "projectsData.js").read_text()
    assert text.startswith("const projectsData = [\n{\n  title: 'Alpha',\n")
    assert "// Projects shown" not in text
    assert text.endswith("];\n\nexport default projectsData;\n")


def test_remote_concurrent_edit_conflicts(github_backend, fake_github, monkeypatch):
    store = ProjectStore(github_backend, "data/projectsData.js")
    original_read = github_backend.read_file

    def read_then_external_edit(path):
        result = original_read(path)
        fake_github.put(path, fake_github.files[path][0] + "\n// touched\n")
        return result

    monkeypatch.setattr(github_backend, "read_file", read_then_external_edit)
    with pytest.raises(Conflict):
        store.create_project(NEW_PROJECT)
