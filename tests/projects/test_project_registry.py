import json
from pathlib import Path

import pytest

from vibe.errors import ParseError
from vibe.projects.registry import ProjectRegistry


def test_missing_registry_is_created(tmp_path: Path) -> None:
    path = tmp_path / "data" / "registry.json"

    registry = ProjectRegistry(path)

    assert registry.projects == []
    assert json.loads(path.read_text()) == {"projects": []}


def test_add_project_deduplicates_with_single_write(tmp_path: Path, monkeypatch) -> None:
    registry = ProjectRegistry(tmp_path / "registry.json")
    project = tmp_path / "app"
    project.mkdir()
    writes = []
    original_save = registry._save

    def counting_save() -> None:
        writes.append(1)
        original_save()

    monkeypatch.setattr(registry, "_save", counting_save)

    assert registry.add_project(project) is True
    assert registry.add_project(project) is False
    assert registry.add_project(tmp_path / "app" / ".." / "app") is False

    assert registry.projects == [str(project.resolve())]
    assert len(writes) == 1
    assert project in registry


def test_registry_persists_with_four_space_indent(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    ProjectRegistry(path).add_project(tmp_path)

    text = path.read_text()

    assert text.startswith('{\n    "projects": [\n')
    assert ProjectRegistry(path).projects == [str(tmp_path.resolve())]


def test_duplicates_dropped_on_load(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    path.write_text(json.dumps({"projects": ["/a", "/b", "/a"]}))

    assert ProjectRegistry(path).projects == ["/a", "/b"]


@pytest.mark.parametrize("content", ["{not json", '{"projects": "nope"}', '{"projects": [1, 2]}'])
def test_invalid_registry_raises(tmp_path: Path, content: str) -> None:
    path = tmp_path / "registry.json"
    path.write_text(content)

    with pytest.raises(ParseError):
        ProjectRegistry(path)


def test_clean_removes_only_missing_directories(tmp_path: Path) -> None:
    registry = ProjectRegistry(tmp_path / "registry.json")
    projects = [tmp_path / f"project-{index}" for index in range(5)]
    for project in projects:
        project.mkdir()
        registry.add_project(project)
    projects[1].rmdir()
    projects[3].rmdir()

    removed = registry.clean_projects()

    assert removed == 2
    assert registry.projects == [str(projects[i].resolve()) for i in (0, 2, 4)]
    assert ProjectRegistry(tmp_path / "registry.json").projects == registry.projects


def test_clean_without_changes_does_not_write(tmp_path: Path, monkeypatch) -> None:
    registry = ProjectRegistry(tmp_path / "registry.json")
    registry.add_project(tmp_path)
    monkeypatch.setattr(registry, "_save", lambda: pytest.fail("registry should not be saved"))

    assert registry.clean_projects() == 0
