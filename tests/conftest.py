"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from vaultframe.models import DataSourceDefinition, ProjectDefinition, ViewDefinition
from vaultframe.sources import FileSystemStore, NoteFile

PROJECTS_TOML = """\
[[projects]]
id = "books"
name = "Books"
data_source = { kind = "folder", path = "Books" }

[[projects.views]]
id = "books-table"
name = "All books"
type = "table"

[[projects.views]]
id = "books-board"
name = "Board"
type = "board"
config = { group_by = "read" }

[[projects]]
id = "notes"
name = "Notes"
data_source = { kind = "derived", path = "" }
"""


def write_note(vault: Path, rel: str, lines: list[str]) -> Path:
    path = vault / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """A small vault with a Books folder and project settings."""
    root = tmp_path / "vault"
    root.mkdir()

    write_note(
        root,
        "Books/dune.md",
        [
            "---",
            "author: Frank Herbert",
            "year: 1965",
            "read: true",
            "started: 2024-01-02",
            'series: "[[Dune Saga]]"',
            "tags:",
            "- scifi",
            "- classic",
            "---",
            "# Dune",
            "",
            "See [[Arrakis]] and #desert.",
        ],
    )
    write_note(
        root,
        "Books/neuromancer.md",
        [
            "---",
            "author: William Gibson",
            "year: 1984",
            "read: false",
            "rating:",
            "---",
            "Cyberspace.",
        ],
    )
    write_note(root, "Books/Archive/old.md", ["---", "author: Someone", "---", ""])
    write_note(root, "Dune Saga.md", ["# Dune Saga", ""])

    settings = root / ".vaultframe"
    settings.mkdir()
    (settings / "projects.toml").write_text(PROJECTS_TOML, encoding="utf-8")
    return root


@pytest.fixture
def store(vault: Path) -> FileSystemStore:
    return FileSystemStore(vault)


def make_project(
    kind: str = "folder",
    project_id: str = "books",
    views: tuple[ViewDefinition, ...] = (),
    **config,
) -> ProjectDefinition:
    return ProjectDefinition(
        id=project_id,
        name=project_id.title(),
        data_source=DataSourceDefinition(kind=kind, config=config),
        views=views,
    )


class MemoryStore:
    """In-memory note store; paths listed in `unreadable` fail to read."""

    def __init__(self, notes: dict[str, str], unreadable: tuple[str, ...] = ()):
        self.notes = dict(notes)
        self.unreadable = set(unreadable)

    def files(self) -> list[NoteFile]:
        return [NoteFile.from_path(path) for path in sorted(self.notes)]

    def get_file(self, path: str) -> NoteFile | None:
        return NoteFile.from_path(path) if path in self.notes else None

    def read(self, path: str) -> str:
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        return self.notes[path]

    def write(self, path: str, text: str) -> None:
        self.notes[path] = text

    def create(self, path: str, text: str) -> NoteFile:
        if path in self.notes:
            raise FileExistsError(path)
        self.notes[path] = text
        return NoteFile.from_path(path)

    def delete(self, path: str) -> None:
        del self.notes[path]

    def resolve_link(self, link_text: str, source_path: str) -> str | None:
        path = f"{link_text}.md"
        return path if path in self.notes else None
