"""
DataSource capability and kind -> implementation dispatch.

A data source reads the notes of one project into a DataFrame. Concrete
sources are plain classes satisfying the protocol; the project's
`data_source.kind` selects which one is built.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Callable, Protocol, Sequence, runtime_checkable

from ..models import DataField, DataFieldType, DataFrame, ProjectDefinition
from .store import NoteFile, NoteStore, is_note_path

# Fields every note-backed frame starts with.
PATH_FIELD = DataField(name="path", type=DataFieldType.STRING, identifier=True, derived=True)
NAME_FIELD = DataField(name="name", type=DataFieldType.STRING, derived=True)


@runtime_checkable
class DataSource(Protocol):
    """Reads data frames from a project."""

    project: ProjectDefinition

    async def query_all(self) -> DataFrame:
        """Return a DataFrame with all records in the project."""
        ...

    async def query_one(self, file: NoteFile, fields: Sequence[DataField]) -> DataFrame:
        """Return a DataFrame with the single record for `file`.

        `fields` holds the known schema, so the file parses into it.
        """
        ...

    def includes(self, path: str) -> bool:
        """Whether a path belongs to the project. Pure, no I/O."""
        ...

    def readonly(self) -> bool:
        """Whether records can be written back."""
        ...


DataSourceFactory = Callable[[ProjectDefinition, NoteStore], DataSource]

# Global registry: data source kind -> factory
_SOURCES: dict[str, DataSourceFactory] = {}


def register_data_source(kind: str, factory: DataSourceFactory) -> None:
    """Register a data source implementation under a kind tag."""
    _SOURCES[kind] = factory


def list_data_sources() -> list[str]:
    return list(_SOURCES.keys())


def create_data_source(project: ProjectDefinition, store: NoteStore) -> DataSource:
    """Build the data source for a project.

    Raises:
        ValueError: If no implementation is registered for the kind
    """
    kind = project.data_source.kind
    factory = _SOURCES.get(kind)
    if factory is None:
        known = ", ".join(sorted(_SOURCES)) or "none"
        raise ValueError(f"Unknown data source kind {kind!r} (known: {known})")
    return factory(project, store)


def normalize_folder(path: str) -> str:
    folder = str(path or "").replace("\\", "/").strip().strip("/")
    return "" if folder == "." else folder


def in_folder(path: str, folder: str, recursive: bool) -> bool:
    """Check whether a note path lies in a folder (the vault root is "")."""
    if not is_note_path(path):
        return False
    parent = str(PurePosixPath(path).parent)
    if parent == ".":
        parent = ""
    if parent == folder:
        return True
    if not recursive:
        return False
    return folder == "" or parent.startswith(folder + "/")
