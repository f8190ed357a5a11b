"""Data sources: read project notes into data frames."""

from .base import (
    DataSource,
    create_data_source,
    list_data_sources,
    register_data_source,
)
from .derived import DerivedDataSource
from .folder import FolderDataSource
from .store import FileSystemStore, LinkIndex, NoteFile, NoteStore, StoreUnavailableError

register_data_source("folder", FolderDataSource)
register_data_source("derived", DerivedDataSource)

__all__ = [
    "DataSource",
    "DerivedDataSource",
    "FileSystemStore",
    "FolderDataSource",
    "LinkIndex",
    "NoteFile",
    "NoteStore",
    "StoreUnavailableError",
    "create_data_source",
    "list_data_sources",
    "register_data_source",
]
