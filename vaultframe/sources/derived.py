"""Read-only data source of values computed from note content."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Sequence

import frontmatter
import yaml

from ..models import (
    EMPTY_FRAME,
    DataField,
    DataFieldType,
    DataFrame,
    DataRecord,
    ProjectDefinition,
    RecordError,
)
from .base import NAME_FIELD, PATH_FIELD, in_folder, normalize_folder
from .parser import count_words, extract_links, extract_tags, extract_title
from .store import NoteFile, NoteStore, StoreUnavailableError

logger = logging.getLogger(__name__)

DERIVED_FIELDS = (
    PATH_FIELD,
    NAME_FIELD,
    DataField(name="title", type=DataFieldType.STRING, derived=True),
    DataField(name="words", type=DataFieldType.NUMBER, derived=True),
    DataField(name="links", type=DataFieldType.LIST, derived=True),
    DataField(name="tags", type=DataFieldType.LIST, derived=True),
    DataField(name="modified", type=DataFieldType.DATE, derived=True),
)


class DerivedDataSource:
    """Computes title, word count, links and tags for the notes in a folder.

    Every field is derived, so none of them maps back to front matter and the
    source is read-only.
    """

    def __init__(self, project: ProjectDefinition, store: NoteStore):
        self.project = project
        self.store = store
        config = project.data_source.config
        self.folder = normalize_folder(config.get("path", ""))
        self.recursive = bool(config.get("recursive", True))

    def includes(self, path: str) -> bool:
        return in_folder(path, self.folder, self.recursive)

    def readonly(self) -> bool:
        return True

    async def query_all(self) -> DataFrame:
        files = [f for f in await asyncio.to_thread(self.store.files) if self.includes(f.path)]
        results = await asyncio.gather(*(self._load(f) for f in files))
        return _frame(results)

    async def query_one(self, file: NoteFile, fields: Sequence[DataField]) -> DataFrame:
        # The schema is fixed, so the hint has nothing to add.
        if not self.includes(file.path):
            return EMPTY_FRAME
        return _frame([await self._load(file)])

    async def _load(self, file: NoteFile) -> DataRecord | RecordError:
        try:
            values = await asyncio.to_thread(self._compute, file)
        except StoreUnavailableError:
            raise
        except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read {file.path}: {e}")
            return RecordError(path=file.path, message=str(e))
        return DataRecord(id=file.path, values=values)

    def _compute(self, file: NoteFile) -> dict[str, Any]:
        post = frontmatter.loads(self.store.read(file.path))
        content = post.content
        return {
            "path": file.path,
            "name": file.name,
            "title": extract_title(content, file.name),
            "words": count_words(content),
            "links": extract_links(content),
            "tags": extract_tags(content, post.metadata),
            "modified": datetime.fromtimestamp(file.modified) if file.modified else None,
        }


def _frame(results: Sequence[DataRecord | RecordError]) -> DataFrame:
    return DataFrame(
        fields=DERIVED_FIELDS,
        records=tuple(r for r in results if isinstance(r, DataRecord)),
        errors=tuple(r for r in results if isinstance(r, RecordError)),
    )
