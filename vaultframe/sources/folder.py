"""Front-matter backed data source over a vault folder."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import yaml

from ..frame.schema import coerce_value, detect_field_type, merge_fields, to_data_value
from ..metadata import ParseError, decode_front_matter
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
from .store import LinkIndex, NoteFile, NoteStore, StoreUnavailableError

logger = logging.getLogger(__name__)

BUILTIN_FIELDS = (PATH_FIELD, NAME_FIELD)


class FolderDataSource:
    """Reads each note's front matter in a folder into a record.

    Config:
        path: Folder relative to the vault root ("" for the root)
        recursive: Include notes in subfolders
    """

    def __init__(self, project: ProjectDefinition, store: NoteStore):
        self.project = project
        self.store = store
        config = project.data_source.config
        self.folder = normalize_folder(config.get("path", ""))
        self.recursive = bool(config.get("recursive", False))

    def includes(self, path: str) -> bool:
        return in_folder(path, self.folder, self.recursive)

    def readonly(self) -> bool:
        return False

    async def query_all(self) -> DataFrame:
        listing = await asyncio.to_thread(self.store.files)
        links = LinkIndex(listing)
        files = [f for f in listing if self.includes(f.path)]
        parsed = await asyncio.gather(*(self._parse(f) for f in files))
        return self._build_frame(parsed, hints=(), links=links)

    async def query_one(self, file: NoteFile, fields: Sequence[DataField]) -> DataFrame:
        if not self.includes(file.path):
            return EMPTY_FRAME
        links = LinkIndex(await asyncio.to_thread(self.store.files))
        parsed = await self._parse(file)
        return self._build_frame([parsed], hints=fields, links=links)

    async def _parse(self, file: NoteFile) -> tuple[NoteFile, dict[str, Any]] | RecordError:
        try:
            metadata = await asyncio.to_thread(self._read_metadata, file)
        except StoreUnavailableError:
            raise
        except (OSError, UnicodeDecodeError, ParseError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read {file.path}: {e}")
            return RecordError(path=file.path, message=str(e))
        return file, metadata

    def _read_metadata(self, file: NoteFile) -> dict[str, Any]:
        text = self.store.read(file.path)
        return decode_front_matter(text) or {}

    def _build_frame(
        self,
        parsed: Sequence[tuple[NoteFile, dict[str, Any]] | RecordError],
        hints: Sequence[DataField],
        links: LinkIndex,
    ) -> DataFrame:
        builtin_names = {f.name for f in BUILTIN_FIELDS}
        hinted = {f.name: f for f in hints if f.name not in builtin_names}

        records: list[DataRecord] = []
        errors: list[RecordError] = []
        detected: list[tuple[str, DataFieldType | None]] = []

        for item in parsed:
            if isinstance(item, RecordError):
                errors.append(item)
                continue

            file, metadata = item
            values: dict[str, Any] = {"path": file.path, "name": file.name}
            for key, raw in metadata.items():
                key = str(key)
                if key in builtin_names:
                    logger.debug(f"{file.path}: front matter key {key!r} shadows a built-in field")
                    continue

                value = to_data_value(raw, file.path, links.resolve)
                if key in hinted:
                    value = coerce_value(value, hinted[key].type, file.path, links.resolve)
                else:
                    field_type = DataFieldType.UNKNOWN if isinstance(raw, dict) else detect_field_type(value)
                    detected.append((key, field_type))
                values[key] = value

            records.append(DataRecord(id=file.path, values=values))

        fields = merge_fields(list(BUILTIN_FIELDS) + list(hinted.values()), detected)
        return DataFrame(fields=tuple(fields), records=tuple(records), errors=tuple(errors))
