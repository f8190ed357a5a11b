"""
Editing API handed to views.

Writes go through the front matter codec, so only the keys being edited
change in a note; everything else in the file is preserved.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any, Callable, Mapping, Sequence

from .frame.schema import coerce_value, to_data_value
from .metadata import decode_front_matter, encode_front_matter
from .models import ABSENT, DataField, DataRecord
from .sources.base import DataSource, normalize_folder
from .sources.store import LinkIndex, NoteStore

logger = logging.getLogger(__name__)


class ReadOnlyError(PermissionError):
    """Raised when writing through a read-only data source."""


class ViewApi:
    """Record and field edits for one project."""

    def __init__(
        self,
        source: DataSource,
        store: NoteStore,
        on_change: Callable[[list[str]], None] | None = None,
        null_str: str = "",
    ):
        self.source = source
        self.store = store
        self.on_change = on_change
        self.null_str = null_str

    def _check_writable(self) -> None:
        if self.source.readonly():
            raise ReadOnlyError(f"Project '{self.source.project.name}' is read-only")

    def _changed(self, record_ids: list[str]) -> None:
        if record_ids and self.on_change:
            self.on_change(record_ids)

    def _patch_note(self, path: str, patch: Mapping[str, Any]) -> None:
        text = self.store.read(path)
        self.store.write(path, encode_front_matter(text, patch, null_str=self.null_str))

    def update_record(self, record: DataRecord, fields: Sequence[DataField]) -> None:
        """Write a record's values back to its note.

        Derived fields are skipped. Schema fields missing from the record are
        removed from the note. Values equal to what the note holds, as read
        into a frame, are not rewritten, so keys nobody edited keep their
        original YAML (nested mappings, numeric list items).
        """
        self._check_writable()

        text = self.store.read(record.id)
        stored = decode_front_matter(text) or {}
        links = LinkIndex(self.store.files())

        patch: dict[str, Any] = {}
        for f in fields:
            if f.derived:
                continue
            if f.name not in record.values:
                if f.name in stored:
                    patch[f.name] = ABSENT
                continue
            value = record.values[f.name]
            if f.name in stored and _unchanged(value, stored[f.name], f, record.id, links):
                continue
            patch[f.name] = value

        if patch:
            self.store.write(record.id, encode_front_matter(text, patch, null_str=self.null_str))
        logger.debug(f"Updated {record.id}: {sorted(patch)}")
        self._changed([record.id])

    def add_record(self, name: str, values: Mapping[str, Any] | None = None) -> str:
        """Create a note in the project folder; returns the new record id."""
        self._check_writable()

        folder = normalize_folder(self.source.project.data_source.config.get("path", ""))
        filename = f"{name}.md" if not name.lower().endswith(".md") else name
        path = str(PurePosixPath(folder) / filename) if folder else filename
        if not self.source.includes(path):
            raise ValueError(f"Record path is outside the project: {path}")

        self.store.create(path, encode_front_matter("", dict(values or {}), null_str=self.null_str))
        logger.debug(f"Created {path}")
        self._changed([path])
        return path

    def delete_record(self, record_id: str) -> None:
        self._check_writable()
        self.store.delete(record_id)
        logger.debug(f"Deleted {record_id}")
        self._changed([record_id])

    def rename_field(self, old: str, new: str) -> list[str]:
        """Rename a front matter key in every note of the project."""
        self._check_writable()
        if old == new:
            return []

        changed = []
        for path, frontmatter in self._project_front_matter():
            if old not in frontmatter:
                continue
            self._patch_note(path, {old: ABSENT, new: frontmatter[old]})
            changed.append(path)

        self._changed(changed)
        return changed

    def delete_field(self, name: str) -> list[str]:
        """Remove a front matter key from every note of the project."""
        self._check_writable()

        changed = []
        for path, frontmatter in self._project_front_matter():
            if name not in frontmatter:
                continue
            self._patch_note(path, {name: ABSENT})
            changed.append(path)

        self._changed(changed)
        return changed

    def _project_front_matter(self) -> list[tuple[str, dict[str, Any]]]:
        result = []
        for file in self.store.files():
            if not self.source.includes(file.path):
                continue
            result.append((file.path, decode_front_matter(self.store.read(file.path)) or {}))
        return result


def _same(a: Any, b: Any) -> bool:
    # True == 1 in Python, but a boolean edit of a number is still an edit
    return type(a) is type(b) and a == b


def _unchanged(value: Any, raw: Any, field: DataField, path: str, links: LinkIndex) -> bool:
    """Whether `value` is what the raw front matter value reads as."""
    read = to_data_value(raw, path, links.resolve)
    if _same(value, read):
        return True
    return _same(value, coerce_value(read, field.type, path, links.resolve))
