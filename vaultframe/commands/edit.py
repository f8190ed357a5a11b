"""Set command - edit a record's front matter from the command line."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console

from ..frame.values import is_string_link
from ..models import ABSENT, DataField, DataRecord
from ..workspace import Workspace


def parse_assignment(text: str) -> tuple[str, Any]:
    """Parse KEY=VALUE into (key, value).

    The value is read as a YAML scalar or flow collection, except for a
    [[wiki-link]] which is kept as text. `KEY=` sets an empty value and a
    bare `KEY` removes the key.
    """
    key, sep, raw = text.partition("=")
    key = key.strip()
    if not key:
        raise ValueError(f"Invalid assignment: {text!r}")
    if not sep:
        return key, ABSENT
    if not raw.strip():
        return key, None
    if is_string_link(raw.strip()):
        return key, raw.strip()
    try:
        return key, yaml.safe_load(raw)
    except yaml.YAMLError:
        return key, raw


def run_set(
    vault_path: Path,
    project_id: str,
    record_id: str,
    assignments: list[str],
    *,
    console: Console | None = None,
) -> DataRecord:
    """Apply assignments to one record and write it back through the view API."""
    console = console or Console()

    workspace = Workspace.load(vault_path)
    project = workspace.project(project_id)
    source = workspace.source(project)
    api = workspace.view_api(source)

    frame = asyncio.run(source.query_all())
    record = frame.record(record_id)
    if record is None:
        raise ValueError(f"Unknown record {record_id!r} in project {project.id!r}")

    values = dict(record.values)
    fields: dict[str, DataField] = {}
    for assignment in assignments:
        key, value = parse_assignment(assignment)
        field = frame.field(key)
        if field is not None and field.derived:
            raise ValueError(f"Field '{key}' is derived and can't be edited")
        if value is ABSENT:
            values.pop(key, None)
        else:
            values[key] = value
        fields[key] = field or DataField(name=key)

    updated = DataRecord(id=record.id, values=values)
    # Only the assigned keys are written; the rest of the note is left alone.
    api.update_record(updated, list(fields.values()))
    console.print(f"[green]Updated[/green] {record.id}")
    return updated
