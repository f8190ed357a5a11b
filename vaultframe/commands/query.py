"""Projects and query commands - list projects, print a project's frame."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..models import DataFrame, Link
from ..notices import ConsoleNotifier, Notifier, report_frame_errors
from ..views.table import format_value
from ..workspace import Workspace


def _jsonable(value: Any) -> Any:
    if isinstance(value, Link):
        return asdict(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def frame_to_dict(frame: DataFrame) -> dict[str, Any]:
    """Serialize a frame for JSON output."""
    return {
        "fields": [
            {"name": f.name, "type": f.type.value, "identifier": f.identifier, "derived": f.derived}
            for f in frame.fields
        ],
        "records": [
            {"id": r.id, "values": {k: _jsonable(v) for k, v in r.values.items()}}
            for r in frame.records
        ],
        "errors": [asdict(e) for e in frame.errors],
    }


def run_projects(vault_path: Path, *, console: Console | None = None) -> int:
    """Print configured projects and their views; returns the project count."""
    console = console or Console()
    workspace = Workspace.load(vault_path)

    if not workspace.projects:
        console.print("[dim]No projects configured.[/dim]")
        return 0

    table = Table(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Views")
    for project in workspace.projects:
        source = project.data_source
        where = source.config.get("path", "")
        table.add_row(
            project.id,
            project.name,
            f"{source.kind}:{where}" if where else source.kind,
            ", ".join(f"{v.id} ({v.type})" for v in project.views) or "-",
        )
    console.print(table)
    return len(workspace.projects)


def run_query(
    vault_path: Path,
    project_id: str,
    *,
    output_json: bool = False,
    console: Console | None = None,
    notifier: Notifier | None = None,
) -> DataFrame:
    """Query every record of a project and print the frame."""
    console = console or Console()
    notifier = notifier or ConsoleNotifier()

    workspace = Workspace.load(vault_path)
    project = workspace.project(project_id)
    frame = asyncio.run(workspace.source(project).query_all())

    if output_json:
        print(json.dumps(frame_to_dict(frame), indent=2))
    else:
        table = Table(title=project.name)
        for f in frame.fields:
            table.add_column(f"{f.name} ({f.type.value})", style="cyan" if f.identifier else None)
        for record in frame.records:
            table.add_row(*(format_value(record.values.get(name)) for name in frame.field_names))
        console.print(table)

    report_frame_errors(frame, notifier)
    return frame
