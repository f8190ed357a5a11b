"""Table view: renders the frame as a rich Table."""

from __future__ import annotations

from datetime import date
from typing import Any

from rich.table import Table

from ..models import DataFrame, DataQueryResult, Link
from .view import ProjectView, ProjectViewProps


def format_value(value: Any) -> str:
    """Display text for a data value; empty values render blank."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Link):
        return value.display_name or value.link_text
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    return str(value)


class TableView(ProjectView):
    """
    One row per record, one column per field.

    Config:
        fields: Field names to show, in order (default: all)
        hide_derived: Leave out derived fields except the identifier
    """

    def __init__(self) -> None:
        self.props: ProjectViewProps | None = None
        self.frame: DataFrame | None = None

    def get_view_type(self) -> str:
        return "table"

    def get_display_name(self) -> str:
        return "Table"

    def get_icon(self) -> str:
        return "table"

    def on_open(self, props: ProjectViewProps) -> None:
        self.props = props
        self.frame = None

    def on_data(self, result: DataQueryResult) -> None:
        if self.props is None:
            return
        self.frame = result.data
        self.props.content_el.empty()
        self.props.content_el.append(self.render(result.data))

    def on_close(self) -> None:
        self.props = None
        self.frame = None

    def visible_fields(self, frame: DataFrame) -> list[str]:
        config = self.props.config if self.props else {}
        wanted = config.get("fields")
        if wanted:
            names = [name for name in wanted if frame.field(name) is not None]
        else:
            names = frame.field_names
        if config.get("hide_derived"):
            names = [
                name for name in names
                if not frame.field(name).derived or frame.field(name).identifier
            ]
        return names

    def render(self, frame: DataFrame) -> Table:
        title = self.props.project.name if self.props else None
        table = Table(title=title, show_lines=False)
        names = self.visible_fields(frame)
        for name in names:
            table.add_column(name, style="cyan" if frame.field(name).identifier else None)

        for record in frame.records:
            table.add_row(*(format_value(record.values.get(name)) for name in names))

        if frame.errors:
            table.caption = f"{len(frame.errors)} note(s) could not be read"
        return table
