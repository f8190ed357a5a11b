"""Watch command - keep a project's view current as notes change."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..notices import ConsoleNotifier, report_frame_errors
from ..views import ContentElement, ViewController, default_registry
from ..watcher import NoteChange, ProjectRefresher, run_watch_loop
from ..workspace import Workspace


def run_watch(vault_path: Path, project_id: str, view_id: str | None = None) -> None:
    """
    Render a project's view and re-render it on every note change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console()
    notifier = ConsoleNotifier()

    workspace = Workspace.load(vault_path)
    project = workspace.project(project_id)
    view = workspace.view(project, view_id)
    source = workspace.source(project)

    frame = asyncio.run(source.query_all())
    report_frame_errors(frame, notifier)

    content = ContentElement()
    controller = ViewController(content, default_registry())
    props = workspace.view_props(project, view, frame, source, workspace.view_api(source))
    controller.attach(props)
    refresher = ProjectRefresher(source, workspace.store, controller, props)

    def render() -> None:
        for child in content:
            console.print(child)

    def on_refresh(change: NoteChange) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] {change.kind} {change.path}")
        report_frame_errors(refresher.frame, notifier)
        render()

    def on_error(change: NoteChange, error: Exception) -> None:
        notifier.notify(f"Could not refresh {change.path}: {error}", "warning")

    console.print(f"[bold]Watching[/bold] {project.name} ({view.name})")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    render()

    try:
        run_watch_loop(vault_path, refresher, on_refresh=on_refresh, on_error=on_error)
    finally:
        controller.detach()
        console.print("[bold]Stopped.[/bold]")
