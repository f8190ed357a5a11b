"""Show command - render a project through one of its views."""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console

from ..notices import ConsoleNotifier, Notifier, report_frame_errors
from ..views import ContentElement, ViewController, ViewRegistry, default_registry
from ..workspace import Workspace


def run_show(
    vault_path: Path,
    project_id: str,
    view_id: str | None = None,
    *,
    registry: ViewRegistry | None = None,
    console: Console | None = None,
    notifier: Notifier | None = None,
) -> ContentElement:
    """Attach the view, print what it rendered, then detach it."""
    console = console or Console()
    notifier = notifier or ConsoleNotifier()
    registry = registry or default_registry()

    workspace = Workspace.load(vault_path)
    project = workspace.project(project_id)
    view = workspace.view(project, view_id)
    source = workspace.source(project)

    frame = asyncio.run(source.query_all())
    report_frame_errors(frame, notifier)

    content = ContentElement()
    controller = ViewController(content, registry)
    controller.attach(workspace.view_props(project, view, frame, source, workspace.view_api(source)))

    if view.type not in registry:
        notifier.notify(f"No view installed for type '{view.type}'", "warning")
    for child in content:
        console.print(child)

    controller.detach()
    return content
