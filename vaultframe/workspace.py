"""Wiring of settings, note store, data sources and views for one vault."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .models import DataFrame, DataQueryResult, ProjectDefinition, ViewDefinition
from .settings import ViewConfigStore, get_projects_path, load_settings
from .sources import DataSource, FileSystemStore, create_data_source
from .view_api import ViewApi
from .views import ViewProps


@dataclass
class Workspace:
    """A vault with its configured projects."""

    vault_path: Path
    projects: list[ProjectDefinition] = field(default_factory=list)

    def __post_init__(self):
        self.store = FileSystemStore(self.vault_path)
        self.view_configs = ViewConfigStore(self.vault_path)

    @classmethod
    def load(cls, vault_path: Path) -> Workspace:
        return cls(vault_path=vault_path, projects=load_settings(get_projects_path(vault_path)))

    def project(self, project_id: str) -> ProjectDefinition:
        """Look up a project by id or name.

        Raises:
            ValueError: If no project matches
        """
        for project in self.projects:
            if project.id == project_id:
                return project
        for project in self.projects:
            if project.name.lower() == project_id.lower():
                return project
        raise ValueError(f"Unknown project: {project_id}")

    def view(self, project: ProjectDefinition, view_id: str | None) -> ViewDefinition:
        """A project's view by id; its first view when no id is given.

        Projects without views get an implicit table view.
        """
        if view_id is None:
            if project.views:
                return project.views[0]
            return ViewDefinition(id=f"{project.id}-table", name="Table", type="table")

        view = project.get_view(view_id)
        if view is None:
            raise ValueError(f"Unknown view {view_id!r} in project {project.id!r}")
        return view

    def source(self, project: ProjectDefinition) -> DataSource:
        return create_data_source(project, self.store)

    def view_api(
        self,
        source: DataSource,
        on_change: Callable[[list[str]], None] | None = None,
    ) -> ViewApi:
        return ViewApi(source, self.store, on_change=on_change)

    def view_props(
        self,
        project: ProjectDefinition,
        view: ViewDefinition,
        frame: DataFrame,
        source: DataSource,
        view_api: ViewApi | None = None,
    ) -> ViewProps:
        """Props for the view controller, with saved view config applied."""

        def on_config_change(config: dict) -> None:
            self.view_configs.save(project.id, view.id, config)

        return ViewProps(
            view=view,
            project=project,
            data_props=DataQueryResult(data=frame),
            config=self.view_configs.effective_config(project, view),
            on_config_change=on_config_change,
            view_api=view_api,
            readonly=source.readonly(),
        )
