"""
Project settings.

Projects and their views are declared in `.vaultframe/projects.toml` inside
the vault. View config saved by views at runtime lives next to it in
`view-config.json` and overlays the declared config.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from .models import DataSourceDefinition, ProjectDefinition, ViewDefinition

SETTINGS_DIR = ".vaultframe"
PROJECTS_FILE = "projects.toml"
VIEW_CONFIG_FILE = "view-config.json"


def get_settings_dir(vault_path: Path) -> Path:
    return vault_path / SETTINGS_DIR


def get_projects_path(vault_path: Path) -> Path:
    return get_settings_dir(vault_path) / PROJECTS_FILE


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _required_str(raw: dict[str, Any], key: str, where: str) -> str:
    value = str(raw.get(key, "")).strip()
    if not value:
        raise ValueError(f"{where}: '{key}' is required")
    return value


def parse_project(raw: dict[str, Any]) -> ProjectDefinition:
    """Build a ProjectDefinition from a TOML table."""
    project_id = _required_str(raw, "id", "project")
    where = f"project {project_id!r}"
    name = str(raw.get("name", "")).strip() or project_id

    source_raw = raw.get("data_source")
    if not isinstance(source_raw, dict):
        raise ValueError(f"{where}: 'data_source' table is required")
    kind = _required_str(source_raw, "kind", f"{where} data_source")
    source_config = {k: v for k, v in source_raw.items() if k != "kind"}

    views: list[ViewDefinition] = []
    seen: set[str] = set()
    for view_raw in raw.get("views", []):
        if not isinstance(view_raw, dict):
            raise ValueError(f"{where}: each view must be a table")
        view_id = _required_str(view_raw, "id", f"{where} view")
        if view_id in seen:
            raise ValueError(f"{where}: duplicate view id {view_id!r}")
        seen.add(view_id)
        views.append(
            ViewDefinition(
                id=view_id,
                name=str(view_raw.get("name", "")).strip() or view_id,
                type=_required_str(view_raw, "type", f"{where} view {view_id!r}"),
                config=_coerce_dict(view_raw.get("config")),
            )
        )

    return ProjectDefinition(
        id=project_id,
        name=name,
        data_source=DataSourceDefinition(kind=kind, config=source_config),
        views=tuple(views),
        default_name=str(raw.get("default_name", "")),
    )


def load_settings(path: Path) -> list[ProjectDefinition]:
    """
    Load project definitions from TOML.

    Raises:
        FileNotFoundError: If the settings file is missing
        ValueError: If the TOML is malformed or a project is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"Project settings not found: {path}")

    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Failed to parse settings TOML: {e}") from e

    projects: list[ProjectDefinition] = []
    seen: set[str] = set()
    for raw in data.get("projects", []):
        if not isinstance(raw, dict):
            raise ValueError("each project must be a table")
        project = parse_project(raw)
        if project.id in seen:
            raise ValueError(f"duplicate project id {project.id!r}")
        seen.add(project.id)
        projects.append(project)
    return projects


class ViewConfigStore:
    """Runtime view config persisted as JSON, keyed by project and view id."""

    def __init__(self, vault_path: Path):
        self.path = get_settings_dir(vault_path) / VIEW_CONFIG_FILE

    def _load(self) -> dict[str, dict[str, dict[str, Any]]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def get(self, project_id: str, view_id: str) -> dict[str, Any]:
        return dict(self._load().get(project_id, {}).get(view_id, {}))

    def save(self, project_id: str, view_id: str, config: dict[str, Any]) -> None:
        data = self._load()
        data.setdefault(project_id, {})[view_id] = config
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True, default=str), encoding="utf-8")

    def effective_config(self, project: ProjectDefinition, view: ViewDefinition) -> dict[str, Any]:
        """Declared view config overlaid with saved config."""
        return {**view.config, **self.get(project.id, view.id)}
