"""Pluggable views and the controller that manages their lifecycle."""

from .content import ContentElement
from .controller import ViewController, ViewProps
from .registry import ViewRegistry
from .table import TableView
from .view import ProjectView, ProjectViewProps


def default_registry() -> ViewRegistry:
    """Registry with the built-in views installed."""
    return ViewRegistry([TableView()])


__all__ = [
    "ContentElement",
    "ProjectView",
    "ProjectViewProps",
    "TableView",
    "ViewController",
    "ViewProps",
    "ViewRegistry",
    "default_registry",
]
