"""
View implementation contract.

A view is a pluggable renderer bound to a view type. The controller drives
it through three hooks: on_open once per attachment, on_data for every data
delivery, on_close once before the instance is discarded.

Hooks are synchronous. A view that needs asynchronous work schedules it
itself and must tolerate on_data/on_close arriving after it was superseded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from ..models import DataQueryResult, ProjectDefinition

if TYPE_CHECKING:
    from ..view_api import ViewApi
    from .content import ContentElement


@dataclass(frozen=True)
class ProjectViewProps:
    """Everything a view gets when it opens."""

    view_id: str
    project: ProjectDefinition
    content_el: ContentElement
    config: dict[str, Any] = field(default_factory=dict)
    save_config: Callable[[dict[str, Any]], None] = lambda config: None
    view_api: ViewApi | None = None
    readonly: bool = False


class ProjectView(ABC):
    """Base class for view implementations."""

    @abstractmethod
    def get_view_type(self) -> str:
        """Registry key, e.g. "table"."""
        ...

    @abstractmethod
    def get_display_name(self) -> str:
        ...

    def get_icon(self) -> str:
        return "layout"

    @abstractmethod
    def on_open(self, props: ProjectViewProps) -> None:
        ...

    @abstractmethod
    def on_data(self, result: DataQueryResult) -> None:
        ...

    @abstractmethod
    def on_close(self) -> None:
        ...
