"""
View lifecycle controller.

Binds one content element to at most one view instance at a time:

    unattached --attach--> attached --detach--> detached

While attached, `update` either forwards data to the current instance or,
when the view or project identity changed, swaps the instance: close the
old one, clear the element, open the new one and deliver data.

Each opened instance gets a new generation. Data deliveries and saved
config tagged with an older generation are dropped, so late callbacks from
a closed instance never reach the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from ..models import DataQueryResult, ProjectDefinition, ViewDefinition
from .content import ContentElement
from .registry import ViewRegistry
from .view import ProjectView, ProjectViewProps

if TYPE_CHECKING:
    from ..view_api import ViewApi

logger = logging.getLogger(__name__)


@dataclass
class ViewProps:
    """Input for attach/update: the view to show and the data to show in it."""

    view: ViewDefinition
    project: ProjectDefinition
    data_props: DataQueryResult = field(default_factory=DataQueryResult)
    config: dict[str, Any] = field(default_factory=dict)
    on_config_change: Callable[[dict[str, Any]], None] = lambda config: None
    view_api: ViewApi | None = None
    readonly: bool = False


class ViewController:
    """Attaches view implementations from a registry to a content element."""

    def __init__(self, content_el: ContentElement, registry: ViewRegistry):
        self.content_el = content_el
        self.registry = registry
        self.state = "unattached"
        self.generation = 0
        self.view_id: str | None = None
        self.project_id: str | None = None
        self._instance: ProjectView | None = None

    @property
    def instance(self) -> ProjectView | None:
        """The open view instance, if any."""
        return self._instance

    def attach(self, props: ViewProps) -> None:
        """Mount: open the view for props.view.type and deliver data.

        An unregistered view type leaves the element empty.
        """
        if self.state != "unattached":
            raise RuntimeError(f"Cannot attach a controller in state {self.state!r}")
        self.state = "attached"
        self._open(props)

    def update(self, props: ViewProps) -> None:
        """Re-render with new props.

        Only data is forwarded while the view and project stay the same;
        config, readonly and view_api are read by the view when it opens.
        """
        if self.state != "attached":
            raise RuntimeError(f"Cannot update a controller in state {self.state!r}")

        dirty = props.view.id != self.view_id or props.project.id != self.project_id
        if dirty:
            logger.debug(f"Switching view {self.view_id} -> {props.view.id}")
            self._close()
            self.content_el.empty()
            self._open(props)
        else:
            self.deliver(props.data_props, self.generation)

    def detach(self) -> None:
        """Unmount: close the current instance. No hooks fire afterwards."""
        if self.state != "attached":
            return
        self._close()
        self.state = "detached"

    def deliver(self, data: DataQueryResult, generation: int) -> bool:
        """Send data to the instance opened at `generation`.

        Returns False (and does nothing) when that instance is gone.
        """
        if self._instance is None or generation != self.generation:
            logger.debug(f"Dropped data for stale generation {generation}")
            return False
        self._instance.on_data(data)
        return True

    def _open(self, props: ViewProps) -> None:
        self.generation += 1
        self.view_id = props.view.id
        self.project_id = props.project.id

        instance = self.registry.get(props.view.type)
        if instance is None:
            logger.debug(f"No view registered for type {props.view.type!r}")
            return

        generation = self.generation
        self._instance = instance
        instance.on_open(
            ProjectViewProps(
                view_id=props.view.id,
                project=props.project,
                content_el=self.content_el,
                config=props.config,
                save_config=self._guard(generation, props.on_config_change),
                view_api=props.view_api,
                readonly=props.readonly,
            )
        )
        self.deliver(props.data_props, generation)

    def _close(self) -> None:
        instance, self._instance = self._instance, None
        self.generation += 1
        if instance is not None:
            instance.on_close()

    def _guard(
        self,
        generation: int,
        callback: Callable[[dict[str, Any]], None],
    ) -> Callable[[dict[str, Any]], None]:
        """Wrap a callback so it only runs while `generation` is current."""

        def guarded(config: dict[str, Any]) -> None:
            if generation != self.generation:
                logger.debug(f"Ignored config save from stale generation {generation}")
                return
            callback(config)

        return guarded
