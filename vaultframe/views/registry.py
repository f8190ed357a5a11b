"""
View registry for view type -> implementation lookup.

Views register under the type they report. The registry is passed to each
ViewController explicitly, so tests can use their own.
"""

from __future__ import annotations

from typing import Iterable

from .view import ProjectView


class ViewRegistry:
    """Installed view implementations, keyed by view type."""

    def __init__(self, views: Iterable[ProjectView] = ()):
        self._views: dict[str, ProjectView] = {}
        for view in views:
            self.register(view)

    def register(self, view: ProjectView) -> None:
        """
        Register a view under its view type.

        Raises:
            TypeError: If view is not a ProjectView
            ValueError: If the view type is already registered
        """
        if not isinstance(view, ProjectView):
            raise TypeError("view must be a ProjectView instance")

        view_type = view.get_view_type()
        if view_type in self._views:
            raise ValueError(f"View type '{view_type}' already registered")

        self._views[view_type] = view

    def unregister(self, view_type: str) -> None:
        self._views.pop(view_type, None)

    def get(self, view_type: str) -> ProjectView | None:
        """Look up a view by exact type, or None if not registered."""
        return self._views.get(view_type)

    def types(self) -> list[str]:
        return list(self._views.keys())

    def __contains__(self, view_type: object) -> bool:
        return view_type in self._views
