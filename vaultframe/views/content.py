"""Host-owned render target a view draws into."""

from __future__ import annotations

from typing import Any, Iterator


class ContentElement:
    """Ordered list of renderables; the attached view owns its contents."""

    def __init__(self) -> None:
        self.children: list[Any] = []

    def append(self, child: Any) -> None:
        self.children.append(child)

    def empty(self) -> None:
        """Remove everything rendered so far."""
        self.children.clear()

    def __iter__(self) -> Iterator[Any]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)
