"""
File system watcher for incremental project refresh.

This module provides:
- Watchdog-based monitoring of the notes a data source includes
- Debounced change emission (editors save in bursts)
- A refresher that folds each change into the current frame with
  query_one and pushes the result through the view controller
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Literal

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .frame.ops import remove_record, replace_record, with_error
from .models import DataFrame, DataQueryResult
from .sources.base import DataSource
from .sources.store import NoteStore
from .views.controller import ViewController, ViewProps

logger = logging.getLogger(__name__)

ChangeKind = Literal["created", "modified", "deleted", "moved"]


@dataclass(frozen=True)
class NoteChange:
    """A debounced change to a note in the project."""

    kind: ChangeKind
    path: str  # vault-relative
    old_path: str | None = None  # for moves


@dataclass
class PendingChange:
    kind: ChangeKind
    timestamp: float


class ProjectEventHandler(FileSystemEventHandler):
    """
    Collects file system events for the notes a data source includes.

    Key behaviors:
    - Debounces rapid modifications (e.g., editor save cycles)
    - A create followed by modifications stays a create
    - A create followed by a delete before flushing is dropped
    """

    DEBOUNCE_SECONDS = 0.5

    def __init__(self, vault_path: Path, includes: Callable[[str], bool]):
        super().__init__()
        self.vault_path = vault_path.resolve()
        self.includes = includes
        self.pending: dict[str, PendingChange] = {}
        self.moves: list[NoteChange] = []

    def _relative(self, path: str | bytes) -> str | None:
        if isinstance(path, bytes):
            path = path.decode()
        try:
            return Path(path).resolve().relative_to(self.vault_path).as_posix()
        except ValueError:
            return None

    def _relevant(self, path: str | bytes) -> str | None:
        rel = self._relative(path)
        if rel is None or not self.includes(rel):
            return None
        return rel

    def on_created(self, event: FileCreatedEvent) -> None:
        rel = None if event.is_directory else self._relevant(event.src_path)
        if rel:
            self.pending[rel] = PendingChange("created", time.time())

    def on_modified(self, event: FileModifiedEvent) -> None:
        rel = None if event.is_directory else self._relevant(event.src_path)
        if not rel:
            return
        # Don't override a pending creation with a modification
        if rel in self.pending and self.pending[rel].kind == "created":
            self.pending[rel].timestamp = time.time()
            return
        self.pending[rel] = PendingChange("modified", time.time())

    def on_deleted(self, event: FileDeletedEvent) -> None:
        rel = None if event.is_directory else self._relevant(event.src_path)
        if not rel:
            return
        if rel in self.pending and self.pending[rel].kind == "created":
            # Created then deleted before flush - nothing happened
            del self.pending[rel]
            return
        self.pending[rel] = PendingChange("deleted", time.time())

    def on_moved(self, event: FileMovedEvent) -> None:
        if event.is_directory:
            return
        src = self._relevant(event.src_path)
        dest = self._relevant(event.dest_path)

        if src and dest:
            self.pending.pop(src, None)
            self.moves.append(NoteChange("moved", dest, old_path=src))
        elif src:
            # Moved out of the project - treat as delete
            self.pending[src] = PendingChange("deleted", time.time())
        elif dest:
            # Moved into the project - treat as create
            self.pending[dest] = PendingChange("created", time.time())

    def flush_pending(self, now: float | None = None) -> list[NoteChange]:
        """Return changes that have passed the debounce window."""
        now = time.time() if now is None else now
        changes, self.moves = self.moves, []

        for path, pending in list(self.pending.items()):
            if now - pending.timestamp >= self.DEBOUNCE_SECONDS:
                changes.append(NoteChange(pending.kind, path))
                del self.pending[path]

        return changes


class ProjectRefresher:
    """Keeps a frame current as notes change and feeds it to the controller."""

    def __init__(
        self,
        source: DataSource,
        store: NoteStore,
        controller: ViewController,
        props: ViewProps,
    ):
        self.source = source
        self.store = store
        self.controller = controller
        self.props = props

    @property
    def frame(self) -> DataFrame:
        return self.props.data_props.data

    async def refresh(self, path: str) -> DataFrame:
        """Re-read one note into the frame."""
        frame = self.frame
        file = self.store.get_file(path)
        if file is None:
            return remove_record(frame, path)

        single = await self.source.query_one(file, frame.fields)
        if single.records:
            return replace_record(frame, single)
        if single.errors:
            return with_error(frame, single.errors[0])
        return remove_record(frame, path)

    async def apply(self, change: NoteChange) -> bool:
        """Fold a change into the frame and deliver it.

        Returns False when the view changed while the note was being read;
        the result is then dropped.
        """
        generation = self.controller.generation
        view_id = self.props.view.id

        if change.kind == "moved" and change.old_path:
            self.props = replace(
                self.props,
                data_props=DataQueryResult(data=remove_record(self.frame, change.old_path)),
            )

        if change.kind == "deleted":
            frame = remove_record(self.frame, change.path)
        else:
            frame = await self.refresh(change.path)

        if self.controller.generation != generation or self.props.view.id != view_id:
            logger.debug(f"Dropped refresh of {change.path}: view changed")
            return False

        self.props = replace(self.props, data_props=DataQueryResult(data=frame))
        self.controller.update(self.props)
        return True


def watch_project(
    vault_path: Path,
    source: DataSource,
) -> tuple[Observer, ProjectEventHandler]:
    """
    Start watching the notes of a project.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ProjectEventHandler(vault_path, source.includes)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)
    observer.start()
    return observer, handler


def apply_pending(
    handler: ProjectEventHandler,
    refresher: ProjectRefresher,
    on_refresh: Callable[[NoteChange], None] | None = None,
    on_error: Callable[[NoteChange, Exception], None] | None = None,
    now: float | None = None,
) -> int:
    """
    Apply the changes that have passed the debounce window.

    A change that fails to apply is logged and passed to `on_error`; the
    remaining changes are still applied.

    Returns:
        Number of changes delivered to the view
    """
    applied = 0
    for change in handler.flush_pending(now):
        try:
            delivered = asyncio.run(refresher.apply(change))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not refresh {change.path}: {e}")
            if on_error:
                on_error(change, e)
            continue
        if delivered:
            applied += 1
            if on_refresh:
                on_refresh(change)
    return applied


def run_watch_loop(
    vault_path: Path,
    refresher: ProjectRefresher,
    on_refresh: Callable[[NoteChange], None] | None = None,
    on_error: Callable[[NoteChange, Exception], None] | None = None,
) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function that applies debounced changes periodically.
    The observer is stopped however the loop ends.
    """
    observer, handler = watch_project(vault_path, refresher.source)

    try:
        while True:
            time.sleep(0.25)
            apply_pending(handler, refresher, on_refresh=on_refresh, on_error=on_error)
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()
