"""Tests for debounced change collection and incremental refresh."""

from __future__ import annotations

import asyncio
import time

from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from conftest import make_project, write_note
from vaultframe.models import DataQueryResult, ViewDefinition
from vaultframe.sources import FolderDataSource
from vaultframe.views import ContentElement, ProjectView, ViewController, ViewProps, ViewRegistry
from vaultframe.watcher import NoteChange, ProjectEventHandler, ProjectRefresher, apply_pending


def _handler(vault) -> ProjectEventHandler:
    source = FolderDataSource(make_project(path="Books"), None)
    return ProjectEventHandler(vault, source.includes)


def _later() -> float:
    return time.time() + 10


def test_modifications_are_debounced(vault):
    handler = _handler(vault)
    path = str(vault / "Books" / "dune.md")

    handler.on_modified(FileModifiedEvent(path))
    handler.on_modified(FileModifiedEvent(path))

    assert handler.flush_pending(now=time.time() - 10) == []
    assert handler.flush_pending(now=_later()) == [NoteChange("modified", "Books/dune.md")]
    assert handler.flush_pending(now=_later()) == []


def test_irrelevant_paths_are_ignored(vault, tmp_path):
    handler = _handler(vault)

    handler.on_modified(FileModifiedEvent(str(vault / "Dune Saga.md")))
    handler.on_modified(FileModifiedEvent(str(vault / "Books" / "cover.png")))
    handler.on_created(FileCreatedEvent(str(tmp_path / "elsewhere.md")))
    handler.on_created(DirCreatedEvent(str(vault / "Books" / "New")))

    assert handler.flush_pending(now=_later()) == []


def test_create_then_modify_stays_create(vault):
    handler = _handler(vault)
    path = str(vault / "Books" / "new.md")

    handler.on_created(FileCreatedEvent(path))
    handler.on_modified(FileModifiedEvent(path))

    assert handler.flush_pending(now=_later()) == [NoteChange("created", "Books/new.md")]


def test_create_then_delete_is_dropped(vault):
    handler = _handler(vault)
    path = str(vault / "Books" / "temp.md")

    handler.on_created(FileCreatedEvent(path))
    handler.on_deleted(FileDeletedEvent(path))

    assert handler.flush_pending(now=_later()) == []


def test_moves(vault):
    handler = _handler(vault)
    books = vault / "Books"

    handler.on_moved(FileMovedEvent(str(books / "dune.md"), str(books / "dune-1965.md")))
    handler.on_moved(FileMovedEvent(str(books / "neuromancer.md"), str(vault / "Archive.md")))
    handler.on_moved(FileMovedEvent(str(vault / "Dune Saga.md"), str(books / "saga.md")))

    changes = handler.flush_pending(now=_later())
    assert NoteChange("moved", "Books/dune-1965.md", old_path="Books/dune.md") in changes
    assert NoteChange("deleted", "Books/neuromancer.md") in changes
    assert NoteChange("created", "Books/saga.md") in changes


class FrameView(ProjectView):
    def __init__(self):
        self.frames = []

    def get_view_type(self) -> str:
        return "table"

    def get_display_name(self) -> str:
        return "Frames"

    def on_open(self, props) -> None:
        pass

    def on_data(self, result: DataQueryResult) -> None:
        self.frames.append(result.data)

    def on_close(self) -> None:
        pass


def _refresher(store, source=None):
    source = source or FolderDataSource(make_project(path="Books"), store)
    frame = asyncio.run(source.query_all())
    view = FrameView()
    controller = ViewController(ContentElement(), ViewRegistry([view]))
    props = ViewProps(
        view=ViewDefinition(id="v1", name="Table", type="table"),
        project=source.project,
        data_props=DataQueryResult(data=frame),
    )
    controller.attach(props)
    return ProjectRefresher(source, store, controller, props), view


def test_refresh_modified_note(vault, store):
    refresher, view = _refresher(store)
    write_note(vault, "Books/dune.md", ["---", "author: F. Herbert", "year: 1965", "---"])

    assert asyncio.run(refresher.apply(NoteChange("modified", "Books/dune.md")))

    frame = view.frames[-1]
    dune = frame.record("Books/dune.md")
    assert dune.values["author"] == "F. Herbert"
    assert "tags" not in dune.values
    # the schema is kept for the rest of the frame
    assert frame.field("tags") is not None
    assert [r.id for r in frame.records] == ["Books/dune.md", "Books/neuromancer.md"]
    assert refresher.frame is frame


def test_refresh_created_and_deleted_notes(vault, store):
    refresher, view = _refresher(store)
    write_note(vault, "Books/new.md", ["---", "author: New", "pages: 12", "---"])

    asyncio.run(refresher.apply(NoteChange("created", "Books/new.md")))
    assert view.frames[-1].record("Books/new.md").values["pages"] == 12
    assert view.frames[-1].field("pages") is not None

    (vault / "Books" / "new.md").unlink()
    asyncio.run(refresher.apply(NoteChange("deleted", "Books/new.md")))
    assert view.frames[-1].record("Books/new.md") is None


def test_refresh_broken_note_becomes_error(vault, store):
    refresher, view = _refresher(store)
    write_note(vault, "Books/dune.md", ["---", "author: [broken", "---"])

    asyncio.run(refresher.apply(NoteChange("modified", "Books/dune.md")))

    frame = view.frames[-1]
    assert frame.record("Books/dune.md") is None
    assert [e.path for e in frame.errors] == ["Books/dune.md"]


def test_refresh_moved_note(vault, store):
    refresher, view = _refresher(store)
    (vault / "Books" / "dune.md").rename(vault / "Books" / "dune-1965.md")

    asyncio.run(refresher.apply(NoteChange("moved", "Books/dune-1965.md", old_path="Books/dune.md")))

    ids = [r.id for r in view.frames[-1].records]
    assert "Books/dune.md" not in ids
    assert "Books/dune-1965.md" in ids


def test_refresh_dropped_when_view_swaps_mid_read(vault, store):
    class SwappingSource(FolderDataSource):
        controller = None

        async def query_one(self, file, fields):
            # the user switches views while the note is read
            self.controller.update(
                ViewProps(view=ViewDefinition(id="v2", name="Other", type="table"), project=self.project)
            )
            return await super().query_one(file, fields)

    source = SwappingSource(make_project(path="Books"), store)
    refresher, view = _refresher(store, source)
    source.controller = refresher.controller
    delivered = len(view.frames)

    assert asyncio.run(refresher.apply(NoteChange("modified", "Books/dune.md"))) is False
    # only the swap delivered data, never the refreshed frame
    assert len(view.frames) == delivered + 1
    assert view.frames[-1].records == ()


def test_failed_change_does_not_stop_the_others(vault):
    class FlakyRefresher:
        def __init__(self):
            self.applied = []

        async def apply(self, change):
            if change.path == "Books/dune.md":
                raise ValueError("bad note")
            self.applied.append(change.path)
            return True

    handler = _handler(vault)
    handler.on_modified(FileModifiedEvent(str(vault / "Books" / "dune.md")))
    handler.on_modified(FileModifiedEvent(str(vault / "Books" / "neuromancer.md")))
    refresher = FlakyRefresher()
    refreshed, errors = [], []

    count = apply_pending(
        handler,
        refresher,
        on_refresh=refreshed.append,
        on_error=lambda change, e: errors.append((change.path, str(e))),
        now=_later(),
    )

    assert count == 1
    assert refresher.applied == ["Books/neuromancer.md"]
    assert refreshed == [NoteChange("modified", "Books/neuromancer.md")]
    assert errors == [("Books/dune.md", "bad note")]
