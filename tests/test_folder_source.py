"""Tests for the front-matter backed folder data source."""

import asyncio
from datetime import date
from pathlib import Path

import pytest

from conftest import MemoryStore, make_project, write_note
from vaultframe.models import DataField, DataFieldType, Link
from vaultframe.sources import (
    FileSystemStore,
    FolderDataSource,
    LinkIndex,
    NoteFile,
    NoteStore,
    StoreUnavailableError,
    create_data_source,
    list_data_sources,
)


def test_registered_kinds(store):
    assert {"folder", "derived"} <= set(list_data_sources())
    assert isinstance(create_data_source(make_project(path="Books"), store), FolderDataSource)


def test_unknown_kind(store):
    with pytest.raises(ValueError, match="Unknown data source kind"):
        create_data_source(make_project(kind="dataview"), store)


def test_includes_is_pure_path_logic(store):
    source = FolderDataSource(make_project(path="Books"), store)
    assert source.includes("Books/x.md")
    assert not source.includes("Books/Archive/x.md")
    assert not source.includes("Books/x.txt")
    assert not source.includes("Booksx/y.md")
    assert not source.includes("Books/.hidden/x.md")
    assert not source.includes("x.md")

    recursive = FolderDataSource(make_project(path="/Books/", recursive=True), store)
    assert recursive.includes("Books/Archive/x.md")

    root = FolderDataSource(make_project(path=""), store)
    assert root.includes("x.md")
    assert not root.includes("Books/x.md")


def test_query_all_builds_schema(store):
    source = FolderDataSource(make_project(path="Books"), store)
    frame = asyncio.run(source.query_all())

    assert [r.id for r in frame.records] == ["Books/dune.md", "Books/neuromancer.md"]
    assert frame.field_names == ["path", "name", "author", "year", "read", "started", "series", "tags", "rating"]
    types = {f.name: f.type for f in frame.fields}
    assert types["year"] == DataFieldType.NUMBER
    assert types["read"] == DataFieldType.BOOLEAN
    assert types["started"] == DataFieldType.DATE
    assert types["series"] == DataFieldType.LINK
    assert types["tags"] == DataFieldType.LIST
    assert types["rating"] == DataFieldType.STRING
    assert frame.field("path").identifier
    assert frame.field("path").derived
    assert frame.conforms()


def test_query_all_values(store):
    source = FolderDataSource(make_project(path="Books"), store)
    frame = asyncio.run(source.query_all())

    dune = frame.record("Books/dune.md").values
    assert dune["name"] == "dune"
    assert dune["year"] == 1965
    assert dune["started"] == date(2024, 1, 2)
    assert dune["tags"] == ["scifi", "classic"]
    assert dune["series"] == Link(
        link_text="Dune Saga",
        source_path="Books/dune.md",
        full_path="Dune Saga.md",
    )

    neuromancer = frame.record("Books/neuromancer.md").values
    # empty values are kept, absent ones are omitted
    assert neuromancer["rating"] is None
    assert "series" not in neuromancer


def test_recursive_query(store):
    source = FolderDataSource(make_project(path="Books", recursive=True), store)
    frame = asyncio.run(source.query_all())
    assert "Books/Archive/old.md" in [r.id for r in frame.records]


def test_broken_note_becomes_error(vault, store):
    write_note(vault, "Books/broken.md", ["---", "author: [unclosed", "---", ""])
    source = FolderDataSource(make_project(path="Books"), store)

    frame = asyncio.run(source.query_all())

    assert len(frame.records) == 2
    assert [e.path for e in frame.errors] == ["Books/broken.md"]
    assert frame.errors[0].message


def test_builtin_names_are_not_shadowed(vault, store):
    write_note(vault, "Books/odd.md", ["---", "name: Custom", "path: elsewhere", "pages: 10", "---"])
    source = FolderDataSource(make_project(path="Books"), store)

    frame = asyncio.run(source.query_all())
    odd = frame.record("Books/odd.md")
    assert odd.values["name"] == "odd"
    assert odd.values["path"] == "Books/odd.md"
    assert frame.field_names.count("name") == 1


def test_mixed_types_become_unknown(vault, store):
    write_note(vault, "Books/odd.md", ["---", "year: unknown", "---"])
    source = FolderDataSource(make_project(path="Books"), store)

    frame = asyncio.run(source.query_all())
    assert frame.field("year").type == DataFieldType.UNKNOWN


def test_query_one_uses_known_schema(vault, store):
    source = FolderDataSource(make_project(path="Books"), store)
    write_note(vault, "Books/quoted.md", ["---", 'year: "1999"', "---"])
    file = store.get_file("Books/quoted.md")

    plain = asyncio.run(source.query_one(file, []))
    assert plain.record("Books/quoted.md").values["year"] == "1999"
    assert plain.field("year").type == DataFieldType.STRING

    hinted = asyncio.run(source.query_one(file, [DataField(name="year", type=DataFieldType.NUMBER)]))
    assert hinted.record("Books/quoted.md").values["year"] == 1999
    assert hinted.field("year").type == DataFieldType.NUMBER
    assert hinted.conforms()


def test_query_one_outside_project(store):
    source = FolderDataSource(make_project(path="Books"), store)
    frame = asyncio.run(source.query_one(store.get_file("Dune Saga.md"), []))
    assert frame.records == ()
    assert frame.fields == ()


def test_repeated_queries_keep_record_ids(store):
    source = FolderDataSource(make_project(path="Books"), store)
    first = asyncio.run(source.query_all())
    second = asyncio.run(source.query_all())
    assert [r.id for r in first.records] == [r.id for r in second.records]
    assert first.fields == second.fields


def test_missing_vault_is_fatal(tmp_path: Path):
    source = FolderDataSource(make_project(path=""), FileSystemStore(tmp_path / "nope"))
    with pytest.raises(StoreUnavailableError):
        asyncio.run(source.query_all())


def test_store_resolves_links(store):
    assert store.resolve_link("Dune Saga", "Books/dune.md") == "Dune Saga.md"
    assert store.resolve_link("dune", "x.md") == "Books/dune.md"
    assert store.resolve_link("Books/dune", "x.md") == "Books/dune.md"
    assert store.resolve_link("Nowhere", "x.md") is None


def test_store_rejects_paths_outside_vault(store):
    with pytest.raises(ValueError):
        store.read("../outside.md")


def test_memory_store_satisfies_protocol():
    assert isinstance(MemoryStore({}), NoteStore)


def test_unreadable_note_becomes_error():
    store = MemoryStore(
        {
            "a.md": "---\nstatus: done\n---\n",
            "b.md": "---\nstatus: open\nowner: \"[[c]]\"\n---\n",
            "c.md": "no front matter",
            "d.md": "---\nstatus: todo\n---\n",
        },
        unreadable=("d.md",),
    )
    source = FolderDataSource(make_project(path=""), store)

    frame = asyncio.run(source.query_all())

    assert [r.id for r in frame.records] == ["a.md", "b.md", "c.md"]
    assert [e.path for e in frame.errors] == ["d.md"]
    assert "Permission denied" in frame.errors[0].message
    assert frame.record("c.md").values == {"path": "c.md", "name": "c"}
    assert frame.record("b.md").values["owner"].full_path == "c.md"
    assert frame.field_names == ["path", "name", "status", "owner"]


def test_invalid_date_becomes_error():
    store = MemoryStore({"good.md": "---\na: 1\n---\n", "bad.md": "---\ndue: 2023-02-30\n---\n"})
    source = FolderDataSource(make_project(path=""), store)

    frame = asyncio.run(source.query_all())

    assert [r.id for r in frame.records] == ["good.md"]
    assert [e.path for e in frame.errors] == ["bad.md"]


def test_links_resolve_from_one_listing(vault):
    class CountingStore(FileSystemStore):
        listings = 0

        def files(self):
            self.listings += 1
            return super().files()

    for i in range(40):
        write_note(vault, f"Links/n{i}.md", ["---", f'next: "[[n{(i + 1) % 40}]]"', "---"])
    store = CountingStore(vault)
    source = FolderDataSource(make_project(path="Links"), store)

    frame = asyncio.run(source.query_all())

    assert store.listings == 1
    assert frame.record("Links/n0.md").values["next"].full_path == "Links/n1.md"
    assert frame.record("Links/n39.md").values["next"].full_path == "Links/n0.md"


def test_link_index_prefers_source_folder():
    index = LinkIndex([NoteFile.from_path("A/note.md"), NoteFile.from_path("B/note.md")])
    assert index.resolve("note", "B/x.md") == "B/note.md"
    assert index.resolve("Note", "C/x.md") == "A/note.md"
    assert index.resolve("B/note", "x.md") == "B/note.md"
    assert index.resolve("C/note", "x.md") is None
    assert index.resolve("note#Heading", "A/x.md") == "A/note.md"
    assert index.resolve("", "x.md") is None
