"""Data models for project frames, views and projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union


class _Absent:
    """Sentinel for a removed key (as opposed to an empty value)."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


# Only used in write patches; records express absence by omitting the key.
ABSENT = _Absent()


class DataFieldType(str, Enum):
    """Data type of a field."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    LINK = "link"
    LIST = "list"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Link:
    """A reference to another note, e.g. from a [[wiki-link]]."""

    link_text: str
    source_path: str
    display_name: str | None = None
    full_path: str | None = None

    def __str__(self) -> str:
        if self.display_name:
            return f"[[{self.link_text}|{self.display_name}]]"
        return f"[[{self.link_text}]]"


DataValue = Union[str, int, float, bool, date, datetime, Link, list]
OptionalDataValue = Union[DataValue, None]


@dataclass(frozen=True)
class DataField:
    """Schema entry for one column of a DataFrame.

    Derived fields are computed from other fields and can't be modified.
    """

    name: str
    type: DataFieldType = DataFieldType.STRING
    identifier: bool = False
    derived: bool = False


@dataclass(frozen=True)
class DataRecord:
    """One row: the values read from a single note."""

    id: str  # vault-relative note path
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))


@dataclass(frozen=True)
class RecordError:
    """Marks a note that could not be read into a record."""

    path: str
    message: str


@dataclass(frozen=True)
class DataFrame:
    """Immutable snapshot of a project's schema (fields) and rows (records)."""

    fields: tuple[DataField, ...] = ()
    records: tuple[DataRecord, ...] = ()
    errors: tuple[RecordError, ...] = ()

    def field(self, name: str) -> DataField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def record(self, record_id: str) -> DataRecord | None:
        for r in self.records:
            if r.id == record_id:
                return r
        return None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def conforms(self) -> bool:
        """Check that field names are unique and every value key is declared."""
        names = self.field_names
        if len(set(names)) != len(names):
            return False
        declared = set(names)
        return all(set(r.values) <= declared for r in self.records)


EMPTY_FRAME = DataFrame()


@dataclass(frozen=True)
class DataQueryResult:
    """What a view receives on every data delivery."""

    data: DataFrame = EMPTY_FRAME


@dataclass(frozen=True)
class DataSourceDefinition:
    """Tagged data source config: kind selects the implementation."""

    kind: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ViewDefinition:
    """A configured view of a project."""

    id: str
    name: str
    type: str
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectDefinition:
    """A configured collection of notes and its views."""

    id: str
    name: str
    data_source: DataSourceDefinition
    views: tuple[ViewDefinition, ...] = ()
    default_name: str = ""

    def get_view(self, view_id: str) -> ViewDefinition | None:
        for view in self.views:
            if view.id == view_id:
                return view
        return None
