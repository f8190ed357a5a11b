"""Field type detection, schema merging and value coercion."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Iterable

import yaml

from ..models import DataField, DataFieldType, Link
from .values import (
    STRING_LINK_PATTERN,
    is_boolean,
    is_date,
    is_link,
    is_list,
    is_number,
    is_optional,
    is_string,
    is_string_link,
)

# link_text, source_path -> resolved vault path
LinkResolver = Callable[[str, str], "str | None"]


def parse_link(text: str, source_path: str, resolve: LinkResolver | None = None) -> Link:
    """Parse a "[[target|display]]" string into a Link."""
    match = STRING_LINK_PATTERN.fullmatch(text.strip())
    inner = match.group(1) if match else text
    link_text, _, display = inner.partition("|")
    link_text = link_text.strip()
    full_path = resolve(link_text, source_path) if resolve else None
    return Link(
        link_text=link_text,
        source_path=source_path,
        display_name=display.strip() or None,
        full_path=full_path,
    )


def to_data_value(
    raw: Any,
    source_path: str,
    resolve: LinkResolver | None = None,
) -> Any:
    """Convert a parsed front matter value into a data value."""
    if raw is None:
        return None
    if is_boolean(raw) or is_number(raw) or is_date(raw):
        return raw
    if is_string(raw):
        if is_string_link(raw):
            return parse_link(raw, source_path, resolve)
        return raw
    if isinstance(raw, (list, tuple)):
        return [_list_item(item) for item in raw if item is not None]
    if isinstance(raw, dict):
        return yaml.safe_dump(raw, default_flow_style=True, width=float("inf")).strip()
    return str(raw)


def _list_item(item: Any) -> str:
    if isinstance(item, (dict, list)):
        return yaml.safe_dump(item, default_flow_style=True, width=float("inf")).strip()
    if is_boolean(item):
        return "true" if item else "false"
    if is_date(item):
        return item.isoformat()
    return str(item)


def detect_field_type(value: Any) -> DataFieldType | None:
    """Detect the field type of a data value, or None for empty values."""
    if is_optional(value):
        return None
    if is_boolean(value):
        return DataFieldType.BOOLEAN
    if is_number(value):
        return DataFieldType.NUMBER
    if is_date(value):
        return DataFieldType.DATE
    if is_link(value):
        return DataFieldType.LINK
    if is_list(value):
        return DataFieldType.LIST
    if is_string(value):
        return DataFieldType.STRING
    return DataFieldType.UNKNOWN


def merge_fields(
    existing: Iterable[DataField],
    detected: Iterable[tuple[str, DataFieldType | None]],
) -> list[DataField]:
    """Union a schema with per-value type observations.

    Fields keep first-seen order. A column whose values disagree on type
    becomes UNKNOWN; a column with only empty values is a STRING.
    """
    fields: dict[str, DataField] = {f.name: f for f in existing}
    observed: dict[str, set[DataFieldType]] = {}
    order: list[str] = list(fields)

    for name, field_type in detected:
        if name not in fields and name not in observed:
            order.append(name)
        types = observed.setdefault(name, set())
        if field_type is not None:
            types.add(field_type)

    result = []
    for name in order:
        if name in fields:
            result.append(fields[name])
            continue
        types = observed[name]
        if not types:
            field_type = DataFieldType.STRING
        elif len(types) == 1:
            field_type = next(iter(types))
        else:
            field_type = DataFieldType.UNKNOWN
        result.append(DataField(name=name, type=field_type))
    return result


def coerce_value(
    value: Any,
    field_type: DataFieldType,
    source_path: str = "",
    resolve: LinkResolver | None = None,
) -> Any:
    """Convert a value into the given field type where possible.

    Values that can't be converted are returned unchanged.
    """
    if is_optional(value) or field_type == DataFieldType.UNKNOWN:
        return value

    if field_type == DataFieldType.STRING:
        if is_string(value):
            return value
        if is_link(value):
            return str(value)
        if is_date(value):
            return value.isoformat()
        if is_boolean(value):
            return "true" if value else "false"
        if is_number(value):
            return str(value)
        return value

    if field_type == DataFieldType.NUMBER:
        if is_string(value):
            try:
                number = float(value.strip())
            except ValueError:
                return value
            return int(number) if number.is_integer() and "." not in value else number
        return value

    if field_type == DataFieldType.BOOLEAN:
        if is_string(value) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        return value

    if field_type == DataFieldType.DATE:
        if is_string(value):
            text = value.strip()
            try:
                return datetime.fromisoformat(text) if "T" in text else date.fromisoformat(text)
            except ValueError:
                return value
        return value

    if field_type == DataFieldType.LINK:
        if is_string(value) and value.strip():
            return parse_link(value, source_path, resolve)
        return value

    if field_type == DataFieldType.LIST:
        if is_list(value):
            return value
        if is_link(value):
            return [str(value)]
        if is_string(value) or is_number(value) or is_boolean(value):
            return [_list_item(value)]
        return value

    return value
