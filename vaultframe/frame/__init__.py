"""Frame value predicates, schema inference and updates."""

from .ops import remove_record, replace_record, with_error
from .schema import coerce_value, detect_field_type, merge_fields, parse_link, to_data_value
from .values import (
    has_value,
    is_boolean,
    is_date,
    is_link,
    is_list,
    is_number,
    is_optional,
    is_optional_boolean,
    is_optional_date,
    is_optional_link,
    is_optional_list,
    is_optional_number,
    is_optional_string,
    is_string,
    is_string_link,
)

__all__ = [
    "coerce_value",
    "detect_field_type",
    "has_value",
    "is_boolean",
    "is_date",
    "is_link",
    "is_list",
    "is_number",
    "is_optional",
    "is_optional_boolean",
    "is_optional_date",
    "is_optional_link",
    "is_optional_list",
    "is_optional_number",
    "is_optional_string",
    "is_string",
    "is_string_link",
    "merge_fields",
    "parse_link",
    "remove_record",
    "replace_record",
    "to_data_value",
    "with_error",
]
