"""Type predicates for optional data values.

Predicates are total: any input, including foreign types, yields a bool.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from ..models import ABSENT, Link

STRING_LINK_PATTERN = re.compile(r"\[\[(.*)\]\]")


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    # bool is an int subclass, but never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_date(value: Any) -> bool:
    """True for dates and datetimes."""
    return isinstance(value, date)


def is_link(value: Any) -> bool:
    return isinstance(value, Link)


def is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_optional(value: Any) -> bool:
    """True for an empty (None) or absent value."""
    return value is None or value is ABSENT


def has_value(value: Any) -> bool:
    """True when the value is present and not empty."""
    return not is_optional(value)


def is_optional_string(value: Any) -> bool:
    return is_string(value) or is_optional(value)


def is_optional_number(value: Any) -> bool:
    return is_number(value) or is_optional(value)


def is_optional_boolean(value: Any) -> bool:
    return is_boolean(value) or is_optional(value)


def is_optional_date(value: Any) -> bool:
    return is_date(value) or is_optional(value)


def is_optional_link(value: Any) -> bool:
    return is_link(value) or is_optional(value)


def is_optional_list(value: Any) -> bool:
    return is_list(value) or is_optional(value)


def is_string_link(value: Any) -> bool:
    """Check whether a plain string is really a [[wiki-link]]."""
    if is_string(value):
        return STRING_LINK_PATTERN.fullmatch(value) is not None
    return False
