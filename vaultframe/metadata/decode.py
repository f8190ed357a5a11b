"""Front matter detection and parsing."""

from __future__ import annotations

import re
from typing import Any

import yaml

DELIMITER = "---"

# Opening "---" line at the very start, YAML body, closing "---" line.
FRONT_MATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)(?<=\n)---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)


class ParseError(ValueError):
    """Raised when a front matter block is not a valid YAML mapping."""


def find_front_matter(text: str) -> re.Match[str] | None:
    """Locate the front matter block; the match end is where the body starts."""
    return FRONT_MATTER_PATTERN.match(text)


def parse_yaml(source: str) -> dict[str, Any]:
    """Parse the YAML body of a front matter block into a mapping.

    Raises:
        ParseError: If the YAML is malformed or not a mapping
    """
    try:
        data = yaml.safe_load(source)
    except (yaml.YAMLError, ValueError) as e:
        # invalid timestamps such as 2023-02-30 raise ValueError
        raise ParseError(f"Malformed front matter: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(f"Front matter must be a mapping, got {type(data).__name__}")
    return data


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split note text into (front matter YAML source or None, body)."""
    match = find_front_matter(text)
    if match is None:
        return None, text
    return match.group("yaml"), text[match.end():]


def decode_front_matter(text: str) -> dict[str, Any] | None:
    """Parse the front matter of a note, or None when it has none."""
    source, _ = split_front_matter(text)
    if source is None:
        return None
    return parse_yaml(source)
