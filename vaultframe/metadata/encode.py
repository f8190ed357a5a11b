"""Front matter encoding: merge a patch into a note's YAML block."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Mapping

import yaml

from ..models import ABSENT, Link
from .decode import DELIMITER, find_front_matter, parse_yaml

# Values containing these stay quoted: they read as mappings, lists or blocks.
AMBIGUOUS_PATTERN = re.compile(r"[:|\-]\s")
QUOTED_PROPERTY_PATTERN = re.compile(
    r"^(?P<indent>[ ]*)(?P<key>[^\s'\"#?\-][^\n]*?):[ ](?P<quoted>'.*'|\".*\")$",
    re.MULTILINE,
)


def merge_front_matter(existing: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow-merge a patch into front matter; ABSENT removes a key."""
    merged = dict(existing)
    for key, value in patch.items():
        if value is ABSENT:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


def encode_front_matter(
    data: str,
    frontmatter: Mapping[str, Any],
    *,
    null_str: str = "",
) -> str:
    """Update the front matter of a note.

    Args:
        data: Current content of the note, including front matter
        frontmatter: Keys to set (ABSENT removes a key)
        null_str: Token written for empty values

    Returns:
        The note text with updated front matter; text after the block is
        left untouched. A block that ends up empty is removed, including
        one that was already empty, so "---\n---\nbody" becomes "body".

    Raises:
        ParseError: If the existing front matter can't be parsed
    """
    match = find_front_matter(data)
    existing = parse_yaml(match.group("yaml")) if match else {}
    merged = merge_front_matter(existing, frontmatter)

    if merged:
        encoded = stringify_yaml(merged, null_str=null_str)
        if match:
            return data[: match.start("yaml")] + encoded + data[match.end("yaml"):]
        return f"{DELIMITER}\n{encoded}{DELIMITER}\n\n{data}"

    if match:
        return data[match.end():]
    return data


def stringify_yaml(value: Any, *, null_str: str = "") -> str:
    """Convert a value to YAML."""
    text = yaml.dump(
        value,
        Dumper=_dumper(null_str),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )
    return postprocess_yaml(text)


def postprocess_yaml(text: str) -> str:
    """Remove quotes from single-line string properties that don't need them."""
    return QUOTED_PROPERTY_PATTERN.sub(_unquote_property, text)


def _unquote_property(match: re.Match[str]) -> str:
    original = match.group(0)
    key = match.group("key")
    quoted = match.group("quoted")

    try:
        value = yaml.safe_load(quoted)
    except (yaml.YAMLError, ValueError):
        return original
    if not isinstance(value, str) or "\n" in value or AMBIGUOUS_PATTERN.search(value):
        return original

    # Only unquote when the plain scalar reads back as the same string.
    try:
        if yaml.safe_load(f"{key}: {value}") != yaml.safe_load(f"{key}: {quoted}"):
            return original
    except (yaml.YAMLError, ValueError):
        return original

    return f"{match.group('indent')}{key}: {value}"


@lru_cache(maxsize=None)
def _dumper(null_str: str) -> type[yaml.SafeDumper]:
    """Build a SafeDumper that writes empty values as `null_str`."""

    class FrontMatterDumper(yaml.SafeDumper):
        pass

    def represent_none(dumper: yaml.SafeDumper, _data: None) -> yaml.ScalarNode:
        return dumper.represent_scalar("tag:yaml.org,2002:null", null_str)

    def represent_link(dumper: yaml.SafeDumper, data: Link) -> yaml.ScalarNode:
        return dumper.represent_str(str(data))

    FrontMatterDumper.add_representer(type(None), represent_none)
    FrontMatterDumper.add_representer(Link, represent_link)
    FrontMatterDumper.add_representer(tuple, yaml.SafeDumper.represent_list)
    return FrontMatterDumper
