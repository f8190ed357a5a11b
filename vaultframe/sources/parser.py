"""Markdown parsing utilities for wiki-links, titles and tags."""

import re

# Match [[target]], [[target|display]], [[target#section]], [[target#section|display]]
WIKILINK_PATTERN = re.compile(r"\[\[([^\]|#]+)(?:#[^\]|]+)?(?:\|[^\]]+)?\]\]")

# Inline #tag, not part of a word or a heading marker
TAG_PATTERN = re.compile(r"(?<![\w#&/])#([A-Za-z_][\w/\-]*)")

WORD_PATTERN = re.compile(r"\S+")


def extract_links(content: str) -> list[str]:
    """Extract all wiki-link targets from content.

    Deduplicated case-insensitively; the first spelling wins.
    """
    seen = set()
    result = []
    for match in WIKILINK_PATTERN.findall(content):
        target = match.strip()
        if target.lower() not in seen:
            seen.add(target.lower())
            result.append(target)
    return result


def extract_title(content: str, default: str) -> str:
    """Title from the first H1 header, or the default."""
    for line in content.split("\n"):
        if line.startswith("# "):
            return line[2:].strip()
    return default


def extract_tags(content: str, frontmatter: dict) -> list[str]:
    """Tags from the `tags` front matter key and inline #tags."""
    raw = frontmatter.get("tags") or []
    if isinstance(raw, str):
        raw = [t for t in re.split(r"[,\s]+", raw) if t]
    elif not isinstance(raw, list):
        raw = [raw]

    tags = []
    for tag in [str(t).lstrip("#") for t in raw] + TAG_PATTERN.findall(content):
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def count_words(content: str) -> int:
    return len(WORD_PATTERN.findall(content))
