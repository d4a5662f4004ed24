"""Tag extraction from Markdown notes.

Notes carry tags in two places: the ``tags`` (or ``tag``) field of the YAML
frontmatter block at the top of the file, and inline ``#tag`` tokens in the
body. Both sources are returned raw; callers normalize them.
"""

from __future__ import annotations

import re
from typing import Any, List, Tuple

import yaml

from .errors import TagReadError

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)\r?\n(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.DOTALL
)
_FENCE_RE = re.compile(r"^[ \t]*(```|~~~)")
_HEADING_RE = re.compile(r"^[ \t]{0,3}#{1,6}(?:[ \t]|$)")
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_INLINE_TAG_RE = re.compile(r"(?:^|(?<=[\s(\[,;]))#([\w/-]*[^\W\d][\w/-]*)", re.UNICODE)


def split_frontmatter(text: str) -> Tuple[str | None, str]:
    """Split a note into its raw frontmatter block and body.

    Args:
        text: Full note contents.

    Returns:
        Tuple[str | None, str]: Frontmatter text (or None) and the remaining body.
    """
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return None, text
    return match.group(1), text[match.end() :]


def frontmatter_tags(block: str | None) -> List[str]:
    """Return the tags declared in a frontmatter block.

    Raises:
        TagReadError: If the block is not valid YAML.
    """
    if not block:
        return []
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise TagReadError(f"Invalid frontmatter: {exc}") from exc
    if not isinstance(data, dict):
        return []

    tags: List[str] = []
    for key in ("tags", "tag"):
        tags.extend(_coerce_tag_values(data.get(key)))
    return tags


def inline_tags(body: str) -> List[str]:
    """Return inline ``#tag`` tokens found in a note body.

    Fenced code blocks, inline code spans and heading markers are ignored.
    """
    tags: List[str] = []
    in_fence = False
    for line in body.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        if _HEADING_RE.match(line):
            line = line.lstrip(" \t").lstrip("#")
        line = _INLINE_CODE_RE.sub(" ", line)
        tags.extend(match.group(1) for match in _INLINE_TAG_RE.finditer(line))
    return tags


def extract_tags(text: str) -> List[str]:
    """Return frontmatter and inline tags for a note, frontmatter first."""
    block, body = split_frontmatter(text)
    return frontmatter_tags(block) + inline_tags(body)


def _coerce_tag_values(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part for part in re.split(r"[,\s]+", value) if part]
    if isinstance(value, (list, tuple, set)):
        values: List[str] = []
        for item in value:
            values.extend(_coerce_tag_values(item))
        return values
    return [str(value)]


__all__ = ["split_frontmatter", "frontmatter_tags", "inline_tags", "extract_tags"]
