"""Tag normalization helpers."""

from __future__ import annotations

from typing import FrozenSet, Iterable


def normalize_tag(raw: str) -> str:
    """Return the canonical form of a tag.

    Lower-cases the value and strips at most one leading ``#``. Hierarchical
    tags are not split, so ``project/work`` and ``project`` stay distinct.

    Args:
        raw: Tag as written by the user or found in a note.

    Returns:
        str: Normalized tag, empty when the input is empty.
    """
    lowered = raw.lower()
    if lowered.startswith("#"):
        return lowered[1:]
    return lowered


def normalize_tags(values: Iterable[object]) -> FrozenSet[str]:
    """Normalize a collection of raw tags, dropping blanks."""
    normalized = (normalize_tag(str(value).strip()) for value in values if value is not None)
    return frozenset(tag for tag in normalized if tag)


def tags_equal(left: str, right: str) -> bool:
    """Return whether two tags are equal in normalized form."""
    return normalize_tag(left) == normalize_tag(right)


__all__ = ["normalize_tag", "normalize_tags", "tags_equal"]
