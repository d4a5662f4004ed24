"""Rule matching for individual vault files."""

from __future__ import annotations

from .models import Rule, VaultFile
from .tags import normalize_tag


class RuleMatcher:
    """Decide whether a single file satisfies a single rule.

    A tag match on a tag-bearing note satisfies the rule on its own, even
    when the rule's file type or filename pattern would reject the file.
    Without a tag match, the file type and filename pattern must both hold
    for whichever of them are set, and at least one of them must be set.
    """

    def matches(self, file: VaultFile, rule: Rule) -> bool:
        """Return whether ``file`` satisfies ``rule``.

        Args:
            file: File record with its normalized tags populated.
            rule: Rule whose criteria are evaluated.

        Returns:
            bool: True when the rule applies to the file.
        """
        if rule.tag and file.is_tag_bearing:
            if normalize_tag(rule.tag.strip()) in file.tags:
                return True

        if rule.file_type and file.extension.lower() != rule.file_type.lower():
            return False

        if rule.filename_pattern:
            if rule.filename_pattern.lower() not in file.base_name.lower():
                return False

        return bool(rule.file_type or rule.filename_pattern)


__all__ = ["RuleMatcher"]
