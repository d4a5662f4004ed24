"""Organization errors."""


class OrganizationError(Exception):
    """Base exception for organization engine failures."""


class RuleSequenceError(OrganizationError, IndexError):
    """Raised when a rule sequence mutation references an invalid position."""
