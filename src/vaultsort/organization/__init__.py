"""Rule matching and relocation engine."""

from .models import (
    MoveFailure,
    MoveOperation,
    OperationPlan,
    Rule,
    RunResult,
    RunSnapshot,
    SkipRecord,
    VaultFile,
)
from .conflicts import ConflictResolver
from .exclusions import is_excluded
from .matcher import RuleMatcher
from .rules import RuleSequence
from .tags import normalize_tag, normalize_tags
from .planner import OrganizerPlanner
from .executor import OperationExecutor

__all__ = [
    "ConflictResolver",
    "MoveFailure",
    "MoveOperation",
    "OperationExecutor",
    "OperationPlan",
    "OrganizerPlanner",
    "Rule",
    "RuleMatcher",
    "RuleSequence",
    "RunResult",
    "RunSnapshot",
    "SkipRecord",
    "VaultFile",
    "is_excluded",
    "normalize_tag",
    "normalize_tags",
]
