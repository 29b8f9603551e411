"""
Data classes and constants for the data patch layer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


# =============================================================================
# Repair Operations
# =============================================================================

class RepairOperation(str, Enum):
    """Supported repair operations, in the order they are applied."""
    INJECT_USAGE_MARK = "inject_usage_mark"
    DROP_DEAD_DEFINITIONS = "drop_dead_definitions"
    INJECT_PLACEHOLDER_GLOSS = "inject_placeholder_gloss"
    REPAIR_CROSS_REFERENCE = "repair_cross_reference"
    RELOCATE_MISPLACED_EXAMPLE = "relocate_misplaced_example"
    DROP_EMPTY_EXAMPLES = "drop_empty_examples"


APPLICATION_ORDER: List[RepairOperation] = list(RepairOperation)


# =============================================================================
# Editorial Constants
# =============================================================================

PLACEHOLDER_GLOSS = "[Definición en proceso de revisión editorial]"

CROSS_REFERENCE_MARKER = "+"

# Glosses at or above this length are real definitions, not bare pointers
CROSS_REFERENCE_MAX_LENGTH = 50

DEFAULT_AD_HOC_LABEL = "Ad hoc"


# =============================================================================
# Parameter Requirements
# =============================================================================

REQUIRED_PARAMS: Dict[str, List[str]] = {
    RepairOperation.INJECT_USAGE_MARK.value: ["trigger", "mark"],
    RepairOperation.DROP_DEAD_DEFINITIONS.value: [],
    RepairOperation.INJECT_PLACEHOLDER_GLOSS.value: [],
    RepairOperation.REPAIR_CROSS_REFERENCE.value: [],
    RepairOperation.RELOCATE_MISPLACED_EXAMPLE.value: ["subentry", "prefix"],
    RepairOperation.DROP_EMPTY_EXAMPLES.value: [],
}

OPTIONAL_PARAMS: Dict[str, List[str]] = {
    RepairOperation.INJECT_USAGE_MARK.value: [],
    RepairOperation.DROP_DEAD_DEFINITIONS.value: [],
    RepairOperation.INJECT_PLACEHOLDER_GLOSS.value: [],
    RepairOperation.REPAIR_CROSS_REFERENCE.value: [],
    RepairOperation.RELOCATE_MISPLACED_EXAMPLE.value: ["label"],
    RepairOperation.DROP_EMPTY_EXAMPLES.value: [],
}


def normalize_headword(headword: str) -> str:
    """Key used to match lemmas against the table."""
    return headword.strip().lower()


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class PatchStep:
    """One repair operation scheduled for a headword."""
    operation: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def repair(self) -> Optional[RepairOperation]:
        """The operation as an enum member, or None if unknown."""
        try:
            return RepairOperation(self.operation)
        except ValueError:
            return None


@dataclass
class PatchTable:
    """Headword-keyed table of repair steps."""
    rules: Dict[str, List[PatchStep]] = field(default_factory=dict)
    description: Optional[str] = None
    source_file: Optional[Path] = None

    def __len__(self) -> int:
        return len(self.rules)

    def __contains__(self, headword: object) -> bool:
        return isinstance(headword, str) and normalize_headword(headword) in self.rules

    def steps_for(self, headword: str) -> List[PatchStep]:
        """Steps for a headword in application order (empty if none)."""
        steps = self.rules.get(normalize_headword(headword), [])
        rank = {op.value: i for i, op in enumerate(APPLICATION_ORDER)}
        return sorted(steps, key=lambda s: rank.get(s.operation, len(rank)))


@dataclass
class ValidationError:
    """Validation error for a step of the table."""
    headword: str
    operation: str
    field: str
    message: str


@dataclass
class ValidationWarning:
    """Validation warning for a headword or step of the table."""
    headword: str
    operation: str
    message: str


@dataclass
class ValidationResult:
    """Result of validating a patch table."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class PatchResult:
    """Outcome of applying one step to one lemma."""
    headword: str
    operation: str
    changed: bool
    message: str


@dataclass
class PatchReport:
    """Outcome of running the patch layer over a parsed document."""
    lemma_count: int
    results: List[PatchResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def applied_count(self) -> int:
        return len(self.results)

    @property
    def changed_count(self) -> int:
        return sum(1 for r in self.results if r.changed)
