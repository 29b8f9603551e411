"""
Validation for patch tables.

Provides both schema validation (known operations, required parameters)
and cross-checking against integrity auditor findings, so the table and
the audit evidence it was written from cannot silently drift apart.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from ..models import IntegrityIssue, IssueType
from .schema import (
    CROSS_REFERENCE_MARKER,
    OPTIONAL_PARAMS,
    REQUIRED_PARAMS,
    PatchStep,
    PatchTable,
    RepairOperation,
    ValidationError,
    ValidationResult,
    ValidationWarning,
    normalize_headword,
)

logger = logging.getLogger(__name__)

# Operations not backed by an audit category
_EDITORIAL_ONLY = {RepairOperation.INJECT_USAGE_MARK}


def validate_patch_table(
    table: PatchTable,
    issues: Optional[Iterable[IntegrityIssue]] = None,
) -> ValidationResult:
    """Validate a patch table.

    Args:
        table: The table to validate
        issues: Auditor findings to cross-check the table against

    Returns:
        ValidationResult with errors and warnings
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []

    for headword, steps in table.rules.items():
        for step in steps:
            step_errors, step_warnings = _validate_step(headword, step)
            errors.extend(step_errors)
            warnings.extend(step_warnings)

    if issues is not None:
        warnings.extend(_cross_check(table, list(issues)))

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_step(
    headword: str,
    step: PatchStep,
) -> tuple[List[ValidationError], List[ValidationWarning]]:
    """Validate a single step of the table."""
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []

    valid_operations = {op.value for op in RepairOperation}
    if step.operation not in valid_operations:
        errors.append(
            ValidationError(
                headword=headword,
                operation=step.operation,
                field="operation",
                message=f"Unknown operation '{step.operation}'. Valid: {', '.join(sorted(valid_operations))}",
            )
        )
        return errors, warnings

    required = REQUIRED_PARAMS.get(step.operation, [])
    for name in required:
        value = step.params.get(name)
        if value is None or value == "" or value == []:
            errors.append(
                ValidationError(
                    headword=headword,
                    operation=step.operation,
                    field=name,
                    message=f"Missing required parameter '{name}'",
                )
            )

    subentry = step.params.get("subentry")
    if subentry is not None and not isinstance(subentry, (str, list)):
        errors.append(
            ValidationError(
                headword=headword,
                operation=step.operation,
                field="subentry",
                message="Parameter 'subentry' must be a string or a list of strings",
            )
        )

    known = set(required) | set(OPTIONAL_PARAMS.get(step.operation, []))
    for name in step.params:
        if name not in known:
            warnings.append(
                ValidationWarning(
                    headword=headword,
                    operation=step.operation,
                    message=f"Unknown parameter '{name}' will be ignored",
                )
            )

    return errors, warnings


def _cross_check(
    table: PatchTable,
    issues: List[IntegrityIssue],
) -> List[ValidationWarning]:
    """Compare the table with the headwords the auditor flagged."""
    warnings: List[ValidationWarning] = []
    audited: Set[str] = {normalize_headword(i.lemma) for i in issues}
    # Only findings the patch layer can repair call for a rule
    repairable: Set[str] = {
        normalize_headword(i.lemma) for i in issues
        if _suggested_operation(i) is not None
    }

    for headword, steps in table.rules.items():
        if headword in audited:
            continue
        audit_backed = [s for s in steps if s.repair not in _EDITORIAL_ONLY]
        if audit_backed:
            warnings.append(
                ValidationWarning(
                    headword=headword,
                    operation=audit_backed[0].operation,
                    message="No audit finding for this headword; the rule may be stale",
                )
            )

    for headword in sorted(repairable - set(table.rules)):
        warnings.append(
            ValidationWarning(
                headword=headword,
                operation="",
                message="Audit finding has no patch rule",
            )
        )

    logger.debug(f"Cross-checked {len(table)} rules against {len(audited)} audited headwords")
    return warnings


def _suggested_operation(issue: IntegrityIssue) -> Optional[RepairOperation]:
    """The repair that addresses a finding, if one applies at its level."""
    if issue.type is IssueType.EMPTY_EXAMPLE_WITH_CONTENT:
        return RepairOperation.DROP_EMPTY_EXAMPLES
    if issue.subentry is not None:
        return None
    if issue.type is IssueType.DEAD_NODE:
        return RepairOperation.DROP_DEAD_DEFINITIONS
    if issue.type in (IssueType.GHOST_DEFINITION, IssueType.EMPTY):
        return RepairOperation.INJECT_PLACEHOLDER_GLOSS
    if issue.type is IssueType.POINTER_ONLY:
        if CROSS_REFERENCE_MARKER in (issue.content_preview or ""):
            return None
        return RepairOperation.REPAIR_CROSS_REFERENCE
    return None


def suggest_patch_table(
    issues: Iterable[IntegrityIssue],
    description: Optional[str] = None,
) -> PatchTable:
    """Draft a patch table from auditor findings.

    Findings with no suitable repair are left out; the draft is meant to be
    reviewed before it replaces the shipped table.
    """
    rules: Dict[str, List[PatchStep]] = {}
    for issue in issues:
        operation = _suggested_operation(issue)
        if operation is None:
            logger.debug(f"No repair for {issue.type.value} in {issue.lemma!r}")
            continue
        steps = rules.setdefault(normalize_headword(issue.lemma), [])
        if all(s.operation != operation.value for s in steps):
            steps.append(PatchStep(operation=operation.value))

    return PatchTable(rules=rules, description=description)
