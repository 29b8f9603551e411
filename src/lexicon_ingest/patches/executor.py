"""
Executor for the data patch layer.

Runs the headword-keyed repair steps over a parsed document, after the
parse and before the lemmas reach consumers.
"""
from __future__ import annotations

import logging
import time
from typing import List, Optional, Tuple

from ..exceptions import PatchTableError
from ..models import Lemma
from .loader import default_patch_table
from .operations import OPERATIONS
from .schema import PatchReport, PatchResult, PatchStep, PatchTable
from .validator import validate_patch_table

logger = logging.getLogger(__name__)


def apply_patches(
    lemmas: List[Lemma],
    table: Optional[PatchTable] = None,
) -> List[Lemma]:
    """Apply the patch table to parsed lemmas.

    Args:
        lemmas: Lemmas as produced by the parser
        table: Patch table to apply; the packaged table when omitted

    Returns:
        New list of lemmas. Patched lemmas are copies; the rest are the
        input objects.
    """
    patched, _ = apply_patches_with_report(lemmas, table)
    return patched


def apply_patches_with_report(
    lemmas: List[Lemma],
    table: Optional[PatchTable] = None,
) -> Tuple[List[Lemma], PatchReport]:
    """Apply the patch table and report what each step did.

    Raises:
        PatchTableError: If the table fails validation
    """
    start_time = time.time()
    if table is None:
        table = default_patch_table()

    validation = validate_patch_table(table)
    if not validation.is_valid:
        details = "; ".join(
            f"{e.headword} ({e.operation}): {e.message}" for e in validation.errors
        )
        raise PatchTableError(f"Invalid patch table: {details}")

    logger.info(f"Applying data patches ({len(table)} headwords in table)")

    results: List[PatchResult] = []
    patched_lemmas: List[Lemma] = []
    for lemma in lemmas:
        for step in table.steps_for(lemma.lemma_sign):
            lemma, result = _apply_step(lemma, step)
            results.append(result)
        patched_lemmas.append(lemma)

    report = PatchReport(
        lemma_count=len(lemmas),
        results=results,
        duration_seconds=time.time() - start_time,
    )
    logger.info(
        f"Applied {report.applied_count} patch steps, {report.changed_count} changed data"
    )
    return patched_lemmas, report


def _apply_step(lemma: Lemma, step: PatchStep) -> Tuple[Lemma, PatchResult]:
    """Apply a single step to a single lemma."""
    operation = OPERATIONS[step.repair]
    patched = operation(lemma, step)
    changed = patched != lemma

    if changed:
        logger.debug(f"{step.operation} patched {lemma.lemma_sign!r}")

    return patched, PatchResult(
        headword=lemma.lemma_sign,
        operation=step.operation,
        changed=changed,
        message=f"{'Patched' if changed else 'Already clean'}: {step.operation}",
    )
