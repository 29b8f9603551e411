"""JSON report output for the diagnostic tools."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from lexicon_ingest.exceptions import ReportError
from lexicon_ingest.models import IntegrityIssue, StructureGroup


def report_json(items: Iterable[StructureGroup | IntegrityIssue]) -> str:
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2)


def write_report(
    items: Iterable[StructureGroup | IntegrityIssue],
    destination: str | Path,
) -> None:
    """Write a structure or integrity report as a JSON array."""
    try:
        Path(destination).write_text(report_json(items), encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Failed to write report: {e}") from e
