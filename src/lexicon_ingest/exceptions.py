"""Custom exception hierarchy for lexicon-ingest."""

from __future__ import annotations


class LexiconIngestError(Exception):
    """Base exception for all lexicon-ingest errors."""


class DataImportError(LexiconIngestError):
    """Source document is not well-formed XML at the envelope level."""


class PatchTableError(LexiconIngestError):
    """Malformed patch table (bad YAML, unknown shape)."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)


class ReportError(LexiconIngestError):
    """A diagnostic report could not be written."""
