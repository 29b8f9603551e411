"""Domain model dataclasses and enums for lexicon-ingest."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lexicon_ingest.markup import strip_tags

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class IssueType(str, Enum):
    """Defect categories reported by the integrity auditor."""

    DEAD_NODE = "dead-node"
    GHOST_DEFINITION = "ghost-definition"
    EMPTY_EXAMPLE_WITH_CONTENT = "empty-example-with-content"
    EMPTY = "EMPTY"
    POINTER_ONLY = "POINTER_ONLY"


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is ``None``."""
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Lexical model
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Example:
    """An illustrative citation attached to a definition."""

    text: str
    source: str | None = None
    is_ad_hoc: bool = False
    ad_hoc_label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "text": self.text,
            "source": self.source,
            "isAdHoc": self.is_ad_hoc,
            "adHocLabel": self.ad_hoc_label,
        })


@dataclass(slots=True)
class Definition:
    """One acceptation: a gloss with its labels and examples.

    ``plain_text`` is derived from ``text`` on every access, so the two can
    never drift apart when a patch rewrites the gloss.
    """

    text: str
    acepcion: str | None = None
    contorno: str | None = None
    usage_label: str | None = None
    geographic_label: str | None = None
    utc: str | None = None
    examples: list[Example] = field(default_factory=list)

    @property
    def plain_text(self) -> str:
        return strip_tags(self.text)

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "acepcion": self.acepcion,
            "contorno": self.contorno,
            "text": self.text,
            "plainText": self.plain_text,
            "usageLabel": self.usage_label,
            "geographicLabel": self.geographic_label,
            "utc": self.utc,
            "examples": [ex.to_dict() for ex in self.examples],
        })


@dataclass(slots=True)
class Sense:
    """A meaning grouping one or more definitions, in document order."""

    definitions: list[Definition] = field(default_factory=list)
    sense_number: str | None = None
    etymology: str | None = None
    scientific_name: str | None = None
    pos: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "senseNumber": self.sense_number,
            "etymology": self.etymology,
            "scientificName": self.scientific_name,
            "pos": self.pos,
            "definitions": [d.to_dict() for d in self.definitions],
        })


@dataclass(slots=True)
class Subentry:
    """A phrase built on the headword, with its own senses."""

    sign: str
    senses: list[Sense] = field(default_factory=list)

    @property
    def plain_sign(self) -> str:
        return strip_tags(self.sign).strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "sign": self.sign,
            "senses": [s.to_dict() for s in self.senses],
        }


@dataclass(slots=True)
class Lemma:
    """A dictionary entry: headword plus everything defined under it."""

    lemma_sign: str
    senses: list[Sense] = field(default_factory=list)
    subentries: list[Subentry] = field(default_factory=list)
    etymology: str | None = None
    observations: str | None = None
    variants: list[str] | None = None

    def iter_senses(self) -> Iterator[Sense]:
        """Senses of the lemma followed by those of each subentry."""
        yield from self.senses
        for sub in self.subentries:
            yield from sub.senses

    def iter_definitions(self) -> Iterator[Definition]:
        for sense in self.iter_senses():
            yield from sense.definitions

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "lemmaSign": self.lemma_sign,
            "etymology": self.etymology,
            "observations": self.observations,
            "variants": list(self.variants) if self.variants is not None else None,
            "senses": [s.to_dict() for s in self.senses],
            "subentries": [s.to_dict() for s in self.subentries],
        })


def lemmas_to_json(lemmas: list[Lemma], *, indent: int | None = None) -> str:
    """Serialise parsed lemmas to the JSON contract consumed downstream."""
    return json.dumps(
        [lemma.to_dict() for lemma in lemmas],
        ensure_ascii=False,
        indent=indent,
    )


# ---------------------------------------------------------------------------
# Diagnostic reports
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StructureGroup:
    """Lemmas sharing one structural signature."""

    signature: str
    count: int
    examples: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "count": self.count,
            "examples": list(self.examples),
        }


@dataclass(frozen=True, slots=True)
class IntegrityIssue:
    """A single integrity finding for one definition."""

    lemma: str
    type: IssueType
    details: str
    has_subentries: bool
    subentry: str | None = None
    content_preview: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "lemma": self.lemma,
            "subentry": self.subentry,
            "type": self.type.value,
            "details": self.details,
            "hasSubentries": self.has_subentries,
            "contentPreview": self.content_preview,
        })
