"""Structural signature analysis over the raw dictionary XML.

Each lemma is reduced to a fingerprint of its element nesting, e.g.
``Lemma(Lemma.LemmaSign, Sense(Definition(Definition.Definición)))``.
Grouping lemmas by fingerprint and listing the rarest shapes first is how
new malformed encodings are discovered. Purely diagnostic: nothing here
feeds the main parse.
"""

from __future__ import annotations

import logging

from lxml import etree

from lexicon_ingest import tags
from lexicon_ingest.extract import child_elements, text_of
from lexicon_ingest.models import StructureGroup
from lexicon_ingest.parser import Source, load_root

logger = logging.getLogger(__name__)

MAX_GROUP_EXAMPLES = 5


def node_signature(element: etree._Element) -> str:
    """Tag-nested-in-tag fingerprint. Text and attributes are ignored."""
    children = child_elements(element)
    if not children:
        return element.tag
    inner = ", ".join(node_signature(child) for child in children)
    return f"{element.tag}({inner})"


def analyze_structure(source: Source) -> list[StructureGroup]:
    """Group lemmas by signature, rarest first.

    Ties keep the order in which each signature was first seen.
    """
    root = load_root(source)
    counts: dict[str, int] = {}
    examples: dict[str, list[str]] = {}

    total = 0
    for lemma_el in root.iter(tags.LEMMA):
        total += 1
        headword = text_of(lemma_el, tags.LEMMA_SIGN) or tags.UNKNOWN_HEADWORD
        signature = node_signature(lemma_el)

        counts[signature] = counts.get(signature, 0) + 1
        sample = examples.setdefault(signature, [])
        if len(sample) < MAX_GROUP_EXAMPLES:
            sample.append(headword)

    groups = [
        StructureGroup(signature=sig, count=count, examples=tuple(examples[sig]))
        for sig, count in counts.items()
    ]
    groups.sort(key=lambda g: g.count)

    unique = sum(1 for g in groups if g.count == 1)
    logger.info(
        "Analyzed %d lemmas: %d distinct structures, %d seen only once",
        total, len(groups), unique,
    )
    return groups

