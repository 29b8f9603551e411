"""Definition integrity auditor.

Classifies every definition reachable from a lemma by which of its fields
carry content. The findings are the evidence behind the patch table; the
auditor itself never repairs anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from lxml import etree

from lexicon_ingest import tags
from lexicon_ingest.extract import (
    child_elements,
    element_text,
    first_child_by_tag,
    inner_markup,
    raw_inner_markup,
    text_of,
)
from lexicon_ingest.markup import collapse_whitespace, is_placeholder_text, strip_tags
from lexicon_ingest.models import IntegrityIssue, IssueType
from lexicon_ingest.parser import Source, load_root

logger = logging.getLogger(__name__)

CROSS_REFERENCE_MARKER = "+"
PREVIEW_LENGTH = 80


def _preview(text: str) -> str:
    text = collapse_whitespace(text)
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH - 3] + "..."


def _reachable_definitions(container: etree._Element) -> Iterator[etree._Element]:
    """Definitions the sense parser would see under a lemma or subentry."""
    for node in child_elements(container):
        if node.tag == tags.SENSE:
            for child in child_elements(node):
                if child.tag == tags.DEFINITION:
                    yield child
        elif node.tag == tags.DEFINITION:
            yield node


def _subentry_sign(subentry_el: etree._Element) -> str:
    sign_el = first_child_by_tag(subentry_el, tags.SUBENTRY_SIGN, direct=True)
    return collapse_whitespace(strip_tags(inner_markup(sign_el)) or element_text(sign_el))


def _walk_definitions(
    root: etree._Element,
) -> Iterator[tuple[str, str | None, bool, etree._Element]]:
    """Yield ``(headword, subentry sign, lemma has subentries, definition)``."""
    for lemma_el in root.iter(tags.LEMMA):
        headword = (
            text_of(lemma_el, tags.LEMMA_SIGN, direct=True) or tags.UNKNOWN_HEADWORD
        )
        subentries = [
            node for node in child_elements(lemma_el) if node.tag == tags.SUBENTRY
        ]
        has_subentries = bool(subentries)

        for def_el in _reachable_definitions(lemma_el):
            yield headword, None, has_subentries, def_el
        for sub_el in subentries:
            sign = _subentry_sign(sub_el)
            for def_el in _reachable_definitions(sub_el):
                yield headword, sign, has_subentries, def_el


def _classify(def_el: etree._Element) -> tuple[IssueType, str, str | None] | None:
    gloss = text_of(def_el, tags.DEFINITION_TEXT)
    if CROSS_REFERENCE_MARKER in gloss:
        return None

    example_texts = [
        text_of(ex_el, tags.EXAMPLE_TEXT)
        for ex_el in def_el.iterdescendants(tags.EXAMPLE)
    ]
    with_content = [t for t in example_texts if not is_placeholder_text(t)]

    if not gloss:
        if not with_content:
            return (
                IssueType.DEAD_NODE,
                "Definition has no gloss and no example content",
                None,
            )
        return (
            IssueType.GHOST_DEFINITION,
            f"Definition has no gloss but {len(with_content)} example(s) with content",
            _preview(with_content[0]),
        )

    if example_texts and not with_content:
        return (
            IssueType.EMPTY_EXAMPLE_WITH_CONTENT,
            f"Gloss present but {len(example_texts)} example node(s) carry no text",
            _preview(gloss),
        )
    return None


def audit_definitions(source: Source) -> list[IntegrityIssue]:
    """Dead nodes, ghost definitions and empty example blocks.

    Glosses containing the ``+`` cross-reference marker are valid by
    convention and skipped.
    """
    root = load_root(source)
    issues: list[IntegrityIssue] = []
    checked = 0

    for headword, sign, has_subentries, def_el in _walk_definitions(root):
        checked += 1
        finding = _classify(def_el)
        if finding is None:
            continue
        issue_type, details, preview = finding
        issues.append(IntegrityIssue(
            lemma=headword,
            type=issue_type,
            details=details,
            has_subentries=has_subentries,
            subentry=sign,
            content_preview=preview,
        ))

    logger.info("Checked %d definitions, %d issues", checked, len(issues))
    return issues


def _is_bold_pointer(gloss_el: etree._Element) -> bool:
    """True when the gloss is a single ``Bold`` element and nothing else."""
    children = child_elements(gloss_el)
    if len(children) != 1 or children[0].tag.lower() != "bold":
        return False
    outside = (gloss_el.text or "") + (children[0].tail or "")
    return not outside.strip()


def audit_definition_markup(source: Source) -> list[IntegrityIssue]:
    """Missing or empty gloss tags, and glosses that are only a bold pointer."""
    root = load_root(source)
    issues: list[IntegrityIssue] = []

    for headword, sign, has_subentries, def_el in _walk_definitions(root):
        gloss_el = first_child_by_tag(def_el, tags.DEFINITION_TEXT)
        if gloss_el is None:
            issue_type = IssueType.EMPTY
            details = f"{tags.DEFINITION_TEXT} tag missing"
            preview = None
        else:
            raw = raw_inner_markup(gloss_el)
            if not raw:
                issue_type = IssueType.EMPTY
                details = "Gloss is empty"
                preview = ""
            elif _is_bold_pointer(gloss_el):
                issue_type = IssueType.POINTER_ONLY
                details = "Gloss is only a bold cross-reference"
                preview = raw
            else:
                continue

        issues.append(IntegrityIssue(
            lemma=headword,
            type=issue_type,
            details=details,
            has_subentries=has_subentries,
            subentry=sign,
            content_preview=preview,
        ))

    logger.info("Markup audit found %d issues", len(issues))
    return issues

