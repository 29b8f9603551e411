"""XML-to-lexical-model pipeline for lexicon-ingest.

The source schema is inconsistent: a ``Definition`` may sit inside its
``Sense`` or appear as a flat sibling of it. Sense-level structure is read
from direct children so that mixed encodings keep their document order;
field values inside a definition are read with descendant searches.
"""

from __future__ import annotations

import functools
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from lxml import etree

from lexicon_ingest import tags
from lexicon_ingest.exceptions import DataImportError
from lexicon_ingest.extract import (
    child_elements,
    element_text,
    first_child_by_tag,
    inner_markup,
    inner_markup_of,
    text_of,
)
from lexicon_ingest.markup import (
    PLACEHOLDER_EXAMPLE,
    collapse_whitespace,
    strip_brackets,
)
from lexicon_ingest.models import Definition, Example, Lemma, Sense, Subentry

if TYPE_CHECKING:
    from lexicon_ingest.patches.schema import PatchTable

logger = logging.getLogger(__name__)

_VARIANT_SEPARATORS = re.compile(r"[,;|]")
_LEADING_NOISE = "\ufeff \t\r\n"

Source = str | bytes | Path | etree._Element


# ---------------------------------------------------------------------------
# Document loading
# ---------------------------------------------------------------------------

def load_root(source: Source) -> etree._Element:
    """Return the root element of ``source``.

    ``source`` may be XML text, raw bytes, a path (``str`` or ``Path``) or
    an element that has already been parsed.
    """
    if isinstance(source, etree._Element):
        return source
    if isinstance(source, Path):
        return _parse_file(source)
    if isinstance(source, bytes):
        return _parse_bytes(source)
    if source.lstrip(_LEADING_NOISE).startswith("<"):
        return _parse_text(source)
    return _parse_file(Path(source))


def _parse_file(path: Path) -> etree._Element:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        return etree.parse(str(path)).getroot()
    except etree.XMLSyntaxError as e:
        raise DataImportError(f"Failed to parse XML: {e}") from e
    except OSError as e:
        raise DataImportError(f"Failed to read {path}: {e}") from e


def _parse_text(text: str) -> etree._Element:
    # An XML declaration is only legal as the very first characters
    return _parse_bytes(
        text.lstrip(_LEADING_NOISE).encode("utf-8"), etree.XMLParser(encoding="utf-8")
    )


def _parse_bytes(
    data: bytes, parser: etree.XMLParser | None = None
) -> etree._Element:
    try:
        return etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise DataImportError(f"Failed to parse XML: {e}") from e


# ---------------------------------------------------------------------------
# Examples and definitions
# ---------------------------------------------------------------------------

def parse_examples(definition_el: etree._Element) -> list[Example]:
    """Examples under a definition, at any depth, in document order.

    An example whose text is empty or the bare ``:`` placeholder is kept
    only when it still carries a source or an ad-hoc label.
    """
    examples: list[Example] = []
    for ex_el in definition_el.iterdescendants(tags.EXAMPLE):
        text = (
            inner_markup_of(ex_el, tags.EXAMPLE_TEXT)
            or text_of(ex_el, tags.EXAMPLE_TEXT)
        )
        source = text_of(ex_el, tags.EXAMPLE_SOURCE)
        ad_hoc = text_of(ex_el, tags.EXAMPLE_AD_HOC)

        if (not text or text == PLACEHOLDER_EXAMPLE) and not source and not ad_hoc:
            continue

        examples.append(Example(
            text=text,
            source=source or None,
            is_ad_hoc=bool(ad_hoc),
            ad_hoc_label=ad_hoc or None,
        ))
    return examples


def parse_definition(definition_el: etree._Element) -> Definition:
    """Parse one ``Definition`` element. Empty glosses pass through."""
    text = (
        inner_markup_of(definition_el, tags.DEFINITION_TEXT)
        or text_of(definition_el, tags.DEFINITION_TEXT)
    )
    return Definition(
        text=text,
        acepcion=text_of(definition_el, tags.DEFINITION_NUMBER) or None,
        contorno=inner_markup_of(definition_el, tags.DEFINITION_CONTORNO) or None,
        usage_label=text_of(definition_el, tags.DEFINITION_USAGE) or None,
        geographic_label=text_of(definition_el, tags.DEFINITION_GEOGRAPHY) or None,
        utc=text_of(definition_el, tags.DEFINITION_UTC) or None,
        examples=parse_examples(definition_el),
    )


# ---------------------------------------------------------------------------
# Senses
# ---------------------------------------------------------------------------

def parse_sense(sense_el: etree._Element) -> Sense:
    """Parse a well-formed ``Sense`` and the definitions nested in it."""
    etymology = strip_brackets(
        inner_markup_of(sense_el, tags.SENSE_ETYMOLOGY, direct=True)
    )
    scientific_name = strip_brackets(
        inner_markup_of(sense_el, tags.SENSE_SCIENTIFIC_NAME, direct=True)
    )
    return Sense(
        definitions=[
            parse_definition(child)
            for child in child_elements(sense_el)
            if child.tag == tags.DEFINITION
        ],
        sense_number=text_of(sense_el, tags.SENSE_NUMBER, direct=True) or None,
        etymology=etymology or None,
        scientific_name=scientific_name or None,
        pos=text_of(sense_el, tags.SENSE_POS, direct=True) or None,
    )


_SenseFold = tuple[list[Sense], int | None]


def _fold_sense_child(state: _SenseFold, node: etree._Element) -> _SenseFold:
    """One step over a sibling: ``(senses so far, open sense index)``."""
    senses, open_index = state

    if node.tag == tags.SENSE:
        senses.append(parse_sense(node))
        return senses, len(senses) - 1

    if node.tag == tags.DEFINITION:
        definition = parse_definition(node)
        if open_index is not None:
            senses[open_index].definitions.append(definition)
            return senses, open_index
        logger.debug("Orphan definition with no open sense, synthesizing one")
        senses.append(Sense(definitions=[definition]))
        return senses, len(senses) - 1

    return state


def parse_senses(parent_el: etree._Element) -> list[Sense]:
    """Assemble senses from the direct children of a lemma or subentry.

    A ``Definition`` found next to ``Sense`` elements joins the most
    recently opened sense, or opens an implicit one when none exists yet.
    Every other sibling is ignored.
    """
    senses, _ = functools.reduce(
        _fold_sense_child, child_elements(parent_el), ([], None)
    )
    return senses


# ---------------------------------------------------------------------------
# Subentries and lemmas
# ---------------------------------------------------------------------------

def parse_subentries(lemma_el: etree._Element) -> list[Subentry]:
    subentries: list[Subentry] = []
    for node in child_elements(lemma_el):
        if node.tag != tags.SUBENTRY:
            continue
        sign_el = first_child_by_tag(node, tags.SUBENTRY_SIGN, direct=True)
        sign = inner_markup(sign_el) or element_text(sign_el)
        subentries.append(Subentry(
            sign=collapse_whitespace(sign),
            senses=parse_senses(node),
        ))
    return subentries


def split_variants(text: str) -> list[str]:
    """Split a variants field on ``,``, ``;`` or ``|``."""
    return [part.strip() for part in _VARIANT_SEPARATORS.split(text) if part.strip()]


def parse_lemma(lemma_el: etree._Element) -> Lemma:
    """Parse one ``Lemma`` element into a :class:`Lemma`."""
    lemma_sign = text_of(lemma_el, tags.LEMMA_SIGN, direct=True)
    if not lemma_sign:
        logger.warning("Lemma without headword at line %s", lemma_el.sourceline)

    etymology = strip_brackets(
        inner_markup_of(lemma_el, tags.LEMMA_ETYMOLOGY, direct=True)
    )
    variants_text = text_of(lemma_el, tags.VARIANTS)

    return Lemma(
        lemma_sign=lemma_sign,
        senses=parse_senses(lemma_el),
        subentries=parse_subentries(lemma_el),
        etymology=etymology or None,
        observations=text_of(lemma_el, tags.OBSERVATIONS) or None,
        variants=split_variants(variants_text) if variants_text else None,
    )


def parse_document(root: etree._Element) -> list[Lemma]:
    """Every ``Lemma`` in the document (the root included), in order."""
    lemmas = [parse_lemma(el) for el in root.iter(tags.LEMMA)]
    logger.info("Parsed %d lemmas", len(lemmas))
    return lemmas


def parse_xml_string(xml: str | bytes) -> list[Lemma]:
    """Parse dictionary XML text. Syntax errors raise DataImportError."""
    if isinstance(xml, str):
        root = _parse_text(xml)
    else:
        root = _parse_bytes(xml)
    return parse_document(root)


def parse_xml_file(path: str | Path) -> list[Lemma]:
    """Parse a dictionary XML file."""
    return parse_document(_parse_file(Path(path)))


def load_dictionary(
    source: Source,
    *,
    patches: bool = True,
    table: PatchTable | None = None,
) -> list[Lemma]:
    """Parse ``source`` and run the patch layer over the result."""
    from lexicon_ingest.patches import apply_patches

    lemmas = parse_document(load_root(source))
    if not patches:
        return lemmas
    return apply_patches(lemmas, table)
