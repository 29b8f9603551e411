"""Node extraction primitives shared by every parser and diagnostic tool.

Lookups search all descendants unless ``direct=True`` restricts them to
the immediate children. A missing tag always yields ``None`` or ``""``.
"""

from __future__ import annotations

from xml.sax.saxutils import escape as xml_escape

from lxml import etree

from lexicon_ingest.markup import normalize_markup


def is_element(node: etree._Element) -> bool:
    """False for comments, processing instructions and entities."""
    return isinstance(node.tag, str)


def child_elements(parent: etree._Element) -> list[etree._Element]:
    """Direct element children in document order."""
    return [child for child in parent if is_element(child)]


def first_child_by_tag(
    parent: etree._Element | None,
    tag: str,
    *,
    direct: bool = False,
) -> etree._Element | None:
    """First element named ``tag`` below ``parent`` (never ``parent`` itself)."""
    if parent is None:
        return None
    if direct:
        for child in parent:
            if child.tag == tag:
                return child
        return None
    return next(parent.iterdescendants(tag), None)


def element_text(element: etree._Element | None) -> str:
    """Trimmed string value of an element, ignoring comments."""
    if element is None:
        return ""
    return str(element.xpath("string()")).strip()


def text_of(
    parent: etree._Element | None,
    tag: str,
    *,
    direct: bool = False,
) -> str:
    return element_text(first_child_by_tag(parent, tag, direct=direct))


def raw_inner_markup(element: etree._Element | None) -> str:
    """Serialised children of ``element``, trimmed, tags left as authored."""
    if element is None:
        return ""
    parts = [xml_escape(element.text)] if element.text else []
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts).strip()


def inner_markup(element: etree._Element | None) -> str:
    """Serialised children of ``element`` with emphasis tags normalised."""
    return normalize_markup(raw_inner_markup(element))


def inner_markup_of(
    parent: etree._Element | None,
    tag: str,
    *,
    direct: bool = False,
) -> str:
    return inner_markup(first_child_by_tag(parent, tag, direct=direct))
