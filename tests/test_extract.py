"""Tests for node extraction primitives."""

from lxml import etree

from lexicon_ingest.extract import (
    child_elements,
    element_text,
    first_child_by_tag,
    inner_markup,
    inner_markup_of,
    raw_inner_markup,
    text_of,
)


def _el(xml):
    return etree.fromstring(xml)


class TestLookup:
    def test_descendant_search_finds_nested_tag(self):
        root = _el("<a><b><c>deep</c></b></a>")
        assert text_of(root, "c") == "deep"

    def test_direct_search_skips_nested_tag(self):
        root = _el("<a><b><c>deep</c></b></a>")
        assert first_child_by_tag(root, "c", direct=True) is None
        assert text_of(root, "c", direct=True) == ""

    def test_direct_search_prefers_own_child(self):
        root = _el("<a><b><c>nested</c></b><c>own</c></a>")
        assert text_of(root, "c", direct=True) == "own"
        assert text_of(root, "c") == "nested"

    def test_missing_parent(self):
        assert first_child_by_tag(None, "c") is None
        assert text_of(None, "c") == ""

    def test_child_elements_skips_comments(self):
        root = _el("<a><!-- note --><b/><?pi x?><c/></a>")
        assert [c.tag for c in child_elements(root)] == ["b", "c"]


class TestText:
    def test_element_text_trims_and_joins(self):
        root = _el("<a>  x<i>y</i>z  </a>")
        assert element_text(root) == "xyz"

    def test_element_text_ignores_comments(self):
        root = _el("<a>x<!-- hidden -->y</a>")
        assert element_text(root) == "xy"

    def test_element_text_none(self):
        assert element_text(None) == ""


class TestInnerMarkup:
    def test_raw_keeps_authored_tags(self):
        root = _el("<g> a <Bold>b</Bold> c </g>")
        assert raw_inner_markup(root) == "a <Bold>b</Bold> c"

    def test_text_is_escaped(self):
        root = _el("<g>a &amp; <Bold>b</Bold></g>")
        assert raw_inner_markup(root) == "a &amp; <Bold>b</Bold>"

    def test_normalised(self):
        root = _el("<g>Edificio para <Bold>habitar</Bold>.</g>")
        assert inner_markup(root) == "Edificio para <b>habitar</b>."

    def test_newlines_flattened(self):
        root = _el("<g>uno\ndos</g>")
        assert inner_markup(root) == "uno dos"

    def test_inner_markup_of_missing(self):
        root = _el("<a/>")
        assert inner_markup_of(root, "g") == ""
        assert inner_markup(None) == ""
