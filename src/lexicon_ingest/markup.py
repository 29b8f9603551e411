"""Inline markup normalisation for dictionary text fields.

Source fields carry custom emphasis tags (``<Bold>``, ``<Italic>``,
``<Underline>``) inside otherwise plain text. They are rewritten to the
canonical ``<b>``/``<i>``/``<u>`` form, and a markup-free projection is
derived from the result for searching.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from lexicon_ingest.tags import INLINE_TAGS

_INLINE_TAG_RE = re.compile(
    r"<\s*(/?)\s*(bold|italic|underline)\s*>", re.IGNORECASE
)
_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_BRACKETS_RE = re.compile(r"[()\[\]]")
_TAG_RE = re.compile(r"<([^>]+)>")

PLACEHOLDER_EXAMPLE = ":"


def normalize_markup(fragment: str) -> str:
    """Map custom emphasis tags to ``b``/``i``/``u`` and flatten newlines.

    Idempotent: the canonical tags are never matched again.
    """
    if not fragment:
        return ""
    out = _INLINE_TAG_RE.sub(
        lambda m: f"<{m.group(1)}{INLINE_TAGS[m.group(2).lower()]}>",
        fragment,
    )
    return _NEWLINE_RE.sub(" ", out)


def strip_brackets(text: str) -> str:
    """Remove ``()[]`` and trim. Only for etymology and scientific names."""
    if not text:
        return ""
    return _BRACKETS_RE.sub("", text).strip()


def strip_tags(text: str) -> str:
    """Plain-text projection: every ``<...>`` tag removed."""
    if not text:
        return ""
    return _TAG_RE.sub("", text)


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split()) if text else ""


def is_placeholder_text(text: str | None) -> bool:
    """True for text that carries no content: empty, blank or a bare ``:``."""
    stripped = strip_tags(text or "").strip()
    return stripped in ("", PLACEHOLDER_EXAMPLE)


# ---------------------------------------------------------------------------
# Structured emphasis
# ---------------------------------------------------------------------------

class Style(str, Enum):
    """Closed set of inline emphasis styles, valued by canonical tag."""

    BOLD = "b"
    ITALIC = "i"
    UNDERLINE = "u"


_STYLE_BY_NAME = {
    "b": Style.BOLD,
    "bold": Style.BOLD,
    "i": Style.ITALIC,
    "italic": Style.ITALIC,
    "u": Style.UNDERLINE,
    "underline": Style.UNDERLINE,
}


@dataclass(frozen=True, slots=True)
class Emphasis:
    """A styled run ``base[start:end]``."""

    style: Style
    start: int
    end: int


def to_spans(markup: str) -> tuple[str, list[Emphasis]]:
    """Split a markup fragment into its base string and emphasis spans.

    The base string is exactly ``strip_tags(markup)``. Unknown tags are
    dropped; an unclosed emphasis runs to the end of the text.
    """
    if not markup:
        return "", []

    parts: list[str] = []
    spans: list[Emphasis] = []
    open_runs: dict[Style, list[int]] = {}
    pos = 0
    last = 0

    for m in _TAG_RE.finditer(markup):
        chunk = markup[last:m.start()]
        parts.append(chunk)
        pos += len(chunk)
        last = m.end()

        inner = m.group(1).strip()
        if inner.endswith("/"):
            continue
        closing = inner.startswith("/")
        name = inner.lstrip("/").split(None, 1)
        style = _STYLE_BY_NAME.get(name[0].lower()) if name else None
        if style is None:
            continue

        if closing:
            starts = open_runs.get(style)
            if starts:
                start = starts.pop()
                if pos > start:
                    spans.append(Emphasis(style, start, pos))
        else:
            open_runs.setdefault(style, []).append(pos)

    tail = markup[last:]
    parts.append(tail)
    pos += len(tail)

    for style, starts in open_runs.items():
        for start in starts:
            if pos > start:
                spans.append(Emphasis(style, start, pos))

    order = list(Style)
    spans.sort(key=lambda s: (s.start, -s.end, order.index(s.style)))
    return "".join(parts), spans


def from_spans(base: str, spans: list[Emphasis]) -> str:
    """Serialise a base string and its spans back to canonical markup."""
    if not base:
        return ""
    size = len(base)
    cuts = {0, size}
    for span in spans:
        cuts.add(min(max(span.start, 0), size))
        cuts.add(min(max(span.end, 0), size))
    bounds = sorted(cuts)

    out: list[str] = []
    for a, b in zip(bounds, bounds[1:]):
        segment = base[a:b]
        if not segment:
            continue
        active = [
            style for style in Style
            if any(s.style is style and s.start <= a and s.end >= b for s in spans)
        ]
        opening = "".join(f"<{style.value}>" for style in active)
        closing = "".join(f"</{style.value}>" for style in reversed(active))
        out.append(f"{opening}{segment}{closing}")
    return "".join(out)
