"""Query interface over parsed lemmas.

Covers what the presentation layer needs from the model: exact and prefix
headword lookup, incidence discovery in definition prose, and the label
filters of the sidebar.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass

from lexicon_ingest.models import Lemma

# A letter is any word character that is neither a digit nor an underscore
_LETTER = r"[^\W\d_]"


def _key(text: str) -> str:
    return text.strip().lower()


def collation_key(text: str) -> str:
    """Accent-blind sort key: ``ácido`` sorts among the a, ``ñandú`` among the n."""
    decomposed = unicodedata.normalize("NFD", text.strip().casefold())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def incidence_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive match of ``term`` not flanked by letters."""
    return re.compile(
        rf"(?<!{_LETTER}){re.escape(term.strip())}(?!{_LETTER})",
        re.IGNORECASE,
    )


@dataclass
class FilterOptions:
    """Sidebar filters. ``None`` leaves a dimension unfiltered."""

    initial_letter: str | None = None
    pos: str | None = None
    usage: str | None = None
    geography: str | None = None


@dataclass(frozen=True, slots=True)
class AvailableFilters:
    """Distinct filter values present in a document, sorted."""

    letters: tuple[str, ...]
    pos: tuple[str, ...]
    usage: tuple[str, ...]
    geography: tuple[str, ...]


class DictionaryIndex:
    """Read-only lookups over a parsed (and usually patched) document."""

    def __init__(self, lemmas: Iterable[Lemma]) -> None:
        self._lemmas = list(lemmas)
        self._by_headword: dict[str, list[Lemma]] = {}
        for lemma in self._lemmas:
            self._by_headword.setdefault(_key(lemma.lemma_sign), []).append(lemma)

    def __len__(self) -> int:
        return len(self._lemmas)

    @property
    def lemmas(self) -> list[Lemma]:
        return list(self._lemmas)

    def lookup(self, headword: str) -> list[Lemma]:
        """Lemmas whose headword equals ``headword`` (trimmed, any case)."""
        return list(self._by_headword.get(_key(headword), []))

    def search(self, query: str) -> list[Lemma]:
        """Prefix search over headwords and markup-free subentry signs.

        An exact headword match sorts first, then alphabetical order.
        """
        q = _key(query)
        if not q:
            return list(self._lemmas)

        results = [
            lemma for lemma in self._lemmas
            if lemma.lemma_sign.lower().startswith(q)
            or any(sub.plain_sign.lower().startswith(q) for sub in lemma.subentries)
        ]
        results.sort(key=lambda l: (_key(l.lemma_sign) != q, collation_key(l.lemma_sign)))
        return results

    def incidences(self, term: str) -> list[Lemma]:
        """Lemmas whose definitions mention ``term`` as a whole word.

        The lemma defining ``term`` itself is excluded.
        """
        if not term.strip():
            return []
        pattern = incidence_pattern(term)
        key = _key(term)
        return [
            lemma for lemma in self._lemmas
            if _key(lemma.lemma_sign) != key
            and any(pattern.search(d.plain_text) for d in lemma.iter_definitions())
        ]

    def available_filters(self) -> AvailableFilters:
        letters: set[str] = set()
        pos: set[str] = set()
        usage: set[str] = set()
        geography: set[str] = set()

        for lemma in self._lemmas:
            if lemma.lemma_sign:
                letters.add(lemma.lemma_sign[0].upper())
            for sense in lemma.iter_senses():
                if sense.pos:
                    pos.add(sense.pos)
                for definition in sense.definitions:
                    if definition.usage_label:
                        usage.add(definition.usage_label)
                    if definition.geographic_label:
                        geography.add(definition.geographic_label)

        return AvailableFilters(
            letters=tuple(sorted(letters, key=collation_key)),
            pos=tuple(sorted(pos, key=collation_key)),
            usage=tuple(sorted(usage, key=collation_key)),
            geography=tuple(sorted(geography, key=collation_key)),
        )

    def filter(self, options: FilterOptions) -> list[Lemma]:
        results = self._lemmas

        if options.initial_letter:
            letter = options.initial_letter.upper()
            results = [l for l in results if l.lemma_sign.upper().startswith(letter)]

        if options.pos:
            results = [
                l for l in results
                if any(s.pos == options.pos for s in l.iter_senses())
            ]

        if options.usage:
            results = [
                l for l in results
                if any(d.usage_label == options.usage for d in l.iter_definitions())
            ]

        if options.geography:
            results = [
                l for l in results
                if any(d.geographic_label == options.geography for d in l.iter_definitions())
            ]

        return list(results)
