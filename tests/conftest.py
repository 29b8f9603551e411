"""Shared test fixtures for lexicon-ingest."""

from pathlib import Path

import pytest

from lexicon_ingest import load_root, parse_document

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_path():
    """Path to the sample dictionary document."""
    return FIXTURES / "sample.xml"


@pytest.fixture
def sample_root(sample_path):
    """Parsed root element of the sample document."""
    return load_root(sample_path)


@pytest.fixture
def sample_lemmas(sample_root):
    """Sample document parsed without the patch layer."""
    return parse_document(sample_root)


@pytest.fixture
def by_headword(sample_lemmas):
    """Sample lemmas keyed by headword."""
    return {lemma.lemma_sign: lemma for lemma in sample_lemmas}
