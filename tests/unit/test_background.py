"""Unit tests for intent.background."""

import pytest
from intent.background import detect_background


@pytest.mark.unit
def test_detects_university(catalog):
    assert detect_background("I'm studying at Stanford!", catalog.backgrounds) == "STANFORD"


@pytest.mark.unit
def test_multi_word_key(catalog):
    assert detect_background("University of Oxford", catalog.backgrounds) == "OXFORD"


@pytest.mark.unit
def test_first_in_catalog_order_wins(catalog):
    assert detect_background("harvard or stanford", catalog.backgrounds) == "STANFORD"


@pytest.mark.unit
def test_no_match(catalog):
    assert detect_background("I went to Yale", catalog.backgrounds) is None
    assert detect_background("", catalog.backgrounds) is None


@pytest.mark.unit
def test_university_phrase(catalog):
    assert detect_background("I study at Stanford University", catalog.backgrounds) == "STANFORD"
    assert detect_background("no mention here", catalog.backgrounds) is None
