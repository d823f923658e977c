"""Unit tests for intent.normalize."""

import pytest
from intent.normalize import normalize


@pytest.mark.unit
class TestNormalize:
    def test_lowercases_and_strips_punctuation(self):
        assert normalize("Hello, World!") == "hello world"

    def test_keeps_ampersand(self):
        assert normalize("F&A") == "f&a"

    def test_collapses_whitespace(self):
        assert normalize("  finance \t\n  and   accounting ") == "finance and accounting"

    def test_apostrophe_becomes_space(self):
        assert normalize("don't") == "don t"

    def test_non_ascii_letters_dropped(self):
        assert normalize("café") == "caf"

    def test_none_and_empty(self):
        assert normalize(None) == ""
        assert normalize("") == ""
        assert normalize("?!...") == ""

    @pytest.mark.parametrize("text", ["Module #1!", "  HR & Payroll ", "Stanford University."])
    def test_idempotent(self, text):
        once = normalize(text)
        assert normalize(once) == once

    def test_module_heading(self):
        assert normalize("Module #1!!") == "module 1"
