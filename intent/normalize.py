"""Canonical text form shared by every matcher."""

import re

_DISALLOWED = re.compile(r"[^a-z0-9\s&]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """Lower-case, replace anything outside ``[a-z0-9 &]`` with a space, collapse runs, trim.

    Total and idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    lowered = (text or "").lower()
    return _WHITESPACE.sub(" ", _DISALLOWED.sub(" ", lowered)).strip()
