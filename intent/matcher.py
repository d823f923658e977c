"""Fuzzy phrase scoring: containment, token hits within an edit budget, whole-string distance.

The score is asymmetric: ``text`` is what the visitor said, ``phrase`` is a
catalog entry.  Short tokens must match exactly; longer ones tolerate one or
two edits so "acounting" or "recruitmnt" still land on the right module.
"""

from rapidfuzz.distance import Levenshtein

from intent.normalize import normalize

OVERLAP_WEIGHT = 0.8
WHOLE_WEIGHT = 0.2
WHOLE_ONLY_WEIGHT = 0.7


def edit_distance(a: str, b: str) -> int:
    """Unit-cost Levenshtein distance (insert, delete, substitute)."""
    return Levenshtein.distance(a or "", b or "")


def token_threshold(length: int) -> int:
    """Edits tolerated for a phrase token of ``length`` characters."""
    if length >= 6:
        return 2
    if length >= 4:
        return 1
    return 0


def score(text: str, phrase: str) -> float:
    """Similarity of ``text`` to catalog ``phrase``; 1.0 when the phrase is contained verbatim.

    The whole-string term can go negative for long, unrelated strings; it only
    ever contributes through the ``max`` below.
    """
    t = normalize(text)
    p = normalize(phrase)
    if not t or not p:
        return 0.0
    if p in t:
        return 1.0

    text_tokens = t.split(" ")
    phrase_tokens = p.split(" ")
    hits = 0
    for token in phrase_tokens:
        if token in text_tokens:
            hits += 1
            continue
        budget = token_threshold(len(token))
        if any(edit_distance(word, token) <= budget for word in text_tokens):
            hits += 1
    overlap = hits / len(phrase_tokens)

    whole = 1 - edit_distance(t, p) / max(len(p), 1)
    return max(OVERLAP_WEIGHT * overlap + WHOLE_WEIGHT * whole, WHOLE_ONLY_WEIGHT * whole)
