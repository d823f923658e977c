"""Intent resolution against the module synonym and topic catalogs.

Modules are scored (best fuzzy match over every synonym, accepted at or above
``MODULE_ACCEPT_THRESHOLD``).  Topics are not scored: the first catalog entry
with a key contained in the utterance wins.  Both functions are total and
return ``None`` rather than raising.
"""

import logging
import re
from collections.abc import Sequence

from catalog import ModuleDescriptor, TopicDescriptor
from intent.matcher import score
from intent.normalize import normalize

logger = logging.getLogger(__name__)

# Tuned on kiosk transcripts; inclusive.
MODULE_ACCEPT_THRESHOLD = 0.42

NUMERAL_WORDS = ("one", "two", "three", "four", "five", "six", "seven", "eight", "nine")
_NUMERAL_PATTERNS = [
    re.compile(rf"\b({index}|{word})\b") for index, word in enumerate(NUMERAL_WORDS, start=1)
]


def _numeral_module(normalized: str, modules: Sequence[ModuleDescriptor]) -> str | None:
    """Bare numerals ("1", "two") pick modules by catalog position, no fuzzy scoring."""
    for pattern, module in zip(_NUMERAL_PATTERNS, modules):
        if pattern.search(normalized):
            return module.key
    return None


def best_module(text: str, modules: Sequence[ModuleDescriptor]) -> tuple[str | None, float]:
    """Highest-scoring module and its score (max over synonyms). Ties keep catalog order."""
    best_key: str | None = None
    best_score = 0.0
    for module in modules:
        module_score = max((score(text, synonym) for synonym in module.synonyms), default=0.0)
        if module_score > best_score:
            best_key, best_score = module.key, module_score
    return best_key, best_score


def resolve_module(text: str, modules: Sequence[ModuleDescriptor]) -> str | None:
    """Module key named by ``text``, or None."""
    normalized = normalize(text)
    if not normalized:
        return None
    key = _numeral_module(normalized, modules)
    if key is not None:
        logger.debug("Module %s via numeral in %r", key, normalized)
        return key
    key, module_score = best_module(normalized, modules)
    if key is not None and module_score >= MODULE_ACCEPT_THRESHOLD:
        logger.debug("Module %s scored %.3f for %r", key, module_score, normalized)
        return key
    logger.debug("No module for %r (best %s at %.3f)", normalized, key, module_score)
    return None


def resolve_topic(
    text: str,
    topics: Sequence[TopicDescriptor],
    home_key: str | None = None,
    organization_name: str | None = None,
) -> str | None:
    """First topic (catalog order) with a match key inside ``text``.

    An utterance that mentions only the organisation's name falls back to
    ``home_key``.
    """
    normalized = normalize(text)
    if not normalized:
        return None
    for topic in topics:
        for match_key in topic.match_keys:
            needle = normalize(match_key)
            if needle and needle in normalized:
                return topic.key
    org = normalize(organization_name)
    if home_key and org and org in normalized:
        return home_key
    return None
