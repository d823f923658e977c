"""University mentions switch the stage background."""

from collections.abc import Sequence

from catalog import BackgroundEntry
from intent.normalize import normalize


def detect_background(text: str, backgrounds: Sequence[BackgroundEntry]) -> str | None:
    """Key of the first background whose match key appears in ``text``, else None.

    Triggers are proper nouns, so plain containment is enough; no scoring.
    """
    normalized = normalize(text)
    if not normalized:
        return None
    for entry in backgrounds:
        if any(normalize(key) and normalize(key) in normalized for key in entry.match_keys):
            return entry.key
    return None
