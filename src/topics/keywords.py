import re
from collections.abc import Collection
from typing import Optional

from src.ingestion.config import STOP_WORDS

_SEPARATORS = re.compile(r"[^a-z0-9]+")


def extract_keywords(
    text: Optional[str], stop_words: Collection[str] = STOP_WORDS
) -> tuple[str, ...]:
    """Return the distinct significant tokens of *text* in first-occurrence order.

    Tokens are lowercased runs of ``[a-z0-9]``; tokens of two characters or
    fewer and stop-words are dropped. The fixed ordering keeps clustering
    labels reproducible.
    """
    if not text:
        return ()
    tokens = _SEPARATORS.split(text.lower())
    kept = dict.fromkeys(
        token for token in tokens if len(token) > 2 and token not in stop_words
    )
    return tuple(kept)
