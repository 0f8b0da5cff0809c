from collections import Counter
from collections.abc import Iterable
from typing import Optional

from src.ingestion.config import Settings
from src.ingestion.models import Video

from .keywords import extract_keywords


def compute_channel_themes(
    videos: Iterable[Video], settings: Optional[Settings] = None
) -> dict[int, Optional[str]]:
    """Summarise each channel by its most frequent keywords.

    Returns ``{channel key: summary}`` for every channel that has at least one
    video. A channel whose videos yield no keywords maps to ``None`` so any
    previous summary is cleared. Ties keep first-seen order.
    """
    settings = settings or Settings()
    frequencies: dict[int, Counter[str]] = {}

    for video in videos:
        counter = frequencies.setdefault(video.channel_key, Counter())
        counter.update(extract_keywords(video.text, settings.stop_words))

    themes: dict[int, Optional[str]] = {}
    for channel_key, counter in frequencies.items():
        top = [word for word, _ in counter.most_common(settings.theme_keyword_count)]
        themes[channel_key] = ", ".join(top) if top else None
    return themes
