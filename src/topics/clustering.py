"""Greedy single-pass topic clustering over keyword overlap.

Membership is order dependent: a bucket's vocabulary grows as videos join,
so later videos are matched against everything absorbed so far. Callers
must pass videos in a stable order (the repositories return creation order)
for labels to be reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from src.ingestion.config import Settings
from src.ingestion.models import Video

from .keywords import extract_keywords


@dataclass
class TopicBucket:
    label: str
    keywords: dict[str, None] = field(default_factory=dict)
    members: list[Video] = field(default_factory=list)

    def overlap(self, keywords: Iterable[str]) -> int:
        return sum(1 for word in keywords if word in self.keywords)

    def absorb(self, video: Video, keywords: Iterable[str]) -> None:
        self.members.append(video)
        for word in keywords:
            self.keywords.setdefault(word, None)


class TopicClusterer:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.buckets: list[TopicBucket] = []
        self.unmatched: list[Video] = []

    def add(self, video: Video) -> None:
        keywords = extract_keywords(video.text, self.settings.stop_words)
        if not keywords:
            self.unmatched.append(video)
            return

        for bucket in self.buckets:
            if bucket.overlap(keywords) >= self.settings.overlap_threshold:
                bucket.absorb(video, keywords)
                return

        label = " ".join(keywords[: self.settings.label_keyword_count])
        bucket = TopicBucket(label=label or self.settings.no_match_label)
        bucket.absorb(video, keywords)
        self.buckets.append(bucket)

    def labels(self) -> dict[int, str]:
        no_match = self.settings.no_match_label
        assigned: dict[int, str] = {video.key: no_match for video in self.unmatched}
        for bucket in self.buckets:
            label = bucket.label if len(bucket.members) > 1 else no_match
            for video in bucket.members:
                assigned[video.key] = label
        return assigned


def assign_topics(
    videos: Iterable[Video], settings: Optional[Settings] = None
) -> dict[int, str]:
    """Label every video in place and return ``{video key: label}``."""
    ordered = list(videos)
    clusterer = TopicClusterer(settings)
    for video in ordered:
        clusterer.add(video)

    labels = clusterer.labels()
    for video in ordered:
        video.topic_label = labels[video.key]
    return labels
