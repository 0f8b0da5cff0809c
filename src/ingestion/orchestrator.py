import logging
from collections.abc import Mapping, Sequence
from typing import Optional, Protocol

from src.topics.clustering import assign_topics
from src.topics.grouping import build_groups
from src.topics.themes import compute_channel_themes

from .config import Settings
from .errors import ChannelResolutionError, InvalidBatchError
from .models import Channel, ParsedVideo, TopicGroup, Video

LOGGER = logging.getLogger(__name__)


class IngestionRepositoryProtocol(Protocol):
    def upsert_channel(self, channel_id: str, url: str) -> Channel: ...

    def upsert_video(self, parsed: ParsedVideo, channel_key: int) -> Video: ...

    def list_channels(self) -> list[Channel]: ...

    def list_videos(self) -> list[Video]: ...

    def save_topic_labels(self, labels: Mapping[int, str]) -> int: ...

    def save_theme_summaries(self, themes: Mapping[int, Optional[str]]) -> int: ...


class ResolverProtocol(Protocol):
    def resolve(self, url: str) -> Optional[str]: ...


class FeedClientProtocol(Protocol):
    def fetch_videos(self, channel_id: str) -> list[ParsedVideo]: ...


def get_groups(
    repository: IngestionRepositoryProtocol, settings: Optional[Settings] = None
) -> list[TopicGroup]:
    settings = settings or Settings()
    return build_groups(
        repository.list_videos(),
        repository.list_channels(),
        no_match_label=settings.no_match_label,
    )


def recluster(
    repository: IngestionRepositoryProtocol, settings: Optional[Settings] = None
) -> None:
    settings = settings or Settings()

    labels = assign_topics(repository.list_videos(), settings)
    repository.save_topic_labels(labels)

    themes = compute_channel_themes(repository.list_videos(), settings)
    repository.save_theme_summaries(themes)

    LOGGER.info(
        "clustered %d videos into %d labels; themes for %d channels",
        len(labels),
        len(set(labels.values())),
        len(themes),
    )


def ingest_channel(
    url: str,
    resolver: ResolverProtocol,
    feed_client: FeedClientProtocol,
    repository: IngestionRepositoryProtocol,
) -> int:
    channel_id = resolver.resolve(url)
    if not channel_id:
        raise ChannelResolutionError(url)

    channel = repository.upsert_channel(channel_id, url)
    parsed_videos = feed_client.fetch_videos(channel_id)
    for parsed in parsed_videos:
        repository.upsert_video(parsed, channel.key)

    LOGGER.info("ingested %d videos for %s (%s)", len(parsed_videos), channel_id, url)
    return len(parsed_videos)


def run_ingestion(
    urls: Sequence[str],
    resolver: ResolverProtocol,
    feed_client: FeedClientProtocol,
    repository: IngestionRepositoryProtocol,
    settings: Optional[Settings] = None,
) -> list[TopicGroup]:
    """Ingest every URL, then re-cluster and re-summarise the whole corpus.

    The first URL that cannot be resolved or whose feed cannot be fetched
    aborts the batch. Channels and videos written before the failure stay
    persisted.
    """
    if not urls:
        raise InvalidBatchError("Please send at least one channel URL.")

    settings = settings or Settings()
    LOGGER.info("ingesting %d channel urls", len(urls))
    total = 0
    for url in urls:
        total += ingest_channel(url, resolver, feed_client, repository)

    LOGGER.info("ingested %d videos from %d channel urls", total, len(urls))
    recluster(repository, settings)
    return get_groups(repository, settings)
