import importlib
import os
from collections.abc import Mapping, Sequence
from typing import Optional

from src.ingestion.config import Settings, load_settings
from src.ingestion.errors import IngestionError

URL_INPUT_COUNT = 3
NO_THEME_TEXT = "No theme"


def _channel_theme(channel: Mapping[str, object]) -> str:
    theme = channel.get("theme_summary")
    return str(theme) if theme else NO_THEME_TEXT


def build_group_cards(groups: Sequence[Mapping[str, object]]) -> list[dict[str, object]]:
    cards: list[dict[str, object]] = []
    for group in groups:
        videos = group.get("videos") or []
        channels = group.get("channels") or []
        if not isinstance(videos, list) or not isinstance(channels, list):
            continue
        cards.append(
            {
                "label": str(group.get("label", "")),
                "video_count": len(videos),
                "videos": [
                    {
                        "title": video.get("title", ""),
                        "published_at": video.get("published_at", ""),
                        "url": f"https://www.youtube.com/watch?v={video.get('video_id', '')}",
                    }
                    for video in videos
                    if isinstance(video, Mapping)
                ],
                "channels": [
                    {
                        "url": channel.get("url", ""),
                        "theme": _channel_theme(channel),
                    }
                    for channel in channels
                    if isinstance(channel, Mapping)
                ],
            }
        )
    return cards


def build_channel_themes(groups: Sequence[Mapping[str, object]]) -> list[dict[str, object]]:
    seen: dict[object, dict[str, object]] = {}
    for group in groups:
        channels = group.get("channels") or []
        if not isinstance(channels, list):
            continue
        for channel in channels:
            if not isinstance(channel, Mapping) or channel.get("id") in seen:
                continue
            seen[channel.get("id")] = {
                "channel_id": channel.get("channel_id", ""),
                "url": channel.get("url", ""),
                "theme": _channel_theme(channel),
            }
    return list(seen.values())


def load_groups(dsn: str, settings: Settings) -> list[dict[str, object]]:
    orchestrator = importlib.import_module("src.ingestion.orchestrator")
    postgres_repository = importlib.import_module("src.ingestion.postgres_repository")
    repository = postgres_repository.PostgresRepository(dsn=dsn)
    return [group.to_dict() for group in orchestrator.get_groups(repository, settings)]


def ingest_urls(dsn: str, urls: list[str], settings: Settings) -> list[dict[str, object]]:
    orchestrator = importlib.import_module("src.ingestion.orchestrator")
    postgres_repository = importlib.import_module("src.ingestion.postgres_repository")
    request_validation = importlib.import_module("src.ingestion.request_validation")
    http_client = importlib.import_module("src.channels.http_client")
    feed = importlib.import_module("src.channels.feed")
    resolver = importlib.import_module("src.channels.resolver")

    cleaned = request_validation.validate_ingest_urls(urls, expected_count=URL_INPUT_COUNT)
    client = http_client.build_http_client(
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
        rate_limit_per_second=settings.rate_limit_per_second,
    )
    groups = orchestrator.run_ingestion(
        cleaned,
        resolver=resolver.ChannelResolver(client, settings),
        feed_client=feed.FeedClient(client, settings),
        repository=postgres_repository.PostgresRepository(dsn=dsn),
        settings=settings,
    )
    return [group.to_dict() for group in groups]


def _render_groups(st: object, groups: Sequence[Mapping[str, object]]) -> None:
    cards = build_group_cards(groups)
    if not cards:
        st.info("No videos yet. Enter three channel URLs and fetch them.")
        return

    st.subheader("Topic groups")
    for card in cards:
        st.markdown(f"**{card['label']}** · {card['video_count']} videos")
        for channel in card["channels"]:
            st.caption(f"{channel['url']} · {channel['theme']}")
        for video in card["videos"]:
            st.write(f"[{video['title']}]({video['url']}) · {video['published_at']}")

    st.subheader("Channel themes")
    st.dataframe(build_channel_themes(groups), use_container_width=True)


def run_topics_app(dsn: str, configure_page: bool = True) -> None:
    st = importlib.import_module("streamlit")
    settings = load_settings()

    if configure_page:
        st.set_page_config(page_title="Channel topic clusters", layout="wide")
    st.title("Channel topic clusters")
    st.caption(
        "Enter three channel URLs, we fetch their recent videos, cluster similar "
        "titles and summarise each channel's themes."
    )

    urls = [
        st.text_input(f"Channel URL {index + 1}", key=f"channel_url_{index}")
        for index in range(URL_INPUT_COUNT)
    ]
    fetch_col, refresh_col = st.columns(2)
    fetch_clicked = fetch_col.button("Fetch & cluster")
    refresh_clicked = refresh_col.button("Refresh groups")

    groups: Optional[list[dict[str, object]]] = None
    if fetch_clicked:
        try:
            groups = ingest_urls(dsn, urls, settings)
        except IngestionError as exc:
            st.error(str(exc))
    if refresh_clicked or groups is None:
        groups = load_groups(dsn, settings)

    _render_groups(st, groups)


def main() -> None:
    dsn = os.getenv("SUPABASE_DB_URL") or os.getenv("DATABASE_URL")
    if not dsn:
        raise ValueError("SUPABASE_DB_URL or DATABASE_URL is required")
    run_topics_app(dsn)


if __name__ == "__main__":
    main()
