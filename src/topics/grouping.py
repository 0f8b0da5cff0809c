from collections.abc import Iterable

from src.ingestion.config import Settings
from src.ingestion.models import Channel, TopicGroup, Video


def build_groups(
    videos: Iterable[Video],
    channels: Iterable[Channel],
    no_match_label: str = Settings.no_match_label,
) -> list[TopicGroup]:
    channel_by_key = {channel.key: channel for channel in channels}
    grouped_videos: dict[str, list[Video]] = {}
    grouped_channel_keys: dict[str, dict[int, None]] = {}

    for video in videos:
        label = video.topic_label or no_match_label
        grouped_videos.setdefault(label, []).append(video)
        grouped_channel_keys.setdefault(label, {})[video.channel_key] = None

    groups: list[TopicGroup] = []
    for label, members in grouped_videos.items():
        found = [
            channel_by_key[key]
            for key in grouped_channel_keys[label]
            if key in channel_by_key
        ]
        groups.append(TopicGroup(label=label, videos=members, channels=found))
    return groups
