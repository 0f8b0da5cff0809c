import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Optional

from .models import Channel, ParsedVideo, Video


class InMemoryRepository:
    def __init__(self) -> None:
        self.channels: dict[int, Channel] = {}
        self.videos: dict[int, Video] = {}
        self._channel_keys: dict[str, int] = {}
        self._video_keys: dict[str, int] = {}
        self._next_channel_key = 1
        self._next_video_key = 1
        self._lock = threading.RLock()

    def find_channel(self, channel_id: str) -> Optional[Channel]:
        key = self._channel_keys.get(channel_id)
        return self.channels.get(key) if key is not None else None

    def get_channel(self, key: int) -> Optional[Channel]:
        return self.channels.get(key)

    def create_channel(self, channel_id: str, url: str) -> Channel:
        with self._lock:
            if channel_id in self._channel_keys:
                raise ValueError(f"channel already exists: {channel_id}")
            channel = Channel(key=self._next_channel_key, channel_id=channel_id, url=url)
            self._next_channel_key += 1
            self.save_channel(channel)
            return channel

    def save_channel(self, channel: Channel) -> Channel:
        with self._lock:
            self.channels[channel.key] = channel
            self._channel_keys[channel.channel_id] = channel.key
            return channel

    def upsert_channel(self, channel_id: str, url: str) -> Channel:
        with self._lock:
            channel = self.find_channel(channel_id)
            if channel is None:
                return self.create_channel(channel_id, url)
            channel.url = url
            return self.save_channel(channel)

    def list_channels(self) -> list[Channel]:
        return [self.channels[key] for key in sorted(self.channels)]

    def find_video(self, video_id: str) -> Optional[Video]:
        key = self._video_keys.get(video_id)
        return self.videos.get(key) if key is not None else None

    def create_video(self, parsed: ParsedVideo, channel_key: int) -> Video:
        with self._lock:
            if parsed.video_id in self._video_keys:
                raise ValueError(f"video already exists: {parsed.video_id}")
            if channel_key not in self.channels:
                raise ValueError(f"unknown channel key: {channel_key}")
            video = Video(
                key=self._next_video_key,
                video_id=parsed.video_id,
                title=parsed.title,
                description=parsed.description,
                published_at=parsed.published_at,
                channel_key=channel_key,
                created_at=datetime.now(timezone.utc),
            )
            self._next_video_key += 1
            self.save_video(video)
            return video

    def save_video(self, video: Video) -> Video:
        with self._lock:
            self.videos[video.key] = video
            self._video_keys[video.video_id] = video.key
            return video

    def upsert_video(self, parsed: ParsedVideo, channel_key: int) -> Video:
        with self._lock:
            video = self.find_video(parsed.video_id)
            if video is None:
                return self.create_video(parsed, channel_key)
            video.title = parsed.title
            video.description = parsed.description
            video.published_at = parsed.published_at
            video.channel_key = channel_key
            return self.save_video(video)

    def list_videos(self) -> list[Video]:
        return [self.videos[key] for key in sorted(self.videos)]

    def save_topic_labels(self, labels: Mapping[int, str]) -> int:
        with self._lock:
            for key, label in labels.items():
                self.videos[key].topic_label = label
            return len(labels)

    def save_theme_summaries(self, themes: Mapping[int, Optional[str]]) -> int:
        updated = 0
        with self._lock:
            for key, summary in themes.items():
                channel = self.channels.get(key)
                if channel is None:
                    continue
                channel.theme_summary = summary
                updated += 1
        return updated

    def snapshot_counts(self) -> dict[str, int]:
        return {
            "channels": len(self.channels),
            "videos": len(self.videos),
        }
