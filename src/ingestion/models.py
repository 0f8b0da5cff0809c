from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class ParsedVideo:
    video_id: str
    title: str
    description: str
    published_at: datetime


@dataclass
class Channel:
    key: int
    channel_id: str
    url: str
    theme_summary: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.key,
            "channel_id": self.channel_id,
            "url": self.url,
            "theme_summary": self.theme_summary,
        }


@dataclass
class Video:
    key: int
    video_id: str
    title: str
    description: str
    published_at: datetime
    channel_key: int
    topic_label: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def text(self) -> str:
        return f"{self.title} {self.description or ''}"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.key,
            "video_id": self.video_id,
            "title": self.title,
            "description": self.description,
            "published_at": self.published_at.isoformat(),
            "channel_id": self.channel_key,
            "topic_label": self.topic_label,
        }


@dataclass(frozen=True)
class TopicGroup:
    label: str
    videos: list[Video]
    channels: list[Channel]

    def to_dict(self) -> dict[str, object]:
        return {
            "label": self.label,
            "videos": [video.to_dict() for video in self.videos],
            "channels": [channel.to_dict() for channel in self.channels],
        }
