from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Optional, Protocol, cast

import psycopg2

from .models import Channel, ParsedVideo, Video


class CursorProtocol(Protocol):
    description: list[tuple[str]]

    def execute(self, sql: str, params: tuple[object, ...]) -> None: ...

    def fetchall(self) -> list[tuple[object, ...]]: ...

    def fetchone(self) -> Optional[tuple[object, ...]]: ...

    def close(self) -> None: ...


class ConnectionProtocol(Protocol):
    def cursor(self) -> CursorProtocol: ...

    def commit(self) -> None: ...

    def close(self) -> None: ...


_CHANNEL_COLUMNS = "id, channel_id, url, theme_summary"
_VIDEO_COLUMNS = (
    "id, video_id, title, description, published_at, channel_key, topic_label, created_at"
)


def _to_channel(row: tuple[object, ...]) -> Channel:
    key, channel_id, url, theme_summary = row
    return Channel(
        key=int(cast(int, key)),
        channel_id=str(channel_id),
        url=str(url),
        theme_summary=cast(Optional[str], theme_summary),
    )


def _to_video(row: tuple[object, ...]) -> Video:
    key, video_id, title, description, published_at, channel_key, topic_label, created_at = row
    return Video(
        key=int(cast(int, key)),
        video_id=str(video_id),
        title=str(title),
        description=str(description or ""),
        published_at=cast(datetime, published_at),
        channel_key=int(cast(int, channel_key)),
        topic_label=cast(Optional[str], topic_label),
        created_at=cast(datetime, created_at or datetime.now(timezone.utc)),
    )


class PostgresRepository:
    def __init__(
        self,
        dsn: str = "",
        connection_factory: Optional[Callable[[], ConnectionProtocol]] = None,
    ) -> None:
        self._dsn: str = dsn
        self._connection_factory: Optional[Callable[[], ConnectionProtocol]] = (
            connection_factory
        )

    def _connect(self) -> ConnectionProtocol:
        if self._connection_factory is not None:
            return self._connection_factory()
        if not self._dsn:
            raise ValueError("dsn is required when no connection_factory is provided")
        return cast(
            ConnectionProtocol,
            cast(object, psycopg2.connect(self._dsn)),
        )

    def _fetch_one(
        self, sql: str, params: tuple[object, ...], commit: bool = False
    ) -> Optional[tuple[object, ...]]:
        conn: ConnectionProtocol = self._connect()
        cursor: CursorProtocol = conn.cursor()
        cursor.execute(sql, params)
        row = cursor.fetchone()
        if commit:
            conn.commit()
        cursor.close()
        conn.close()
        return row

    def _fetch_all(self, sql: str, params: tuple[object, ...] = ()) -> list[tuple[object, ...]]:
        conn: ConnectionProtocol = self._connect()
        cursor: CursorProtocol = conn.cursor()
        cursor.execute(sql, params)
        rows = cursor.fetchall()
        cursor.close()
        conn.close()
        return rows

    def find_channel(self, channel_id: str) -> Optional[Channel]:
        row = self._fetch_one(
            f"SELECT {_CHANNEL_COLUMNS} FROM channels WHERE channel_id = %s",
            (channel_id,),
        )
        return _to_channel(row) if row else None

    def get_channel(self, key: int) -> Optional[Channel]:
        row = self._fetch_one(
            f"SELECT {_CHANNEL_COLUMNS} FROM channels WHERE id = %s",
            (key,),
        )
        return _to_channel(row) if row else None

    def create_channel(self, channel_id: str, url: str) -> Channel:
        row = self._fetch_one(
            f"""
            INSERT INTO channels(channel_id, url)
            VALUES (%s, %s)
            RETURNING {_CHANNEL_COLUMNS}
            """,
            (channel_id, url),
            commit=True,
        )
        if row is None:
            raise RuntimeError(f"channel insert returned no row: {channel_id}")
        return _to_channel(row)

    def save_channel(self, channel: Channel) -> Channel:
        row = self._fetch_one(
            f"""
            UPDATE channels
            SET url = %s, theme_summary = %s
            WHERE id = %s
            RETURNING {_CHANNEL_COLUMNS}
            """,
            (channel.url, channel.theme_summary, channel.key),
            commit=True,
        )
        if row is None:
            raise ValueError(f"unknown channel key: {channel.key}")
        return _to_channel(row)

    def upsert_channel(self, channel_id: str, url: str) -> Channel:
        row = self._fetch_one(
            f"""
            INSERT INTO channels(channel_id, url)
            VALUES (%s, %s)
            ON CONFLICT (channel_id) DO UPDATE SET url = EXCLUDED.url
            RETURNING {_CHANNEL_COLUMNS}
            """,
            (channel_id, url),
            commit=True,
        )
        if row is None:
            raise RuntimeError(f"channel upsert returned no row: {channel_id}")
        return _to_channel(row)

    def list_channels(self) -> list[Channel]:
        rows = self._fetch_all(f"SELECT {_CHANNEL_COLUMNS} FROM channels ORDER BY id")
        return [_to_channel(row) for row in rows]

    def find_video(self, video_id: str) -> Optional[Video]:
        row = self._fetch_one(
            f"SELECT {_VIDEO_COLUMNS} FROM videos WHERE video_id = %s",
            (video_id,),
        )
        return _to_video(row) if row else None

    def create_video(self, parsed: ParsedVideo, channel_key: int) -> Video:
        row = self._fetch_one(
            f"""
            INSERT INTO videos(video_id, title, description, published_at, channel_key)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {_VIDEO_COLUMNS}
            """,
            (
                parsed.video_id,
                parsed.title,
                parsed.description,
                parsed.published_at,
                channel_key,
            ),
            commit=True,
        )
        if row is None:
            raise RuntimeError(f"video insert returned no row: {parsed.video_id}")
        return _to_video(row)

    def save_video(self, video: Video) -> Video:
        row = self._fetch_one(
            f"""
            UPDATE videos
            SET title = %s,
                description = %s,
                published_at = %s,
                channel_key = %s,
                topic_label = %s
            WHERE id = %s
            RETURNING {_VIDEO_COLUMNS}
            """,
            (
                video.title,
                video.description,
                video.published_at,
                video.channel_key,
                video.topic_label,
                video.key,
            ),
            commit=True,
        )
        if row is None:
            raise ValueError(f"unknown video key: {video.key}")
        return _to_video(row)

    def upsert_video(self, parsed: ParsedVideo, channel_key: int) -> Video:
        # topic_label is only written by save_topic_labels.
        row = self._fetch_one(
            f"""
            INSERT INTO videos(video_id, title, description, published_at, channel_key)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (video_id) DO UPDATE SET
                title = EXCLUDED.title,
                description = EXCLUDED.description,
                published_at = EXCLUDED.published_at,
                channel_key = EXCLUDED.channel_key
            RETURNING {_VIDEO_COLUMNS}
            """,
            (
                parsed.video_id,
                parsed.title,
                parsed.description,
                parsed.published_at,
                channel_key,
            ),
            commit=True,
        )
        if row is None:
            raise RuntimeError(f"video upsert returned no row: {parsed.video_id}")
        return _to_video(row)

    def list_videos(self) -> list[Video]:
        rows = self._fetch_all(f"SELECT {_VIDEO_COLUMNS} FROM videos ORDER BY id")
        return [_to_video(row) for row in rows]

    def save_topic_labels(self, labels: Mapping[int, str]) -> int:
        conn: ConnectionProtocol = self._connect()
        cursor: CursorProtocol = conn.cursor()
        for key, label in labels.items():
            cursor.execute(
                "UPDATE videos SET topic_label = %s WHERE id = %s",
                (label, key),
            )
        conn.commit()
        cursor.close()
        conn.close()
        return len(labels)

    def save_theme_summaries(self, themes: Mapping[int, Optional[str]]) -> int:
        conn: ConnectionProtocol = self._connect()
        cursor: CursorProtocol = conn.cursor()
        for key, summary in themes.items():
            cursor.execute(
                "UPDATE channels SET theme_summary = %s WHERE id = %s",
                (summary, key),
            )
        conn.commit()
        cursor.close()
        conn.close()
        return len(themes)

    def snapshot_counts(self) -> dict[str, int]:
        channels = self._fetch_one("SELECT COUNT(*) FROM channels", ())
        videos = self._fetch_one("SELECT COUNT(*) FROM videos", ())
        return {
            "channels": int(cast(int, channels[0])) if channels else 0,
            "videos": int(cast(int, videos[0])) if videos else 0,
        }
