import os
from collections.abc import Mapping
from dataclasses import dataclass, replace


STOP_WORDS: frozenset[str] = frozenset(
    {
        "the",
        "a",
        "an",
        "and",
        "or",
        "to",
        "of",
        "for",
        "with",
        "in",
        "on",
        "at",
        "is",
        "are",
        "be",
        "this",
        "that",
        "it",
        "from",
        "by",
        "about",
        "video",
        "official",
        "new",
        "how",
        "why",
    }
)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119 Safari/537.36"
)


@dataclass(frozen=True)
class Settings:
    max_videos_per_channel: int = 15
    overlap_threshold: int = 3
    label_keyword_count: int = 3
    theme_keyword_count: int = 5
    no_match_label: str = "No Match"
    stop_words: frozenset[str] = STOP_WORDS
    request_timeout_seconds: float = 15.0
    max_retries: int = 2
    rate_limit_per_second: float = 5.0
    feed_base_url: str = "https://www.youtube.com/feeds/videos.xml"
    browser_user_agent: str = BROWSER_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"


_INT_OVERRIDES: dict[str, str] = {
    "TOPICS_MAX_VIDEOS_PER_CHANNEL": "max_videos_per_channel",
    "TOPICS_OVERLAP_THRESHOLD": "overlap_threshold",
}
_FLOAT_OVERRIDES: dict[str, str] = {
    "TOPICS_REQUEST_TIMEOUT_SECONDS": "request_timeout_seconds",
}


def load_settings(environ: Mapping[str, str] = os.environ) -> Settings:
    overrides: dict[str, object] = {}

    for env_name, field_name in _INT_OVERRIDES.items():
        raw = environ.get(env_name, "").strip()
        if not raw:
            continue
        try:
            value = int(raw)
        except ValueError as exc:
            raise ValueError(f"{env_name} must be an integer, got {raw!r}") from exc
        if value < 1:
            raise ValueError(f"{env_name} must be >= 1")
        overrides[field_name] = value

    for env_name, field_name in _FLOAT_OVERRIDES.items():
        raw = environ.get(env_name, "").strip()
        if not raw:
            continue
        try:
            seconds = float(raw)
        except ValueError as exc:
            raise ValueError(f"{env_name} must be a number, got {raw!r}") from exc
        if seconds <= 0:
            raise ValueError(f"{env_name} must be > 0")
        overrides[field_name] = seconds

    return replace(Settings(), **overrides)


def resolve_dsn(environ: Mapping[str, str] = os.environ) -> str:
    return environ.get("SUPABASE_DB_URL") or environ.get("DATABASE_URL") or ""
