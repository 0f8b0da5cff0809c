import importlib
from datetime import datetime, timezone


themes_mod = importlib.import_module("src.topics.themes")
models = importlib.import_module("src.ingestion.models")
config_mod = importlib.import_module("src.ingestion.config")

compute_channel_themes = themes_mod.compute_channel_themes
Video = models.Video
Settings = config_mod.Settings


def _video(key, title, channel_key, description=""):
    return Video(
        key=key,
        video_id=f"v{key}",
        title=title,
        description=description,
        published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        channel_key=channel_key,
    )


def test_theme_contains_most_frequent_keyword():
    videos = [
        _video(11, "alpha beta beta", channel_key=1),
        _video(12, "beta gamma", channel_key=1),
    ]

    themes = compute_channel_themes(videos)

    assert "beta" in themes[1]
    assert themes[1] == "beta, alpha, gamma"


def test_theme_keeps_top_five_with_first_seen_tie_break():
    videos = [
        _video(1, "one1 two2 three3 four4 five5 six6", channel_key=7),
        _video(2, "six6 five5", channel_key=7),
    ]

    themes = compute_channel_themes(videos)

    assert themes[7] == "five5, six6, one1, two2, three3"


def test_theme_is_none_when_channel_has_no_keywords():
    videos = [_video(1, "How to", channel_key=3, description="a new video")]

    themes = compute_channel_themes(videos)

    assert themes == {3: None}


def test_themes_are_computed_per_channel():
    videos = [
        _video(1, "rust async runtime", channel_key=1),
        _video(2, "sourdough bread baking", channel_key=2),
        _video(3, "rust ownership", channel_key=1),
    ]

    themes = compute_channel_themes(videos)

    assert themes[1].startswith("rust, ")
    assert themes[2] == "sourdough, bread, baking"


def test_theme_size_comes_from_settings():
    videos = [_video(1, "alpha beta gamma delta", channel_key=1)]

    themes = compute_channel_themes(videos, Settings(theme_keyword_count=2))

    assert themes[1] == "alpha, beta"


def test_channels_without_videos_are_absent():
    assert compute_channel_themes([]) == {}
