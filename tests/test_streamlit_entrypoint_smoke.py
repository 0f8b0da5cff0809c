from __future__ import annotations

import importlib

import pytest


router = importlib.import_module("streamlit_app")


class FakeStreamlit:
    def __init__(self):
        self.page_config_calls: list[dict[str, object]] = []

    def set_page_config(self, **kwargs):
        self.page_config_calls.append(kwargs)


def test_main_requires_database_url(monkeypatch):
    monkeypatch.delenv("SUPABASE_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(ValueError, match="DATABASE_URL"):
        router.main()


def test_main_configures_page_once_and_runs_topics_app(monkeypatch):
    fake_st = FakeStreamlit()
    calls: list[tuple[str, bool]] = []

    monkeypatch.setenv("DATABASE_URL", "postgres://example")
    monkeypatch.setattr(router, "st", fake_st)
    monkeypatch.setattr(
        router,
        "run_topics_app",
        lambda dsn, configure_page=True: calls.append((dsn, configure_page)),
    )

    router.main()

    assert calls == [("postgres://example", False)]
    assert fake_st.page_config_calls == [{"page_title": "Channel topic clusters", "layout": "wide"}]
