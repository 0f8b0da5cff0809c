import importlib
import json

import pytest


cli = importlib.import_module("src.ingestion.cli")
errors = importlib.import_module("src.ingestion.errors")
repo_mod = importlib.import_module("src.ingestion.repository")


def test_cli_exposes_ingest_command():
    parser = cli.build_parser()
    args = parser.parse_args(["ingest", "https://www.youtube.com/@a", "https://www.youtube.com/@b"])

    assert args.command == "ingest"
    assert args.urls == ["https://www.youtube.com/@a", "https://www.youtube.com/@b"]


def test_cli_ingest_requires_at_least_one_url():
    parser = cli.build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["ingest"])


def test_cli_exposes_groups_command():
    args = cli.build_parser().parse_args(["groups"])

    assert args.command == "groups"


def test_run_ingest_command_uses_in_memory_repository_without_dsn(monkeypatch):
    monkeypatch.delenv("SUPABASE_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    captured = {}

    def fake_run_ingestion(urls, resolver, feed_client, repository, settings):
        captured["urls"] = urls
        captured["repository"] = repository
        captured["timeout"] = settings.request_timeout_seconds
        return []

    monkeypatch.setattr(cli, "run_ingestion", fake_run_ingestion)

    rows = cli.run_ingest_command([" https://www.youtube.com/@a "])

    assert rows == []
    assert captured["urls"] == ["https://www.youtube.com/@a"]
    assert isinstance(captured["repository"], repo_mod.InMemoryRepository)
    assert captured["timeout"] == 15.0


def test_read_groups_command_uses_postgres_repository_when_dsn_set(monkeypatch):
    class FakeRepository:
        def __init__(self, dsn: str) -> None:
            self.dsn = dsn

        def list_videos(self):
            return []

        def list_channels(self):
            return []

    monkeypatch.setenv("DATABASE_URL", "postgres://example")
    monkeypatch.setattr(cli, "PostgresRepository", FakeRepository)

    assert cli.read_groups_command() == []


def test_main_prints_groups_json(monkeypatch, capsys):
    monkeypatch.setattr(
        cli,
        "run_ingest_command",
        lambda urls: [{"label": "No Match", "videos": [], "channels": []}],
    )

    code = cli.main(["ingest", "https://www.youtube.com/@a"])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == [
        {"label": "No Match", "videos": [], "channels": []}
    ]


def test_main_reports_ingestion_errors_on_stderr(monkeypatch, capsys):
    def failing(urls):
        raise errors.ChannelResolutionError(urls[0])

    monkeypatch.setattr(cli, "run_ingest_command", failing)

    code = cli.main(["ingest", "https://www.youtube.com/@nobody"])

    assert code == 2
    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert payload == {"error": "Unable to resolve channel ID from https://www.youtube.com/@nobody"}


def test_main_rejects_invalid_urls(monkeypatch, capsys):
    monkeypatch.delenv("SUPABASE_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    code = cli.main(["ingest", "not-a-url"])

    assert code == 2
    assert "Not a valid URL" in capsys.readouterr().err


def test_main_groups_without_dsn_reports_missing_database(monkeypatch, capsys):
    monkeypatch.delenv("SUPABASE_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr(
        cli,
        "PostgresRepository",
        lambda dsn: pytest.fail("no repository without a dsn"),
    )

    code = cli.main(["groups"])

    assert code == 2
    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert payload == {
        "error": "SUPABASE_DB_URL or DATABASE_URL is required to read stored groups"
    }
