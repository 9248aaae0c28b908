"""Command line parsing, settings and the end-to-end run with a fake client."""

from datetime import datetime

import pytest

import battery_decider
from battery_decider import build_parser, local_midnight_timestamp, main, run
from conftest import DAY, START, FakeClient
from daily_aggregator import AlignmentError
from decider_settings import Settings, SettingsError
from enphase_intervals import EnphaseEndpoint
from interval_fetcher import IntervalFetcher


def _args(start=START, end=START + 2 * DAY):
    args = build_parser().parse_args(["12345", "k3y", "u1", "2024-01-01", "2024-01-03"])
    args.start_date = start
    args.end_date = end
    return args


def test_local_midnight_timestamp_uses_host_zone():
    expected = int(datetime(2024, 3, 15).timestamp())
    assert local_midnight_timestamp("2024-03-15") == expected


def test_parser_requires_five_arguments(capsys):
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["12345", "k3y", "u1", "2024-01-01"])
    assert exc_info.value.code == 2
    assert "usage: battery-decider" in capsys.readouterr().err


def test_parser_rejects_malformed_date():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["12345", "k3y", "u1", "2024-13-01", "2024-12-01"])
    assert exc_info.value.code == 2


def test_main_rejects_end_before_start():
    with pytest.raises(SystemExit) as exc_info:
        main(["12345", "k3y", "u1", "2024-02-01", "2024-01-01"])
    assert exc_info.value.code == 2


def test_run_two_day_scenario(two_day_production, two_day_consumption):
    end = START + 2 * DAY
    client = FakeClient({
        (EnphaseEndpoint.PRODUCTION, START, end): two_day_production,
        (EnphaseEndpoint.CONSUMPTION, START, end): two_day_consumption,
    })
    fetcher = IntervalFetcher(client, max_days=6, delay=0, sleep=lambda _: None)

    report = run(_args(end=end), Settings(), fetcher=fetcher)

    assert report.days == 2
    assert report.average_production_wh == 3500
    assert report.average_consumption_wh == 3500
    assert report.average_net_wh == 0
    assert report.average_exported_wh == 1000
    assert report.average_imported_wh == 1000
    # Consumption is fetched before production
    assert [call[0] for call in client.calls] == [EnphaseEndpoint.CONSUMPTION, EnphaseEndpoint.PRODUCTION]


def test_run_rejects_misaligned_series(two_day_production, two_day_consumption):
    end = START + 2 * DAY
    client = FakeClient({
        (EnphaseEndpoint.PRODUCTION, START, end): two_day_production,
        (EnphaseEndpoint.CONSUMPTION, START, end): two_day_consumption[:-1],
    })
    fetcher = IntervalFetcher(client, max_days=6, delay=0, sleep=lambda _: None)
    with pytest.raises(AlignmentError):
        run(_args(end=end), Settings(), fetcher=fetcher)


def test_main_reports_fatal_error_with_exit_code(monkeypatch):
    def failing_run(args, settings, fetcher=None):
        raise AlignmentError("Production has 4 intervals but consumption has 3")

    monkeypatch.setattr(battery_decider, "run", failing_run)
    monkeypatch.setattr(battery_decider, "setup_logging", lambda settings: None)
    assert main(["12345", "k3y", "u1", "2024-01-01", "2024-01-03"]) == 1


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("ENPHASE_MAX_QUERY_DAYS", "3")
    monkeypatch.setenv("ENPHASE_QUERY_DELAY", "0")
    monkeypatch.setenv("ENPHASE_BASE_URL", "https://api.example.test/api/v2/")
    monkeypatch.setenv("LOG_FORMAT", "JSON")
    settings = Settings.from_env(env_path="/nonexistent/.env")
    assert settings.max_query_days == 3
    assert settings.query_delay == 0
    assert settings.base_url == "https://api.example.test/api/v2"
    assert settings.log_format == "json"


@pytest.mark.parametrize("name,value", [
    ("ENPHASE_MAX_QUERY_DAYS", "0"),
    ("ENPHASE_QUERY_DELAY", "soon"),
    ("LOG_FORMAT", "xml"),
    ("LOG_LEVEL", "LOUD"),
])
def test_settings_reject_bad_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(SettingsError):
        Settings.from_env(env_path="/nonexistent/.env")
