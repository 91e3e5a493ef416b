"""Unit tests for community_calendar.config_loader."""

from pathlib import Path

import pytest

from community_calendar.config_loader import Config, load_config
from community_calendar.exceptions import ConfigError

pytestmark = pytest.mark.unit


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load_config(str(tmp_path / "absent.yaml"))
    assert cfg == Config()
    assert cfg.default_duration_minutes == 60
    assert (cfg.years_back, cfg.years_ahead) == (1, 5)


def test_yaml_file_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "events_source: https://example.org/events.json\n"
        "timezone: America/Chicago\n"
        "log_level: debug\n"
        "default_duration_minutes: '90'\n"
        "years_ahead: 3\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg.events_source == "https://example.org/events.json"
    assert cfg.timezone == "America/Chicago"
    assert cfg.log_level == "DEBUG"
    assert cfg.default_duration_minutes == 90
    assert cfg.years_ahead == 3


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == Config()


def test_non_mapping_top_level_raises(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("events_source: file.json\ntimezone: UTC\n", encoding="utf-8")
    monkeypatch.setenv("COMMUNITYCAL_EVENTS_SOURCE", "env.json")
    monkeypatch.setenv("COMMUNITYCAL_TIMEZONE", "America/Chicago")

    cfg = load_config(str(path))
    assert cfg.events_source == "env.json"
    assert cfg.timezone == "America/Chicago"


def test_from_dict_coerces_bad_values() -> None:
    cfg = Config.from_dict(
        {
            "default_duration_minutes": 0,
            "years_back": "lots",
            "years_ahead": -2,
            "request_timeout": "slow",
            "timezone": "",
        }
    )
    assert cfg.default_duration_minutes == 1
    assert cfg.years_back == 1
    assert cfg.years_ahead == 0
    assert cfg.request_timeout == 10.0
    assert cfg.timezone is None
