import importlib

import pytest

from padel_tracker import config


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "/api"), ("", "/api"), ("v1/", "/v1"), ("/api/", "/api"), ("/", "/")],
)
def test_canon_prefix(raw, expected) -> None:
    assert config._canon_prefix(raw) == expected


def test_int_env_falls_back_on_bad_values(monkeypatch) -> None:
    monkeypatch.setenv("MATCH_MAX_BACKDATE_DAYS", "soon")
    assert config._int_env("MATCH_MAX_BACKDATE_DAYS", 30) == 30
    monkeypatch.setenv("MATCH_MAX_BACKDATE_DAYS", "-4")
    assert config._int_env("MATCH_MAX_BACKDATE_DAYS", 30) == 30
    monkeypatch.setenv("MATCH_MAX_BACKDATE_DAYS", "14")
    assert config._int_env("MATCH_MAX_BACKDATE_DAYS", 30) == 14


def test_rate_limits_disabled(monkeypatch) -> None:
    monkeypatch.setenv("DISABLE_RATE_LIMITS", "TRUE")
    assert config.rate_limits_disabled()
    monkeypatch.setenv("DISABLE_RATE_LIMITS", "0")
    assert not config.rate_limits_disabled()


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("MATCH_MAX_BACKDATE_DAYS", "7")
    monkeypatch.setenv("MATCH_RATE_LIMIT", "5/minute")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.MATCH_MAX_BACKDATE_DAYS == 7
        assert reloaded.MATCH_RATE_LIMIT == "5/minute"
    finally:
        monkeypatch.undo()
        importlib.reload(config)
