from datetime import datetime, timedelta, timezone

import pytest

from padel_tracker.schemas import MatchConfig, SetScore
from padel_tracker.services.validation import (
    ValidationError,
    normalize_config,
    normalize_sets,
    validate_lineup,
    validate_match_date,
    validate_match_score,
)

NOW = datetime(2026, 5, 20, 18, 0, tzinfo=timezone.utc)


def test_normalize_sets_flags_only_third_set_in_super_tiebreak_mode() -> None:
    sets = [
        SetScore(team1=6, team2=4, isTiebreak=True),
        {"team1": 3, "team2": 6},
        {"team1": 10, "team2": 7, "isTiebreak": False},
    ]
    normalized = normalize_sets(sets, MatchConfig(superTiebreak=True))
    assert [s["isTiebreak"] for s in normalized] == [False, False, True]
    assert normalize_sets(sets, None)[2]["isTiebreak"] is False


def test_normalize_config_fills_defaults() -> None:
    assert normalize_config(None) == {"goldenPoint": False, "superTiebreak": False}
    assert normalize_config({"goldenPoint": True}) == {
        "goldenPoint": True,
        "superTiebreak": False,
    }


def test_validate_match_score_returns_winner() -> None:
    sets = normalize_sets([{"team1": 4, "team2": 6}, {"team1": 3, "team2": 6}], None)
    assert validate_match_score(sets, None) == 2


def test_validate_match_score_raises_with_rule_message() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_match_score([{"team1": 6, "team2": 4}], None)
    assert exc.value.code == "match_invalid_score"
    assert exc.value.detail == "A match must have at least 2 sets."


def test_validate_lineup_returns_slot_order() -> None:
    assert validate_lineup(["a", "b"], ["c", "d"]) == ["a", "b", "c", "d"]


@pytest.mark.parametrize(
    "team1, team2",
    [(["a", "b"], ["a", "c"]), (["a", "a"], ["b", "c"])],
    ids=["across-teams", "same-team"],
)
def test_validate_lineup_rejects_duplicates(team1, team2) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_lineup(team1, team2)
    assert exc.value.code == "match_invalid_lineup"
    assert "duplicate players: a" == exc.value.detail


def test_validate_lineup_requires_two_per_team() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_lineup(["a"], ["b", "c"])
    assert exc.value.code == "match_invalid_lineup"


def test_validate_match_date_returns_naive_utc() -> None:
    played = datetime(2026, 5, 20, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    result = validate_match_date(played, max_backdate_days=30, now=NOW)
    assert result == datetime(2026, 5, 20, 10, 0)
    assert result.tzinfo is None


def test_validate_match_date_rejects_future_dates() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_match_date(NOW + timedelta(minutes=5), max_backdate_days=30, now=NOW)
    assert exc.value.code == "match_invalid_date"
    assert "future" in exc.value.detail


def test_validate_match_date_backdate_window() -> None:
    validate_match_date(NOW - timedelta(days=30, hours=23), max_backdate_days=30, now=NOW)
    with pytest.raises(ValidationError) as exc:
        validate_match_date(NOW - timedelta(days=31), max_backdate_days=30, now=NOW)
    assert exc.value.detail == "Only matches from the last 30 days can be recorded."
