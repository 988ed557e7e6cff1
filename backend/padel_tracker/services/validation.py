from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..scoring import padel


class ValidationError(Exception):
    """Raised when a submitted match is invalid."""

    def __init__(self, detail: str, code: str = "match_invalid_score") -> None:
        super().__init__(detail)
        self.detail = detail
        self.code = code


def _flag(config: Any, name: str) -> bool:
    if config is None:
        return False
    if isinstance(config, dict):
        return bool(config.get(name, False))
    return bool(getattr(config, name, False))


def normalize_sets(sets: Sequence[Any], config: Any) -> List[Dict[str, Any]]:
    """Return plain set dictionaries with ``isTiebreak`` derived from ``config``.

    Only the third set of a super-tiebreak match is flagged; whatever the
    client sent for ``isTiebreak`` is ignored.
    """

    super_tiebreak = _flag(config, "superTiebreak")
    normalized: List[Dict[str, Any]] = []
    for index, s in enumerate(sets):
        team1 = s["team1"] if isinstance(s, dict) else s.team1
        team2 = s["team2"] if isinstance(s, dict) else s.team2
        normalized.append(
            {
                "team1": team1,
                "team2": team2,
                "isTiebreak": super_tiebreak and index == 2,
            }
        )
    return normalized


def normalize_config(config: Any) -> Dict[str, bool]:
    return {
        "goldenPoint": _flag(config, "goldenPoint"),
        "superTiebreak": _flag(config, "superTiebreak"),
    }


def validate_match_score(sets: Sequence[Any], config: Any) -> int:
    """Validate ``sets`` under padel rules and return the winning team.

    Raises:
        ValidationError: with the rule violation as ``detail``.
    """

    result = padel.validate_match(sets, config)
    if not result.valid:
        raise ValidationError(result.error or "invalid match score")
    winner = padel.match_winner(sets, config)
    if winner is None:  # pragma: no cover - validate_match guarantees a winner
        raise ValidationError("The match must have a clear winner (2 sets won).")
    return winner


def validate_lineup(team1: Sequence[str], team2: Sequence[str]) -> List[str]:
    """Return the four player ids in slot order (team 1 first).

    Raises:
        ValidationError: unless each team has two players and all four differ.
    """

    if len(team1) != 2 or len(team2) != 2:
        raise ValidationError(
            "Padel matches require exactly 2 players per team.",
            code="match_invalid_lineup",
        )
    player_ids = [*team1, *team2]
    seen: set[str] = set()
    duplicates = []
    for pid in player_ids:
        if pid in seen and pid not in duplicates:
            duplicates.append(pid)
        seen.add(pid)
    if duplicates:
        raise ValidationError(
            "duplicate players: " + ", ".join(duplicates),
            code="match_invalid_lineup",
        )
    return player_ids


def _as_utc(value: datetime) -> datetime:
    # Naive values are taken to be UTC already.
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_match_date(
    value: datetime,
    *,
    max_backdate_days: int,
    now: Optional[datetime] = None,
) -> datetime:
    """Check the date a match was played and return it as naive UTC.

    Matches cannot be dated in the future or more than
    ``max_backdate_days`` days ago.
    """

    played_at = _as_utc(value)
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)

    if played_at > current:
        raise ValidationError(
            "Matches cannot be recorded with a future date.",
            code="match_invalid_date",
        )
    if (current - played_at).days > max_backdate_days:
        raise ValidationError(
            f"Only matches from the last {max_backdate_days} days can be recorded.",
            code="match_invalid_date",
        )
    return played_at.replace(tzinfo=None)
