"""Padel scoring rules.

Validates submitted set and match scores and tracks live scoring
(points -> games -> sets) for a best-of-three doubles match."""

from collections.abc import Mapping
from typing import Any, Dict, NamedTuple, Optional, Sequence

SET_GAMES = 6
MAX_SET_GAMES = 7
SUPER_TIEBREAK_POINTS = 10
TIEBREAK_POINTS = 7
SETS_TO_WIN = 2
MAX_SETS = 3


class ValidationResult(NamedTuple):
    valid: bool
    error: Optional[str] = None


def _set_values(set_score: Any) -> tuple[int, int, bool]:
    if isinstance(set_score, Mapping):
        return (
            set_score["team1"],
            set_score["team2"],
            bool(set_score.get("isTiebreak", False)),
        )
    return (
        set_score.team1,
        set_score.team2,
        bool(getattr(set_score, "isTiebreak", False)),
    )


def _super_tiebreak_enabled(config: Any) -> bool:
    if config is None:
        return False
    if isinstance(config, Mapping):
        return bool(config.get("superTiebreak", False))
    return bool(getattr(config, "superTiebreak", False))


def _set_label(index: int, is_super_tiebreak: bool) -> str:
    return "Super Tiebreak" if is_super_tiebreak else f"Set {index + 1}"


def is_valid_set_score(team1: int, team2: int, is_super_tiebreak: bool) -> bool:
    """Return ``True`` if ``team1``-``team2`` is a reachable set score.

    Both finished sets (``6-4``, ``7-6``) and sets still in progress
    (``4-3``) are accepted. Use :func:`get_set_winner` to tell them apart.
    Super tie-breaks are capped at 10 points, so ``10-9`` and ``12-10`` are
    rejected.
    """

    if team1 < 0 or team2 < 0:
        return False

    if is_super_tiebreak:
        if team1 > SUPER_TIEBREAK_POINTS or team2 > SUPER_TIEBREAK_POINTS:
            return False
        if team1 == SUPER_TIEBREAK_POINTS:
            return team2 <= SUPER_TIEBREAK_POINTS - 2
        if team2 == SUPER_TIEBREAK_POINTS:
            return team1 <= SUPER_TIEBREAK_POINTS - 2
        return True

    if team1 > MAX_SET_GAMES or team2 > MAX_SET_GAMES:
        return False

    # 7-5 is a clean win, 7-6 a tiebreak win
    if team1 == MAX_SET_GAMES:
        return team2 in (SET_GAMES - 1, SET_GAMES)
    if team2 == MAX_SET_GAMES:
        return team1 in (SET_GAMES - 1, SET_GAMES)

    # 6-5 has to be played on to 7-5 or 7-6
    if team1 == SET_GAMES:
        return team2 <= SET_GAMES - 2
    if team2 == SET_GAMES:
        return team1 <= SET_GAMES - 2

    return True


def get_set_winner(team1: int, team2: int, is_super_tiebreak: bool) -> Optional[int]:
    """Return ``1`` or ``2`` for the team that won the set, ``None`` otherwise."""

    if not is_valid_set_score(team1, team2, is_super_tiebreak):
        return None

    if is_super_tiebreak:
        if team1 == SUPER_TIEBREAK_POINTS and team2 <= SUPER_TIEBREAK_POINTS - 2:
            return 1
        if team2 == SUPER_TIEBREAK_POINTS and team1 <= SUPER_TIEBREAK_POINTS - 2:
            return 2
        return None

    if team1 == MAX_SET_GAMES:
        return 1
    if team2 == MAX_SET_GAMES:
        return 2
    if team1 == SET_GAMES and team2 <= SET_GAMES - 2:
        return 1
    if team2 == SET_GAMES and team1 <= SET_GAMES - 2:
        return 2
    return None


def validate_completed_set(
    team1: int, team2: int, is_super_tiebreak: bool
) -> ValidationResult:
    """Check that a single set is both valid and finished."""

    if not is_valid_set_score(team1, team2, is_super_tiebreak):
        return ValidationResult(False, f"invalid score ({team1}-{team2})")
    if get_set_winner(team1, team2, is_super_tiebreak) is None:
        if is_super_tiebreak:
            return ValidationResult(
                False,
                f"the super tiebreak is not finished ({team1}-{team2}); "
                "it is won at 10 points with a 2 point lead",
            )
        return ValidationResult(
            False,
            f"the set is not finished ({team1}-{team2}); "
            "a set is won 6-0 to 6-4, 7-5 or 7-6",
        )
    return ValidationResult(True)


def can_play_third_set(sets: Sequence[Any]) -> bool:
    """Return ``True`` if the first two sets were split one each.

    Only the first two entries are inspected; each set is scored according
    to its own ``isTiebreak`` flag.
    """

    if len(sets) < 2:
        return False

    winners = []
    for set_score in sets[:2]:
        team1, team2, is_tiebreak = _set_values(set_score)
        winners.append(get_set_winner(team1, team2, is_tiebreak))

    if winners[0] is None or winners[1] is None:
        return False
    return winners[0] != winners[1]


def count_sets_won(sets: Sequence[Any], config: Any = None) -> tuple[int, int]:
    """Tally the sets won by each team.

    The third set (index 2) is scored as a super tie-break when the match
    config enables ``superTiebreak``.
    """

    super_tiebreak = _super_tiebreak_enabled(config)
    team1_sets = team2_sets = 0
    for index, set_score in enumerate(sets):
        team1, team2, _ = _set_values(set_score)
        winner = get_set_winner(team1, team2, super_tiebreak and index == 2)
        if winner == 1:
            team1_sets += 1
        elif winner == 2:
            team2_sets += 1
    return team1_sets, team2_sets


def match_winner(sets: Sequence[Any], config: Any = None) -> Optional[int]:
    team1_sets, team2_sets = count_sets_won(sets, config)
    if team1_sets > team2_sets:
        return 1
    if team2_sets > team1_sets:
        return 2
    return None


def validate_match(sets: Sequence[Any], config: Any = None) -> ValidationResult:
    """Validate a complete best-of-three padel match.

    Checks run in order and the first failure is reported:

    - at least 2 (and at most 3) sets;
    - every set score is valid for its type, the third set being a super
      tie-break when ``config.superTiebreak`` is set;
    - one team won at least 2 sets;
    - a third set is only present when the first two were split, and it has
      a winner;
    - with only 2 sets, one team won both.
    """

    if len(sets) < 2:
        return ValidationResult(False, "A match must have at least 2 sets.")
    if len(sets) > MAX_SETS:
        return ValidationResult(False, f"A match can have at most {MAX_SETS} sets.")

    super_tiebreak = _super_tiebreak_enabled(config)
    for index, set_score in enumerate(sets):
        team1, team2, _ = _set_values(set_score)
        is_super_tiebreak = super_tiebreak and index == 2
        if not is_valid_set_score(team1, team2, is_super_tiebreak):
            label = _set_label(index, is_super_tiebreak)
            return ValidationResult(
                False,
                f"{label} has an invalid score ({team1}-{team2}). "
                "Check the padel scoring rules.",
            )

    team1_sets, team2_sets = count_sets_won(sets, config)
    if team1_sets < SETS_TO_WIN and team2_sets < SETS_TO_WIN:
        return ValidationResult(
            False, "The match must have a clear winner (2 sets won)."
        )

    if len(sets) == 3:
        if not can_play_third_set(sets[:2]):
            return ValidationResult(
                False,
                "A third set cannot be played when a team already won the "
                "first 2 sets.",
            )
        team1, team2, _ = _set_values(sets[2])
        if get_set_winner(team1, team2, super_tiebreak) is None:
            return ValidationResult(False, "The third set must have a winner.")

    if len(sets) == 2 and team1_sets != 2 and team2_sets != 2:
        return ValidationResult(
            False, "With 2 sets, one team must have won both."
        )

    return ValidationResult(True)


# ---------------------------------------------------------------------------
# Live scoring
# ---------------------------------------------------------------------------

def init_state(config: Dict) -> Dict:
    """Initialise the scoreboard state.

    ``config`` may contain ``goldenPoint`` (the point played at 40-40
    decides the game) and ``superTiebreak`` (a 1-1 match is decided by a
    tie-break to 10 points instead of a third set). ``tiebreakTo`` sets the
    points needed to win a 6-6 tiebreak (default ``7``).
    """

    return {
        "config": {
            "goldenPoint": bool(config.get("goldenPoint", False)),
            "superTiebreak": bool(config.get("superTiebreak", False)),
            "tiebreakTo": config.get("tiebreakTo", TIEBREAK_POINTS),
        },
        "points": {"A": 0, "B": 0},
        "games": {"A": 0, "B": 0},
        "sets": {"A": 0, "B": 0},
        "tiebreak": False,
        "superTiebreak": False,
        "setScores": [],
    }


def _other(side: str) -> str:
    return "B" if side == "A" else "A"


def _close_set(state: Dict, side: str, team1: int, team2: int, is_tiebreak: bool) -> None:
    state["sets"][side] += 1
    state["setScores"].append(
        {"team1": team1, "team2": team2, "isTiebreak": is_tiebreak}
    )
    state["points"]["A"] = state["points"]["B"] = 0
    state["games"]["A"] = state["games"]["B"] = 0
    state["tiebreak"] = False
    state["superTiebreak"] = (
        state["config"]["superTiebreak"]
        and state["sets"]["A"] == state["sets"]["B"] == SETS_TO_WIN - 1
    )


def is_finished(state: Dict) -> bool:
    return max(state["sets"]["A"], state["sets"]["B"]) >= SETS_TO_WIN


def apply(event: Dict, state: Dict) -> Dict:
    if event.get("type") != "POINT" or event.get("by") not in ("A", "B"):
        raise ValueError("invalid padel event")
    side = event["by"]
    opp = _other(side)

    if is_finished(state):
        return state

    cfg = state["config"]
    state["points"][side] += 1
    ps, po = state["points"][side], state["points"][opp]

    if state.get("superTiebreak"):
        # Plays on past 10 (e.g. 11-9); validate_match caps the super tiebreak at 10.
        if ps >= SUPER_TIEBREAK_POINTS and ps - po >= 2:
            _close_set(state, side, state["points"]["A"], state["points"]["B"], True)
        return state

    if state.get("tiebreak"):
        if ps >= cfg.get("tiebreakTo", TIEBREAK_POINTS) and ps - po >= 2:
            state["games"][side] += 1
            _close_set(state, side, state["games"]["A"], state["games"]["B"], False)
        return state

    if ps >= 4 and (ps - po >= 2 or (cfg.get("goldenPoint") and po >= 3)):
        state["games"][side] += 1
        state["points"]["A"] = state["points"]["B"] = 0
        gs, go = state["games"][side], state["games"][opp]
        if state["games"]["A"] == SET_GAMES and state["games"]["B"] == SET_GAMES:
            state["tiebreak"] = True
        elif gs >= SET_GAMES and gs - go >= 2:
            _close_set(state, side, state["games"]["A"], state["games"]["B"], False)
    return state


def summary(state: Dict) -> Dict:
    winner = None
    if is_finished(state):
        winner = 1 if state["sets"]["A"] > state["sets"]["B"] else 2
    return {
        "points": state["points"],
        "games": state["games"],
        "sets": state["sets"],
        "setScores": list(state["setScores"]),
        "tiebreak": state["tiebreak"],
        "superTiebreak": state["superTiebreak"],
        "winnerTeam": winner,
        "config": state["config"],
    }


def _push(events: list, state: Dict, side: str, count: int) -> Dict:
    for _ in range(count):
        ev = {"type": "POINT", "by": side}
        events.append(ev)
        state = apply(ev, state)
    return state


def record_sets(set_scores, state=None):
    """Generate point events that reproduce the given set scores.

    ``set_scores`` is an iterable of ``(team1, team2)`` tuples. Each score
    must be a finished set for the mode the scoreboard is in when the set
    starts (a super tie-break once a super-tiebreak match is tied 1-1).
    """

    state = state or init_state({})
    events = []

    for t1, t2 in set_scores:
        is_super_tiebreak = bool(state.get("superTiebreak"))
        winner_team = get_set_winner(t1, t2, is_super_tiebreak)
        if winner_team is None:
            raise ValueError(f"{t1}-{t2} is not a finished padel set")
        winner = "A" if winner_team == 1 else "B"
        loser = _other(winner)
        win_score, lose_score = (t1, t2) if winner == "A" else (t2, t1)

        if is_super_tiebreak:
            for _ in range(lose_score):
                state = _push(events, state, winner, 1)
                state = _push(events, state, loser, 1)
            state = _push(events, state, winner, win_score - lose_score)
            continue

        # Alternate games so the set never ends early; four straight points
        # take a game.
        for _ in range(lose_score):
            state = _push(events, state, winner, 4)
            state = _push(events, state, loser, 4)

        if win_score == MAX_SET_GAMES and lose_score == SET_GAMES:
            tiebreak_to = state["config"].get("tiebreakTo", TIEBREAK_POINTS)
            state = _push(events, state, winner, tiebreak_to)
        else:
            for _ in range(win_score - lose_score):
                state = _push(events, state, winner, 4)

    return events, state
