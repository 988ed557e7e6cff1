import json

import pytest

from padel_tracker.exceptions import ProcedureError, ProcedureResponseError
from padel_tracker.services import procedures

ELO_CHANGES = {
    "player_1": {"before": 1200, "after": 1216, "change": 16},
    "player_2": {"before": 1180, "after": 1196, "change": 16},
    "player_3": {"before": 1210, "after": 1194, "change": -16},
    "player_4": {"before": 1190, "after": 1174, "change": -16},
}


class FakeResult:
    def __init__(self, value):
        self._value = value

    def scalar(self):
        return self._value

    def mappings(self):
        return self

    def all(self):
        return self._value


class FakeSession:
    """Stands in for AsyncSession; returns one canned value per execute()."""

    def __init__(self, *values):
        self._values = list(values)
        self.statements = []

    async def execute(self, statement, params=None):
        self.statements.append((str(statement), params))
        return FakeResult(self._values.pop(0))


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw",
    [ELO_CHANGES, json.dumps(ELO_CHANGES), json.dumps(ELO_CHANGES).encode()],
    ids=["dict", "json-text", "json-bytes"],
)
async def test_update_match_elos_parses_payload(raw) -> None:
    session = FakeSession(raw)
    changes = await procedures.update_match_elos(session, "m1")
    assert changes.player_1.after == 1216
    assert changes.player_4.change == -16
    assert "update_match_elos" in session.statements[0][0]


@pytest.mark.anyio
async def test_update_match_elos_none_when_nothing_returned() -> None:
    assert await procedures.update_match_elos(FakeSession(None), "m1") is None


@pytest.mark.anyio
async def test_procedure_error_payload_raises() -> None:
    with pytest.raises(ProcedureError) as exc:
        await procedures.update_match_elos(FakeSession({"error": "match not found"}), "m1")
    assert exc.value.status_code == 400
    assert "match not found" in exc.value.detail


@pytest.mark.anyio
async def test_malformed_payload_raises_bad_response() -> None:
    payload = dict(ELO_CHANGES)
    del payload["player_4"]
    with pytest.raises(ProcedureResponseError) as exc:
        await procedures.update_match_elos(FakeSession(payload), "m1")
    assert exc.value.status_code == 502
    assert exc.value.code == "procedure_bad_response"


@pytest.mark.anyio
async def test_inconsistent_change_rejected() -> None:
    payload = dict(ELO_CHANGES)
    payload["player_1"] = {"before": 1200, "after": 1216, "change": 40}
    with pytest.raises(ProcedureResponseError):
        await procedures.update_match_elos(FakeSession(payload), "m1")


@pytest.mark.anyio
async def test_invalid_json_rejected() -> None:
    with pytest.raises(ProcedureResponseError):
        await procedures.update_match_elos(FakeSession("{not json"), "m1")


@pytest.mark.anyio
async def test_calculate_expected_score() -> None:
    assert await procedures.calculate_expected_score(FakeSession(0.64), 1300, 1200) == 0.64


@pytest.mark.anyio
@pytest.mark.parametrize("raw", [1.5, -0.1, "0.5", None, True])
async def test_calculate_expected_score_rejects_non_probabilities(raw) -> None:
    with pytest.raises(ProcedureResponseError):
        await procedures.calculate_expected_score(FakeSession(raw), 1300, 1200)


@pytest.mark.anyio
async def test_calculate_new_elo_passes_optional_k_factor() -> None:
    session = FakeSession(1216.0, 1232.0)
    assert await procedures.calculate_new_elo(session, 1200, 1200, True) == 1216.0
    assert await procedures.calculate_new_elo(session, 1200, 1200, True, 64) == 1232.0


@pytest.mark.anyio
async def test_head_to_head_stats() -> None:
    raw = {
        "total_matches": 5,
        "player_a_wins": 3,
        "player_b_wins": 2,
        "current_streak": -1,
        "last_match_date": "2026-05-01T19:30:00",
    }
    stats = await procedures.get_head_to_head_stats(FakeSession(raw), "a", "b")
    assert stats.player_a_wins == 3
    assert stats.current_streak == -1
    assert await procedures.get_head_to_head_stats(FakeSession(None), "a", "b") is None


@pytest.mark.anyio
async def test_head_to_head_wins_cannot_exceed_total() -> None:
    raw = {"total_matches": 1, "player_a_wins": 1, "player_b_wins": 1}
    with pytest.raises(ProcedureResponseError):
        await procedures.get_head_to_head_stats(FakeSession(raw), "a", "b")


@pytest.mark.anyio
async def test_partner_stats_rows() -> None:
    rows = [
        {
            "partner_id": "p2",
            "partner_name": "Lucía",
            "partner_avatar_url": None,
            "total_matches": 4,
            "won_matches": 3,
            "lost_matches": 1,
            "win_rate": 75.0,
            "current_streak": 2,
            "last_match_date": None,
        }
    ]
    session = FakeSession(rows)
    stats = await procedures.get_player_partner_stats(session, "p1")
    assert [s.partner_id for s in stats] == ["p2"]
    assert session.statements[0][1] == {"target_player_id": "p1"}


@pytest.mark.anyio
async def test_partner_stats_rejects_out_of_range_win_rate() -> None:
    rows = [
        {
            "partner_id": "p2",
            "partner_name": "Lucía",
            "total_matches": 4,
            "won_matches": 3,
            "lost_matches": 1,
            "win_rate": 175.0,
        }
    ]
    with pytest.raises(ProcedureResponseError):
        await procedures.get_player_partner_stats(FakeSession(rows), "p1")


INVITATION_ROW = {
    "id": "inv1",
    "match_id": "m1",
    "invited_player_id": "p3",
    "invited_profile_id": "u3",
    "status": "pending",
    "invite_token": "tok",
    "match_date": "2026-05-01T19:30:00",
    "venue": "Club Norte",
    "created_by_name": "Ana",
    "player_names": ["Ana", "Bea", "Carla", "Dani"],
}


@pytest.mark.anyio
async def test_get_invitation_by_token() -> None:
    session = FakeSession([INVITATION_ROW])
    invitation = await procedures.get_invitation_by_token(session, "tok")
    assert invitation.status == "pending"
    assert invitation.player_names[2] == "Carla"
    assert session.statements[0][1] == {"token": "tok"}
    assert await procedures.get_invitation_by_token(FakeSession([]), "tok") is None


@pytest.mark.anyio
async def test_get_invitation_rejects_unknown_status() -> None:
    row = dict(INVITATION_ROW, status="maybe")
    with pytest.raises(ProcedureResponseError):
        await procedures.get_invitation_by_token(FakeSession([row]), "tok")


@pytest.mark.anyio
async def test_respond_to_invitation() -> None:
    session = FakeSession({"success": True, "message": "ok"})
    result = await procedures.respond_to_invitation(session, "tok", "accepted", "u3")
    assert result.success is True
    assert "respond_to_invitation" in session.statements[0][0]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw",
    [{"success": False, "error": "already answered"}, {"success": False}],
    ids=["with-error", "without-error"],
)
async def test_respond_to_invitation_failure(raw) -> None:
    with pytest.raises(ProcedureError) as exc:
        await procedures.respond_to_invitation(FakeSession(raw), "tok", "rejected")
    assert exc.value.status_code == 400


@pytest.mark.anyio
async def test_respond_to_invitation_malformed() -> None:
    with pytest.raises(ProcedureResponseError):
        await procedures.respond_to_invitation(FakeSession({"ok": 1}), "tok", "accepted")
