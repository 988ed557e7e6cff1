"""Calls into the rating procedures provisioned on the hosted database.

The procedure bodies (Elo formula, provisional K factor, statistics queries)
live server-side. This module only invokes them and checks that what comes
back matches the documented shapes before anything else touches it.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ProcedureError, ProcedureResponseError
from ..schemas import (
    EloChanges,
    HeadToHeadStats,
    InvitationDetails,
    InvitationResponseResult,
    PartnerStats,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _decode(procedure: str, raw: Any) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProcedureResponseError(procedure, f"invalid JSON ({exc.msg})") from exc
    return raw


def _parse(procedure: str, model: Type[ModelT], raw: Any) -> ModelT:
    payload = _decode(procedure, raw)
    if isinstance(payload, dict) and payload.get("error"):
        raise ProcedureError(procedure, str(payload["error"]))
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning("%s returned an unexpected payload: %s", procedure, exc)
        raise ProcedureResponseError(
            procedure, f"payload does not match {model.__name__}"
        ) from exc


def _number(procedure: str, raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal)):
        raise ProcedureResponseError(procedure, f"expected a number, got {raw!r}")
    return float(raw)


async def update_match_elos(session: AsyncSession, match_id: str) -> Optional[EloChanges]:
    """Apply the rating update for ``match_id`` and return the per-slot changes."""

    raw = (await session.execute(select(func.update_match_elos(match_id)))).scalar()
    logger.debug("update_match_elos(%s) -> %r", match_id, raw)
    if raw is None:
        return None
    return _parse("update_match_elos", EloChanges, raw)


async def calculate_expected_score(
    session: AsyncSession, player_elo: float, opponent_elo: float
) -> float:
    raw = (
        await session.execute(
            select(func.calculate_expected_score(player_elo, opponent_elo))
        )
    ).scalar()
    logger.debug(
        "calculate_expected_score(%s, %s) -> %r", player_elo, opponent_elo, raw
    )
    value = _number("calculate_expected_score", raw)
    if not 0.0 <= value <= 1.0:
        raise ProcedureResponseError(
            "calculate_expected_score", f"expected a probability, got {value}"
        )
    return value


async def calculate_new_elo(
    session: AsyncSession,
    current_elo: float,
    opponent_avg_elo: float,
    won: bool,
    k_factor: Optional[float] = None,
) -> float:
    args: list[Any] = [current_elo, opponent_avg_elo, won]
    if k_factor is not None:
        args.append(k_factor)
    raw = (await session.execute(select(func.calculate_new_elo(*args)))).scalar()
    logger.debug("calculate_new_elo%r -> %r", tuple(args), raw)
    return _number("calculate_new_elo", raw)


async def get_head_to_head_stats(
    session: AsyncSession, player_a_id: str, player_b_id: str
) -> Optional[HeadToHeadStats]:
    raw = (
        await session.execute(
            select(func.get_head_to_head_stats(player_a_id, player_b_id))
        )
    ).scalar()
    logger.debug(
        "get_head_to_head_stats(%s, %s) -> %r", player_a_id, player_b_id, raw
    )
    if raw is None:
        return None
    return _parse("get_head_to_head_stats", HeadToHeadStats, raw)


async def get_player_partner_stats(
    session: AsyncSession, player_id: str
) -> list[PartnerStats]:
    rows = (
        await session.execute(
            text("SELECT * FROM get_player_partner_stats(:target_player_id)"),
            {"target_player_id": player_id},
        )
    ).mappings().all()
    logger.debug("get_player_partner_stats(%s) -> %d rows", player_id, len(rows))
    return [
        _parse("get_player_partner_stats", PartnerStats, dict(row)) for row in rows
    ]


async def get_invitation_by_token(
    session: AsyncSession, token: str
) -> Optional[InvitationDetails]:
    rows = (
        await session.execute(
            text("SELECT * FROM get_invitation_by_token(:token)"), {"token": token}
        )
    ).mappings().all()
    logger.debug("get_invitation_by_token -> %d rows", len(rows))
    if not rows:
        return None
    return _parse("get_invitation_by_token", InvitationDetails, dict(rows[0]))


async def respond_to_invitation(
    session: AsyncSession,
    token: str,
    response: str,
    user_id: Optional[str] = None,
) -> InvitationResponseResult:
    """Accept or reject an invitation; the procedure records ``responded_at``."""

    raw = (
        await session.execute(
            select(func.respond_to_invitation(token, response, user_id))
        )
    ).scalar()
    logger.debug("respond_to_invitation(%s) -> %r", response, raw)
    result = _parse("respond_to_invitation", InvitationResponseResult, raw)
    if not result.success:
        raise ProcedureError(
            "respond_to_invitation", result.message or "invitation was not updated"
        )
    return result
