# backend/padel_tracker/routers/matches.py
import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import config
from ..cache import stats_cache
from ..db import get_session
from ..exceptions import InvalidMatchScore, MatchNotFound, ProblemDetail, http_problem
from ..models import Match, MatchInvitation, Player
from ..rate_limit import limiter, match_rate_limit
from ..schemas import (
    EloChanges,
    InvitationOut,
    MatchConfig,
    MatchCreate,
    MatchCreatedOut,
    MatchListOut,
    MatchOut,
    MatchUpdate,
    MatchValidateIn,
    SetScore,
    ValidationResultOut,
)
from ..scoring import padel
from ..services import procedures
from ..services.validation import (
    ValidationError,
    normalize_config,
    normalize_sets,
    validate_lineup,
    validate_match_date,
    validate_match_score,
)

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/matches",
    tags=["matches"],
    responses={404: {"model": ProblemDetail}, 422: {"model": ProblemDetail}},
)


def _utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _stored_elo_changes(match: Match) -> EloChanges | None:
    if not match.elo_changes:
        return None
    try:
        return EloChanges.model_validate(match.elo_changes)
    except PydanticValidationError:
        logger.warning("match %s has malformed elo_changes; omitting", match.id)
        return None


def _to_match_out(match: Match) -> MatchOut:
    return MatchOut(
        id=match.id,
        createdBy=match.created_by,
        matchDate=_utc(match.match_date),
        venue=match.venue,
        team1=[match.player_1_id, match.player_2_id],
        team2=[match.player_3_id, match.player_4_id],
        sets=[SetScore.model_validate(s) for s in match.score_sets or []],
        winnerTeam=match.winner_team,
        config=MatchConfig(**normalize_config(match.match_config)),
        eloChanges=_stored_elo_changes(match),
        notes=match.notes,
        createdAt=_utc(match.created_at),
        updatedAt=_utc(match.updated_at),
    )


def _problem(exc: ValidationError) -> Exception:
    if exc.code == "match_invalid_score":
        return InvalidMatchScore(exc.detail)
    return http_problem(status_code=422, detail=exc.detail, code=exc.code)


async def _get_match(session: AsyncSession, mid: str) -> Match:
    match = await session.get(Match, mid)
    if match is None:
        raise MatchNotFound(mid)
    return match


def _checked_score(sets: Any, match_config: Any) -> tuple[list[dict], dict, int]:
    normalized_sets = normalize_sets(sets, match_config)
    normalized_config = normalize_config(match_config)
    try:
        winner = validate_match_score(normalized_sets, normalized_config)
    except ValidationError as exc:
        raise _problem(exc) from exc
    return normalized_sets, normalized_config, winner


# POST /api/v0/matches/validate
@router.post("/validate", response_model=ValidationResultOut)
async def validate_match_route(body: MatchValidateIn) -> ValidationResultOut:
    sets = normalize_sets(body.sets, body.config)
    result = padel.validate_match(sets, body.config)
    return ValidationResultOut(
        valid=result.valid,
        error=result.error,
        winnerTeam=padel.match_winner(sets, body.config) if result.valid else None,
    )


# POST /api/v0/matches
async def create_match(body: MatchCreate, session: AsyncSession) -> MatchCreatedOut:
    try:
        player_ids = validate_lineup(body.team1, body.team2)
        played_at = validate_match_date(
            body.matchDate, max_backdate_days=config.MATCH_MAX_BACKDATE_DAYS
        )
    except ValidationError as exc:
        raise _problem(exc) from exc

    sets, match_config, winner = _checked_score(body.sets, body.config)

    players = (
        await session.execute(select(Player).where(Player.id.in_(player_ids)))
    ).scalars().all()
    player_map = {p.id: p for p in players}
    missing = [pid for pid in player_ids if pid not in player_map]
    if missing:
        raise http_problem(
            status_code=400,
            detail="unknown players: " + ", ".join(missing),
            code="match_unknown_players",
        )

    mid = uuid.uuid4().hex
    match = Match(
        id=mid,
        created_by=body.createdBy,
        match_date=played_at,
        venue=body.venue,
        player_1_id=player_ids[0],
        player_2_id=player_ids[1],
        player_3_id=player_ids[2],
        player_4_id=player_ids[3],
        score_sets=sets,
        winner_team=winner,
        match_config=match_config,
        notes=body.notes,
    )
    session.add(match)
    # The rating procedure reads the match row, so it has to be flushed first.
    await session.flush()
    elo_changes = await procedures.update_match_elos(session, mid)

    invitations: list[MatchInvitation] = []
    for pid in player_ids:
        player = player_map[pid]
        if player.is_ghost or not player.profile_id:
            continue
        if player.profile_id == body.createdBy:
            continue
        invitation = MatchInvitation(
            id=uuid.uuid4().hex,
            match_id=mid,
            invited_player_id=pid,
            invited_profile_id=player.profile_id,
            status="pending",
            invite_token=secrets.token_urlsafe(24),
        )
        session.add(invitation)
        invitations.append(invitation)

    await session.commit()
    await stats_cache.invalidate_players(player_ids)
    logger.info(
        "Recorded match %s (%d sets, team %d won, %d invitations)",
        mid,
        len(sets),
        winner,
        len(invitations),
    )
    return MatchCreatedOut(
        id=mid,
        winnerTeam=winner,
        eloChanges=elo_changes,
        invitations=[
            InvitationOut(
                id=inv.id,
                playerId=inv.invited_player_id,
                status=inv.status,
                inviteToken=inv.invite_token,
            )
            for inv in invitations
        ],
    )


@router.post("", response_model=MatchCreatedOut, status_code=201)
@limiter.limit(match_rate_limit)
async def create_match_route(
    request: Request,
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
) -> MatchCreatedOut:
    return await create_match(body, session)


@router.get("", response_model=MatchListOut)
async def list_matches(
    playerId: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> MatchListOut:
    stmt = select(Match)
    count_stmt = select(func.count()).select_from(Match)
    if playerId:
        involves_player = or_(
            Match.player_1_id == playerId,
            Match.player_2_id == playerId,
            Match.player_3_id == playerId,
            Match.player_4_id == playerId,
        )
        stmt = stmt.where(involves_player)
        count_stmt = count_stmt.where(involves_player)
    total = (await session.execute(count_stmt)).scalar() or 0
    stmt = stmt.order_by(Match.match_date.desc(), Match.id).limit(limit).offset(offset)
    rows = (await session.execute(stmt)).scalars().all()
    return MatchListOut(
        matches=[_to_match_out(m) for m in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{mid}", response_model=MatchOut)
async def get_match(mid: str, session: AsyncSession = Depends(get_session)) -> MatchOut:
    return _to_match_out(await _get_match(session, mid))


async def update_match(mid: str, body: MatchUpdate, session: AsyncSession) -> MatchOut:
    match = await _get_match(session, mid)

    if body.sets is not None or body.config is not None:
        sets = body.sets if body.sets is not None else match.score_sets
        match_config = body.config if body.config is not None else match.match_config
        normalized_sets, normalized_config, winner = _checked_score(sets, match_config)
        match.score_sets = normalized_sets
        match.match_config = normalized_config
        match.winner_team = winner

    if body.matchDate is not None:
        try:
            match.match_date = validate_match_date(
                body.matchDate, max_backdate_days=config.MATCH_MAX_BACKDATE_DAYS
            )
        except ValidationError as exc:
            raise _problem(exc) from exc

    if "venue" in body.model_fields_set:
        match.venue = body.venue or None
    if "notes" in body.model_fields_set:
        match.notes = body.notes

    # Ratings for this match and every later one are recomputed by the
    # database trigger on update; refresh picks up the new elo_changes.
    await session.commit()
    await session.refresh(match)
    await stats_cache.invalidate_players(match.player_ids)
    logger.info("Updated match %s", mid)
    return _to_match_out(match)


@router.patch("/{mid}", response_model=MatchOut)
async def update_match_route(
    mid: str,
    body: MatchUpdate,
    session: AsyncSession = Depends(get_session),
) -> MatchOut:
    return await update_match(mid, body, session)


@router.delete("/{mid}", status_code=204)
async def delete_match(mid: str, session: AsyncSession = Depends(get_session)):
    match = await _get_match(session, mid)
    player_ids = match.player_ids
    await session.execute(delete(MatchInvitation).where(MatchInvitation.match_id == mid))
    await session.delete(match)
    await session.commit()
    await stats_cache.invalidate_players(player_ids)
    logger.info("Deleted match %s", mid)
    return Response(status_code=204)
