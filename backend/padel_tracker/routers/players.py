import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import stats_cache
from ..db import get_session
from ..exceptions import ProblemDetail, PlayerNotFound, http_problem
from ..models import Player
from ..schemas import (
    Category,
    HeadToHeadStats,
    PartnerStats,
    PlayerCreate,
    PlayerListOut,
    PlayerOut,
)
from ..services import procedures
from ..services.categories import CATEGORIES, category_for_rating, initial_rating

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


def _name_pattern(q: str) -> str:
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _win_rate(player: Player) -> float:
    if not player.matches_played:
        return 0.0
    return round(player.matches_won / player.matches_played * 100, 1)


def _to_player_out(player: Player, rank: int | None = None) -> PlayerOut:
    category = player.category_label
    if category not in CATEGORIES:
        category = category_for_rating(player.elo_score)
    return PlayerOut(
        id=player.id,
        displayName=player.display_name,
        isGhost=player.is_ghost,
        rating=player.elo_score,
        category=category,
        matchesPlayed=player.matches_played,
        matchesWon=player.matches_won,
        winRate=_win_rate(player),
        rank=rank,
    )


async def _get_player(session: AsyncSession, player_id: str) -> Player:
    player = await session.get(Player, player_id)
    if player is None:
        raise PlayerNotFound(player_id)
    return player


@router.post("", response_model=PlayerOut, status_code=201)
async def create_player(
    body: PlayerCreate,
    session: AsyncSession = Depends(get_session),
) -> PlayerOut:
    """Create a ghost player: someone without an account who shows up in matches."""

    pid = uuid.uuid4().hex
    player = Player(
        id=pid,
        display_name=body.displayName,
        created_by_user_id=body.createdByUserId,
        is_ghost=True,
        elo_score=float(initial_rating(body.category)),
        category_label=body.category,
        matches_played=0,
        matches_won=0,
    )
    session.add(player)
    await session.commit()
    logger.info("Created ghost player %s (%s)", pid, body.category)
    return _to_player_out(player)


@router.get("", response_model=PlayerListOut)
async def list_players(
    q: str = "",
    category: Category | None = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> PlayerListOut:
    """Players ordered by rating, best first."""

    stmt = select(Player)
    count_stmt = select(func.count()).select_from(Player)
    if q:
        name_filter = Player.display_name.ilike(_name_pattern(q), escape="\\")
        stmt = stmt.where(name_filter)
        count_stmt = count_stmt.where(name_filter)
    if category:
        stmt = stmt.where(Player.category_label == category)
        count_stmt = count_stmt.where(Player.category_label == category)
    total = (await session.execute(count_stmt)).scalar() or 0
    stmt = (
        stmt.order_by(Player.elo_score.desc(), Player.display_name)
        .limit(limit)
        .offset(offset)
    )
    rows = (await session.execute(stmt)).scalars().all()
    players = [
        _to_player_out(p, rank=offset + index + 1) for index, p in enumerate(rows)
    ]
    return PlayerListOut(players=players, total=total, limit=limit, offset=offset)


@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(
    player_id: str, session: AsyncSession = Depends(get_session)
) -> PlayerOut:
    return _to_player_out(await _get_player(session, player_id))


@router.get("/{player_id}/partners", response_model=list[PartnerStats])
async def partner_stats(
    player_id: str, session: AsyncSession = Depends(get_session)
) -> list[PartnerStats]:
    key = ("partners", player_id)
    cached = await stats_cache.get(key)
    if cached is not None:
        return cached

    await _get_player(session, player_id)
    stats = await procedures.get_player_partner_stats(session, player_id)
    await stats_cache.set(key, stats)
    return stats


@router.get("/{player_id}/head-to-head/{other_id}", response_model=HeadToHeadStats)
async def head_to_head(
    player_id: str,
    other_id: str,
    session: AsyncSession = Depends(get_session),
) -> HeadToHeadStats:
    """Record of ``player_id`` (player A) against ``other_id`` (player B)."""

    if player_id == other_id:
        raise http_problem(
            status_code=400,
            detail="head-to-head needs two different players",
            code="head_to_head_same_player",
        )
    key = ("h2h", player_id, other_id)
    cached = await stats_cache.get(key)
    if cached is not None:
        return cached

    await _get_player(session, player_id)
    await _get_player(session, other_id)
    stats = await procedures.get_head_to_head_stats(session, player_id, other_id)
    if stats is None:
        stats = HeadToHeadStats(total_matches=0, player_a_wins=0, player_b_wins=0)
    await stats_cache.set(key, stats)
    return stats
