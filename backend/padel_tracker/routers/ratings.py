from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import PlayerNotFound, ProblemDetail
from ..models import Player
from ..schemas import ExpectedScoreIn, ExpectedScoreOut, RatingProjectionOut
from ..services import procedures

router = APIRouter(
    prefix="/ratings",
    tags=["ratings"],
    responses={404: {"model": ProblemDetail}, 502: {"model": ProblemDetail}},
)


# POST /api/v0/ratings/expected-score
@router.post("/expected-score", response_model=ExpectedScoreOut)
async def expected_score(
    body: ExpectedScoreIn,
    session: AsyncSession = Depends(get_session),
) -> ExpectedScoreOut:
    """Win probability of each team and what every player stands to gain or lose."""

    player_ids = [*body.team1, *body.team2]
    rows = (
        await session.execute(select(Player).where(Player.id.in_(player_ids)))
    ).scalars().all()
    ratings = {p.id: p.elo_score for p in rows}
    for pid in player_ids:
        if pid not in ratings:
            raise PlayerNotFound(pid)

    team1_rating = sum(ratings[pid] for pid in body.team1) / len(body.team1)
    team2_rating = sum(ratings[pid] for pid in body.team2) / len(body.team2)
    team1_expected = await procedures.calculate_expected_score(
        session, team1_rating, team2_rating
    )

    projections = []
    for pid in player_ids:
        opponent_avg = team2_rating if pid in body.team1 else team1_rating
        projections.append(
            RatingProjectionOut(
                playerId=pid,
                rating=ratings[pid],
                ifWin=await procedures.calculate_new_elo(
                    session, ratings[pid], opponent_avg, True
                ),
                ifLoss=await procedures.calculate_new_elo(
                    session, ratings[pid], opponent_avg, False
                ),
            )
        )

    return ExpectedScoreOut(
        team1Rating=team1_rating,
        team2Rating=team2_rating,
        team1ExpectedScore=team1_expected,
        team2ExpectedScore=1 - team1_expected,
        projections=projections,
    )
