import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import InvitationNotFound, ProblemDetail
from ..schemas import InvitationDetails, InvitationRespondIn, InvitationRespondOut
from ..services import procedures

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/invitations",
    tags=["invitations"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


# GET /api/v0/invitations/{token}
@router.get("/{token}", response_model=InvitationDetails)
async def get_invitation(
    token: str, session: AsyncSession = Depends(get_session)
) -> InvitationDetails:
    invitation = await procedures.get_invitation_by_token(session, token)
    if invitation is None:
        raise InvitationNotFound()
    return invitation


# POST /api/v0/invitations/{token}/respond
@router.post("/{token}/respond", response_model=InvitationRespondOut)
async def respond_to_invitation(
    token: str,
    body: InvitationRespondIn,
    session: AsyncSession = Depends(get_session),
) -> InvitationRespondOut:
    if await procedures.get_invitation_by_token(session, token) is None:
        raise InvitationNotFound()
    result = await procedures.respond_to_invitation(
        session, token, body.response, body.userId
    )
    await session.commit()
    logger.info("Invitation %s", body.response)
    return InvitationRespondOut(token=token, status=body.response, message=result.message)
