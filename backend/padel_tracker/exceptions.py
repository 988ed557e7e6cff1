from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class PlayerNotFound(DomainException):
    def __init__(self, player_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{player_id}' not found",
            code="player_not_found",
        )


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


class InvalidMatchScore(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=422,
            title="Invalid match score",
            detail=detail,
            code="match_invalid_score",
        )


class InvitationNotFound(DomainException):
    def __init__(self) -> None:
        super().__init__(
            status_code=404,
            title="Invitation not found",
            detail="invitation not found or expired",
            code="invitation_not_found",
        )


class ProcedureResponseError(DomainException):
    """A stored procedure returned a payload that does not match its contract."""

    def __init__(self, procedure: str, detail: str) -> None:
        super().__init__(
            status_code=502,
            title="Unexpected rating service response",
            detail=f"{procedure}: {detail}",
            code="procedure_bad_response",
        )
        self.procedure = procedure


class ProcedureError(DomainException):
    """A stored procedure reported an error in its result payload."""

    def __init__(self, procedure: str, message: str) -> None:
        super().__init__(
            status_code=400,
            title="Rating service error",
            detail=f"{procedure}: {message}",
            code="procedure_error",
        )
        self.procedure = procedure


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
