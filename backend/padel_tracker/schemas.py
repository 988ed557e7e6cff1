from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator, field_validator, ConfigDict

from .services.categories import DEFAULT_CATEGORY

Category = Literal["8va", "7ma", "6ta", "5ta", "4ta", "3ra", "2da", "1ra"]

# Tolerated drift between ``after - before`` and ``change`` in rating
# payloads; the procedures round each value independently.
RATING_ROUNDING_TOLERANCE = 1.0


def _strip_required(value: str, field: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field} must not be empty")
    return trimmed


class SetScore(BaseModel):
    team1: int
    team2: int
    isTiebreak: bool = False

    @field_validator("team1", "team2", mode="before")
    @classmethod
    def _reject_booleans(cls, value):
        # bool is a subclass of int
        if isinstance(value, bool):
            raise ValueError("set scores must be integers (not booleans)")
        return value


class MatchConfig(BaseModel):
    goldenPoint: bool = False
    superTiebreak: bool = False

    model_config = ConfigDict(extra="forbid")


class EloChange(BaseModel):
    before: float
    after: float
    change: float

    @model_validator(mode="after")
    def _consistent_change(self):
        if abs((self.after - self.before) - self.change) > RATING_ROUNDING_TOLERANCE:
            raise ValueError("change does not match after - before")
        return self


class EloChanges(BaseModel):
    player_1: EloChange
    player_2: EloChange
    player_3: EloChange
    player_4: EloChange


class HeadToHeadStats(BaseModel):
    total_matches: int = Field(..., ge=0)
    player_a_wins: int = Field(..., ge=0)
    player_b_wins: int = Field(..., ge=0)
    # > 0: player A is on a winning streak, < 0: player B is
    current_streak: int = 0
    last_match_date: Optional[datetime] = None

    @model_validator(mode="after")
    def _wins_within_total(self):
        if self.player_a_wins + self.player_b_wins > self.total_matches:
            raise ValueError("wins exceed total_matches")
        return self


class PartnerStats(BaseModel):
    partner_id: str
    partner_name: str
    partner_avatar_url: Optional[str] = None
    total_matches: int = Field(..., ge=0)
    won_matches: int = Field(..., ge=0)
    lost_matches: int = Field(..., ge=0)
    win_rate: float = Field(..., ge=0, le=100)
    current_streak: int = 0
    last_match_date: Optional[datetime] = None

    @model_validator(mode="after")
    def _results_within_total(self):
        if self.won_matches + self.lost_matches > self.total_matches:
            raise ValueError("won + lost exceed total_matches")
        return self


class MatchValidateIn(BaseModel):
    sets: list[SetScore]
    config: MatchConfig = Field(default_factory=MatchConfig)


class ValidationResultOut(BaseModel):
    valid: bool
    error: Optional[str] = None
    winnerTeam: Optional[Literal[1, 2]] = None


class MatchCreate(BaseModel):
    createdBy: str = Field(..., min_length=1)
    matchDate: datetime
    venue: Optional[str] = Field(default=None, max_length=200)
    team1: list[str] = Field(..., min_length=2, max_length=2)
    team2: list[str] = Field(..., min_length=2, max_length=2)
    sets: list[SetScore]
    config: MatchConfig = Field(default_factory=MatchConfig)
    notes: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(extra="forbid")

    @field_validator("createdBy", mode="before")
    @classmethod
    def _validate_created_by(cls, value: str) -> str:
        return _strip_required(value, "createdBy")

    @field_validator("venue", mode="before")
    @classmethod
    def _normalize_venue(cls, value):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("venue must be a string")
        return value.strip() or None

    @field_validator("team1", "team2", mode="before")
    @classmethod
    def _normalize_team(cls, value):
        if not isinstance(value, list):
            raise ValueError("teams must be a list of player ids")
        return [_strip_required(pid, "player id") for pid in value]


class MatchUpdate(BaseModel):
    matchDate: Optional[datetime] = None
    venue: Optional[str] = Field(default=None, max_length=200)
    sets: Optional[list[SetScore]] = None
    config: Optional[MatchConfig] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(extra="forbid")

    @field_validator("venue", mode="before")
    @classmethod
    def _normalize_venue(cls, value):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("venue must be a string")
        return value.strip()


class InvitationOut(BaseModel):
    id: str
    playerId: str
    status: Literal["pending", "accepted", "rejected"]
    inviteToken: str


class MatchOut(BaseModel):
    id: str
    createdBy: str
    matchDate: datetime
    venue: Optional[str] = None
    team1: list[str]
    team2: list[str]
    sets: list[SetScore]
    winnerTeam: Literal[1, 2]
    config: MatchConfig
    eloChanges: Optional[EloChanges] = None
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class MatchCreatedOut(BaseModel):
    id: str
    winnerTeam: Literal[1, 2]
    eloChanges: Optional[EloChanges] = None
    invitations: list[InvitationOut] = Field(default_factory=list)


class MatchListOut(BaseModel):
    matches: list[MatchOut]
    total: int
    limit: int
    offset: int


class PlayerCreate(BaseModel):
    displayName: str = Field(..., min_length=1, max_length=100)
    category: Category = DEFAULT_CATEGORY
    createdByUserId: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("displayName", mode="before")
    @classmethod
    def _validate_display_name(cls, value: str) -> str:
        return _strip_required(value, "displayName")


class PlayerOut(BaseModel):
    id: str
    displayName: str
    isGhost: bool
    rating: float
    category: Category
    matchesPlayed: int
    matchesWon: int
    winRate: float
    rank: Optional[int] = None


class PlayerListOut(BaseModel):
    players: list[PlayerOut]
    total: int
    limit: int
    offset: int


class CategoryOut(BaseModel):
    id: Category
    label: str
    initialRating: int
    minRating: Optional[int] = None
    maxRating: Optional[int] = None


class ExpectedScoreIn(BaseModel):
    team1: list[str] = Field(..., min_length=2, max_length=2)
    team2: list[str] = Field(..., min_length=2, max_length=2)

    @model_validator(mode="after")
    def _distinct_players(self):
        if len(set(self.team1) | set(self.team2)) != 4:
            raise ValueError("a padel match needs 4 different players")
        return self


class RatingProjectionOut(BaseModel):
    playerId: str
    rating: float
    ifWin: float
    ifLoss: float


class ExpectedScoreOut(BaseModel):
    team1Rating: float
    team2Rating: float
    team1ExpectedScore: float
    team2ExpectedScore: float
    projections: list[RatingProjectionOut] = Field(default_factory=list)



class InvitationDetails(BaseModel):
    id: str
    match_id: str
    invited_player_id: str
    invited_profile_id: Optional[str] = None
    status: Literal["pending", "accepted", "rejected"]
    invite_token: str
    match_date: datetime
    venue: Optional[str] = None
    created_by_name: str
    player_names: list[str] = Field(default_factory=list)


class InvitationRespondIn(BaseModel):
    response: Literal["accepted", "rejected"]
    userId: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class InvitationResponseResult(BaseModel):
    success: bool
    error: Optional[str] = None
    message: Optional[str] = None


class InvitationRespondOut(BaseModel):
    token: str
    status: Literal["accepted", "rejected"]
    message: Optional[str] = None
