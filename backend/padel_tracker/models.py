from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Float,
    Boolean,
    Text,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from .db import Base

# Tables, triggers and rating procedures are provisioned on the hosted
# database; these mappings mirror its columns.

JSONType = JSON().with_variant(JSONB, "postgresql")


class Player(Base):
    __tablename__ = "players"
    id = Column(String, primary_key=True)
    profile_id = Column(String, nullable=True)  # null for ghost players
    created_by_user_id = Column(String, nullable=True)
    display_name = Column(String, nullable=False)
    is_ghost = Column(Boolean, nullable=False, default=False)
    elo_score = Column(Float, nullable=False, default=1000)
    category_label = Column(String(3), nullable=False, default="8va")
    matches_played = Column(Integer, nullable=False, default=0)
    matches_won = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_players_elo_score", elo_score),)


class Match(Base):
    __tablename__ = "matches"
    id = Column(String, primary_key=True)
    created_by = Column(String, nullable=False)
    match_date = Column(DateTime, nullable=False)
    venue = Column(String, nullable=True)
    # players 1-2 form team 1, players 3-4 team 2
    player_1_id = Column(String, ForeignKey("players.id"), nullable=False)
    player_2_id = Column(String, ForeignKey("players.id"), nullable=False)
    player_3_id = Column(String, ForeignKey("players.id"), nullable=False)
    player_4_id = Column(String, ForeignKey("players.id"), nullable=False)
    score_sets = Column(JSONType, nullable=False)
    winner_team = Column(Integer, nullable=False)
    elo_changes = Column(JSONType, nullable=True)
    match_config = Column(JSONType, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_matches_match_date", match_date),)

    @property
    def player_ids(self) -> list[str]:
        return [self.player_1_id, self.player_2_id, self.player_3_id, self.player_4_id]


class MatchInvitation(Base):
    __tablename__ = "match_invitations"
    id = Column(String, primary_key=True)
    match_id = Column(
        String, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False
    )
    invited_player_id = Column(String, ForeignKey("players.id"), nullable=False)
    invited_profile_id = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    invite_token = Column(String, nullable=False, unique=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
