"""
Database models for teams, events, games and standings.

Events are the umbrella for every competition a team plays in (regular
season, tournaments, playoffs, playdowns, provincials, exhibitions).
Games belong to at most one event; bracket games may carry a textual
placeholder ("1st Pool A") instead of a team id until pool play finishes.

Enumerated columns are stored as plain strings; the ``str`` enums below are
the allowed values.
"""
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, String, Float, Integer, DateTime, Date, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class EventType(str, Enum):
    REGULAR_SEASON = "regular_season"
    TOURNAMENT = "tournament"
    PLAYOFF = "playoff"
    PLAYDOWN = "playdown"
    PROVINCIAL = "provincial"
    EXHIBITION = "exhibition"


class GameStage(str, Enum):
    REGULAR_SEASON = "regular_season"
    POOL_PLAY = "pool_play"
    PLAYOFF = "playoff"
    SEMIFINAL = "semifinal"
    FINAL = "final"
    PLAYDOWN = "playdown"


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ResultType(str, Enum):
    REGULATION = "regulation"
    OVERTIME = "overtime"
    SHOOTOUT = "shootout"


# =============================================================================
# TEAMS
# =============================================================================

class Team(Base):
    """
    Canonical team.

    Identity for matching is ``external_id`` when present, otherwise the
    normalized name. Teams are created lazily by imports and never merged
    automatically.
    """
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False, index=True)
    external_id = Column(String(50), nullable=True, index=True)  # "#1234"
    level = Column(String(20), nullable=True)  # U13, U15, ...
    skill_level = Column(String(20), nullable=True)  # A, AA, AAA, ...
    division = Column(String(50), nullable=True)
    short_name = Column(String(50), nullable=True)
    short_location = Column(String(50), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Team {self.name} ({self.external_id or 'no id'})>"


# =============================================================================
# EVENTS
# =============================================================================

class Event(Base):
    """
    A competition instance with its own point structure and standings rules.

    ``total_teams`` / ``qualifying_count`` are only meaningful for playdowns,
    where the top ``qualifying_count`` teams advance.
    """
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False, index=True)
    event_type = Column(String(20), nullable=False, index=True, default=EventType.TOURNAMENT.value)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    location = Column(String(200), nullable=True)
    level = Column(String(20), nullable=True)
    skill_level = Column(String(20), nullable=True)

    # Point structure
    win_points = Column(Integer, nullable=False, default=2)
    tie_points = Column(Integer, nullable=False, default=1)
    loss_points = Column(Integer, nullable=False, default=0)
    overtime_loss_points = Column(Integer, nullable=True)  # None: same as a loss

    goal_differential_cap = Column(Integer, nullable=True, default=5)

    # Playdown cutoffs
    total_teams = Column(Integer, nullable=True)
    qualifying_count = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    pools = relationship("Pool", back_populates="event", cascade="all, delete-orphan")
    tiebreaker_rules = relationship(
        "TiebreakerRule",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="TiebreakerRule.priority_order",
    )

    __table_args__ = (
        Index('ix_events_type_dates', 'event_type', 'start_date', 'end_date'),
    )

    def __repr__(self):
        return f"<Event {self.name} [{self.event_type}] {self.start_date}..{self.end_date}>"


class Pool(Base):
    """Round-robin sub-group of teams within an event."""
    __tablename__ = "pools"

    id = Column(String(36), primary_key=True, default=_new_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)  # "A", "B", ...
    advancement_count = Column(Integer, nullable=False, default=0)

    event = relationship("Event", back_populates="pools")
    teams = relationship("PoolTeam", back_populates="pool", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Pool {self.name} of {self.event_id}>"


class PoolTeam(Base):
    """Pool membership."""
    __tablename__ = "pool_teams"

    pool_id = Column(String(36), ForeignKey("pools.id", ondelete="CASCADE"), primary_key=True)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)

    pool = relationship("Pool", back_populates="teams")
    team = relationship("Team")


class TiebreakerRule(Base):
    """
    One criterion in an event's tiebreaker chain.

    Lower ``priority_order`` is applied first.
    """
    __tablename__ = "tiebreaker_rules"

    id = Column(String(36), primary_key=True, default=_new_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    rule_type = Column(String(50), nullable=False)  # head_to_head, goal_differential, ...
    priority_order = Column(Integer, nullable=False, default=0)

    event = relationship("Event", back_populates="tiebreaker_rules")

    def __repr__(self):
        return f"<TiebreakerRule {self.priority_order}: {self.rule_type}>"


# =============================================================================
# GAMES
# =============================================================================

class Game(Base):
    """
    A single game.

    ``status == completed`` iff both final scores are set. The unique
    constraint on (event_id, game_number) backs up the importer's duplicate
    game-number check; games without a number are unconstrained.
    """
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=_new_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True)
    pool_id = Column(String(36), ForeignKey("pools.id", ondelete="SET NULL"), nullable=True, index=True)
    game_number = Column(String(20), nullable=True)

    stage = Column(String(20), nullable=False, default=GameStage.POOL_PLAY.value)
    start_datetime = Column(DateTime, nullable=False, index=True)
    venue = Column(String(200), nullable=True)

    home_team_id = Column(String(36), ForeignKey("teams.id"), nullable=True, index=True)
    away_team_id = Column(String(36), ForeignKey("teams.id"), nullable=True, index=True)
    home_placeholder = Column(String(50), nullable=True)  # "1st Pool A"
    away_placeholder = Column(String(50), nullable=True)

    final_score_home = Column(Integer, nullable=True)
    final_score_away = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=GameStatus.SCHEDULED.value, index=True)
    result_type = Column(String(20), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    event = relationship("Event")
    home_team = relationship("Team", foreign_keys=[home_team_id])
    away_team = relationship("Team", foreign_keys=[away_team_id])

    __table_args__ = (
        UniqueConstraint('event_id', 'game_number', name='uq_games_event_game_number'),
    )

    @property
    def has_result(self) -> bool:
        return (
            self.status == GameStatus.COMPLETED.value
            and self.final_score_home is not None
            and self.final_score_away is not None
        )

    def __repr__(self):
        return f"<Game {self.away_team_id} @ {self.home_team_id} {self.start_datetime} - {self.status}>"


# =============================================================================
# STANDINGS SNAPSHOT
# =============================================================================

class StandingsSnapshot(Base):
    """
    Externally supplied standings row for one team in one event.

    Imported from a pasted standings table and cross-checked against the
    standings computed from games.
    """
    __tablename__ = "season_standings"

    id = Column(String(36), primary_key=True, default=_new_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(String(36), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)

    gp = Column(Integer, nullable=False, default=0)
    w = Column(Integer, nullable=False, default=0)
    l = Column(Integer, nullable=False, default=0)  # noqa: E741
    t = Column(Integer, nullable=False, default=0)
    otl = Column(Integer, nullable=False, default=0)
    sol = Column(Integer, nullable=False, default=0)
    pts = Column(Integer, nullable=False, default=0)
    gf = Column(Integer, nullable=False, default=0)
    ga = Column(Integer, nullable=False, default=0)
    gd = Column(Integer, nullable=False, default=0)
    pim = Column(Integer, nullable=False, default=0)
    pct = Column(Float, nullable=False, default=0.0)

    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint('event_id', 'team_id', name='uq_season_standings_event_team'),
    )

    def __repr__(self):
        return f"<StandingsSnapshot {self.team_id} {self.gp}GP {self.w}-{self.l}-{self.t} {self.pts}PTS>"
