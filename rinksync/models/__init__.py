"""
Database models.

Usage:
    from rinksync.models import Team, Event, Game
"""
from rinksync.models.models import (
    Base,
    EventType,
    GameStage,
    GameStatus,
    ResultType,
    Team,
    Event,
    Pool,
    PoolTeam,
    TiebreakerRule,
    Game,
    StandingsSnapshot,
)

__all__ = [
    "Base",
    "EventType",
    "GameStage",
    "GameStatus",
    "ResultType",
    "Team",
    "Event",
    "Pool",
    "PoolTeam",
    "TiebreakerRule",
    "Game",
    "StandingsSnapshot",
]
