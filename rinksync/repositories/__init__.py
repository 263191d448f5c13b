"""
Repository layer for data access.

Usage:
    from rinksync.repositories import TeamRepository, GameRepository
    from rinksync.core.database import SessionLocal

    db = SessionLocal()
    team = TeamRepository(db).find_by_external_id("#2859")
    db.close()
"""

from rinksync.repositories.base import BaseRepository
from rinksync.repositories.team_repository import TeamRepository
from rinksync.repositories.event_repository import EventRepository
from rinksync.repositories.game_repository import GameRepository
from rinksync.repositories.standings_repository import StandingsRepository

__all__ = [
    "BaseRepository",
    "TeamRepository",
    "EventRepository",
    "GameRepository",
    "StandingsRepository",
]
