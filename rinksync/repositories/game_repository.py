"""
Game Repository.

The duplicate checks of the importers live here: by game number within an
event, and by calendar day + unordered team pair, either within one event
or across all events.

Usage:
    repo = GameRepository(db)
    dup = repo.find_by_game_number(event_id, "365")
    dup = repo.find_by_date_and_pair(date(2025, 10, 5), team_a, team_b)
"""
from datetime import date
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from rinksync.models import Game, GameStatus
from rinksync.repositories.base import BaseRepository, day_bounds


class GameRepository(BaseRepository[Game]):
    """Data access for games."""

    def __init__(self, db: Session):
        super().__init__(Game, db)

    def find_by_game_number(self, event_id: str, game_number: str) -> Optional[Game]:
        """Game in ``event_id`` carrying this external game number."""
        return self.where_first(Game.event_id == event_id, Game.game_number == game_number)

    def find_by_date_and_pair(
        self,
        day: date,
        team_a_id: str,
        team_b_id: str,
        event_id: Optional[str] = None,
    ) -> Optional[Game]:
        """
        Game on ``day`` between the two teams, regardless of home/away.

        Args:
            day: Calendar day of the game
            team_a_id: One team
            team_b_id: The other team
            event_id: Restrict to one event; None searches every event

        Returns:
            The earliest such game or None
        """
        start, end = day_bounds(day)
        query = self.query().filter(
            Game.start_datetime >= start,
            Game.start_datetime <= end,
            or_(
                and_(Game.home_team_id == team_a_id, Game.away_team_id == team_b_id),
                and_(Game.home_team_id == team_b_id, Game.away_team_id == team_a_id),
            ),
        )
        if event_id is not None:
            query = query.filter(Game.event_id == event_id)
        return query.order_by(Game.start_datetime, Game.id).first()

    def find_by_event(self, event_id: str) -> List[Game]:
        return self.query().filter(Game.event_id == event_id).order_by(Game.start_datetime, Game.id).all()

    def find_completed_by_event(self, event_id: str) -> List[Game]:
        """Completed games with both scores for one event."""
        return self.query().filter(
            Game.event_id == event_id,
            Game.status == GameStatus.COMPLETED.value,
            Game.final_score_home.isnot(None),
            Game.final_score_away.isnot(None),
        ).order_by(Game.start_datetime, Game.id).all()

    def find_by_event_and_team(self, event_id: str, team_id: str) -> List[Game]:
        return self.query().filter(
            Game.event_id == event_id,
            or_(Game.home_team_id == team_id, Game.away_team_id == team_id),
        ).order_by(Game.start_datetime, Game.id).all()
