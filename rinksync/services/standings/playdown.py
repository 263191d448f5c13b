"""
Playdown schedule generation.

A playdown is a round robin where every pair of teams meets
``games_per_matchup`` times, alternating home ice: the first meeting is
hosted by the team listed first, the second by the other, and so on.
The top ``qualifying_count`` teams of the event advance.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rinksync.models import EventType, GameStage, GameStatus
from rinksync.repositories import EventRepository, GameRepository
from rinksync.services.sync.errors import EventNotFoundError, ImportValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matchup:
    home_team_id: str
    away_team_id: str


def generate_playdown_schedule(team_ids: Sequence[str], games_per_matchup: int = 2) -> List[Matchup]:
    """
    Round-robin game slots.

    Returns C(n, 2) * games_per_matchup matchups, grouped by pair in the
    order the teams were given.
    """
    if games_per_matchup < 1:
        raise ValueError("games_per_matchup must be at least 1")
    if len(set(team_ids)) != len(team_ids):
        raise ValueError("team_ids must be distinct")

    slots: List[Matchup] = []
    for i, first in enumerate(team_ids):
        for second in team_ids[i + 1:]:
            for k in range(games_per_matchup):
                if k % 2 == 0:
                    slots.append(Matchup(home_team_id=first, away_team_id=second))
                else:
                    slots.append(Matchup(home_team_id=second, away_team_id=first))
    return slots


class PlaydownService:
    """Create unscored playdown game slots for an event."""

    def __init__(self, db: Session):
        self.db = db
        self.events = EventRepository(db)
        self.games = GameRepository(db)

    async def create_schedule(
        self,
        event_id: str,
        team_ids: Sequence[str],
        games_per_matchup: int = 2,
        start: Optional[datetime] = None,
    ) -> dict:
        """
        Insert one scheduled game per generated slot.

        Args:
            event_id: Playdown event
            team_ids: Teams in the loop (at least two)
            games_per_matchup: Meetings per pair
            start: Placeholder start time for every slot (today at midnight by default)

        Returns:
            {"created": int, "errors": [str]}

        Raises:
            ImportValidationError: Fewer than two teams or a bad meeting count
            EventNotFoundError: Unknown event
        """
        if len(team_ids) < 2:
            raise ImportValidationError("At least two teams are required")
        if games_per_matchup < 1:
            raise ImportValidationError("games_per_matchup must be at least 1")

        event = self.events.find_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        if event.event_type != EventType.PLAYDOWN.value:
            logger.warning(f"Generating playdown slots for non-playdown event {event.name} ({event.event_type})")

        try:
            slots = generate_playdown_schedule(list(team_ids), games_per_matchup)
        except ValueError as e:
            raise ImportValidationError(str(e)) from e

        start = start or datetime.combine(datetime.utcnow().date(), datetime.min.time())
        created = 0
        errors: List[str] = []

        for slot in slots:
            try:
                self.games.create(
                    event_id=event_id,
                    stage=GameStage.PLAYDOWN.value,
                    start_datetime=start,
                    venue=None,
                    home_team_id=slot.home_team_id,
                    away_team_id=slot.away_team_id,
                    status=GameStatus.SCHEDULED.value,
                )
                self.games.save()
                created += 1
            except SQLAlchemyError as e:
                self.games.rollback()
                logger.error(f"Failed to create playdown slot {slot.home_team_id} vs {slot.away_team_id}: {e}")
                errors.append(f"{slot.home_team_id} vs {slot.away_team_id}: {e}")

        logger.info(f"Created {created}/{len(slots)} playdown slots for event {event.name}")
        return {"created": created, "errors": errors}
