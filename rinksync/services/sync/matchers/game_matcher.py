"""Game matcher for finding existing games that a parsed record refers to.

Matching rules:
1. Game number - same external game number within the target event
2. Same day + team pair - same calendar day and the same two teams in either
   home/away order, within one event or across all events

League classification of a schedule entry against its existing game:
- matched: the existing game carries the same score
- conflict: the existing game carries a different score (never overwritten)
- matched_fillable: the existing game has no result yet
- new: no existing game
"""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from rinksync.models import Game
from rinksync.repositories import GameRepository
from rinksync.services.parsing.records import ScheduleEntry

logger = logging.getLogger(__name__)


class MatchStatus(str, Enum):
    MATCHED = "matched"
    CONFLICT = "conflict"
    MATCHED_FILLABLE = "matched_fillable"
    NEW = "new"
    IMPORTED = "imported"
    FILLED = "filled"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class LeagueMatch:
    status: MatchStatus
    detail: str
    existing_game_id: Optional[str] = None


def entry_label(entry: ScheduleEntry) -> str:
    """'10-05 vs Team X'."""
    return f"{entry.game_date.strftime('%m-%d')} vs {entry.opponent_name}"


def scores_for_team(game: Game, team_id: str):
    """(team score, opponent score) of an existing game from ``team_id``'s side."""
    if game.home_team_id == team_id:
        return game.final_score_home, game.final_score_away
    return game.final_score_away, game.final_score_home


class GameMatcher:
    """
    Duplicate and league-match lookups against persisted games.
    """

    def __init__(self, db: Session):
        """
        Initialize the game matcher.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.games = GameRepository(db)

    async def find_by_game_number(self, event_id: str, game_number: Optional[str]) -> Optional[Game]:
        if not game_number:
            return None
        return self.games.find_by_game_number(event_id, game_number)

    async def find_same_day_pair(
        self,
        day: date,
        team_a_id: str,
        team_b_id: str,
        event_id: Optional[str] = None,
    ) -> Optional[Game]:
        """Existing game on ``day`` between the teams; all events when ``event_id`` is None."""
        return self.games.find_by_date_and_pair(day, team_a_id, team_b_id, event_id=event_id)

    async def classify_league_entry(
        self,
        entry: ScheduleEntry,
        team_id: str,
        opponent_id: str,
        event_id: str,
    ) -> LeagueMatch:
        """
        Compare a league schedule entry with the regular-season event's games.

        Args:
            entry: Parsed entry (scores from the tracked team's side)
            team_id: Tracked team
            opponent_id: Resolved opponent
            event_id: Regular-season event to search

        Returns:
            LeagueMatch with the status and a human-readable detail
        """
        label = entry_label(entry)
        existing = await self.find_same_day_pair(entry.game_date, team_id, opponent_id, event_id=event_id)

        if existing is None:
            return LeagueMatch(
                status=MatchStatus.NEW,
                detail=f"{label}: {entry.own_score}-{entry.opponent_score} (not in existing games)",
            )

        if not existing.has_result:
            return LeagueMatch(
                status=MatchStatus.MATCHED_FILLABLE,
                detail=f"{label}: exists (no score yet)",
                existing_game_id=existing.id,
            )

        own, opponent = scores_for_team(existing, team_id)
        if own == entry.own_score and opponent == entry.opponent_score:
            return LeagueMatch(
                status=MatchStatus.MATCHED,
                detail=f"{label}: scores match ({own}-{opponent})",
                existing_game_id=existing.id,
            )

        logger.warning(
            f"Score conflict {label}: schedule has {entry.own_score}-{entry.opponent_score}, "
            f"existing game {existing.id} has {own}-{opponent}"
        )
        return LeagueMatch(
            status=MatchStatus.CONFLICT,
            detail=(
                f"{label}: schedule says {entry.own_score}-{entry.opponent_score}, "
                f"existing has {own}-{opponent}"
            ),
            existing_game_id=existing.id,
        )
