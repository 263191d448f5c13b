"""
Standings snapshot repository.

Snapshots are keyed by (event, team); ``upsert`` keeps one row per key.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from rinksync.models import StandingsSnapshot
from rinksync.repositories.base import BaseRepository

SNAPSHOT_FIELDS = ("gp", "w", "l", "t", "otl", "sol", "pts", "gf", "ga", "gd", "pim", "pct")


class StandingsRepository(BaseRepository[StandingsSnapshot]):
    """Data access for externally supplied standings rows."""

    def __init__(self, db: Session):
        super().__init__(StandingsSnapshot, db)

    def find_row(self, event_id: str, team_id: str) -> Optional[StandingsSnapshot]:
        return self.where_first(
            StandingsSnapshot.event_id == event_id,
            StandingsSnapshot.team_id == team_id,
        )

    def find_by_event(self, event_id: str) -> List[StandingsSnapshot]:
        """Snapshot rows for an event, with their teams loaded."""
        return self.query().options(
            joinedload(StandingsSnapshot.team)
        ).filter(
            StandingsSnapshot.event_id == event_id
        ).order_by(StandingsSnapshot.pts.desc(), StandingsSnapshot.team_id).all()

    def upsert(self, event_id: str, team_id: str, values: Dict[str, Any]) -> StandingsSnapshot:
        """
        Insert or update the row for (event, team).

        Only keys in ``SNAPSHOT_FIELDS`` are written. Not committed.
        """
        row = self.find_row(event_id, team_id)
        if row is None:
            row = self.create(event_id=event_id, team_id=team_id)
        for field in SNAPSHOT_FIELDS:
            if field in values:
                setattr(row, field, values[field])
        return row
