"""
Event Repository.

Covers events plus the per-event configuration the standings need
(pools, pool membership, tiebreaker rules).

Usage:
    repo = EventRepository(db)
    event = repo.find_overlapping("tournament", date(2025, 11, 7), date(2025, 11, 9))
"""
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from rinksync.models import Event, Pool, PoolTeam, TiebreakerRule
from rinksync.repositories.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """Data access for events."""

    def __init__(self, db: Session):
        super().__init__(Event, db)

    def find_overlapping(self, event_type: str, start: date, end: date) -> Optional[Event]:
        """
        First event of ``event_type`` whose date range overlaps [start, end].

        Events without both dates never overlap anything.
        """
        return self.query().filter(
            Event.event_type == event_type,
            Event.start_date.isnot(None),
            Event.end_date.isnot(None),
            Event.start_date <= end,
            Event.end_date >= start,
        ).order_by(Event.start_date, Event.created_at, Event.id).first()

    def find_by_name(self, name: str) -> Optional[Event]:
        """Event with exactly this name."""
        return self.query().filter(Event.name == name).order_by(Event.created_at, Event.id).first()

    # ========================================================================
    # Pools and tiebreakers
    # ========================================================================

    def find_pools(self, event_id: str) -> List[Pool]:
        return self.db.query(Pool).filter(Pool.event_id == event_id).order_by(Pool.name).all()

    def find_pool_team_ids(self, pool_ids: List[str]) -> Dict[str, List[str]]:
        """Map pool id -> team ids for the given pools."""
        membership: Dict[str, List[str]] = {pool_id: [] for pool_id in pool_ids}
        if not pool_ids:
            return membership
        rows = self.db.query(PoolTeam).filter(PoolTeam.pool_id.in_(pool_ids)).all()
        for row in rows:
            membership[row.pool_id].append(row.team_id)
        return membership

    def find_tiebreaker_rules(self, event_id: str) -> List[TiebreakerRule]:
        return self.db.query(TiebreakerRule).filter(
            TiebreakerRule.event_id == event_id
        ).order_by(TiebreakerRule.priority_order, TiebreakerRule.id).all()
