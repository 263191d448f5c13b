"""
Base repository class for the data access layer.

Repositories are the only place that builds queries. The import services
talk to the store exclusively through them, which keeps the store contract
(find team by external id, find games by date and team pair, ...) in one
place and lets tests run against an in-memory SQLite session.

Writes are added to the session by ``create`` and committed by ``save``;
the import services commit per record and ``rollback`` a failed record
without touching the rest of the batch.

Example:
    class TeamRepository(BaseRepository[Team]):
        def find_by_external_id(self, external_id: str) -> Optional[Team]:
            return self.where_first(Team.external_id == external_id)
"""
from datetime import date, datetime, time
from typing import TypeVar, Generic, Type, Optional, List, Tuple
from sqlalchemy.orm import Query, Session

T = TypeVar("T")


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar day (naive datetimes)."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


class BaseRepository(Generic[T]):
    """
    Shared lookups and unit-of-work helpers for one model.

    Attributes:
        model_type: Team, Event, Game or StandingsSnapshot
        db: Session shared with the service that owns this repository
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    # ========================================================================
    # Lookups
    # ========================================================================

    def find_by_id(self, id: str) -> Optional[T]:
        return self.db.get(self.model_type, id)

    def query(self) -> Query:
        """Fresh query over this repository's model."""
        return self.db.query(self.model_type)

    def where(self, *criterion) -> List[T]:
        return self.query().filter(*criterion).all()

    def where_first(self, *criterion) -> Optional[T]:
        return self.query().filter(*criterion).first()

    # ========================================================================
    # Writes
    # ========================================================================

    def create(self, **kwargs) -> T:
        """
        Add a new row to the session.

        The row gets its id on flush; callers that need ``instance.id``
        before committing call ``save`` first.
        """
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        return instance

    def save(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        """Discard the failed record's pending changes."""
        self.db.rollback()
