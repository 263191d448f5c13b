"""
Team Repository.

Usage:
    repo = TeamRepository(db)
    team = repo.find_by_external_id("#2859")
    team = repo.find_by_name_substring("Nepean Wildcats")
"""
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from rinksync.models import Team
from rinksync.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Data access for teams."""

    def __init__(self, db: Session):
        super().__init__(Team, db)

    def find_by_external_id(self, external_id: str) -> Optional[Team]:
        """Find a team by its third-party identifier (e.g. "#2859")."""
        return self.query().filter(
            Team.external_id == external_id
        ).order_by(Team.created_at, Team.id).first()

    def find_by_name_substring(self, fragment: str) -> Optional[Team]:
        """
        First team whose name contains ``fragment``, case-insensitively.

        "First" is creation order, so repeated imports resolve a fragment
        to the same team.
        """
        if not fragment:
            return None
        return self.query().filter(
            func.lower(Team.name).contains(fragment.lower(), autoescape=True)
        ).order_by(Team.created_at, Team.id).first()

    def find_by_ids(self, team_ids: List[str]) -> List[Team]:
        if not team_ids:
            return []
        return self.where(Team.id.in_(team_ids))

    def all_names(self) -> List[str]:
        """Every stored team name (for diagnostics)."""
        return [row[0] for row in self.db.query(Team.name).all()]
