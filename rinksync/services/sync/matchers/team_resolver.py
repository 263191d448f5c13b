"""Team resolver for mapping pasted team references to canonical teams.

Handles the ways a team shows up in pasted text:
- With a third-party identifier: "Nepean Wildcats #2859" or "(#2859)"
- With organizational codes and counts: "Nepean Wildcats NYH12345 (3)"
- With an age-group suffix: "Nepean Wildcats U13 A"

Pipeline:
1. Exact lookup by external identifier
2. Case-insensitive substring match of the cleaned name (first by creation order)
3. Create a new team with the caller's level / skill defaults

A resolver instance belongs to one import call. Its cache guarantees at most
one team creation per distinct identity within that call.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rinksync.repositories import TeamRepository
from rinksync.services.sync.errors import TeamResolutionError
from rinksync.services.sync.utils.name_normalizer import (
    clean_team_name,
    closest_name,
    extract_external_id,
    normalize,
    search_name,
)

logger = logging.getLogger(__name__)


class TeamResolver:
    """
    Resolve raw team references to team ids.

    Attributes:
        created: Ids of teams created by this resolver, in creation order
        lookups: Number of resolutions that hit the data store
    """

    def __init__(
        self,
        db: Session,
        default_level: Optional[str] = None,
        default_skill_level: Optional[str] = None,
    ):
        """
        Initialize the team resolver.

        Args:
            db: SQLAlchemy database session
            default_level: Level for created teams when resolve() gets none
            default_skill_level: Skill tier for created teams when resolve() gets none
        """
        self.db = db
        self.teams = TeamRepository(db)
        self.default_level = default_level
        self.default_skill_level = default_skill_level
        self._cache: Dict[str, str] = {}
        self.created: List[str] = []
        self.lookups = 0

    @staticmethod
    def identity_key(cleaned_name: str, external_id: Optional[str] = None) -> str:
        """Cache key: the external id when known, otherwise the normalized name."""
        return external_id or normalize(cleaned_name)

    def seed(self, team_id: str, raw_name: Optional[str] = None, external_id: Optional[str] = None) -> None:
        """
        Pre-load a known team (e.g. the tracked team of a schedule import).
        """
        if external_id:
            self._cache[external_id] = team_id
        if raw_name:
            cleaned = clean_team_name(raw_name)
            if cleaned:
                self._cache[normalize(cleaned)] = team_id

    async def resolve(
        self,
        raw_name: str,
        external_id: Optional[str] = None,
        level: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> str:
        """
        Resolve a raw team reference to a team id, creating the team if needed.

        Args:
            raw_name: Team cell as pasted (may contain "#id", codes, counts)
            external_id: Third-party identifier; extracted from raw_name when omitted
            level: Level for a created team
            skill_level: Skill tier for a created team

        Returns:
            Team id

        Raises:
            TeamResolutionError: Nothing usable in raw_name and no external id
            SQLAlchemyError: Creating the team failed (session rolled back)
        """
        external_id = external_id or extract_external_id(raw_name or "")
        cleaned = clean_team_name(raw_name or "")

        if not cleaned and not external_id:
            raise TeamResolutionError(raw_name or "")

        key = self.identity_key(cleaned, external_id)
        cached = self._cache.get(key)
        if cached:
            return cached

        self.lookups += 1
        team = None

        # Step 1: External identifier
        if external_id:
            team = self.teams.find_by_external_id(external_id)
            if team:
                logger.debug(f"External id match for '{raw_name}': {external_id}")

        # Step 2: Name substring
        if team is None and cleaned:
            team = self.teams.find_by_name_substring(search_name(cleaned))
            if team:
                logger.debug(f"Name match for '{raw_name}': {team.name}")

        # Step 3: Create
        if team is None:
            team = self._create_team(
                name=cleaned or external_id,
                external_id=external_id,
                level=level or self.default_level,
                skill_level=skill_level or self.default_skill_level,
            )

        self._cache[key] = team.id
        return team.id

    def _create_team(self, name: str, external_id: Optional[str], level: Optional[str], skill_level: Optional[str]):
        near = closest_name(name, self.teams.all_names())
        if near:
            logger.info(
                f"Creating team '{name}' ({external_id or 'no id'}); "
                f"closest existing name is '{near[0]}' ({near[1]:.0f})"
            )
        else:
            logger.info(f"Creating team '{name}' ({external_id or 'no id'})")

        try:
            team = self.teams.create(
                name=name,
                external_id=external_id,
                level=level,
                skill_level=skill_level,
            )
            self.teams.save()
        except SQLAlchemyError as e:
            self.teams.rollback()
            logger.error(f"Failed to create team '{name}': {e}")
            raise

        self.created.append(team.id)
        return team

    @property
    def cache_size(self) -> int:
        return len(self._cache)
