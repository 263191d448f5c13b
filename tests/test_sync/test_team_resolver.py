"""Integration tests for TeamResolver.

Test Strategy:
1. External identifier match wins over names
2. Case-insensitive substring match, first by creation order
3. Unknown teams are created with the resolver's defaults
4. The per-resolver cache prevents repeated lookups and duplicate creation
5. Unusable references raise TeamResolutionError
"""
from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from rinksync.models import Team
from rinksync.services.sync.errors import TeamResolutionError
from rinksync.services.sync.matchers.team_resolver import TeamResolver


class TestTeamResolver:
    """Integration tests for team resolution."""

    # Lookup Tests
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_external_id_match(self, db_session: Session, make_team):
        blazers = make_team("Kanata Blazers", external_id="#1234")

        resolver = TeamResolver(db_session)
        team_id = await resolver.resolve("Some Other Name #1234")

        assert team_id == blazers.id
        assert resolver.created == []

    @pytest.mark.asyncio
    async def test_substring_match_ignores_case_and_age_suffix(self, db_session: Session, make_team):
        blades = make_team("Orleans Blades")

        resolver = TeamResolver(db_session)

        assert await resolver.resolve("ORLEANS BLADES U13 A") == blades.id

    @pytest.mark.asyncio
    async def test_substring_match_takes_first_created(self, db_session: Session, make_team):
        blue = make_team("Nepean Wildcats Blue", created_at=datetime(2025, 1, 1))
        make_team("Nepean Wildcats White", created_at=datetime(2025, 2, 1))

        resolver = TeamResolver(db_session)

        assert await resolver.resolve("Nepean Wildcats") == blue.id

    # Creation Tests
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_creates_unknown_team_with_defaults(self, db_session: Session):
        resolver = TeamResolver(db_session, default_level="U15", default_skill_level="AA")

        team_id = await resolver.resolve("Barrhaven Raiders #777 NYH55 (4)")

        team = db_session.get(Team, team_id)
        assert team.name == "Barrhaven Raiders"
        assert team.external_id == "#777"
        assert team.level == "U15"
        assert team.skill_level == "AA"
        assert resolver.created == [team_id]

    @pytest.mark.asyncio
    async def test_explicit_level_overrides_default(self, db_session: Session):
        resolver = TeamResolver(db_session, default_level="U15")

        team_id = await resolver.resolve("Barrhaven Raiders", level="U18")

        assert db_session.get(Team, team_id).level == "U18"

    # Cache Tests
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_cache_prevents_duplicate_creation(self, db_session: Session):
        resolver = TeamResolver(db_session)

        first = await resolver.resolve("Barrhaven Raiders")
        second = await resolver.resolve("barrhaven   raiders (2)")

        assert first == second
        assert resolver.lookups == 1
        assert len(resolver.created) == 1
        assert db_session.query(Team).count() == 1

    @pytest.mark.asyncio
    async def test_cache_keyed_by_external_id(self, db_session: Session):
        resolver = TeamResolver(db_session)

        first = await resolver.resolve("Raiders #777")
        second = await resolver.resolve("Barrhaven Raiders #777")

        assert first == second
        assert resolver.lookups == 1

    @pytest.mark.asyncio
    async def test_seeded_team_skips_lookup(self, db_session: Session, make_team):
        tracked = make_team("Nepean Wildcats")
        resolver = TeamResolver(db_session)
        resolver.seed(tracked.id, raw_name="Nepean Wildcats")

        assert await resolver.resolve("NEPEAN WILDCATS") == tracked.id
        assert resolver.lookups == 0
        assert resolver.cache_size == 1

    @pytest.mark.asyncio
    async def test_caches_are_per_resolver(self, db_session: Session):
        first = TeamResolver(db_session)
        await first.resolve("Barrhaven Raiders")

        second = TeamResolver(db_session)
        await second.resolve("Barrhaven Raiders")

        assert second.lookups == 1
        assert second.created == []

    # Error Tests
    # ─────────────────────────────────────────────────────────────

    @pytest.mark.asyncio
    async def test_empty_name_raises(self, db_session: Session):
        resolver = TeamResolver(db_session)

        with pytest.raises(TeamResolutionError):
            await resolver.resolve("(3)")
        with pytest.raises(TeamResolutionError):
            await resolver.resolve("")
