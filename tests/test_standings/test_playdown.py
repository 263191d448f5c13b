"""Tests for playdown schedule generation."""
from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from rinksync.models import Game
from rinksync.services.standings.playdown import PlaydownService, generate_playdown_schedule
from rinksync.services.sync.errors import EventNotFoundError, ImportValidationError


class TestGeneratePlaydownSchedule:
    """Tests for round-robin slot generation."""

    @pytest.mark.parametrize("teams,games_per_matchup,expected", [
        (["a", "b"], 2, 2),
        (["a", "b", "c"], 2, 6),
        (["a", "b", "c", "d"], 3, 18),
        (["a", "b", "c", "d", "e"], 1, 10),
    ])
    def test_slot_count(self, teams, games_per_matchup, expected):
        assert len(generate_playdown_schedule(teams, games_per_matchup)) == expected

    def test_home_ice_alternates(self):
        slots = generate_playdown_schedule(["a", "b"], 3)

        assert [(s.home_team_id, s.away_team_id) for s in slots] == [("a", "b"), ("b", "a"), ("a", "b")]

    def test_every_pair_meets(self):
        slots = generate_playdown_schedule(["a", "b", "c"], 1)

        pairs = {frozenset((s.home_team_id, s.away_team_id)) for s in slots}
        assert pairs == {frozenset("ab"), frozenset("ac"), frozenset("bc")}

    def test_invalid_input(self):
        with pytest.raises(ValueError):
            generate_playdown_schedule(["a", "a"], 2)
        with pytest.raises(ValueError):
            generate_playdown_schedule(["a", "b"], 0)


class TestPlaydownService:
    """Integration tests for persisting playdown slots."""

    @pytest.mark.asyncio
    async def test_creates_scheduled_games(self, db_session: Session, make_event, make_team):
        event = make_event("Playdowns", event_type="playdown", qualifying_count=2)
        teams = [make_team(name).id for name in ["Alpha Hawks", "Bravo Bears", "Charlie Cats"]]
        start = datetime(2026, 1, 10, 9, 0)

        result = await PlaydownService(db_session).create_schedule(event.id, teams, games_per_matchup=2, start=start)

        assert result == {"created": 6, "errors": []}
        games = db_session.query(Game).filter(Game.event_id == event.id).all()
        assert len(games) == 6
        assert all(g.stage == "playdown" and g.status == "scheduled" for g in games)
        assert all(g.start_datetime == start and g.final_score_home is None for g in games)

    @pytest.mark.asyncio
    async def test_unknown_event(self, db_session: Session):
        with pytest.raises(EventNotFoundError):
            await PlaydownService(db_session).create_schedule("missing", ["a", "b"])

    @pytest.mark.asyncio
    async def test_needs_two_teams(self, db_session: Session, make_event):
        event = make_event("Playdowns", event_type="playdown")
        with pytest.raises(ImportValidationError):
            await PlaydownService(db_session).create_schedule(event.id, ["a"])

    @pytest.mark.asyncio
    async def test_duplicate_teams_rejected(self, db_session: Session, make_event):
        event = make_event("Playdowns", event_type="playdown")
        with pytest.raises(ImportValidationError):
            await PlaydownService(db_session).create_schedule(event.id, ["a", "a"])
