"""
Event standings service.

Builds the standings an event page shows:
- One table per pool, computed over that pool's pool-play games
- A single table for pool-less events (regular season, playdowns), over
  every completed game of the event
- Playdown qualification flags from the event's ``qualifying_count``
- Bracket games with "1st Pool A" style placeholders resolved

Also hosts the small record helpers used by team views: season record,
current streak and event status.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from rinksync.models import Event, EventType, GameStage, GameStatus
from rinksync.repositories import EventRepository, GameRepository, StandingsRepository, TeamRepository
from rinksync.services.standings.calculator import PointStructure, StandingsCalculator, TeamRef, TeamStanding
from rinksync.services.sync.errors import EventNotFoundError

logger = logging.getLogger(__name__)

PLACEHOLDER_ORDINALS = ["1st", "2nd", "3rd", "4th"]
BRACKET_STAGES = (GameStage.SEMIFINAL.value, GameStage.FINAL.value)


@dataclass
class PoolStandings:
    pool_id: Optional[str]
    pool_name: Optional[str]
    advancement_count: int
    standings: List[TeamStanding]


@dataclass
class BracketSlot:
    """A bracket game with placeholders resolved where pool play allows."""
    game_id: str
    stage: str
    game_number: Optional[str]
    home_team_id: Optional[str]
    away_team_id: Optional[str]
    home_placeholder: Optional[str] = None
    away_placeholder: Optional[str] = None
    final_score_home: Optional[int] = None
    final_score_away: Optional[int] = None


@dataclass
class EventStandings:
    event_id: str
    event_name: str
    event_type: str
    pools: List[PoolStandings] = field(default_factory=list)
    bracket: List[BracketSlot] = field(default_factory=list)

    @property
    def has_pools(self) -> bool:
        return any(p.pool_id is not None for p in self.pools)


@dataclass
class TeamRecord:
    w: int = 0
    l: int = 0  # noqa: E741
    t: int = 0
    streak: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.w}-{self.l}-{self.t}"


# =============================================================================
# Pure helpers
# =============================================================================

def resolve_placeholders(games: Sequence[Any], pool_standings: Dict[str, List[TeamStanding]]) -> List[BracketSlot]:
    """
    Fill missing bracket sides from pool standings.

    Args:
        games: Game rows (semifinals, finals, ...)
        pool_standings: "Pool A" -> standings in rank order

    Returns:
        One BracketSlot per game; a side is only filled when its team id is
        missing and its placeholder names a rank the pool has
    """
    slots = []
    for game in games:
        slot = BracketSlot(
            game_id=game.id,
            stage=game.stage,
            game_number=game.game_number,
            home_team_id=game.home_team_id,
            away_team_id=game.away_team_id,
            home_placeholder=game.home_placeholder,
            away_placeholder=game.away_placeholder,
            final_score_home=game.final_score_home,
            final_score_away=game.final_score_away,
        )
        slot.home_team_id = slot.home_team_id or _team_for_placeholder(slot.home_placeholder, pool_standings)
        slot.away_team_id = slot.away_team_id or _team_for_placeholder(slot.away_placeholder, pool_standings)
        slots.append(slot)
    return slots


def _team_for_placeholder(placeholder: Optional[str], pool_standings: Dict[str, List[TeamStanding]]) -> Optional[str]:
    if not placeholder:
        return None
    parts = placeholder.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() not in PLACEHOLDER_ORDINALS:
        return None
    rank = PLACEHOLDER_ORDINALS.index(parts[0].lower())
    standings = pool_standings.get(parts[1].strip())
    if standings and rank < len(standings):
        return standings[rank].team_id
    return None


def summarize_team_record(games: Sequence[Any], team_id: str) -> TeamRecord:
    """
    Record and current streak ("W3") of a team over completed games.

    Games the team did not play in are ignored.
    """
    results = []
    for game in games:
        if game.status != GameStatus.COMPLETED.value:
            continue
        if team_id not in (game.home_team_id, game.away_team_id):
            continue
        if game.final_score_home is None or game.final_score_away is None:
            continue
        is_home = game.home_team_id == team_id
        mine = game.final_score_home if is_home else game.final_score_away
        theirs = game.final_score_away if is_home else game.final_score_home
        outcome = "W" if mine > theirs else "L" if mine < theirs else "T"
        results.append((game.start_datetime, outcome))

    record = TeamRecord(
        w=sum(1 for _, r in results if r == "W"),
        l=sum(1 for _, r in results if r == "L"),
        t=sum(1 for _, r in results if r == "T"),
    )

    results.sort(key=lambda item: item[0], reverse=True)
    if results:
        latest = results[0][1]
        count = 0
        for _, outcome in results:
            if outcome != latest:
                break
            count += 1
        record.streak = f"{latest}{count}"
    return record


def event_status(start: Optional[date], end: Optional[date], today: date) -> str:
    """
    'active', 'upcoming' or 'completed' for an event date range.

    An event with only a start date is active from that day on.
    """
    if start and end:
        if start <= today <= end:
            return "active"
        if today > end:
            return "completed"
    elif start and today >= start:
        return "active"
    return "upcoming"


# =============================================================================
# Service
# =============================================================================

class EventStandingsService:
    """Load an event's configuration and games and compute its standings."""

    def __init__(self, db: Session, default_goal_diff_cap: Optional[int] = 5):
        self.db = db
        self.events = EventRepository(db)
        self.games = GameRepository(db)
        self.teams = TeamRepository(db)
        self.snapshots = StandingsRepository(db)
        self.default_goal_diff_cap = default_goal_diff_cap

    def calculator_for(self, event: Event) -> StandingsCalculator:
        cap = event.goal_differential_cap if event.goal_differential_cap is not None else self.default_goal_diff_cap
        return StandingsCalculator(
            tiebreaker_rules=self.events.find_tiebreaker_rules(event.id),
            point_structure=PointStructure.from_event(event),
            goal_diff_cap=cap,
        )

    async def get_event_standings(self, event_id: str) -> EventStandings:
        """
        Raises:
            EventNotFoundError: Unknown event
        """
        event = self.events.find_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        calculator = self.calculator_for(event)
        games = self.games.find_by_event(event_id)
        result = EventStandings(event_id=event.id, event_name=event.name, event_type=event.event_type)

        pools = self.events.find_pools(event_id)
        if pools:
            membership = self.events.find_pool_team_ids([p.id for p in pools])
            pool_play = [g for g in games if g.stage == GameStage.POOL_PLAY.value]
            for pool in pools:
                teams = self.teams.find_by_ids(membership.get(pool.id, []))
                pool_games = [g for g in pool_play if g.pool_id == pool.id]
                result.pools.append(PoolStandings(
                    pool_id=pool.id,
                    pool_name=pool.name,
                    advancement_count=pool.advancement_count or 0,
                    standings=calculator.compute(teams, pool_games),
                ))
        else:
            teams = self._event_teams(event_id, games)
            result.pools.append(PoolStandings(
                pool_id=None,
                pool_name=None,
                advancement_count=event.qualifying_count or 0,
                standings=calculator.compute(teams, games),
            ))

        if event.event_type == EventType.PLAYDOWN.value and event.qualifying_count:
            for pool in result.pools:
                for standing in pool.standings:
                    standing.qualifies = standing.rank <= event.qualifying_count

        bracket_games = [g for g in games if g.stage in BRACKET_STAGES]
        if bracket_games:
            by_pool = {f"Pool {p.pool_name}": p.standings for p in result.pools if p.pool_name}
            result.bracket = resolve_placeholders(bracket_games, by_pool)

        logger.debug(f"Computed standings for event {event.name}: {len(result.pools)} table(s)")
        return result

    def _event_teams(self, event_id: str, games: Sequence[Any]) -> List[TeamRef]:
        """Teams appearing in the event's games or its standings snapshot."""
        team_ids = []
        for game in games:
            for team_id in (game.home_team_id, game.away_team_id):
                if team_id and team_id not in team_ids:
                    team_ids.append(team_id)
        for row in self.snapshots.find_by_event(event_id):
            if row.team_id not in team_ids:
                team_ids.append(row.team_id)
        return [TeamRef(id=t.id, name=t.name) for t in self.teams.find_by_ids(team_ids)]

    async def get_team_record(self, event_id: str, team_id: str) -> TeamRecord:
        if self.events.find_by_id(event_id) is None:
            raise EventNotFoundError(event_id)
        return summarize_team_record(self.games.find_by_event_and_team(event_id, team_id), team_id)
