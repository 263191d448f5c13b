"""Import reconciler for bringing pasted records into the canonical store.

This reconciler coordinates three import flows:
- Score tables: resolve teams, skip duplicates (game number, or same teams on
  the same day within the event), insert, then cross-check the event's
  standings snapshot against standings computed from its games
- Free-text schedules: classify entries by glyph, match league entries
  against the regular-season event (matched / conflict / matched_fillable /
  new), cluster everything else into inferred events and optionally import
- Standings tables: resolve teams and upsert snapshot rows

One reconciler serves one import call. It owns the TeamResolver, so the
identity cache never outlives the call.

Each write is committed on its own. A per-record failure rolls back that
write, is recorded with the record's identifying fields and never stops the
batch. There is no locking across the check-then-insert sequences; the
unique constraint on (event_id, game_number) turns a concurrent duplicate
game number into a reported skip.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rinksync.core.config import settings
from rinksync.models import Event, EventType, GameStage, GameStatus, ResultType
from rinksync.repositories import EventRepository, GameRepository, StandingsRepository, TeamRepository
from rinksync.services.parsing.records import GameRow, ScheduleEntry, StandingsRow
from rinksync.services.standings.calculator import PointStructure, StandingsCalculator, TeamRef
from rinksync.services.sync.errors import EventNotFoundError, ImportValidationError, TeamResolutionError
from rinksync.services.sync.matchers.game_matcher import GameMatcher, LeagueMatch, MatchStatus, entry_label
from rinksync.services.sync.matchers.team_resolver import TeamResolver
from rinksync.services.sync.tournament_clusterer import TournamentCluster, TournamentClusterer
from rinksync.services.sync.utils.name_normalizer import is_home_venue

logger = logging.getLogger(__name__)

# Summary keys and cluster import order
CLASSIFICATION_ORDER = ["league", "tournament", "playoff", "provincial", "district", "national", "exhibition"]


def row_label(row: GameRow, number: Optional[str]) -> str:
    """Record label: "#365", or the team pair when the row has no game number."""
    if number:
        return f"#{number}"
    return f"{row.home_name} vs {row.away_name}"


# =============================================================================
# Results
# =============================================================================

@dataclass
class RecordStatus:
    """Outcome for one input record."""
    status: str
    detail: str
    game_number: Optional[str] = None
    game_id: Optional[str] = None


@dataclass
class ScoreTableImportResult:
    imported: int = 0
    records: List[RecordStatus] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    mismatches: List[str] = field(default_factory=list)
    created_teams: int = 0

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class LeagueResult:
    entry: ScheduleEntry
    status: str
    detail: str
    existing_game_id: Optional[str] = None


@dataclass
class ScheduleImportSummary:
    imported: int = 0
    filled: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    created_events: List[str] = field(default_factory=list)
    records: List[RecordStatus] = field(default_factory=list)

    def record(self, status: MatchStatus, detail: str, game_id: Optional[str] = None) -> None:
        self.records.append(RecordStatus(status.value, detail, game_id=game_id))


@dataclass
class ScheduleReconciliation:
    summary: Dict[str, int]
    league_results: List[LeagueResult]
    clusters: List[TournamentCluster]
    import_results: Optional[ScheduleImportSummary] = None


@dataclass
class StandingsImportRow:
    team_name: str
    team_id: str
    created: bool


@dataclass
class StandingsImportResult:
    rows: List[StandingsImportRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def created_teams(self) -> int:
        return sum(1 for r in self.rows if r.created)


# =============================================================================
# Reconciler
# =============================================================================

class ImportReconciler:
    """
    Entry point for score-table, schedule and standings imports.
    """

    def __init__(
        self,
        db: Session,
        default_level: Optional[str] = None,
        default_skill_level: Optional[str] = None,
        max_gap_days: Optional[int] = None,
        placeholder_venues: Optional[Iterable[str]] = None,
        home_venue_keywords: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the import reconciler.

        Args:
            db: SQLAlchemy database session
            default_level: Level for created teams/events (settings.DEFAULT_LEVEL)
            default_skill_level: Skill tier for created teams/events (settings.DEFAULT_SKILL_LEVEL)
            max_gap_days: Clustering gap (settings.CLUSTER_MAX_GAP_DAYS)
            placeholder_venues: Venues ignored for cluster location (settings.PLACEHOLDER_VENUES)
            home_venue_keywords: Venue substrings meaning the tracked team is home
                (settings.HOME_VENUE_KEYWORDS)
        """
        self.db = db
        self.default_level = default_level or settings.DEFAULT_LEVEL
        self.default_skill_level = default_skill_level or settings.DEFAULT_SKILL_LEVEL
        self.home_venue_keywords = list(
            home_venue_keywords if home_venue_keywords is not None else settings.HOME_VENUE_KEYWORDS
        )

        self.teams = TeamRepository(db)
        self.events = EventRepository(db)
        self.games = GameRepository(db)
        self.snapshots = StandingsRepository(db)
        self.matcher = GameMatcher(db)
        self.resolver = TeamResolver(db, self.default_level, self.default_skill_level)
        self.clusterer = TournamentClusterer(
            max_gap_days=max_gap_days if max_gap_days is not None else settings.CLUSTER_MAX_GAP_DAYS,
            placeholder_venues=placeholder_venues if placeholder_venues is not None else settings.PLACEHOLDER_VENUES,
        )

    def _require_event(self, event_id: str) -> Event:
        event = self.events.find_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    # ========================================================================
    # Score table import
    # ========================================================================

    async def import_score_table(
        self,
        event_id: str,
        rows: List[GameRow],
        stage: Optional[str] = None,
        level: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> ScoreTableImportResult:
        """
        Import parsed score-table rows into an event.

        Args:
            event_id: Target event
            rows: Parsed rows
            stage: Stage for inserted games; regular_season for regular-season
                events and pool_play otherwise when omitted
            level: Level for created teams (event level, then default)
            skill_level: Skill tier for created teams (event skill, then default)

        Returns:
            ScoreTableImportResult with per-record statuses and snapshot mismatches

        Raises:
            ImportValidationError: Missing event id or no rows
            EventNotFoundError: Unknown event
        """
        if not event_id or not rows:
            raise ImportValidationError("event_id and rows required")
        event = self._require_event(event_id)

        if stage is None:
            stage = (
                GameStage.REGULAR_SEASON.value
                if event.event_type == EventType.REGULAR_SEASON.value
                else GameStage.POOL_PLAY.value
            )
        level = level or event.level or self.default_level
        skill_level = skill_level or event.skill_level or self.default_skill_level

        logger.info(f"Importing {len(rows)} score rows into {event.name} (stage={stage})")
        result = ScoreTableImportResult()

        for row in rows:
            status = await self._import_game_row(event_id, row, stage, level, skill_level, result)
            result.records.append(status)

        result.created_teams = len(self.resolver.created)
        result.mismatches = await self.validate_against_snapshot(event_id)

        logger.info(
            f"Score import into {event.name}: {result.imported} imported, "
            f"{len(result.skipped)} skipped, {len(result.errors)} errors, "
            f"{len(result.mismatches)} mismatches"
        )
        return result

    async def _import_game_row(
        self,
        event_id: str,
        row: GameRow,
        stage: str,
        level: str,
        skill_level: str,
        result: ScoreTableImportResult,
    ) -> RecordStatus:
        # Blank game numbers are stored as NULL
        number = (row.game_number or "").strip() or None
        label = row_label(row, number)
        try:
            home_id = await self.resolver.resolve(row.home_name, row.home_external_id, level, skill_level)
            away_id = await self.resolver.resolve(row.away_name, row.away_external_id, level, skill_level)

            if await self.matcher.find_by_game_number(event_id, number):
                detail = f"{label} (duplicate game number)"
                result.skipped.append(detail)
                return RecordStatus(MatchStatus.SKIPPED.value, detail, number)

            day = row.start_datetime.date()
            if await self.matcher.find_same_day_pair(day, home_id, away_id, event_id=event_id):
                detail = f"{label} {day.strftime('%b')} {day.day} (same teams & date)"
                result.skipped.append(detail)
                return RecordStatus(MatchStatus.SKIPPED.value, detail, number)

            completed = row.has_score
            game = self.games.create(
                event_id=event_id,
                game_number=number,
                stage=stage,
                start_datetime=row.start_datetime,
                venue=row.venue or None,
                home_team_id=home_id,
                away_team_id=away_id,
                final_score_home=row.home_score if completed else None,
                final_score_away=row.away_score if completed else None,
                status=GameStatus.COMPLETED.value if completed else GameStatus.SCHEDULED.value,
                result_type=ResultType.REGULATION.value if completed else None,
            )
            self.games.save()
            result.imported += 1
            return RecordStatus(MatchStatus.IMPORTED.value, f"{label} imported", number, game.id)

        except IntegrityError:
            # Another import inserted the same game number first
            self.games.rollback()
            detail = f"{label} (duplicate game number)"
            result.skipped.append(detail)
            return RecordStatus(MatchStatus.SKIPPED.value, detail, number)
        except (TeamResolutionError, SQLAlchemyError) as e:
            self.games.rollback()
            logger.error(f"Game {number or label}: {e}")
            detail = f"Game {number or label}: {e}"
            result.errors.append(detail)
            return RecordStatus(MatchStatus.ERROR.value, detail, number)

    # ========================================================================
    # Snapshot cross-check
    # ========================================================================

    async def validate_against_snapshot(self, event_id: str) -> List[str]:
        """
        Compare GP/W/L/T computed from completed games with the stored snapshot.

        Returns:
            One message per snapshot team whose record differs, and a
            "No games found" message for snapshot teams without games.
            Empty when the event has no snapshot.
        """
        event = self._require_event(event_id)
        snapshot = self.snapshots.find_by_event(event_id)
        if not snapshot:
            return []

        games = self.games.find_completed_by_event(event_id)

        team_ids = [row.team_id for row in snapshot]
        for game in games:
            for team_id in (game.home_team_id, game.away_team_id):
                if team_id and team_id not in team_ids:
                    team_ids.append(team_id)
        teams = [TeamRef(id=t.id, name=t.name) for t in self.teams.find_by_ids(team_ids)]

        calculator = StandingsCalculator(point_structure=PointStructure.from_event(event), goal_diff_cap=None)
        computed = {s.team_id: s for s in calculator.compute(teams, games)}

        mismatches: List[str] = []
        for row in snapshot:
            name = row.team.name if row.team else row.team_id
            calc = computed.get(row.team_id)

            if calc is None or calc.gp == 0:
                mismatches.append(
                    f"{name}: No games found (standings show {row.gp}GP {row.w}W {row.l}L {row.t}T)"
                )
                continue

            diffs = []
            for label, mine, theirs in (
                ("GP", calc.gp, row.gp),
                ("W", calc.w, row.w),
                ("L", calc.l, row.l),
                ("T", calc.t, row.t),
            ):
                if mine != theirs:
                    diffs.append(f"{label}: {mine} vs {theirs}")
            if diffs:
                mismatches.append(f"{name}: {', '.join(diffs)} (games vs standings)")

        if mismatches:
            logger.info(f"Snapshot cross-check for event {event_id}: {len(mismatches)} mismatches")
        return mismatches

    # ========================================================================
    # Schedule reconciliation
    # ========================================================================

    async def reconcile_schedule(
        self,
        entries: List[ScheduleEntry],
        team_id: str,
        team_name: str,
        regular_season_event_id: Optional[str] = None,
        do_import: bool = False,
    ) -> ScheduleReconciliation:
        """
        Reconcile a tracked team's schedule with the stored games.

        Args:
            entries: Parsed schedule entries
            team_id: Tracked team
            team_name: Tracked team's name (pre-seeds the resolver)
            regular_season_event_id: Event league entries are matched against;
                without it every league entry is new
            do_import: Insert new league games, fill fillable ones, and create
                or reuse events for clusters

        Raises:
            ImportValidationError: No entries or no team id
            EventNotFoundError: Unknown regular-season event
        """
        if not entries or not team_id:
            raise ImportValidationError("entries and team_id required")
        if regular_season_event_id:
            self._require_event(regular_season_event_id)

        self.resolver.seed(team_id, raw_name=team_name)

        summary = {name: 0 for name in CLASSIFICATION_ORDER}
        summary["total"] = len(entries)
        for entry in entries:
            summary[entry.classification] = summary.get(entry.classification, 0) + 1

        league_entries = [e for e in entries if e.classification == "league"]
        league_results = await self._match_league_entries(league_entries, team_id, regular_season_event_id)

        by_classification = self.clusterer.cluster_by_classification(entries)
        clusters = [
            cluster
            for name in CLASSIFICATION_ORDER
            for cluster in by_classification.get(name, [])
        ]

        logger.info(
            f"Schedule for {team_name}: {len(entries)} entries, {len(league_entries)} league, "
            f"{len(clusters)} clusters"
        )

        import_results = None
        if do_import:
            import_results = ScheduleImportSummary()
            if regular_season_event_id:
                await self._import_league_results(league_results, team_id, regular_season_event_id, import_results)
            for cluster in clusters:
                await self._import_cluster(cluster, team_id, import_results)
            logger.info(
                f"Schedule import for {team_name}: {import_results.imported} imported, "
                f"{import_results.filled} filled, {len(import_results.created_events)} events created"
            )

        return ScheduleReconciliation(
            summary=summary,
            league_results=league_results,
            clusters=clusters,
            import_results=import_results,
        )

    async def _match_league_entries(
        self,
        entries: List[ScheduleEntry],
        team_id: str,
        event_id: Optional[str],
    ) -> List[LeagueResult]:
        results = []
        for entry in entries:
            label = entry_label(entry)
            if not event_id:
                results.append(LeagueResult(
                    entry, MatchStatus.NEW.value, f"{label}: {entry.own_score}-{entry.opponent_score}"
                ))
                continue
            try:
                opponent_id = await self.resolver.resolve(entry.opponent_name, entry.opponent_external_id)
                match: LeagueMatch = await self.matcher.classify_league_entry(entry, team_id, opponent_id, event_id)
                results.append(LeagueResult(entry, match.status.value, match.detail, match.existing_game_id))
            except (TeamResolutionError, SQLAlchemyError) as e:
                self.db.rollback()
                logger.error(f"{label}: {e}")
                results.append(LeagueResult(entry, MatchStatus.ERROR.value, f"{label}: {e}"))
        return results

    async def _import_league_results(
        self,
        results: List[LeagueResult],
        team_id: str,
        event_id: str,
        summary: ScheduleImportSummary,
    ) -> None:
        for league_result in results:
            if league_result.status == MatchStatus.NEW.value:
                game_id = await self._insert_entry(
                    league_result.entry, team_id, event_id, GameStage.REGULAR_SEASON.value, summary
                )
                if game_id:
                    league_result.status = MatchStatus.IMPORTED.value
                    league_result.existing_game_id = game_id
                    summary.imported += 1
            elif league_result.status == MatchStatus.MATCHED_FILLABLE.value:
                if await self._fill_scores(league_result, team_id, summary):
                    league_result.status = MatchStatus.FILLED.value
                    summary.filled += 1

    async def _fill_scores(self, league_result: LeagueResult, team_id: str, summary: ScheduleImportSummary) -> bool:
        """Write the entry's score into an existing game that has none."""
        entry = league_result.entry
        label = entry_label(entry)
        try:
            game = self.games.find_by_id(league_result.existing_game_id)
            if game is None or game.has_result:
                summary.record(
                    MatchStatus.SKIPPED, f"{label} (score already stored)", league_result.existing_game_id
                )
                return False
            if game.home_team_id == team_id:
                game.final_score_home, game.final_score_away = entry.own_score, entry.opponent_score
            else:
                game.final_score_home, game.final_score_away = entry.opponent_score, entry.own_score
            game.status = GameStatus.COMPLETED.value
            game.result_type = entry.result_type
            self.games.save()
            summary.record(MatchStatus.FILLED, f"{label} filled {entry.own_score}-{entry.opponent_score}", game.id)
            return True
        except SQLAlchemyError as e:
            self.games.rollback()
            logger.error(f"{label}: failed to fill score: {e}")
            summary.errors.append(f"{label}: {e}")
            summary.record(MatchStatus.ERROR, f"{label}: {e}")
            return False

    async def _import_cluster(self, cluster: TournamentCluster, team_id: str, summary: ScheduleImportSummary) -> None:
        try:
            event = self._find_or_create_event(cluster, summary)
        except SQLAlchemyError as e:
            self.events.rollback()
            logger.error(f"Failed to create event {cluster.name}: {e}")
            summary.errors.append(f"Failed to create event: {cluster.name}")
            for entry in cluster.entries:
                summary.record(MatchStatus.ERROR, f"{entry_label(entry)}: event {cluster.name} not created")
            return

        for entry in cluster.entries:
            if await self._insert_entry(entry, team_id, event.id, cluster.stage, summary):
                summary.imported += 1

    def _find_or_create_event(self, cluster: TournamentCluster, summary: ScheduleImportSummary) -> Event:
        """Overlapping event of the same type, else an exact name match, else a new event."""
        event = self.events.find_overlapping(cluster.event_type, cluster.start_date, cluster.end_date)
        if event is None:
            event = self.events.find_by_name(cluster.name)
        if event is not None:
            logger.debug(f"Cluster {cluster.name} matched event {event.name}")
            return event

        event = self.events.create(
            name=cluster.name,
            event_type=cluster.event_type,
            start_date=cluster.start_date,
            end_date=cluster.end_date,
            location=cluster.location,
            level=self.default_level,
            skill_level=self.default_skill_level,
            goal_differential_cap=settings.DEFAULT_GOAL_DIFF_CAP,
        )
        self.events.save()
        summary.created_events.append(cluster.name)
        logger.info(f"Created {cluster.event_type} event {cluster.name}")
        return event

    def _sides(self, entry: ScheduleEntry, team_id: str, opponent_id: str) -> Dict[str, Any]:
        """Home/away by venue: the tracked team is home only at a home rink."""
        if is_home_venue(entry.venue, self.home_venue_keywords):
            return {
                "home_team_id": team_id,
                "away_team_id": opponent_id,
                "final_score_home": entry.own_score,
                "final_score_away": entry.opponent_score,
            }
        return {
            "home_team_id": opponent_id,
            "away_team_id": team_id,
            "final_score_home": entry.opponent_score,
            "final_score_away": entry.own_score,
        }

    async def _insert_entry(
        self,
        entry: ScheduleEntry,
        team_id: str,
        event_id: str,
        stage: str,
        summary: ScheduleImportSummary,
    ) -> Optional[str]:
        """
        Insert one schedule entry as a game.

        The duplicate check spans every event: the same game may already be
        stored under an event imported from another source.

        Returns:
            The new game id, or None when skipped or failed
        """
        label = entry_label(entry)
        try:
            opponent_id = await self.resolver.resolve(entry.opponent_name, entry.opponent_external_id)
            existing = await self.matcher.find_same_day_pair(entry.game_date, team_id, opponent_id)
            if existing:
                summary.skipped += 1
                summary.record(MatchStatus.SKIPPED, f"{label} (already stored)", existing.id)
                return None

            game = self.games.create(
                event_id=event_id,
                stage=stage,
                start_datetime=entry.start_datetime,
                venue=entry.venue or None,
                status=GameStatus.COMPLETED.value,
                result_type=entry.result_type,
                **self._sides(entry, team_id, opponent_id),
            )
            self.games.save()
            summary.record(MatchStatus.IMPORTED, f"{label} imported", game.id)
            return game.id
        except (TeamResolutionError, SQLAlchemyError) as e:
            self.games.rollback()
            logger.error(f"{label}: {e}")
            summary.errors.append(f"{label}: {e}")
            summary.record(MatchStatus.ERROR, f"{label}: {e}")
            return None

    # ========================================================================
    # Standings import
    # ========================================================================

    async def import_standings(
        self,
        event_id: str,
        rows: List[StandingsRow],
        level: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> StandingsImportResult:
        """
        Upsert snapshot rows for an event, resolving (or creating) each team.

        Raises:
            ImportValidationError: Missing event id or no rows
            EventNotFoundError: Unknown event
        """
        if not event_id or not rows:
            raise ImportValidationError("event_id and rows required")
        event = self._require_event(event_id)
        level = level or event.level or self.default_level
        skill_level = skill_level or event.skill_level or self.default_skill_level

        result = StandingsImportResult()
        for row in rows:
            try:
                team_id = await self.resolver.resolve(row.team_name, row.external_id, level, skill_level)
                self.snapshots.upsert(event_id, team_id, row.stats())
                self.snapshots.save()
                result.rows.append(StandingsImportRow(
                    team_name=row.team_name,
                    team_id=team_id,
                    created=team_id in self.resolver.created,
                ))
            except (TeamResolutionError, SQLAlchemyError) as e:
                self.snapshots.rollback()
                logger.error(f"Standings row {row.team_name}: {e}")
                result.errors.append(f"{row.team_name}: {e}")

        logger.info(
            f"Standings import into {event.name}: {len(result.rows)} rows, {result.created_teams} new teams"
        )
        return result
