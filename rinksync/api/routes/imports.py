"""Import API routes.

Provides endpoints for:
- Score-table import into an event (with snapshot cross-check)
- Free-text schedule reconciliation (preview, or import with do_import)
- Standings-table import into an event's snapshot

Each endpoint accepts either structured rows or the raw pasted text, and
reports how many candidate records the parser kept.

Base path: /api/imports
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rinksync.api.schemas import (
    ClusterPreviewOut,
    LeagueResultOut,
    RecordStatusOut,
    ScheduleImportRequest,
    ScheduleImportResultOut,
    ScheduleReconciliationResponse,
    ScoreTableImportRequest,
    ScoreTableImportResponse,
    StandingsImportRequest,
    StandingsImportResponse,
    StandingsImportRowOut,
)
from rinksync.core.config import settings
from rinksync.core.database import get_db
from rinksync.services.parsing import GameRow, ScheduleEntry, ScheduleParser, StandingsRow
from rinksync.services.parsing.symbols import classify
from rinksync.services.parsing.tabular_parser import count_candidate_lines, parse_game_rows, parse_standings_rows
from rinksync.services.sync.errors import EventNotFoundError, ImportValidationError
from rinksync.services.sync.reconciler import ImportReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/imports", tags=["imports"])


def get_reconciler(db: Session = Depends(get_db)) -> ImportReconciler:
    """Dependency: one reconciler (and team cache) per request."""
    return ImportReconciler(db)


def _raise_http(error: Exception) -> None:
    if isinstance(error, EventNotFoundError):
        raise HTTPException(status_code=404, detail=str(error))
    raise HTTPException(status_code=400, detail=str(error))


@router.post("/games", response_model=ScoreTableImportResponse)
async def import_games(
    request: ScoreTableImportRequest,
    reconciler: ImportReconciler = Depends(get_reconciler),
) -> ScoreTableImportResponse:
    """
    Import a score table into an event.

    Duplicate game numbers and same-teams-same-day games are skipped.
    After the import, the event's standings snapshot (if any) is compared
    with the records computed from its completed games.
    """
    if request.raw_text is not None:
        rows = parse_game_rows(request.raw_text)
        candidates = count_candidate_lines(request.raw_text, join_continuations=True)
    else:
        rows = [GameRow(**row.model_dump()) for row in (request.rows or [])]
        candidates = len(rows)

    try:
        result = await reconciler.import_score_table(
            request.event_id,
            rows,
            stage=request.stage,
            level=request.level,
            skill_level=request.skill_level,
        )
    except (ImportValidationError, EventNotFoundError) as e:
        logger.warning(f"Score import rejected: {e}")
        _raise_http(e)

    return ScoreTableImportResponse(
        success=result.success,
        candidates=candidates,
        parsed=len(rows),
        imported=result.imported,
        created_teams=result.created_teams,
        records=[RecordStatusOut.model_validate(r) for r in result.records],
        skipped=result.skipped,
        errors=result.errors,
        mismatches=result.mismatches,
    )


@router.post("/schedule", response_model=ScheduleReconciliationResponse)
async def import_schedule(
    request: ScheduleImportRequest,
    reconciler: ImportReconciler = Depends(get_reconciler),
) -> ScheduleReconciliationResponse:
    """
    Reconcile a tracked team's schedule.

    League entries are matched against the regular-season event; other
    entries are clustered into inferred events. With ``do_import`` the new
    games are written and fillable games get their scores.
    """
    if request.raw_text is not None:
        parser = ScheduleParser(
            season_start_year=settings.SEASON_START_YEAR,
            cutoff_month=settings.SEASON_CUTOFF_MONTH,
        )
        entries = parser.parse(request.raw_text)
        candidates = len(entries) + parser.discarded
    else:
        entries = [
            ScheduleEntry(**item.model_dump(), classification=classify(item.symbol).name)
            for item in (request.entries or [])
        ]
        candidates = len(entries)

    try:
        result = await reconciler.reconcile_schedule(
            entries,
            team_id=request.team_id,
            team_name=request.team_name,
            regular_season_event_id=request.regular_season_event_id,
            do_import=request.do_import,
        )
    except (ImportValidationError, EventNotFoundError) as e:
        logger.warning(f"Schedule import rejected: {e}")
        _raise_http(e)

    return ScheduleReconciliationResponse(
        candidates=candidates,
        parsed=len(entries),
        summary=result.summary,
        league_results=[
            LeagueResultOut(
                game_date=r.entry.game_date,
                opponent=r.entry.opponent_name,
                own_score=r.entry.own_score,
                opponent_score=r.entry.opponent_score,
                status=r.status,
                detail=r.detail,
                existing_game_id=r.existing_game_id,
            )
            for r in result.league_results
        ],
        clusters=[ClusterPreviewOut(**c.preview()) for c in result.clusters],
        import_results=(
            ScheduleImportResultOut.model_validate(result.import_results)
            if result.import_results is not None else None
        ),
    )


@router.post("/standings", response_model=StandingsImportResponse)
async def import_standings(
    request: StandingsImportRequest,
    reconciler: ImportReconciler = Depends(get_reconciler),
) -> StandingsImportResponse:
    """Upsert an event's standings snapshot from a pasted standings table."""
    if request.raw_text is not None:
        rows = parse_standings_rows(request.raw_text)
        candidates = count_candidate_lines(request.raw_text)
    else:
        rows = [StandingsRow(**row.model_dump()) for row in (request.rows or [])]
        candidates = len(rows)

    try:
        result = await reconciler.import_standings(
            request.event_id,
            rows,
            level=request.level,
            skill_level=request.skill_level,
        )
    except (ImportValidationError, EventNotFoundError) as e:
        logger.warning(f"Standings import rejected: {e}")
        _raise_http(e)

    return StandingsImportResponse(
        success=not result.errors,
        candidates=candidates,
        parsed=len(rows),
        created_teams=result.created_teams,
        rows=[StandingsImportRowOut.model_validate(r) for r in result.rows],
        errors=result.errors,
    )
