"""Event API routes.

Provides endpoints for:
- Computed standings (per pool, with bracket placeholders resolved)
- Snapshot cross-check (games vs imported standings)
- Playdown schedule generation
- A team's record and streak within an event

Base path: /api/events
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rinksync.api.schemas import (
    CrossCheckResponse,
    EventStandingsResponse,
    PlaydownScheduleRequest,
    PlaydownScheduleResponse,
    TeamRecordResponse,
)
from rinksync.core.config import settings
from rinksync.core.database import get_db
from rinksync.services.standings.event_standings import EventStandingsService
from rinksync.services.standings.playdown import PlaydownService
from rinksync.services.sync.errors import EventNotFoundError, ImportValidationError
from rinksync.services.sync.reconciler import ImportReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


def get_standings_service(db: Session = Depends(get_db)) -> EventStandingsService:
    """Dependency to get the event standings service."""
    return EventStandingsService(db, default_goal_diff_cap=settings.DEFAULT_GOAL_DIFF_CAP)


@router.get("/{event_id}/standings", response_model=EventStandingsResponse)
async def get_event_standings(
    event_id: str,
    service: EventStandingsService = Depends(get_standings_service),
) -> EventStandingsResponse:
    """
    Standings for an event.

    Events with pools get one table per pool over pool-play games; other
    events get a single table. Playdown tables flag qualifying teams.
    """
    try:
        standings = await service.get_event_standings(event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return EventStandingsResponse.model_validate(standings)


@router.get("/{event_id}/cross-check", response_model=CrossCheckResponse)
async def cross_check_event(event_id: str, db: Session = Depends(get_db)) -> CrossCheckResponse:
    """Compare the event's standings snapshot with records computed from its games."""
    reconciler = ImportReconciler(db)
    try:
        mismatches = await reconciler.validate_against_snapshot(event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CrossCheckResponse(event_id=event_id, mismatches=mismatches)


@router.post("/{event_id}/playdown-schedule", response_model=PlaydownScheduleResponse)
async def create_playdown_schedule(
    event_id: str,
    request: PlaydownScheduleRequest,
    db: Session = Depends(get_db),
) -> PlaydownScheduleResponse:
    """Create round-robin playdown slots (each pair meets games_per_matchup times)."""
    service = PlaydownService(db)
    try:
        result = await service.create_schedule(
            event_id,
            request.team_ids,
            games_per_matchup=request.games_per_matchup,
            start=request.start,
        )
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PlaydownScheduleResponse(event_id=event_id, created=result["created"], errors=result["errors"])


@router.get("/{event_id}/teams/{team_id}/record", response_model=TeamRecordResponse)
async def get_team_record(
    event_id: str,
    team_id: str,
    service: EventStandingsService = Depends(get_standings_service),
) -> TeamRecordResponse:
    """W-L-T record and current streak of a team in an event."""
    try:
        record = await service.get_team_record(event_id, team_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TeamRecordResponse(
        event_id=event_id,
        team_id=team_id,
        w=record.w,
        l=record.l,
        t=record.t,
        record=record.label,
        streak=record.streak,
    )
