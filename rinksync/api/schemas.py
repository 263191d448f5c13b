"""
Request and response models for the import and standings API.
"""
from datetime import date, datetime, time
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ==================== REQUEST MODELS ====================

class GameRowIn(BaseModel):
    """One score-table row (already split into fields)."""
    game_number: Optional[str] = None
    start_datetime: datetime
    venue: str = ""
    home_name: str
    away_name: str
    home_external_id: Optional[str] = None
    away_external_id: Optional[str] = None
    home_score: Optional[int] = Field(None, ge=0)
    away_score: Optional[int] = Field(None, ge=0)


class ScoreTableImportRequest(BaseModel):
    """Score-table import: structured rows or the pasted table."""
    event_id: str
    rows: Optional[List[GameRowIn]] = None
    raw_text: Optional[str] = Field(None, description="Tab-separated table as pasted")
    stage: Optional[str] = None
    level: Optional[str] = None
    skill_level: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "event_id": "123e4567-e89b-12d3-a456-426614174000",
                "raw_text": "365\tWed, Oct. 01, 2025 7:45 PM\tMinto Arena\tNepean Wildcats #2859 (3)\tKanata Blazers #1234 (2)",
            }
        }
    )


class ScheduleEntryIn(BaseModel):
    game_date: date
    game_time: Optional[time] = None
    opponent_name: str
    opponent_external_id: Optional[str] = None
    venue: str = ""
    result: str = Field(..., pattern=r"^[WLT]$")
    own_score: int = Field(..., ge=0)
    opponent_score: int = Field(..., ge=0)
    result_type: str = Field("regulation", pattern=r"^(regulation|overtime|shootout)$")
    symbol: str = Field("", description="Classification glyph: ‡ ^^ ^ †† † ** * or empty")


class ScheduleImportRequest(BaseModel):
    """Schedule reconciliation: structured entries or the pasted schedule."""
    team_id: str
    team_name: str
    entries: Optional[List[ScheduleEntryIn]] = None
    raw_text: Optional[str] = None
    regular_season_event_id: Optional[str] = None
    do_import: bool = False


class StandingsRowIn(BaseModel):
    team_name: str
    external_id: Optional[str] = None
    gp: int = 0
    w: int = 0
    l: int = 0  # noqa: E741
    t: int = 0
    otl: int = 0
    sol: int = 0
    pts: int = 0
    gf: int = 0
    ga: int = 0
    gd: int = 0
    pim: int = 0
    pct: float = 0.0


class StandingsImportRequest(BaseModel):
    event_id: str
    rows: Optional[List[StandingsRowIn]] = None
    raw_text: Optional[str] = None
    level: Optional[str] = None
    skill_level: Optional[str] = None


class PlaydownScheduleRequest(BaseModel):
    team_ids: List[str] = Field(..., min_length=2)
    games_per_matchup: int = Field(2, ge=1, le=10)
    start: Optional[datetime] = None


# ==================== RESPONSE MODELS ====================

class RecordStatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    detail: str
    game_number: Optional[str] = None
    game_id: Optional[str] = None


class ScoreTableImportResponse(BaseModel):
    success: bool
    candidates: int = Field(..., description="Input records before parsing")
    parsed: int
    imported: int
    created_teams: int
    records: List[RecordStatusOut]
    skipped: List[str]
    errors: List[str]
    mismatches: List[str]


class LeagueResultOut(BaseModel):
    game_date: date
    opponent: str
    own_score: int
    opponent_score: int
    status: str
    detail: str
    existing_game_id: Optional[str] = None


class ClusterPreviewOut(BaseModel):
    name: str
    classification: str
    event_type: str
    start_date: date
    end_date: date
    location: Optional[str] = None
    game_count: int
    games: List[str]


class ScheduleImportResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    imported: int
    filled: int
    skipped: int
    errors: List[str]
    created_events: List[str]
    records: List[RecordStatusOut] = []


class ScheduleReconciliationResponse(BaseModel):
    candidates: int
    parsed: int
    summary: Dict[str, int]
    league_results: List[LeagueResultOut]
    clusters: List[ClusterPreviewOut]
    import_results: Optional[ScheduleImportResultOut] = None


class StandingsImportRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_name: str
    team_id: str
    created: bool


class StandingsImportResponse(BaseModel):
    success: bool
    candidates: int
    parsed: int
    created_teams: int
    rows: List[StandingsImportRowOut]
    errors: List[str]


class TeamStandingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rank: int
    team_id: str
    team_name: str
    gp: int
    w: int
    l: int  # noqa: E741
    t: int
    otl: int
    sol: int
    pts: int
    gf: int
    ga: int
    gd: int
    qualifies: Optional[bool] = None


class PoolStandingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pool_id: Optional[str] = None
    pool_name: Optional[str] = None
    advancement_count: int = 0
    standings: List[TeamStandingOut]


class BracketSlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    game_id: str
    stage: str
    game_number: Optional[str] = None
    home_team_id: Optional[str] = None
    away_team_id: Optional[str] = None
    home_placeholder: Optional[str] = None
    away_placeholder: Optional[str] = None
    final_score_home: Optional[int] = None
    final_score_away: Optional[int] = None


class EventStandingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    event_name: str
    event_type: str
    has_pools: bool
    pools: List[PoolStandingsOut]
    bracket: List[BracketSlotOut]


class CrossCheckResponse(BaseModel):
    event_id: str
    mismatches: List[str]


class TeamRecordResponse(BaseModel):
    event_id: str
    team_id: str
    w: int
    l: int  # noqa: E741
    t: int
    record: str
    streak: Optional[str] = None


class PlaydownScheduleResponse(BaseModel):
    event_id: str
    created: int
    errors: List[str]
