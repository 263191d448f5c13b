"""
Normalized record types produced by the parsers.

Each record kind is its own dataclass with a ``kind`` tag, so the
reconciler never handles loosely-typed row dicts.
"""
from dataclasses import dataclass, asdict
from datetime import date, datetime, time
from typing import Any, ClassVar, Dict, Optional

from rinksync.models import ResultType


@dataclass
class GameRow:
    """One row of a pasted score table."""
    kind: ClassVar[str] = "game_row"

    game_number: Optional[str]
    start_datetime: datetime
    venue: str
    home_name: str
    away_name: str
    home_external_id: Optional[str] = None
    away_external_id: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    @property
    def has_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None


@dataclass
class ScheduleEntry:
    """
    One game of a tracked team's free-text schedule.

    ``own_score`` / ``opponent_score`` are from the tracked team's point of
    view. ``symbol`` is the classification glyph stripped from the opponent
    name ("" when there was none).
    """
    kind: ClassVar[str] = "schedule_entry"

    game_date: date
    opponent_name: str
    venue: str
    result: str  # W / L / T
    own_score: int
    opponent_score: int
    game_time: Optional[time] = None
    opponent_external_id: Optional[str] = None
    result_type: str = ResultType.REGULATION.value
    symbol: str = ""
    classification: str = "exhibition"

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.game_date, self.game_time or time(0, 0))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind
        return data


@dataclass
class StandingsRow:
    """One row of a pasted standings table."""
    kind: ClassVar[str] = "standings_row"

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

    def stats(self) -> Dict[str, Any]:
        """Numeric columns keyed like the snapshot table."""
        data = asdict(self)
        data.pop("team_name")
        data.pop("external_id")
        return data
