"""
Free-text schedule parser.

Parses a tracked team's game list copied from a ranking site. Each game is a
block of lines:

    Oct 5
    7:30 PM
    <blank>
    Kanata Blazers (#1234)*
    Watch at Minto Arena
    W
    3 - 2
    OT

The scan is an explicit state machine. An entry without a result marker or
a score line, or whose opponent or venue line is missing (a date line comes
first), is discarded and the scan resyncs on the current line, looking
for the next date. Malformed entries never stop the scan.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import List, Optional

from rinksync.models import ResultType
from rinksync.services.parsing.records import ScheduleEntry
from rinksync.services.parsing.symbols import classify, strip_symbol
from rinksync.services.sync.utils.name_normalizer import (
    BRACKETED_ID_PATTERN,
    clean_venue,
    extract_external_id,
)
from rinksync.utils.season import infer_season_date

logger = logging.getLogger(__name__)

LEADING_COMMA_PATTERN = re.compile(r'^,\s*')
DATE_LINE_PATTERN = re.compile(r'^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+(\d{1,2})$')
TIME_LINE_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})\s*(AM|PM)$', re.IGNORECASE)
RESULT_LINE_PATTERN = re.compile(r'^[WLT]$')
SCORE_LINE_PATTERN = re.compile(r'^(\d+)\s*-\s*(\d+)$')
OVERTIME_LINE_PATTERN = re.compile(r'^(OT|SO|OT\s*/\s*SO|overtime|shootout)$', re.IGNORECASE)


class ScanState(str, Enum):
    SEEK_DATE = "seek_date"
    TIME = "time"
    SKIP_BLANK = "skip_blank"
    OPPONENT = "opponent"
    VENUE = "venue"
    RESULT = "result"
    SCORE = "score"
    OVERTIME = "overtime"
    EMIT = "emit"
    DISCARD = "discard"


@dataclass
class _PendingEntry:
    game_date: Optional[date] = None
    game_time: Optional[time] = None
    opponent: str = ""
    venue: str = ""
    result: Optional[str] = None
    scores: Optional[tuple] = None
    result_type: str = ResultType.REGULATION.value


def parse_clock(value: str) -> Optional[time]:
    """'7:30 PM' -> time(19, 30)."""
    match = TIME_LINE_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if hours > 12 or minutes > 59:
        return None
    if meridiem == "PM" and hours != 12:
        hours += 12
    if meridiem == "AM" and hours == 12:
        hours = 0
    return time(hours, minutes)


def assign_scores(result: str, first: int, second: int) -> tuple:
    """
    Map the written score to (own, opponent) using the result marker.

    A win takes the larger number, a loss the smaller, a tie keeps the
    order written.
    """
    if result == "W":
        return max(first, second), min(first, second)
    if result == "L":
        return min(first, second), max(first, second)
    return first, second


@dataclass
class ScheduleParser:
    """
    State machine over the lines of a pasted schedule.

    Attributes:
        season_start_year: Year of the September-December half of the season
        cutoff_month: First month that belongs to ``season_start_year``
    """
    season_start_year: int = 2025
    cutoff_month: int = 9
    discarded: int = field(default=0, init=False)

    def parse(self, text: str) -> List[ScheduleEntry]:
        lines = [
            LEADING_COMMA_PATTERN.sub('', line).strip()
            for line in (text or "").replace('\r\n', '\n').split('\n')
        ]
        entries: List[ScheduleEntry] = []
        self.discarded = 0

        state = ScanState.SEEK_DATE
        pending = _PendingEntry()
        i = 0

        while True:
            line = lines[i] if i < len(lines) else None

            if state is ScanState.SEEK_DATE:
                if line is None:
                    break
                pending = _PendingEntry()
                match = DATE_LINE_PATTERN.match(line)
                i += 1
                if match:
                    pending.game_date = infer_season_date(
                        match.group(1), int(match.group(2)), self.season_start_year, self.cutoff_month
                    )
                    state = ScanState.TIME if pending.game_date else ScanState.SEEK_DATE

            elif state is ScanState.TIME:
                clock = parse_clock(line) if line is not None else None
                if clock is not None:
                    pending.game_time = clock
                    i += 1
                state = ScanState.SKIP_BLANK

            elif state is ScanState.SKIP_BLANK:
                if line == "":
                    i += 1
                else:
                    state = ScanState.OPPONENT

            elif state is ScanState.OPPONENT:
                if line is None or DATE_LINE_PATTERN.match(line):
                    state = ScanState.DISCARD
                else:
                    pending.opponent = line
                    i += 1
                    state = ScanState.VENUE

            elif state is ScanState.VENUE:
                if line is None or DATE_LINE_PATTERN.match(line):
                    state = ScanState.DISCARD
                else:
                    pending.venue = line
                    i += 1
                    state = ScanState.RESULT

            elif state is ScanState.RESULT:
                if line is not None and RESULT_LINE_PATTERN.match(line):
                    pending.result = line
                    i += 1
                    state = ScanState.SCORE
                else:
                    state = ScanState.DISCARD

            elif state is ScanState.SCORE:
                match = SCORE_LINE_PATTERN.match(line) if line is not None else None
                if match:
                    pending.scores = (int(match.group(1)), int(match.group(2)))
                    i += 1
                    state = ScanState.OVERTIME
                else:
                    state = ScanState.DISCARD

            elif state is ScanState.OVERTIME:
                if line is not None and OVERTIME_LINE_PATTERN.match(line):
                    lowered = line.lower()
                    if "so" in lowered or "shootout" in lowered:
                        pending.result_type = ResultType.SHOOTOUT.value
                    else:
                        pending.result_type = ResultType.OVERTIME.value
                    i += 1
                state = ScanState.EMIT

            elif state is ScanState.EMIT:
                entries.append(self._build_entry(pending))
                state = ScanState.SEEK_DATE

            elif state is ScanState.DISCARD:
                # Resync: the current line may itself be the next date
                self.discarded += 1
                logger.debug(f"Discarded schedule entry dated {pending.game_date}: incomplete block")
                state = ScanState.SEEK_DATE

        if self.discarded:
            logger.info(f"Schedule parse: {len(entries)} entries, {self.discarded} discarded")
        return entries

    def _build_entry(self, pending: _PendingEntry) -> ScheduleEntry:
        own, opponent = assign_scores(pending.result, *pending.scores)
        without_symbol, symbol = strip_symbol(pending.opponent)
        external_id = extract_external_id(without_symbol) if BRACKETED_ID_PATTERN.search(without_symbol) else None
        opponent_name = ' '.join(BRACKETED_ID_PATTERN.sub(' ', without_symbol).split())

        return ScheduleEntry(
            game_date=pending.game_date,
            game_time=pending.game_time,
            opponent_name=opponent_name,
            opponent_external_id=external_id,
            venue=clean_venue(pending.venue),
            result=pending.result,
            own_score=own,
            opponent_score=opponent,
            result_type=pending.result_type,
            symbol=symbol,
            classification=classify(symbol).name,
        )


def parse_schedule(text: str, season_start_year: int = 2025, cutoff_month: int = 9) -> List[ScheduleEntry]:
    """Parse a pasted schedule with a throwaway parser."""
    return ScheduleParser(season_start_year=season_start_year, cutoff_month=cutoff_month).parse(text)
