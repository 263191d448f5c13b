"""
Tab-separated table parsers for pasted score and standings tables.

Game table columns:
    game #, date, venue, home team (score), away team (score)

    "365\tWed, Oct. 01, 2025 7:45 PM\tMinto Arena\tNepean Wildcats #2859 NYH1 (3)\tKanata Blazers #1234 (2)"

Standings table columns (13 or more):
    team, GP, W, L, T, OTL, SOL, PTS, GF, GA, DIFF, PIM, PCT

Malformed lines are dropped. Callers compare the number of returned records
with the number of candidate lines to report what was discarded.
"""
import logging
import re
from datetime import datetime
from typing import List, Optional, Tuple

from rinksync.services.parsing.records import GameRow, StandingsRow
from rinksync.services.sync.utils.name_normalizer import extract_external_id

logger = logging.getLogger(__name__)

GAME_COLUMNS = 5
STANDINGS_COLUMNS = 13

CONTINUATION_PATTERN = re.compile(r'\n(?!\d)')
GAME_NUMBER_PATTERN = re.compile(r'^\d+$')
GAME_LENGTH_PATTERN = re.compile(r'Game length:.*$', re.IGNORECASE)
SCORE_SUFFIX_PATTERN = re.compile(r'\s*\((\d+)\)\s*$')
LEADING_INT_PATTERN = re.compile(r'^\s*([+-]?\d+)')
LEADING_FLOAT_PATTERN = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+))')

# Tried in order after periods are removed ("Oct. 01" -> "Oct 01")
DATE_FORMATS = (
    "%a, %b %d, %Y %I:%M %p",
    "%a, %B %d, %Y %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%B %d, %Y %I:%M %p",
    "%a, %b %d, %Y",
    "%b %d, %Y",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def parse_int(value: str, default: int = 0) -> int:
    """Leading integer of a cell ("12", "+3", "7*"), else ``default``."""
    match = LEADING_INT_PATTERN.match(value or "")
    return int(match.group(1)) if match else default


def parse_float(value: str, default: float = 0.0) -> float:
    match = LEADING_FLOAT_PATTERN.match(value or "")
    return float(match.group(1)) if match else default


def parse_table_datetime(value: str) -> Optional[datetime]:
    """
    Parse a score-table date cell.

    Examples:
        >>> parse_table_datetime("Wed, Oct. 01, 2025 7:45 PM")
        datetime.datetime(2025, 10, 1, 19, 45)
    """
    cleaned = ' '.join((value or "").replace('.', '').split())
    cleaned = re.sub(r'\bSept\b', 'Sep', cleaned)
    if not cleaned:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def split_team_and_score(cell: str) -> Tuple[str, Optional[str], Optional[int]]:
    """
    Split "Nepean Wildcats #2859 (3)" into name, external id and score.

    The returned name keeps identifier and code noise; the resolver
    cleans it. A missing score is None.
    """
    match = SCORE_SUFFIX_PATTERN.search(cell)
    score = int(match.group(1)) if match else None
    team = SCORE_SUFFIX_PATTERN.sub('', cell).strip()
    return team, extract_external_id(team), score


def parse_game_rows(text: str) -> List[GameRow]:
    """
    Parse a pasted score table into GameRows.

    Lines not starting with a digit are continuations of the previous line
    (wrapped cells) and are joined with a space.
    """
    if not text or not text.strip():
        return []

    joined = CONTINUATION_PATTERN.sub(' ', text.replace('\r\n', '\n'))
    rows: List[GameRow] = []
    dropped = 0

    for line in joined.strip().split('\n'):
        if not line.strip():
            continue
        parts = [part.strip() for part in line.split('\t')]
        if len(parts) < GAME_COLUMNS or not GAME_NUMBER_PATTERN.match(parts[0]):
            dropped += 1
            continue

        home_raw, away_raw = parts[3], parts[4]
        start = parse_table_datetime(parts[1])
        if not home_raw or not away_raw or start is None:
            dropped += 1
            continue

        home_name, home_id, home_score = split_team_and_score(home_raw)
        away_name, away_id, away_score = split_team_and_score(away_raw)

        rows.append(GameRow(
            game_number=parts[0],
            start_datetime=start,
            venue=GAME_LENGTH_PATTERN.sub('', parts[2]).strip(),
            home_name=home_name,
            away_name=away_name,
            home_external_id=home_id,
            away_external_id=away_id,
            home_score=home_score,
            away_score=away_score,
        ))

    if dropped:
        logger.debug(f"Dropped {dropped} malformed score-table lines")
    return rows


def parse_standings_rows(text: str) -> List[StandingsRow]:
    """Parse a pasted standings table into StandingsRows."""
    if not text or not text.strip():
        return []

    rows: List[StandingsRow] = []
    for line in text.replace('\r\n', '\n').strip().split('\n'):
        parts = [part.strip() for part in line.split('\t')]
        if len(parts) < STANDINGS_COLUMNS or not parts[0]:
            continue
        # Header row ("Team  GP  W ...")
        if not LEADING_INT_PATTERN.match(parts[1]):
            continue

        rows.append(StandingsRow(
            team_name=parts[0],
            external_id=extract_external_id(parts[0]),
            gp=parse_int(parts[1]),
            w=parse_int(parts[2]),
            l=parse_int(parts[3]),
            t=parse_int(parts[4]),
            otl=parse_int(parts[5]),
            sol=parse_int(parts[6]),
            pts=parse_int(parts[7]),
            gf=parse_int(parts[8]),
            ga=parse_int(parts[9]),
            gd=parse_int(parts[10]),
            pim=parse_int(parts[11]),
            pct=parse_float(parts[12]),
        ))
    return rows


def count_candidate_lines(text: str, join_continuations: bool = False) -> int:
    """Non-empty input lines, for reporting how many were dropped."""
    text = (text or "").replace('\r\n', '\n')
    if join_continuations:
        text = CONTINUATION_PATTERN.sub(' ', text)
    return sum(1 for line in text.split('\n') if line.strip())
