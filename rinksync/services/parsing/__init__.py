"""
Parsers for pasted schedule, score and standings text.

Two independent pipelines:
- tabular_parser: tab-separated score tables and standings tables
- schedule_parser: free-text schedule blocks (state machine)
"""
from rinksync.services.parsing.records import GameRow, ScheduleEntry, StandingsRow
from rinksync.services.parsing.schedule_parser import ScheduleParser, ScanState, parse_schedule
from rinksync.services.parsing.tabular_parser import parse_game_rows, parse_standings_rows

__all__ = [
    "GameRow",
    "ScheduleEntry",
    "StandingsRow",
    "ScheduleParser",
    "ScanState",
    "parse_schedule",
    "parse_game_rows",
    "parse_standings_rows",
]
