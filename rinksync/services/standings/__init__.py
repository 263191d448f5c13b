"""
Standings services.

- calculator: ranked records under a point structure and tiebreaker chain
- event_standings: per-pool tables, bracket placeholders, team records
- playdown: round-robin playdown slots
"""
from rinksync.services.standings.calculator import (
    PointStructure,
    StandingsCalculator,
    TeamRef,
    TeamStanding,
    calculate_standings,
)

__all__ = [
    "PointStructure",
    "StandingsCalculator",
    "TeamRef",
    "TeamStanding",
    "calculate_standings",
]
