"""
Classification glyphs appended to opponent names in pasted schedules.

    ‡   national tournament
    ^^  district tournament
    ^   provincial
    ††  playoff
    †   playoff
    **  tournament
    *   league (regular season)
    (none) exhibition

Two-character glyphs share a prefix with one-character ones, so matching is
longest-first over ``SYMBOL_ORDER``: "Team^^" is district, never a
provincial game against "Team^".
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from rinksync.models import EventType, GameStage


@dataclass(frozen=True)
class Classification:
    name: str
    event_type: str
    stage: str


NATIONAL = Classification("national", EventType.TOURNAMENT.value, GameStage.POOL_PLAY.value)
DISTRICT = Classification("district", EventType.TOURNAMENT.value, GameStage.POOL_PLAY.value)
PROVINCIAL = Classification("provincial", EventType.PROVINCIAL.value, GameStage.POOL_PLAY.value)
PLAYOFF = Classification("playoff", EventType.PLAYOFF.value, GameStage.PLAYOFF.value)
TOURNAMENT = Classification("tournament", EventType.TOURNAMENT.value, GameStage.POOL_PLAY.value)
LEAGUE = Classification("league", EventType.REGULAR_SEASON.value, GameStage.REGULAR_SEASON.value)
EXHIBITION = Classification("exhibition", EventType.EXHIBITION.value, GameStage.POOL_PLAY.value)

# Longest match first
SYMBOL_ORDER: List[str] = ["‡", "^^", "^", "††", "†", "**", "*"]

SYMBOL_CLASSIFICATIONS: Dict[str, Classification] = {
    "‡": NATIONAL,
    "^^": DISTRICT,
    "^": PROVINCIAL,
    "††": PLAYOFF,
    "†": PLAYOFF,
    "**": TOURNAMENT,
    "*": LEAGUE,
    "": EXHIBITION,
}

CLASSIFICATIONS_BY_NAME: Dict[str, Classification] = {
    c.name: c for c in (NATIONAL, DISTRICT, PROVINCIAL, PLAYOFF, TOURNAMENT, LEAGUE, EXHIBITION)
}


def strip_symbol(name: str) -> Tuple[str, str]:
    """
    Split a trailing classification glyph off a name.

    Returns:
        (name without the glyph, glyph or "")

    Examples:
        >>> strip_symbol("Kanata Blazers^^")
        ('Kanata Blazers', '^^')
        >>> strip_symbol("Kanata Blazers")
        ('Kanata Blazers', '')
    """
    stripped = name.rstrip()
    for symbol in SYMBOL_ORDER:
        if stripped.endswith(symbol):
            return stripped[: -len(symbol)].rstrip(), symbol
    return stripped, ""


def classify(symbol: str) -> Classification:
    """Classification for a glyph; unknown glyphs count as exhibition."""
    return SYMBOL_CLASSIFICATIONS.get(symbol, EXHIBITION)
