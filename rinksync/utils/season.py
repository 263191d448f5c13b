"""
Season utilities.

Minor hockey seasons span two calendar years (September through the
following spring). Pasted schedules only carry "Mon D", so the year is
inferred from the month: months from the cutoff month onward fall in the
season start year, earlier months in the next calendar year.
"""
from datetime import date
from typing import Optional

# Month abbreviations as they appear in pasted schedules (1-indexed)
MONTH_ABBREVIATIONS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}


def season_year_for_month(month: int, start_year: int = 2025, cutoff_month: int = 9) -> int:
    """
    Calendar year of a month within the season starting in ``start_year``.

    Examples:
        >>> season_year_for_month(10)   # October 2025
        2025
        >>> season_year_for_month(1)    # January 2026
        2026
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    return start_year if month >= cutoff_month else start_year + 1


def infer_season_date(
    month_abbr: str,
    day: int,
    start_year: int = 2025,
    cutoff_month: int = 9,
) -> Optional[date]:
    """
    Build a date from "Oct", 5 using the season year split.

    Returns None for an unknown month or an impossible day (e.g. Feb 30).
    """
    month = MONTH_ABBREVIATIONS.get(month_abbr[:3].title())
    if month is None:
        return None
    try:
        return date(season_year_for_month(month, start_year, cutoff_month), month, day)
    except ValueError:
        return None


def format_short_date(value: date) -> str:
    """'Nov 7' style label used in event names."""
    return f"{value.strftime('%b')} {value.day}"
