"""Name normalization utilities for team name matching.

Handles common noise in pasted team cells:
- External identifiers: "Nepean Wildcats #2859" → "Nepean Wildcats"
- Bracketed identifiers: "Kanata Blazers (#1234)" → "Kanata Blazers"
- Organizational codes: "Nepean Wildcats NYH12345" → "Nepean Wildcats"
- Trailing counts: "Nepean Wildcats (3)" → "Nepean Wildcats"
- Age-group suffixes for searching: "Nepean Wildcats U13 A" → "Nepean Wildcats"
- Case and extra spaces: "NEPEAN  WILDCATS" → "nepean wildcats"
"""
import re
from typing import Iterable, List, Optional, Tuple

from rapidfuzz import fuzz, process

BRACKETED_ID_PATTERN = re.compile(r'\(#(\d+)\)\s*')
EXTERNAL_ID_PATTERN = re.compile(r'#(\S+)')
ORG_CODE_PATTERN = re.compile(r'\s+NYH\S+')
TRAILING_COUNT_PATTERN = re.compile(r'\s*\(\d+\)\s*$')
AGE_SUFFIX_PATTERNS = (
    re.compile(r'\s+U\d+\s+\w+$', re.IGNORECASE),  # "U13 A"
    re.compile(r'\s+\d+U$', re.IGNORECASE),  # "13U"
)
VENUE_PREFIX_PATTERNS = (
    re.compile(r'^Watch at\s+', re.IGNORECASE),
    re.compile(r'^at\s+', re.IGNORECASE),
)


def extract_external_id(text: str) -> Optional[str]:
    """
    Extract a third-party identifier token from a name cell.

    Both "(#1234)" and a bare "#ABC-12" are recognized.

    Examples:
        >>> extract_external_id("Kanata Blazers (#1234)")
        '#1234'
        >>> extract_external_id("Nepean Wildcats #2859 NYH1")
        '#2859'
        >>> extract_external_id("Nepean Wildcats") is None
        True
    """
    if not text:
        return None
    match = BRACKETED_ID_PATTERN.search(text)
    if match:
        return f"#{match.group(1)}"
    match = EXTERNAL_ID_PATTERN.search(text)
    if match:
        return f"#{match.group(1).rstrip(')')}"
    return None


def clean_team_name(raw: str) -> str:
    """
    Strip identifiers, organizational codes and trailing counts.

    Examples:
        >>> clean_team_name("Nepean Wildcats #2859 NYH12345 (3)")
        'Nepean Wildcats'
        >>> clean_team_name("Kanata Blazers (#1234)")
        'Kanata Blazers'
    """
    if not raw:
        return ""

    name = BRACKETED_ID_PATTERN.sub(' ', raw)
    name = EXTERNAL_ID_PATTERN.sub('', name)
    name = ORG_CODE_PATTERN.sub('', name)
    name = TRAILING_COUNT_PATTERN.sub('', name)

    return ' '.join(name.split())


def normalize(name: str) -> str:
    """Lowercased, whitespace-collapsed name used as an identity key."""
    if not name:
        return ""
    return ' '.join(name.lower().split())


def search_name(cleaned: str) -> str:
    """
    Name used for substring search against stored teams.

    Drops a trailing age-group suffix so that "Nepean Wildcats U13 A"
    finds a stored "Nepean Wildcats".
    """
    name = cleaned
    for pattern in AGE_SUFFIX_PATTERNS:
        name = pattern.sub('', name)
    return name.strip() or cleaned


def clean_venue(raw: str) -> str:
    """
    Remove "Watch at" / "at" prefixes from a venue line.

    Examples:
        >>> clean_venue("Watch at Minto Arena")
        'Minto Arena'
        >>> clean_venue("at Bell Centennial")
        'Bell Centennial'
    """
    if not raw:
        return ""
    venue = raw.strip()
    for pattern in VENUE_PREFIX_PATTERNS:
        venue = pattern.sub('', venue)
    return venue.strip()


def is_home_venue(venue: str, keywords: Iterable[str]) -> bool:
    """True when any home-rink keyword occurs in the venue (case-insensitive)."""
    if not venue:
        return False
    lowered = venue.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword)


def closest_name(name: str, candidates: List[str], score_cutoff: float = 60.0) -> Optional[Tuple[str, float]]:
    """
    Closest candidate by WRatio similarity, for diagnostics.

    Returns:
        (candidate, score) or None when nothing scores above ``score_cutoff``
    """
    if not name or not candidates:
        return None
    result = process.extractOne(
        normalize(name),
        candidates,
        scorer=fuzz.WRatio,
        processor=normalize,
        score_cutoff=score_cutoff,
    )
    if result is None:
        return None
    match, score, _ = result
    return match, score
