"""
Tournament clustering for schedule entries without an event.

Entries are sorted by (date, time) and merged greedily: an entry joins the
current cluster when it is at most ``max_gap_days`` after the latest date
already in the cluster, otherwise it starts a new cluster. Clusters are
never re-split or merged afterwards.

Example:
    clusterer = TournamentClusterer(max_gap_days=4, placeholder_venues=["Add Rink"])
    clusters = clusterer.cluster(entries, classification="tournament")
    clusters[0].name  # "Tournament @ Minto Arena (Nov 7-Nov 9)"
"""
import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, ClassVar, Dict, Iterable, List, Optional

from rinksync.services.parsing.records import ScheduleEntry
from rinksync.services.parsing.symbols import CLASSIFICATIONS_BY_NAME, EXHIBITION
from rinksync.utils.season import format_short_date

logger = logging.getLogger(__name__)

# Event-name prefix per classification
CLUSTER_LABELS = {
    "national": "National Tournament",
    "district": "District Tournament",
    "provincial": "Provincials",
    "playoff": "Playoffs",
    "tournament": "Tournament",
    "exhibition": "Exhibition",
    "league": "League",
}


@dataclass
class TournamentCluster:
    """A run of entries grouped into one inferred event."""
    kind: ClassVar[str] = "tournament_cluster"

    entries: List[ScheduleEntry]
    classification: str
    event_type: str
    stage: str
    start_date: date
    end_date: date
    location: Optional[str]
    name: str
    member_labels: List[str] = field(default_factory=list)

    @property
    def game_count(self) -> int:
        return len(self.entries)

    def preview(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "classification": self.classification,
            "event_type": self.event_type,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "location": self.location,
            "game_count": self.game_count,
            "games": list(self.member_labels),
        }


def describe_entry(entry: ScheduleEntry) -> str:
    """'Nov 07 vs Kanata Blazers (3-2)'."""
    return (
        f"{entry.game_date.strftime('%b %d')} vs {entry.opponent_name} "
        f"({entry.own_score}-{entry.opponent_score})"
    )


class TournamentClusterer:
    """Group event-less schedule entries by date proximity."""

    def __init__(self, max_gap_days: int = 4, placeholder_venues: Optional[Iterable[str]] = None):
        self.max_gap_days = max_gap_days
        self.placeholder_venues = {v.strip().lower() for v in (placeholder_venues or ["Add Rink"])}

    def cluster(self, entries: List[ScheduleEntry], classification: Optional[str] = None) -> List[TournamentCluster]:
        """
        Cluster entries of one classification.

        Args:
            entries: Schedule entries (any order)
            classification: Classification applied to every cluster; taken from
                the first entry when omitted

        Returns:
            Clusters in chronological order
        """
        if not entries:
            return []

        ordered = sorted(entries, key=lambda e: (e.game_date, e.game_time or time(0, 0)))
        groups: List[List[ScheduleEntry]] = [[ordered[0]]]
        latest = ordered[0].game_date

        for entry in ordered[1:]:
            if (entry.game_date - latest).days <= self.max_gap_days:
                groups[-1].append(entry)
            else:
                groups.append([entry])
            # Sorted input: the newest entry is the cluster's latest date
            latest = entry.game_date

        clusters = [self._build(group, classification or group[0].classification) for group in groups]
        logger.debug(f"Clustered {len(ordered)} {classification or ''} entries into {len(clusters)} clusters")
        return clusters

    def cluster_by_classification(self, entries: List[ScheduleEntry]) -> Dict[str, List[TournamentCluster]]:
        """Cluster each classification separately; league entries are skipped."""
        grouped: Dict[str, List[ScheduleEntry]] = {}
        for entry in entries:
            if entry.classification == "league":
                continue
            grouped.setdefault(entry.classification, []).append(entry)
        return {name: self.cluster(members, name) for name, members in grouped.items()}

    def _build(self, members: List[ScheduleEntry], classification: str) -> TournamentCluster:
        start = min(e.game_date for e in members)
        end = max(e.game_date for e in members)
        location = self._pick_location(members)
        details = CLASSIFICATIONS_BY_NAME.get(classification, EXHIBITION)

        return TournamentCluster(
            entries=list(members),
            classification=details.name,
            event_type=details.event_type,
            stage=details.stage,
            start_date=start,
            end_date=end,
            location=location,
            name=cluster_name(CLUSTER_LABELS.get(details.name, "Tournament"), start, end, location),
            member_labels=[describe_entry(e) for e in members],
        )

    def _pick_location(self, members: List[ScheduleEntry]) -> Optional[str]:
        for entry in members:
            venue = (entry.venue or "").strip()
            if venue and venue.lower() not in self.placeholder_venues:
                return venue
        return None


def cluster_name(label: str, start: date, end: date, location: Optional[str]) -> str:
    """
    Synthesize an event name.

    Examples:
        >>> cluster_name("Tournament", date(2025, 11, 7), date(2025, 11, 9), "Minto Arena")
        'Tournament @ Minto Arena (Nov 7-Nov 9)'
        >>> cluster_name("Tournament", date(2025, 11, 7), date(2025, 11, 7), None)
        'Tournament (Nov 7)'
    """
    date_range = format_short_date(start)
    if end != start:
        date_range = f"{date_range}-{format_short_date(end)}"
    if location:
        return f"{label} @ {location} ({date_range})"
    return f"{label} ({date_range})"
