"""Unit tests for TournamentClusterer.

Test Strategy:
1. Gap boundary: 4 days merges, 5 days splits
2. Gaps are measured from the latest date already in the cluster
3. Location skips placeholder venues
4. Names follow "<Label> @ <location> (<range>)"
5. Classification drives event type, stage and label
"""
from datetime import date, time

from rinksync.services.parsing.records import ScheduleEntry
from rinksync.services.sync.tournament_clusterer import TournamentClusterer, cluster_name


def entry(day: date, opponent: str = "Orleans Blades", venue: str = "Walter Baker",
          classification: str = "tournament", game_time: time = None) -> ScheduleEntry:
    return ScheduleEntry(
        game_date=day,
        game_time=game_time,
        opponent_name=opponent,
        venue=venue,
        result="W",
        own_score=3,
        opponent_score=1,
        classification=classification,
    )


class TestTournamentClusterer:
    """Tests for date-proximity clustering."""

    # Boundary Tests
    # ─────────────────────────────────────────────────────────────

    def test_four_day_gap_merges(self):
        clusters = TournamentClusterer(max_gap_days=4).cluster([
            entry(date(2025, 11, 7)),
            entry(date(2025, 11, 11)),
        ])

        assert len(clusters) == 1
        assert clusters[0].game_count == 2

    def test_five_day_gap_splits(self):
        clusters = TournamentClusterer(max_gap_days=4).cluster([
            entry(date(2025, 11, 7)),
            entry(date(2025, 11, 12)),
        ])

        assert len(clusters) == 2

    def test_gap_measured_from_latest_member(self):
        clusters = TournamentClusterer(max_gap_days=4).cluster([
            entry(date(2025, 11, 1)),
            entry(date(2025, 11, 4)),
            entry(date(2025, 11, 8)),
        ])

        assert len(clusters) == 1
        assert clusters[0].start_date == date(2025, 11, 1)
        assert clusters[0].end_date == date(2025, 11, 8)

    def test_unsorted_input_is_ordered(self):
        clusters = TournamentClusterer().cluster([
            entry(date(2025, 12, 20), opponent="Late"),
            entry(date(2025, 11, 8), opponent="Second", game_time=time(9, 0)),
            entry(date(2025, 11, 8), opponent="First", game_time=time(8, 0)),
        ])

        assert [c.start_date for c in clusters] == [date(2025, 11, 8), date(2025, 12, 20)]
        assert [e.opponent_name for e in clusters[0].entries] == ["First", "Second"]

    def test_empty_input(self):
        assert TournamentClusterer().cluster([]) == []

    # Location and Name Tests
    # ─────────────────────────────────────────────────────────────

    def test_location_skips_placeholder_venue(self):
        clusters = TournamentClusterer(placeholder_venues=["Add Rink"]).cluster([
            entry(date(2025, 11, 7), venue="Add Rink"),
            entry(date(2025, 11, 8), venue="Minto Arena"),
            entry(date(2025, 11, 9), venue="Walter Baker"),
        ])

        assert clusters[0].location == "Minto Arena"
        assert clusters[0].name == "Tournament @ Minto Arena (Nov 7-Nov 9)"

    def test_name_without_location(self):
        clusters = TournamentClusterer().cluster([entry(date(2025, 11, 7), venue="Add Rink")])

        assert clusters[0].location is None
        assert clusters[0].name == "Tournament (Nov 7)"

    def test_cluster_name_helper(self):
        assert cluster_name("Provincials", date(2026, 3, 27), date(2026, 3, 29), "Bell Centennial") == (
            "Provincials @ Bell Centennial (Mar 27-Mar 29)"
        )

    # Classification Tests
    # ─────────────────────────────────────────────────────────────

    def test_classification_sets_type_stage_and_label(self):
        clusters = TournamentClusterer().cluster([entry(date(2026, 2, 20), classification="playoff")], "playoff")

        assert clusters[0].event_type == "playoff"
        assert clusters[0].stage == "playoff"
        assert clusters[0].name.startswith("Playoffs @ ")

    def test_cluster_by_classification_skips_league(self):
        grouped = TournamentClusterer().cluster_by_classification([
            entry(date(2025, 10, 5), classification="league"),
            entry(date(2025, 11, 7), classification="tournament"),
            entry(date(2025, 11, 8), classification="exhibition"),
        ])

        assert set(grouped) == {"tournament", "exhibition"}
        assert grouped["exhibition"][0].event_type == "exhibition"

    def test_preview(self):
        cluster = TournamentClusterer().cluster([entry(date(2025, 11, 7)), entry(date(2025, 11, 8))])[0]

        preview = cluster.preview()

        assert preview["game_count"] == 2
        assert preview["start_date"] == "2025-11-07"
        assert preview["games"][0] == "Nov 07 vs Orleans Blades (3-1)"
