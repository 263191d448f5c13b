"""Unit tests for the tab-separated score and standings table parsers.

Test Strategy:
1. Score rows: date formats, team cells (name, #id, score), venue noise
2. Wrapped cells joined onto the previous line
3. Malformed lines dropped, candidate count still reported
4. Standings rows: header skipped, numeric fallbacks
"""
from datetime import datetime

import pytest

from rinksync.services.parsing.tabular_parser import (
    count_candidate_lines,
    parse_float,
    parse_game_rows,
    parse_int,
    parse_standings_rows,
    parse_table_datetime,
    split_team_and_score,
)


def tsv(*cells) -> str:
    return "\t".join(cells)


class TestCellHelpers:
    """Tests for single-cell parsing helpers."""

    # Numbers
    # ─────────────────────────────────────────────────────────────

    def test_parse_int_leading_number(self):
        assert parse_int("12") == 12
        assert parse_int("+3") == 3
        assert parse_int("-4") == -4
        assert parse_int("7*") == 7

    def test_parse_int_falls_back_to_zero(self):
        assert parse_int("") == 0
        assert parse_int("n/a") == 0
        assert parse_int(None) == 0

    def test_parse_float(self):
        assert parse_float(".750") == pytest.approx(0.75)
        assert parse_float("0.5") == pytest.approx(0.5)
        assert parse_float("-") == 0.0

    # Dates
    # ─────────────────────────────────────────────────────────────

    def test_parses_abbreviated_month_with_period(self):
        assert parse_table_datetime("Wed, Oct. 01, 2025 7:45 PM") == datetime(2025, 10, 1, 19, 45)

    def test_parses_sept_abbreviation(self):
        assert parse_table_datetime("Sept. 28, 2025 6:00 PM") == datetime(2025, 9, 28, 18, 0)

    def test_parses_date_without_time(self):
        assert parse_table_datetime("Nov 7, 2025") == datetime(2025, 11, 7)

    def test_unparseable_date_is_none(self):
        assert parse_table_datetime("TBD") is None
        assert parse_table_datetime("") is None

    # Team cells
    # ─────────────────────────────────────────────────────────────

    def test_split_team_cell(self):
        name, external_id, score = split_team_and_score("Nepean Wildcats #2859 NYH12345 (3)")
        assert name == "Nepean Wildcats #2859 NYH12345"
        assert external_id == "#2859"
        assert score == 3

    def test_missing_score_is_none(self):
        name, external_id, score = split_team_and_score("Kanata Blazers")
        assert name == "Kanata Blazers"
        assert external_id is None
        assert score is None


class TestParseGameRows:
    """Tests for score-table parsing."""

    def test_parses_complete_row(self):
        text = tsv(
            "365",
            "Wed, Oct. 01, 2025 7:45 PM",
            "Minto Arena Game length: 60 min",
            "Nepean Wildcats #2859 NYH1 (3)",
            "Kanata Blazers #1234 (2)",
        )

        rows = parse_game_rows(text)

        assert len(rows) == 1
        row = rows[0]
        assert row.kind == "game_row"
        assert row.game_number == "365"
        assert row.start_datetime == datetime(2025, 10, 1, 19, 45)
        assert row.venue == "Minto Arena"
        assert row.home_external_id == "#2859"
        assert row.away_external_id == "#1234"
        assert (row.home_score, row.away_score) == (3, 2)
        assert row.has_score

    def test_row_without_scores_is_scheduled(self):
        text = tsv("366", "Sat, Nov. 01, 2025 9:00 AM", "Bell Centennial", "Nepean Wildcats #2859", "Orleans Blades #99")

        rows = parse_game_rows(text)

        assert len(rows) == 1
        assert rows[0].home_score is None
        assert not rows[0].has_score

    def test_wrapped_cell_is_joined(self):
        text = (
            tsv("367", "Sun, Nov. 02, 2025 1:00 PM", "Walter Baker", "Nepean Wildcats #2859 (1)", "Orleans")
            + "\nBlades #99 (4)"
        )

        rows = parse_game_rows(text)

        assert len(rows) == 1
        assert rows[0].away_name == "Orleans Blades #99"
        assert rows[0].away_score == 4

    def test_malformed_lines_are_dropped(self):
        text = "\n".join([
            tsv("Game", "Date", "Venue", "Home", "Away"),
            tsv("368", "Mon, Nov. 03, 2025 7:00 PM", "Minto Arena", "A #1 (2)", "B #2 (2)"),
            tsv("369", "not a date", "Minto Arena", "A #1 (2)", "B #2 (2)"),
            tsv("370", "Mon, Nov. 03, 2025 7:00 PM", "Minto Arena"),
        ])

        rows = parse_game_rows(text)

        assert [r.game_number for r in rows] == ["368"]
        assert count_candidate_lines(text, join_continuations=True) == 4

    def test_empty_input(self):
        assert parse_game_rows("") == []
        assert parse_game_rows("   \n  ") == []


class TestParseStandingsRows:
    """Tests for standings-table parsing."""

    HEADER = tsv("Team", "GP", "W", "L", "T", "OTL", "SOL", "PTS", "GF", "GA", "DIFF", "PIM", "PCT")

    def test_parses_row_and_skips_header(self):
        text = "\n".join([
            self.HEADER,
            tsv("Nepean Wildcats #2859", "10", "7", "2", "1", "0", "0", "15", "40", "20", "+20", "30", ".750"),
        ])

        rows = parse_standings_rows(text)

        assert len(rows) == 1
        row = rows[0]
        assert row.team_name == "Nepean Wildcats #2859"
        assert row.external_id == "#2859"
        assert (row.gp, row.w, row.l, row.t) == (10, 7, 2, 1)
        assert row.pts == 15
        assert row.gd == 20
        assert row.pct == pytest.approx(0.75)

    def test_short_lines_are_dropped(self):
        text = "\n".join([
            tsv("Kanata Blazers", "4", "2", "2"),
            tsv("Orleans Blades", "4", "1", "3", "0", "0", "0", "2", "8", "12", "-4", "6", "-"),
        ])

        rows = parse_standings_rows(text)

        assert [r.team_name for r in rows] == ["Orleans Blades"]
        assert rows[0].gd == -4
        assert rows[0].pct == 0.0

    def test_stats_exclude_identity_fields(self):
        text = tsv("Kanata Blazers", "4", "2", "2", "0", "0", "0", "4", "10", "9", "1", "8", ".500")

        stats = parse_standings_rows(text)[0].stats()

        assert "team_name" not in stats
        assert "external_id" not in stats
        assert stats["gf"] == 10
