"""Unit tests for the free-text schedule parser.

Test Strategy:
1. Full entries: date, optional time, opponent, venue, result, score, OT/SO
2. Score assignment from the result marker
3. Classification glyphs (longest match first) and opponent identifiers
4. Season-year inference around the cutoff month
5. Discard-and-resync: malformed entries never stop the scan
"""
from datetime import date, time

import pytest

from rinksync.services.parsing.schedule_parser import ScheduleParser, assign_scores, parse_clock, parse_schedule
from rinksync.services.parsing.symbols import classify, strip_symbol
from rinksync.utils.season import infer_season_date, season_year_for_month


SAMPLE_SCHEDULE = """Oct 5
7:30 PM

Kanata Blazers (#1234)*
Watch at Minto Arena
W
2 - 3
OT
Nov 7
Orleans Blades^^
at Bell Centennial
L
4 - 1
"""


class TestScheduleParser:
    """Tests for schedule block parsing."""

    def test_parses_full_entries(self):
        entries = parse_schedule(SAMPLE_SCHEDULE)

        assert len(entries) == 2
        first, second = entries

        assert first.kind == "schedule_entry"
        assert first.game_date == date(2025, 10, 5)
        assert first.game_time == time(19, 30)
        assert first.opponent_name == "Kanata Blazers"
        assert first.opponent_external_id == "#1234"
        assert first.venue == "Minto Arena"
        assert first.result == "W"
        assert first.result_type == "overtime"
        assert first.classification == "league"

        assert second.game_date == date(2025, 11, 7)
        assert second.game_time is None
        assert second.opponent_name == "Orleans Blades"
        assert second.venue == "Bell Centennial"
        assert second.result_type == "regulation"
        assert second.classification == "district"

    def test_win_takes_larger_score(self):
        entries = parse_schedule(SAMPLE_SCHEDULE)
        assert (entries[0].own_score, entries[0].opponent_score) == (3, 2)

    def test_loss_takes_smaller_score(self):
        entries = parse_schedule(SAMPLE_SCHEDULE)
        assert (entries[1].own_score, entries[1].opponent_score) == (1, 4)

    def test_tie_keeps_written_order(self):
        text = "Dec 1\nBarrhaven Raiders\nWalter Baker\nT\n2 - 2\n"

        entries = parse_schedule(text)

        assert entries[0].result == "T"
        assert (entries[0].own_score, entries[0].opponent_score) == (2, 2)
        assert entries[0].classification == "exhibition"

    def test_shootout_marker(self):
        text = "Dec 2\nBarrhaven Raiders**\nWalter Baker\nW\n4 - 3\nSO\n"

        entries = parse_schedule(text)

        assert entries[0].result_type == "shootout"
        assert entries[0].classification == "tournament"

    def test_leading_csv_comma_is_stripped(self):
        text = ",Oct 12\n,6:15 PM\n,Kanata Blazers*\n,Minto Arena\n,L\n,1 - 5\n"

        entries = parse_schedule(text)

        assert len(entries) == 1
        assert entries[0].game_time == time(18, 15)
        assert (entries[0].own_score, entries[0].opponent_score) == (1, 5)

    # Discard and resync
    # ─────────────────────────────────────────────────────────────

    def test_entry_without_result_is_discarded_and_scan_resyncs(self):
        text = "\n".join([
            "Oct 5",
            "Team A",
            "Rink",
            "Oct 6",
            "Team B",
            "Rink",
            "W",
            "3 - 1",
        ])
        parser = ScheduleParser()

        entries = parser.parse(text)

        assert [e.opponent_name for e in entries] == ["Team B"]
        assert entries[0].game_date == date(2025, 10, 6)
        assert parser.discarded == 1

    def test_entry_without_score_is_discarded(self):
        text = "\n".join([
            "Oct 5",
            "Team A",
            "Rink",
            "W",
            "Oct 7",
            "Team C",
            "Rink",
            "L",
            "0 - 2",
        ])
        parser = ScheduleParser()

        entries = parser.parse(text)

        assert [e.opponent_name for e in entries] == ["Team C"]
        assert parser.discarded == 1

    def test_entry_without_opponent_keeps_next_date(self):
        text = "Oct 5\n7:00 PM\n\nOct 6\n7:00 PM\n\nKanata*\nMinto\nW\n3 - 2\n"
        parser = ScheduleParser()

        entries = parser.parse(text)

        assert len(entries) == 1
        assert entries[0].game_date == date(2025, 10, 6)
        assert entries[0].opponent_name == "Kanata"
        assert (entries[0].own_score, entries[0].opponent_score) == (3, 2)
        assert parser.discarded == 1

    def test_entry_without_venue_keeps_next_date(self):
        text = "\n".join([
            "Oct 5",
            "Team A",
            "Oct 6",
            "Team B",
            "Rink",
            "L",
            "1 - 2",
        ])
        parser = ScheduleParser()

        entries = parser.parse(text)

        assert [e.opponent_name for e in entries] == ["Team B"]
        assert entries[0].game_date == date(2025, 10, 6)
        assert parser.discarded == 1

    def test_trailing_date_without_block_is_discarded(self):
        parser = ScheduleParser()

        entries = parser.parse(SAMPLE_SCHEDULE + "Dec 3\n")

        assert len(entries) == 2
        assert parser.discarded == 1

    def test_noise_before_first_date_is_ignored(self):
        text = "Schedule\nGames played: 2\n\n" + SAMPLE_SCHEDULE

        assert len(parse_schedule(text)) == 2

    def test_empty_input(self):
        assert parse_schedule("") == []

    # Season year
    # ─────────────────────────────────────────────────────────────

    def test_spring_months_fall_in_next_year(self):
        text = "Jan 10\nKanata Blazers*\nMinto Arena\nW\n2 - 1\n"

        entries = parse_schedule(text)

        assert entries[0].game_date == date(2026, 1, 10)

    def test_custom_season_start(self):
        text = "Feb 3\nKanata Blazers*\nMinto Arena\nW\n2 - 1\n"

        entries = ScheduleParser(season_start_year=2024).parse(text)

        assert entries[0].game_date == date(2025, 2, 3)


class TestSymbols:
    """Tests for classification glyph handling."""

    @pytest.mark.parametrize("name,expected_symbol,expected_class", [
        ("Team^^", "^^", "district"),
        ("Team^", "^", "provincial"),
        ("Team††", "††", "playoff"),
        ("Team†", "†", "playoff"),
        ("Team**", "**", "tournament"),
        ("Team*", "*", "league"),
        ("Team‡", "‡", "national"),
        ("Team", "", "exhibition"),
    ])
    def test_longest_symbol_wins(self, name, expected_symbol, expected_class):
        cleaned, symbol = strip_symbol(name)

        assert cleaned == "Team"
        assert symbol == expected_symbol
        assert classify(symbol).name == expected_class

    def test_classification_event_types(self):
        assert classify("*").event_type == "regular_season"
        assert classify("^").event_type == "provincial"
        assert classify("†").stage == "playoff"
        assert classify("??").name == "exhibition"


class TestHelpers:
    """Tests for clock, score and season helpers."""

    def test_parse_clock(self):
        assert parse_clock("7:30 PM") == time(19, 30)
        assert parse_clock("12:05 AM") == time(0, 5)
        assert parse_clock("12:00 pm") == time(12, 0)
        assert parse_clock("Minto Arena") is None

    def test_assign_scores(self):
        assert assign_scores("W", 1, 4) == (4, 1)
        assert assign_scores("L", 4, 1) == (1, 4)
        assert assign_scores("T", 3, 3) == (3, 3)

    def test_season_year_for_month(self):
        assert season_year_for_month(9) == 2025
        assert season_year_for_month(12) == 2025
        assert season_year_for_month(8) == 2026
        assert season_year_for_month(1, start_year=2030) == 2031

    def test_invalid_month_raises(self):
        with pytest.raises(ValueError):
            season_year_for_month(13)

    def test_infer_season_date_rejects_impossible_day(self):
        assert infer_season_date("Feb", 30) is None
        assert infer_season_date("Foo", 1) is None
