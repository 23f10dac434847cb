"""
Unit tests for schedule grouping and ordering.
"""

from datetime import date

import pytest

from service_eligibility.app.rules.models import Event
from service_eligibility.app.registry.seed import DEFAULT_SCHEDULE
from service_eligibility.app.schedule.views import (
    EPOCH, group_events_by_date, parse_event_date, parse_time_of_day, schedule_by_date,
    sort_dates_chronologically
)


class TestParsing:
    """Test cases for time and date parsing."""

    @pytest.mark.parametrize("text,minutes", [
        ("07:00 AM", 420),
        ("9:00 AM", 540),
        ("12:00 PM", 720),
        ("7:00 PM", 1140),
        ("12:15 AM", 15),
        ("7:05 pm", 1145),
        ("03:30PM", 930),
    ])
    def test_parse_time_of_day(self, text, minutes):
        assert parse_time_of_day(text) == minutes

    @pytest.mark.parametrize("text", ["All Day", "", "TBC", "19:00"])
    def test_unparsable_time_is_zero(self, text):
        assert parse_time_of_day(text) == 0

    def test_parse_event_date(self):
        assert parse_event_date("29.03.2026") == date(2026, 3, 29)

    @pytest.mark.parametrize("text", ["", "2026-03-29", "31.02.2026", "aa.bb.cccc", "01.01.99999999999999999999"])
    def test_unparsable_date_is_epoch(self, text):
        assert parse_event_date(text) == EPOCH


class TestGrouping:
    """Test cases for group_events_by_date and schedule_by_date."""

    def test_events_ordered_by_time_within_date(self):
        """Test each date's events are ordered by time with 'All Day' first."""
        events = [
            Event(id="a", date="29.03.2026", time="07:00 PM"),
            Event(id="b", date="29.03.2026", time="09:00 AM"),
            Event(id="c", date="29.03.2026", time="All Day"),
            Event(id="d", date="29.03.2026", time="12:00 PM"),
        ]

        groups = group_events_by_date(events)

        assert [e.id for e in groups["29.03.2026"]] == ["c", "b", "d", "a"]

    def test_equal_times_keep_input_order(self):
        events = [
            Event(id="first", date="27.03.2026", time="All Day"),
            Event(id="second", date="27.03.2026", time="All Day"),
        ]

        assert [e.id for e in group_events_by_date(events)["27.03.2026"]] == ["first", "second"]

    def test_dates_sorted_chronologically_not_lexically(self):
        """Test DD.MM.YYYY strings order by calendar date."""
        assert sort_dates_chronologically(["28.03.2026", "27.03.2026", "29.03.2026"]) == [
            "27.03.2026", "28.03.2026", "29.03.2026"
        ]
        assert sort_dates_chronologically(["01.04.2026", "31.03.2026", "29.03.2026"]) == [
            "29.03.2026", "31.03.2026", "01.04.2026"
        ]

    def test_malformed_date_sorts_first(self):
        assert sort_dates_chronologically(["28.03.2026", "TBC"]) == ["TBC", "28.03.2026"]

    def test_default_schedule_by_date(self):
        """Test the seeded itinerary renders as five dated sections."""
        sections = schedule_by_date(Event.from_dict(e) for e in DEFAULT_SCHEDULE)

        assert [s["date"] for s in sections] == [
            "27.03.2026", "28.03.2026", "29.03.2026", "30.03.2026", "31.03.2026"
        ]
        assert [e.id for e in sections[2]["events"]] == [
            "E5", "E6", "E7", "E8", "E9", "E10", "E11"
        ]

    def test_overflowing_date_does_not_break_listing(self):
        """Test one absurd year sorts first instead of failing the whole schedule."""
        events = [
            Event(id="ok", date="29.03.2026", time="07:00 PM"),
            Event(id="bad", date="01.01.99999999999999999999", time="07:00 PM"),
        ]

        sections = schedule_by_date(events)

        assert [s["date"] for s in sections] == ["01.01.99999999999999999999", "29.03.2026"]
