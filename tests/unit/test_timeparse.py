"""Unit tests for hearing date/time parsing."""

from datetime import date, datetime, time

import pytest

from hearing_scheduler.utils.timeparse import (
    minutes_between,
    parse_hearing_date,
    parse_time_of_day,
)


@pytest.mark.unit
class TestParseTimeOfDay:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("10:00", time(10, 0)),
            ("9:05", time(9, 5)),
            ("14:30:59", time(14, 30)),
            ("2:15 PM", time(14, 15)),
            ("12:00 AM", time(0, 0)),
            ("12:30 pm", time(12, 30)),
            (time(11, 45, 20), time(11, 45)),
        ],
    )
    def test_accepts_common_formats(self, raw, expected):
        assert parse_time_of_day(raw) == expected

    @pytest.mark.edge_case
    @pytest.mark.parametrize("raw", ["", "noon", "25:00", "10:75", "13:00 PM", None])
    def test_rejects_garbage(self, raw):
        with pytest.raises(ValueError):
            parse_time_of_day(raw)


@pytest.mark.unit
class TestParseHearingDate:
    def test_iso_date(self):
        assert parse_hearing_date("2025-03-14") == date(2025, 3, 14)

    def test_iso_datetime_string_keeps_calendar_day(self):
        assert parse_hearing_date("2025-03-14T18:30:00") == date(2025, 3, 14)

    def test_datetime_and_date_objects(self):
        assert parse_hearing_date(datetime(2025, 3, 14, 9)) == date(2025, 3, 14)
        assert parse_hearing_date(date(2025, 3, 14)) == date(2025, 3, 14)

    @pytest.mark.edge_case
    @pytest.mark.parametrize("raw", ["", "   ", "14/03/2025", "tomorrow", "2025-03-14 not-a-date", "2025-03-14xyz", 20250314])
    def test_rejects_unparseable(self, raw):
        with pytest.raises(ValueError):
            parse_hearing_date(raw)


@pytest.mark.unit
def test_minutes_between_is_absolute():
    assert minutes_between(time(10, 0), time(13, 0)) == 180
    assert minutes_between(time(13, 0), time(10, 0)) == 180
    assert minutes_between(time(10, 0), time(10, 0)) == 0
