"""Unit tests for the Hearing value object and schedule CSV I/O."""

from datetime import date, time

import pytest

from hearing_scheduler.core.hearing import Hearing, HearingStatus, Priority
from hearing_scheduler.data.schedule_io import load_schedule_csv, save_schedule_csv


@pytest.mark.unit
class TestHearing:
    def test_defaults(self, make_hearing):
        hearing = make_hearing("H1")

        assert hearing.duration_minutes == 60
        assert hearing.priority == Priority.MEDIUM
        assert hearing.opposing_party is None
        assert hearing.start_minute == 600

    @pytest.mark.parametrize(
        "status,active,open_",
        [
            (HearingStatus.ACTIVE, True, True),
            (HearingStatus.PENDING, False, True),
            (HearingStatus.CLOSED, False, False),
            (HearingStatus.WON, False, False),
            (HearingStatus.LOST, False, False),
        ],
    )
    def test_status_predicates(self, make_hearing, status, active, open_):
        hearing = make_hearing("H1", status=status)
        assert hearing.is_active() is active
        assert hearing.is_open() is open_

    def test_with_time_keeps_identity(self, make_hearing):
        hearing = make_hearing("H1", "10:00")

        moved = hearing.with_time(time(14, 0), date(2025, 3, 20))

        assert moved.hearing_id == "H1"
        assert moved.hearing_time == time(14, 0)
        assert moved.hearing_date == date(2025, 3, 20)
        assert hearing.hearing_time == time(10, 0)

    def test_frozen(self, make_hearing):
        hearing = make_hearing("H1")
        with pytest.raises(AttributeError):
            hearing.client_name = "Someone Else"

    def test_dict_round_trip_with_blank_optionals(self, make_hearing):
        hearing = make_hearing("H1", "14:15", judge_name="Justice Iyer", priority=Priority.URGENT)

        data = hearing.to_dict()

        assert data["hearing_time"] == "14:15"
        assert data["opposing_party"] == ""
        assert Hearing.from_dict(data) == hearing

    @pytest.mark.edge_case
    def test_from_dict_defaults_missing_time(self):
        hearing = Hearing.from_dict({
            "hearing_id": "H9",
            "case_number": "OS-9",
            "client_name": "Mehta Exports",
            "court_name": "City Civil Court",
            "hearing_date": "2025-03-14T00:00:00",
            "hearing_time": "",
            "status": "Pending",
        })

        assert hearing.hearing_time == time(10, 0)
        assert hearing.hearing_date == date(2025, 3, 14)
        assert hearing.status == HearingStatus.PENDING

    @pytest.mark.failure
    def test_from_dict_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            Hearing.from_dict({
                "hearing_id": "H9",
                "case_number": "OS-9",
                "client_name": "Mehta Exports",
                "court_name": "City Civil Court",
                "hearing_date": "2025-03-14",
                "status": "adjourned",
            })


@pytest.mark.unit
class TestScheduleCsv:
    def test_save_and_load(self, make_hearing, tmp_path):
        hearings = [
            make_hearing("B", "14:00", opposing_party="Rao & Sons"),
            make_hearing("A", "09:30"),
        ]

        path = save_schedule_csv(hearings, tmp_path / "nested" / "schedule.csv")
        loaded = load_schedule_csv(path)

        assert [h.hearing_id for h in loaded] == ["A", "B"]
        assert loaded[1].opposing_party == "Rao & Sons"
        assert set(loaded) == set(hearings)

    def test_missing_file_is_empty_schedule(self, tmp_path):
        assert load_schedule_csv(tmp_path / "absent.csv") == []

    @pytest.mark.failure
    def test_bad_row_names_line(self, make_hearing, tmp_path):
        path = save_schedule_csv([make_hearing("A")], tmp_path / "schedule.csv")
        with path.open("a", encoding="utf-8") as f:
            f.write("B,OS-2,Client B,City Civil Court,not-a-date,10:00,60,,,active,medium\n")

        with pytest.raises(ValueError, match=r"schedule\.csv:3"):
            load_schedule_csv(path)
