import pytest

from schoolms.core import time_slots
from schoolms.core.enums import (
    PERSISTED_TO_ROSTER,
    ROSTER_TO_PERSISTED,
    AttendanceStatus,
    RosterStatus,
    day_sort_key,
    normalize_day,
)
from schoolms.core.exceptions import ConflictError, ValidationError
from schoolms.core.grading import grade_result, letter_grade, result_status
from schoolms.core.identifiers import clean_identifier, is_object_id, new_object_id


class TestIdentifiers:
    def test_new_object_id_shape(self):
        oid = new_object_id()
        assert len(oid) == 24
        assert is_object_id(oid)
        assert new_object_id() != oid

    def test_is_object_id(self):
        assert is_object_id("65a1b2c3d4e5f60718293a4B")
        assert not is_object_id("S001")
        assert not is_object_id("65a1b2c3d4e5f60718293a4")
        assert not is_object_id(None)

    @pytest.mark.parametrize("value", [None, "", "  ", "undefined", "null"])
    def test_placeholder_identifiers_rejected(self, value):
        with pytest.raises(ValidationError) as exc:
            clean_identifier(value, "student")
        assert exc.value.message == "Invalid student ID provided"
        assert exc.value.status_code == 400


class TestDays:
    def test_normalize_day(self):
        assert normalize_day("monday") == "Monday"
        assert normalize_day("MON") == "Monday"
        assert normalize_day("Sun") == "Sunday"
        assert normalize_day("Funday") is None

    def test_week_order(self):
        days = ["Friday", "Monday", "Wednesday"]
        assert sorted(days, key=day_sort_key) == ["Monday", "Wednesday", "Friday"]


class TestAttendanceStatusMapping:
    def test_bijection(self):
        assert PERSISTED_TO_ROSTER[AttendanceStatus.EXCUSED] is RosterStatus.LEAVE
        assert ROSTER_TO_PERSISTED[RosterStatus.LEAVE] is AttendanceStatus.EXCUSED
        for persisted in AttendanceStatus:
            assert ROSTER_TO_PERSISTED[PERSISTED_TO_ROSTER[persisted]] is persisted


class TestGrading:
    @pytest.mark.parametrize(
        "pct,letter",
        [(95, "A+"), (90, "A+"), (85, "A"), (70, "B+"), (65, "B"), (50, "C+"), (45, "C"), (33, "D"), (32.9, "F")],
    )
    def test_letter_grade(self, pct, letter):
        assert letter_grade(pct) == letter

    def test_pass_threshold(self):
        assert result_status(33).value == "Pass"
        assert result_status(32.99).value == "Fail"

    def test_grade_result_computes(self):
        assert grade_result(45, 50) == (90.0, "A+", "Pass")

    def test_supplied_grade_and_status_win(self):
        assert grade_result(10, 50, grade="C", status="Passed") == (20.0, "C", "Pass")


class TestTimeSlots:
    def test_normalize_room_data_drops_incomplete_and_mirrors_first(self):
        data = {
            "time_slots": [
                {"name": "", "start_time": "08:00", "end_time": "09:00"},
                {"name": "Slot 2", "start_time": "09:00", "end_time": ""},
            ]
        }
        cleaned = time_slots.normalize_room_data(data)
        assert cleaned["time_slots"] == [{"name": "Slot 1", "start_time": "08:00", "end_time": "09:00"}]
        assert cleaned["start_time"] == "08:00"
        assert cleaned["end_time"] == "09:00"

    def test_string_slots_from_old_records(self):
        assert time_slots.room_time_slots({"time_slots": ["a", "b"]})[1]["name"] == "Slot 2"

    def test_insert_copies_previous_duration(self):
        slots = [{"name": "Slot 1", "start_time": "08:00", "end_time": "08:45"}]
        updated = time_slots.insert_slot(slots, copy_previous=True)
        assert updated[1] == {"name": "Slot 2", "start_time": "08:45", "end_time": "09:30"}

    def test_insert_in_middle_renumbers_default_names(self):
        slots = [
            {"name": "Slot 1", "start_time": "08:00", "end_time": "08:45"},
            {"name": "Lunch", "start_time": "12:00", "end_time": "12:30"},
            {"name": "Slot 3", "start_time": "13:00", "end_time": "13:45"},
        ]
        updated = time_slots.insert_slot(slots, index=1, start_time="09:00", end_time="09:45")
        assert [s["name"] for s in updated] == ["Slot 1", "Slot 2", "Lunch", "Slot 4"]

    def test_remove_keeps_indexes_contiguous(self):
        slots = [
            {"name": "Slot 1", "start_time": "08:00", "end_time": "08:45"},
            {"name": "Slot 2", "start_time": "08:45", "end_time": "09:30"},
            {"name": "Slot 3", "start_time": "09:30", "end_time": "10:15"},
        ]
        updated = time_slots.remove_slot(slots, 0)
        assert [s["name"] for s in updated] == ["Slot 1", "Slot 2"]
        assert updated[0]["start_time"] == "08:45"
        with pytest.raises(IndexError):
            time_slots.remove_slot(slots, 3)

    def test_slot_times(self):
        data = {"time_slots": [{"name": "Slot 1", "start_time": "08:00", "end_time": "08:45"}]}
        assert time_slots.slot_times(data, "0")["end_time"] == "08:45"
        assert time_slots.slot_times(data, "1") is None
        assert time_slots.slot_times(data, None) is None


class TestConflictErrorMessage:
    def test_room_message_names_subject_room_slot_day(self):
        e = ConflictError("room", "MATH101", "R1", "0", "Monday", index=1)
        assert e.status_code == 409
        assert e.message.startswith("Time Slot 2:")
        assert "MATH101" in e.message and "R1" in e.message and "Monday" in e.message
        assert e.detail["kind"] == "room"

    def test_teacher_message(self):
        e = ConflictError("teacher", "SCI", "R2", "2", "Tuesday")
        assert "Teacher" in e.message
        assert e.detail["conflicting_subject"] == "SCI"
