import pytest

from schoolms.core.schedule_conflicts import (
    ROOM,
    TEACHER,
    ScheduleSlot,
    SubjectSchedule,
    check_conflict,
    check_draft_conflict,
    find_batch_conflict,
    normalize_slot,
    normalize_teacher_id,
)


def subject(code, *entries, name=None):
    return SubjectSchedule.from_subject({"code": code, "name": name, "schedule": list(entries)})


class TestNormalization:
    @pytest.mark.parametrize("raw,expected", [(0, "0"), ("0", "0"), (" 01 ", "1"), (12, "12")])
    def test_slot_canonical(self, raw, expected):
        assert normalize_slot(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "  ", "abc", "-1", -1, True, "1.5"])
    def test_slot_unslotted(self, raw):
        assert normalize_slot(raw) is None

    def test_teacher_id_from_populated_object(self):
        assert normalize_teacher_id({"id": "T9", "name": "Ada"}) == "T9"
        assert normalize_teacher_id({"_id": "T9"}) == "T9"
        assert normalize_teacher_id("  ") is None
        assert normalize_teacher_id(None) is None


class TestRoomConflict:
    def test_same_room_slot_day(self):
        x = subject("X", {"room": "R1", "slot": "0", "day": "Monday"})
        result = check_conflict({"room": "R1", "slot": "0", "day": "Monday"}, [x])
        assert result.conflict
        assert result.kind == ROOM
        assert result.conflicting_subject_label == "X"

    def test_other_slot_is_free(self):
        x = subject("X", {"room": "R1", "slot": "0", "day": "Monday"})
        assert not check_conflict({"room": "R1", "slot": "1", "day": "Monday"}, [x])

    def test_slot_compared_in_canonical_form(self):
        x = subject("X", {"room": "R1", "slot": 0, "day": "Monday"})
        assert check_conflict({"room": "R1", "slot": "00", "day": "Monday"}, [x])

    def test_day_match_is_exact(self):
        x = subject("X", {"room": "R1", "slot": "0", "day": "Monday"})
        assert not check_conflict({"room": "R1", "slot": "0", "day": "Tuesday"}, [x])

    def test_differs_only_by_room(self):
        x = subject("X", {"room": "R1", "slot": "0", "day": "Monday"})
        assert not check_conflict({"room": "R2", "slot": "0", "day": "Monday"}, [x])

    def test_unslotted_never_conflicts(self):
        x = subject("X", {"room": "R1", "slot": None, "day": "Monday"})
        assert not check_conflict({"room": "R1", "slot": "", "day": "Monday"}, [x])
        assert not check_conflict({"room": None, "slot": None, "day": "Monday"}, [x])

    def test_label_falls_back_to_name(self):
        x = subject(None, {"room": "R1", "slot": "0", "day": "Monday"}, name="Physics")
        result = check_conflict({"room": "R1", "slot": "0", "day": "Monday"}, [x])
        assert result.conflicting_subject_label == "Physics"
        nameless = subject(None, {"room": "R1", "slot": "0", "day": "Monday"})
        assert check_conflict({"room": "R1", "slot": "0", "day": "Monday"}, [nameless]).conflicting_subject_label == "Unknown Subject"


class TestTeacherConflict:
    def test_same_teacher_other_room(self):
        x = subject("X", {"room": "R1", "slot": "2", "day": "Tuesday", "teacher_id": "T9"})
        result = check_conflict({"room": "R2", "slot": "2", "day": "Tuesday", "teacher_id": "T9"}, [x])
        assert result.conflict
        assert result.kind == TEACHER
        assert result.conflicting_subject_label == "X"

    def test_teacher_only_on_one_side(self):
        x = subject("X", {"room": "R1", "slot": "2", "day": "Tuesday", "teacher_id": "T9"})
        assert not check_conflict({"room": "R2", "slot": "2", "day": "Tuesday"}, [x])
        y = subject("Y", {"room": "R1", "slot": "2", "day": "Tuesday"})
        assert not check_conflict({"room": "R2", "slot": "2", "day": "Tuesday", "teacher_id": "T9"}, [y])

    def test_room_conflict_reported_before_teacher(self):
        teacher_hit = subject("A", {"room": "R2", "slot": "1", "day": "Friday", "teacher_id": "T1"})
        room_hit = subject("B", {"room": "R1", "slot": "1", "day": "Friday"})
        result = check_conflict({"room": "R1", "slot": "1", "day": "Friday", "teacher_id": "T1"}, [teacher_hit, room_hit])
        assert result.kind == ROOM
        assert result.conflicting_subject_label == "B"


class TestOrdering:
    def test_single_conflict_regardless_of_order(self):
        proposed = {"room": "R1", "slot": "0", "day": "Monday"}
        b = subject("B", {"room": "R1", "slot": "0", "day": "Monday"})
        c = subject("C", {"room": "R1", "slot": "0", "day": "Monday"})
        first = check_conflict(proposed, [b, c])
        second = check_conflict(proposed, [c, b])
        assert first.conflict and second.conflict
        assert first.kind == second.kind == ROOM
        assert {first.conflicting_subject_label, second.conflicting_subject_label} <= {"B", "C"}

    def test_fresh_on_every_call(self):
        entries = [{"room": "R1", "slot": "0", "day": "Monday"}]
        x = subject("X", *entries)
        assert check_conflict({"room": "R1", "slot": "0", "day": "Monday"}, [x])
        freed = subject("X")
        assert not check_conflict({"room": "R1", "slot": "0", "day": "Monday"}, [freed])


class TestDraftConflict:
    def test_sibling_draft_same_room(self):
        sibling = ScheduleSlot(day="Monday", room="R1", slot="0")
        result = check_draft_conflict({"room": "R1", "slot": 0, "day": "Monday"}, [sibling], label="MATH")
        assert result.kind == ROOM
        assert result.conflicting_subject_label == "MATH"

    def test_no_room_no_slot_short_circuits(self):
        sibling = ScheduleSlot(day="Monday", room=None, slot=None)
        assert not check_draft_conflict({"room": None, "slot": None, "day": "Monday"}, [sibling])


class TestBatch:
    def test_first_conflicting_entry_reported(self):
        x = subject("X", {"room": "R1", "slot": "1", "day": "Wednesday"})
        batch = [
            {"room": "R1", "slot": "0", "day": "Wednesday"},
            {"room": "R1", "slot": "1", "day": "Wednesday"},
            {"room": "R1", "slot": "1", "day": "Thursday"},
        ]
        index, entry, result = find_batch_conflict(batch, [x])
        assert index == 1
        assert entry.day == "Wednesday"
        assert result.kind == ROOM

    def test_clean_batch(self):
        x = subject("X", {"room": "R1", "slot": "1", "day": "Wednesday"})
        assert find_batch_conflict([{"room": "R1", "slot": "2", "day": "Wednesday"}], [x]) is None
