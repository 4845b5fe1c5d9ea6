"""
Room and teacher double-booking checks for subject schedules.

A schedule entry occupies (room, slot, day) and, when it names a teacher,
(teacher, slot, day). Across all subjects both combinations must be unique. The
checks here are pure scans over already loaded schedules; callers run them before
every write and must reject the whole batch on the first conflict.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

ROOM = "room"
TEACHER = "teacher"

UNKNOWN_SUBJECT = "Unknown Subject"


def normalize_slot(value: Any) -> Optional[str]:
    """Canonical decimal string of a slot index.

    0, "0", " 01 " -> "0"/"0"/"1". Empty, negative or non-numeric slots are
    unslotted and return None; unslotted entries never conflict.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value) if value >= 0 else None
    text = str(value).strip()
    if not text.isdigit():
        return None
    return str(int(text))


def normalize_teacher_id(value: Any) -> Optional[str]:
    """Teacher reference as a plain string; accepts populated {'id': ...} objects."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("id") or value.get("_id")
        if value is None:
            return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ScheduleSlot:
    """The parts of a schedule entry that take part in conflict checks."""

    day: str
    room: Optional[str] = None
    slot: Optional[str] = None
    teacher_id: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: Any) -> "ScheduleSlot":
        """Build from a mapping or any object exposing day/room/slot/teacher_id."""
        if isinstance(entry, Mapping):
            get = entry.get
        else:
            def get(key: str, default: Any = None) -> Any:
                return getattr(entry, key, default)
        return cls(
            day=get("day") or "",
            room=get("room") or None,
            slot=normalize_slot(get("slot")),
            teacher_id=normalize_teacher_id(get("teacher_id")),
        )


@dataclass(frozen=True)
class SubjectSchedule:
    """One other subject's persisted schedule, as seen by the checker."""

    code: Optional[str]
    name: Optional[str]
    entries: Sequence[ScheduleSlot] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return self.code or self.name or UNKNOWN_SUBJECT

    @classmethod
    def from_subject(cls, subject: Any) -> "SubjectSchedule":
        """Build from a subject mapping (API JSON) or ORM object."""
        if isinstance(subject, Mapping):
            code, name = subject.get("code"), subject.get("name")
            raw_entries = subject.get("schedule") or []
        else:
            code, name = getattr(subject, "code", None), getattr(subject, "name", None)
            raw_entries = getattr(subject, "schedule_entries", None) or []
        return cls(code=code, name=name, entries=tuple(ScheduleSlot.from_entry(e) for e in raw_entries))


@dataclass(frozen=True)
class ConflictResult:
    conflict: bool
    kind: Optional[str] = None
    conflicting_subject_label: Optional[str] = None

    def __bool__(self) -> bool:
        return self.conflict


NO_CONFLICT = ConflictResult(conflict=False)


def _room_hit(proposed: ScheduleSlot, slot: str, other: ScheduleSlot) -> bool:
    return (
        proposed.room is not None
        and other.room == proposed.room
        and other.slot == slot
        and other.day == proposed.day
    )


def _teacher_hit(proposed: ScheduleSlot, slot: str, other: ScheduleSlot) -> bool:
    return (
        other.teacher_id is not None
        and other.teacher_id == proposed.teacher_id
        and other.slot == slot
        and other.day == proposed.day
    )


def check_conflict(proposed: Any, other_subjects: Iterable[SubjectSchedule]) -> ConflictResult:
    """First room conflict, else first teacher conflict, against other subjects.

    Day comparison is exact on the canonical capitalized name.
    """
    candidate = proposed if isinstance(proposed, ScheduleSlot) else ScheduleSlot.from_entry(proposed)
    slot = candidate.slot
    if slot is None:
        return NO_CONFLICT
    subjects = list(other_subjects)
    for subject in subjects:
        if any(_room_hit(candidate, slot, e) for e in subject.entries):
            return ConflictResult(True, ROOM, subject.label)
    if candidate.teacher_id is not None:
        for subject in subjects:
            if any(_teacher_hit(candidate, slot, e) for e in subject.entries):
                return ConflictResult(True, TEACHER, subject.label)
    return NO_CONFLICT


def check_draft_conflict(proposed: Any, sibling_drafts: Iterable[Any], label: str = "this subject") -> ConflictResult:
    """Room self-check of one draft entry against the other drafts of the same editor."""
    candidate = proposed if isinstance(proposed, ScheduleSlot) else ScheduleSlot.from_entry(proposed)
    if candidate.slot is None or candidate.room is None:
        return NO_CONFLICT
    for sibling in sibling_drafts:
        other = sibling if isinstance(sibling, ScheduleSlot) else ScheduleSlot.from_entry(sibling)
        if _room_hit(candidate, candidate.slot, other):
            return ConflictResult(True, ROOM, label)
    return NO_CONFLICT


def find_batch_conflict(
    entries: Sequence[Any],
    other_subjects: Iterable[SubjectSchedule],
) -> Optional[Tuple[int, ScheduleSlot, ConflictResult]]:
    """Check every per-day entry of a batch; return the first (index, entry, result) that conflicts."""
    subjects: List[SubjectSchedule] = list(other_subjects)
    for index, entry in enumerate(entries):
        candidate = entry if isinstance(entry, ScheduleSlot) else ScheduleSlot.from_entry(entry)
        result = check_conflict(candidate, subjects)
        if result:
            return index, candidate, result
    return None
