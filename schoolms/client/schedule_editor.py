"""
Draft editing of one subject's schedule.

Persisted schedules hold one entry per day. The editor merges entries that differ
only by day into a multi-day draft, lets the caller reshape drafts, and expands them
back into per-day entries on save. Conflicts are computed fresh on every call
against the other subjects' schedules as loaded and against sibling drafts.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from schoolms.client.api_client import SchoolApiClient
from schoolms.core import time_slots
from schoolms.core.enums import WEEK_ORDER, day_sort_key, normalize_day
from schoolms.core.exceptions import ConflictError, ValidationError
from schoolms.core.schedule_conflicts import (
    ROOM,
    ConflictResult,
    ScheduleSlot,
    SubjectSchedule,
    check_conflict,
    check_draft_conflict,
    normalize_slot,
    normalize_teacher_id,
)

logger = logging.getLogger(__name__)

DEFAULT_START = "09:00"
DEFAULT_END = "10:00"


@dataclass
class ScheduleDraft:
    days: List[str] = field(default_factory=lambda: ["Monday"])
    start_time: str = DEFAULT_START
    end_time: str = DEFAULT_END
    room: Optional[str] = None
    slot: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    teacher_id: Optional[str] = None


@dataclass(frozen=True)
class DayOption:
    day: str
    selected: bool
    disabled: bool
    conflicting_subject: Optional[str] = None


def _merge_key(entry: Mapping[str, Any], teacher_ids: Mapping[str, str]) -> Tuple:
    teacher = normalize_teacher_id(entry.get("teacher_id"))
    return (
        entry.get("start_time") or DEFAULT_START,
        entry.get("end_time") or DEFAULT_END,
        entry.get("room") or None,
        teacher_ids.get(teacher, teacher),
        entry.get("grade") or None,
        entry.get("section") or None,
        normalize_slot(entry.get("slot")),
    )


def merge_schedule(
    entries: Sequence[Mapping[str, Any]],
    teacher_ids: Optional[Mapping[str, str]] = None,
) -> List[ScheduleDraft]:
    """Collapse per-day entries into drafts; days within a draft run Monday to Sunday.

    `teacher_ids` maps readable teacher codes to object ids, so an entry naming
    a teacher either way lands in the same draft.
    """
    drafts: Dict[Tuple, ScheduleDraft] = {}
    for entry in entries:
        day = normalize_day(entry.get("day")) or "Monday"
        key = _merge_key(entry, teacher_ids or {})
        draft = drafts.get(key)
        if draft is None:
            start, end, room, teacher, grade, section, slot = key
            drafts[key] = ScheduleDraft(
                days=[day], start_time=start, end_time=end, room=room, slot=slot,
                grade=grade, section=section, teacher_id=teacher,
            )
        elif day not in draft.days:
            draft.days.append(day)
    for draft in drafts.values():
        draft.days.sort(key=day_sort_key)
    return list(drafts.values())


def expand_drafts(drafts: Sequence[ScheduleDraft]) -> List[Dict[str, Any]]:
    """One persisted entry per (draft, day), in draft order."""
    entries = []
    for draft in drafts:
        for day in draft.days:
            entries.append(
                {
                    "day": day,
                    "start_time": draft.start_time,
                    "end_time": draft.end_time,
                    "room": draft.room or None,
                    "slot": normalize_slot(draft.slot),
                    "grade": draft.grade,
                    "section": draft.section,
                    "teacher_id": draft.teacher_id,
                }
            )
    return entries


class ScheduleEditor:
    """Editing session for one subject's schedule."""

    def __init__(self, client: SchoolApiClient, subject_id: str) -> None:
        self.client = client
        self.subject_id = subject_id
        self.subject: Dict[str, Any] = {}
        self.drafts: List[ScheduleDraft] = []
        self.others: List[SubjectSchedule] = []
        self.rooms: Dict[str, Dict[str, Any]] = {}
        self.teacher_ids: Dict[str, str] = {}

    async def load(self) -> None:
        self.subject = await self.client.get_subject(self.subject_id)
        subjects = await self.client.list_subjects()
        self.others = [SubjectSchedule.from_subject(s) for s in subjects if s["id"] != self.subject["id"]]
        self.rooms = {r["code"]: r for r in await self.client.list_rooms()}
        self.teacher_ids = {t["teacher_code"]: t["id"] for t in await self.client.list_teachers()}
        self.drafts = merge_schedule(self.subject.get("schedule") or [], self.teacher_ids)

    def resolve_teacher(self, teacher_id: Optional[Any]) -> Optional[str]:
        """Object id for a teacher given by code or id. Unknown keys pass through."""
        key = normalize_teacher_id(teacher_id)
        return self.teacher_ids.get(key, key)

    def _slot(self, draft: ScheduleDraft, day: str) -> ScheduleSlot:
        return ScheduleSlot(
            day=day,
            room=draft.room or None,
            slot=normalize_slot(draft.slot),
            teacher_id=self.resolve_teacher(draft.teacher_id),
        )

    # Draft list

    def add_draft(self, **fields: Any) -> int:
        self.drafts.append(ScheduleDraft(**fields))
        return len(self.drafts) - 1

    def copy_draft(self, index: int) -> int:
        source = self.drafts[index]
        self.drafts.append(replace(source, days=list(source.days)))
        return len(self.drafts) - 1

    def remove_draft(self, index: int) -> None:
        del self.drafts[index]

    def toggle_day(self, index: int, day: str) -> None:
        canonical = normalize_day(day)
        if canonical is None:
            raise ValidationError(f"Invalid day: {day}", field="days", index=index)
        draft = self.drafts[index]
        if canonical in draft.days:
            draft.days.remove(canonical)
        else:
            draft.days.append(canonical)
            draft.days.sort(key=day_sort_key)

    def add_day(self, index: int, day: str) -> None:
        if normalize_day(day) not in self.drafts[index].days:
            self.toggle_day(index, day)

    def remove_day(self, index: int, day: str) -> None:
        if normalize_day(day) in self.drafts[index].days:
            self.toggle_day(index, day)

    # Field changes with time auto-fill

    def set_room(self, index: int, room: Optional[str]) -> None:
        """Select a room. Rooms with slots preselect slot 0 and its times; legacy rooms copy their window."""
        draft = self.drafts[index]
        draft.room = room or None
        draft.slot = None
        info = self.rooms.get(room) if room else None
        if not info:
            return
        data = info.get("data") or {}
        slots = [s for s in time_slots.room_time_slots(data) if s["start_time"] and s["end_time"]]
        if slots:
            draft.slot = "0"
            draft.start_time, draft.end_time = slots[0]["start_time"], slots[0]["end_time"]
        elif data.get("start_time") and data.get("end_time"):
            draft.start_time, draft.end_time = data["start_time"], data["end_time"]

    def set_slot(self, index: int, slot: Optional[Any]) -> None:
        draft = self.drafts[index]
        draft.slot = normalize_slot(slot)
        if draft.slot is None or not draft.room:
            return
        times = time_slots.slot_times((self.rooms.get(draft.room) or {}).get("data"), draft.slot)
        if times and times["start_time"] and times["end_time"]:
            draft.start_time, draft.end_time = times["start_time"], times["end_time"]

    def set_grade(self, index: int, grade: Optional[str]) -> None:
        """Changing the grade clears the section."""
        self.drafts[index].grade = grade or None
        self.drafts[index].section = None

    def set_section(self, index: int, section: Optional[str]) -> None:
        self.drafts[index].section = section or None

    def set_teacher(self, index: int, teacher_id: Optional[Any]) -> None:
        self.drafts[index].teacher_id = self.resolve_teacher(teacher_id)

    def room_has_slots(self, room: Optional[str]) -> bool:
        """Slot selection is only possible when the room has named time slots."""
        info = self.rooms.get(room) if room else None
        return bool(info and time_slots.room_time_slots(info.get("data")))

    # Checks

    def _siblings(self, index: int) -> List[ScheduleSlot]:
        return [self._slot(d, day) for i, d in enumerate(self.drafts) if i != index for day in d.days]

    def check_day(self, index: int, day: str) -> ConflictResult:
        """Conflict of draft `index` if it ran on `day`: sibling drafts first, then other subjects."""
        candidate = self._slot(self.drafts[index], day)
        own = check_draft_conflict(candidate, self._siblings(index), label=self.subject.get("code") or "this subject")
        if own:
            return own
        return check_conflict(candidate, self.others)

    def day_options(self, index: int) -> List[DayOption]:
        """Per weekday: selected, and disabled when taking it would conflict. Selected days stay enabled."""
        draft = self.drafts[index]
        options = []
        for day in WEEK_ORDER:
            selected = day in draft.days
            result = self.check_day(index, day)
            options.append(
                DayOption(
                    day=day,
                    selected=selected,
                    disabled=bool(result) and not selected,
                    conflicting_subject=result.conflicting_subject_label,
                )
            )
        return options

    def validate(self) -> None:
        for i, draft in enumerate(self.drafts):
            prefix = f"Time Slot {i + 1}"
            if not draft.days:
                raise ValidationError(f"{prefix} must have at least one day selected.", field="days", index=i)
            if not draft.room:
                raise ValidationError(f"{prefix} must have a room selected.", field="room", index=i)
            if self.room_has_slots(draft.room) and normalize_slot(draft.slot) is None:
                raise ValidationError(f"{prefix} must have a slot selected.", field="slot", index=i)
            if not draft.start_time:
                raise ValidationError(f"{prefix} must have a start time.", field="start_time", index=i)
            if not draft.end_time:
                raise ValidationError(f"{prefix} must have an end time.", field="end_time", index=i)
            if not draft.grade:
                raise ValidationError(f"{prefix} must have a grade selected.", field="grade", index=i)
            if not draft.section:
                raise ValidationError(f"{prefix} must have a section selected.", field="section", index=i)

    def check_conflicts(self) -> None:
        """Raise ConflictError for the first (draft, day) that collides with anything."""
        for i, draft in enumerate(self.drafts):
            for day in draft.days:
                result = self.check_day(i, day)
                if result:
                    raise ConflictError(
                        kind=result.kind or ROOM,
                        conflicting_subject=result.conflicting_subject_label,
                        room=draft.room,
                        slot=normalize_slot(draft.slot),
                        day=day,
                        index=i,
                    )

    async def save(self) -> Dict[str, Any]:
        """Validate, check and send the full per-day schedule. Drafts are kept on any failure."""
        self.validate()
        try:
            self.check_conflicts()
        except ConflictError as e:
            logger.warning("Schedule save for %s blocked: %s", self.subject.get("code"), e.message)
            raise
        subject = await self.client.update_subject(self.subject["id"], {"schedule": expand_drafts(self.drafts)})
        self.subject = subject
        logger.info("Saved schedule for %s (%d drafts)", subject.get("code"), len(self.drafts))
        return subject
