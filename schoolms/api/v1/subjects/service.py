"""
Subjects and their schedules.

Schedules are written wholesale. Every write is validated entry by entry (room,
slot, teacher) and, when conflict enforcement is on, checked against the persisted
schedules of all other subjects before anything is flushed. One bad entry rejects
the whole write.
"""

import logging
from typing import Dict, List, Optional, Sequence

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.api.v1.teachers.service import teacher_lookup
from schoolms.core import time_slots
from schoolms.core.config import settings
from schoolms.core.enums import WEEK_ORDER, MasterDataType
from schoolms.core.exceptions import ConflictError, NotFoundError, ServiceError, ValidationError
from schoolms.core.grade_section import normalize_grade
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import MasterData, Subject, SubjectScheduleEntry
from schoolms.core.schedule_conflicts import (
    ScheduleSlot,
    SubjectSchedule,
    check_conflict,
    find_batch_conflict,
    normalize_slot,
)

from .schemas import (
    DayAvailability,
    ScheduleEntryIn,
    ScheduleEntryOut,
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
)

logger = logging.getLogger(__name__)

subject_lookup = EntityLookup(Subject, "code", "subject")


def _to_response(s: Subject) -> SubjectResponse:
    return SubjectResponse(
        id=s.id,
        code=s.code,
        name=s.name,
        category=s.category,
        level=s.level,
        credits=s.credits or 0,
        description=s.description,
        grades=list(s.grades or []),
        status=s.status,
        schedule=[ScheduleEntryOut.model_validate(e) for e in s.schedule_entries],
        created_at=s.created_at,
    )


async def _reload(db: AsyncSession, subject_id: str) -> Subject:
    result = await db.execute(
        select(Subject).where(Subject.id == subject_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def other_schedules(db: AsyncSession, exclude_id: Optional[str] = None) -> List[SubjectSchedule]:
    """Persisted schedules of every subject except `exclude_id`."""
    stmt = select(Subject)
    if exclude_id is not None:
        stmt = stmt.where(Subject.id != exclude_id)
    result = await db.execute(stmt)
    return [SubjectSchedule.from_subject(s) for s in result.scalars().all()]


async def _rooms_by_code(db: AsyncSession) -> Dict[str, MasterData]:
    result = await db.execute(select(MasterData).where(MasterData.type == MasterDataType.ROOM.value))
    return {r.code: r for r in result.scalars().all()}


async def _build_entries(
    db: AsyncSession,
    entries: Sequence[ScheduleEntryIn],
    subject_id: Optional[str],
) -> List[SubjectScheduleEntry]:
    rooms = await _rooms_by_code(db)
    teacher_ids: Dict[str, str] = {}
    rows: List[SubjectScheduleEntry] = []

    for index, entry in enumerate(entries):
        prefix = f"Time Slot {index + 1}"
        if not (time_slots.is_valid_time(entry.start_time) and time_slots.is_valid_time(entry.end_time)):
            raise ValidationError(f"{prefix}: start and end times must be HH:MM", field="start_time", index=index)
        if settings.enforce_schedule_conflicts and not (entry.grade and entry.section):
            raise ValidationError(f"{prefix}: grade and section are required", field="grade", index=index)

        room_code = (entry.room or "").strip() or None
        slot = normalize_slot(entry.slot)
        if room_code is not None:
            room = rooms.get(room_code)
            if room is None:
                raise ValidationError(f"{prefix}: room {room_code} does not exist", field="room", index=index)
            available = time_slots.room_time_slots(room.data)
            if available and slot is not None and int(slot) >= len(available):
                raise ValidationError(
                    f"{prefix}: room {room_code} has no slot {slot}", field="slot", index=index
                )
        elif slot is not None:
            raise ValidationError(f"{prefix}: a slot needs a room", field="room", index=index)

        teacher_id = None
        if entry.teacher_id:
            key = entry.teacher_id.strip()
            if key not in teacher_ids:
                teacher = await teacher_lookup.get(db, key)
                if teacher is None:
                    raise ValidationError(f"{prefix}: teacher {key} not found", field="teacher_id", index=index)
                teacher_ids[key] = teacher.id
            teacher_id = teacher_ids[key]

        rows.append(
            SubjectScheduleEntry(
                position=index,
                day=entry.day,
                start_time=entry.start_time,
                end_time=entry.end_time,
                room=room_code,
                slot=slot,
                grade=normalize_grade(entry.grade.strip()) if entry.grade else None,
                section=entry.section.strip().upper() if entry.section else None,
                teacher_id=teacher_id,
            )
        )

    if settings.enforce_schedule_conflicts and rows:
        hit = find_batch_conflict(rows, await other_schedules(db, exclude_id=subject_id))
        if hit is not None:
            index, proposed, result = hit
            logger.warning(
                "Rejected schedule write for subject %s: %s conflict with %s on %s slot %s",
                subject_id, result.kind, result.conflicting_subject_label, proposed.day, proposed.slot,
            )
            raise ConflictError(
                kind=result.kind,
                conflicting_subject=result.conflicting_subject_label,
                room=proposed.room,
                slot=proposed.slot,
                day=proposed.day,
                index=index,
            )
    return rows


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(Subject.id).where(Subject.code == code)
    if exclude_id is not None:
        stmt = stmt.where(Subject.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise ServiceError(f"Subject with code '{code}' already exists", status.HTTP_409_CONFLICT)


async def create_subject(db: AsyncSession, payload: SubjectCreate) -> SubjectResponse:
    code = payload.code.strip()
    await _ensure_code_free(db, code)
    entries = await _build_entries(db, payload.schedule, subject_id=None)
    obj = Subject(
        code=code,
        name=payload.name.strip(),
        category=payload.category,
        level=payload.level,
        credits=payload.credits,
        description=payload.description,
        grades=[normalize_grade(g.strip()) for g in payload.grades if g.strip()],
        status=payload.status.value,
        schedule_entries=entries,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Subject creation failed", status.HTTP_409_CONFLICT)
    logger.info("Created subject %s (%s) with %d schedule entries", obj.code, obj.id, len(entries))
    return _to_response(await _reload(db, obj.id))


async def list_subjects(
    db: AsyncSession,
    status_filter: Optional[str] = None,
    grade: Optional[str] = None,
) -> List[SubjectResponse]:
    stmt = select(Subject).order_by(Subject.code)
    if status_filter:
        stmt = stmt.where(Subject.status == status_filter)
    result = await db.execute(stmt)
    subjects = result.scalars().all()
    if grade:
        wanted = normalize_grade(grade.strip())
        subjects = [s for s in subjects if wanted in (s.grades or [])]
    return [_to_response(s) for s in subjects]


async def get_subject(db: AsyncSession, identifier: str) -> Optional[SubjectResponse]:
    obj = await subject_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def update_subject(db: AsyncSession, identifier: str, payload: SubjectUpdate) -> SubjectResponse:
    obj = await subject_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Subject not found")
    data = payload.model_dump(exclude_unset=True, exclude={"schedule"})
    if data.get("code"):
        data["code"] = data["code"].strip()
        await _ensure_code_free(db, data["code"], exclude_id=obj.id)
    if data.get("status") is not None:
        data["status"] = data["status"].value
    if data.get("grades") is not None:
        data["grades"] = [normalize_grade(g.strip()) for g in data["grades"] if g.strip()]
    # Validate the schedule before touching any column
    entries = None
    if payload.schedule is not None:
        entries = await _build_entries(db, payload.schedule, subject_id=obj.id)
    for field, value in data.items():
        if value is None and field in ("code", "name", "category", "level", "credits", "grades", "status"):
            continue
        setattr(obj, field, value)
    if entries is not None:
        obj.schedule_entries = entries
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Subject with this code already exists", status.HTTP_409_CONFLICT)
    return _to_response(await _reload(db, obj.id))


async def replace_schedule(db: AsyncSession, identifier: str, schedule: Sequence[ScheduleEntryIn]) -> SubjectResponse:
    obj = await subject_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Subject not found")
    obj.schedule_entries = await _build_entries(db, schedule, subject_id=obj.id)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Schedule update failed", status.HTTP_409_CONFLICT)
    logger.info("Replaced schedule of subject %s with %d entries", obj.code, len(schedule))
    return _to_response(await _reload(db, obj.id))


async def delete_subject(db: AsyncSession, identifier: str) -> bool:
    obj = await subject_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted subject %s (%s)", obj.code, obj.id)
    return True


async def availability(
    db: AsyncSession,
    identifier: str,
    room: Optional[str],
    slot: Optional[str],
    teacher_id: Optional[str] = None,
) -> List[DayAvailability]:
    """Per weekday, whether (room, slot) and (teacher, slot) are free for this subject."""
    obj = await subject_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Subject not found")
    resolved_teacher = None
    if teacher_id:
        teacher = await teacher_lookup.get(db, teacher_id)
        if teacher is None:
            raise ValidationError(f"Teacher {teacher_id} not found", field="teacher_id")
        resolved_teacher = teacher.id
    others = await other_schedules(db, exclude_id=obj.id)
    days = []
    for day in WEEK_ORDER:
        result = check_conflict(
            ScheduleSlot(day=day, room=room or None, slot=normalize_slot(slot), teacher_id=resolved_teacher),
            others,
        )
        days.append(
            DayAvailability(
                day=day,
                available=not result,
                kind=result.kind,
                conflicting_subject=result.conflicting_subject_label,
            )
        )
    return days
