"""
Class attendance: one document per (class, date) holding every student's mark.

Create is strict. A second create for the same (class, date) is refused with 409 so
that callers reconcile it into an update; updates replace the whole marks list.
"""

import io
import logging
from datetime import date
from typing import Dict, List, Optional, Sequence

from fastapi import status
from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.api.v1.students.service import student_lookup
from schoolms.api.v1.teachers.service import teacher_lookup
from schoolms.core.enums import AttendanceStatus
from schoolms.core.exceptions import NotFoundError, ServiceError, ValidationError
from schoolms.core.identifiers import clean_identifier
from schoolms.core.models import AttendanceDocument, AttendanceMark

from .schemas import (
    AttendanceCreate,
    AttendanceMarkIn,
    AttendanceMarkOut,
    AttendanceResponse,
    AttendanceUpdate,
)

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Attendance already marked for this class on this date"

STATUS_LETTERS = {
    AttendanceStatus.PRESENT.value: "P",
    AttendanceStatus.ABSENT.value: "A",
    AttendanceStatus.LATE.value: "L",
    AttendanceStatus.EXCUSED.value: "E",
}


def _mark_out(m: AttendanceMark) -> AttendanceMarkOut:
    return AttendanceMarkOut(
        student_id=m.student_id,
        student_code=m.student.student_code if m.student else None,
        student_name=m.student.name if m.student else None,
        status=m.status,
        remarks=m.remarks,
    )


def _to_response(doc: AttendanceDocument, marks: Optional[Sequence[AttendanceMark]] = None) -> AttendanceResponse:
    return AttendanceResponse(
        id=doc.id,
        class_name=doc.class_name,
        date=doc.date,
        marked_by=doc.marked_by,
        students=[_mark_out(m) for m in (doc.marks if marks is None else marks)],
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


async def _reload(db: AsyncSession, document_id: str) -> AttendanceDocument:
    result = await db.execute(
        select(AttendanceDocument)
        .where(AttendanceDocument.id == document_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _build_marks(db: AsyncSession, students: Sequence[AttendanceMarkIn]) -> List[AttendanceMark]:
    """Resolve every student before anything is written; one unknown id fails the batch."""
    marks: List[AttendanceMark] = []
    seen = set()
    for index, entry in enumerate(students):
        student = await student_lookup.get(db, entry.student_id)
        if student is None:
            raise ValidationError(f"Student {entry.student_id} not found", field="student_id", index=index)
        if student.id in seen:
            raise ValidationError(f"Student {entry.student_id} is listed twice", field="student_id", index=index)
        seen.add(student.id)
        marks.append(AttendanceMark(student_id=student.id, status=entry.status.value, remarks=entry.remarks))
    return marks


async def _resolve_marker(db: AsyncSession, marked_by: Optional[str]) -> Optional[str]:
    if not marked_by:
        return None
    teacher = await teacher_lookup.get(db, marked_by)
    if teacher is None:
        raise ValidationError(f"Teacher {marked_by} not found", field="marked_by")
    return teacher.id


async def find_document(db: AsyncSession, class_name: str, on: date) -> Optional[AttendanceDocument]:
    result = await db.execute(
        select(AttendanceDocument).where(
            AttendanceDocument.class_name == class_name.strip(),
            AttendanceDocument.date == on,
        )
    )
    return result.scalar_one_or_none()


async def create_attendance(db: AsyncSession, payload: AttendanceCreate) -> AttendanceResponse:
    class_name = payload.class_name.strip()
    if await find_document(db, class_name, payload.date) is not None:
        logger.warning("Duplicate attendance create for %s on %s", class_name, payload.date)
        raise ServiceError(DUPLICATE_MESSAGE, status.HTTP_409_CONFLICT)
    doc = AttendanceDocument(
        class_name=class_name,
        date=payload.date,
        marked_by=await _resolve_marker(db, payload.marked_by),
        marks=await _build_marks(db, payload.students),
    )
    db.add(doc)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with another create for the same (class, date)
        await db.rollback()
        logger.warning("Duplicate attendance create for %s on %s", class_name, payload.date)
        raise ServiceError(DUPLICATE_MESSAGE, status.HTTP_409_CONFLICT)
    logger.info("Marked attendance %s for %s on %s (%d students)", doc.id, class_name, doc.date, len(doc.marks))
    return _to_response(await _reload(db, doc.id))


async def list_attendance(
    db: AsyncSession,
    class_name: Optional[str] = None,
    on: Optional[date] = None,
    student_id: Optional[str] = None,
) -> List[AttendanceResponse]:
    """Documents matching class/date. With student_id, only documents that mark that
    student are returned and their marks are narrowed to that student."""
    stmt = select(AttendanceDocument).order_by(AttendanceDocument.date.desc(), AttendanceDocument.class_name)
    if class_name:
        stmt = stmt.where(AttendanceDocument.class_name == class_name.strip())
    if on:
        stmt = stmt.where(AttendanceDocument.date == on)
    result = await db.execute(stmt)
    docs = result.scalars().all()
    if not student_id:
        return [_to_response(d) for d in docs]

    student = await student_lookup.get(db, student_id)
    if student is None:
        return []
    filtered = []
    for d in docs:
        marks = [m for m in d.marks if m.student_id == student.id]
        if marks:
            filtered.append(_to_response(d, marks))
    return filtered


async def get_attendance(db: AsyncSession, document_id: str) -> Optional[AttendanceResponse]:
    ident = clean_identifier(document_id, "attendance")
    doc = await db.get(AttendanceDocument, ident.lower())
    return _to_response(doc) if doc else None


async def update_attendance(db: AsyncSession, document_id: str, payload: AttendanceUpdate) -> AttendanceResponse:
    ident = clean_identifier(document_id, "attendance")
    doc = await db.get(AttendanceDocument, ident.lower())
    if not doc:
        raise NotFoundError("Attendance record not found")
    marks = await _build_marks(db, payload.students)
    if payload.marked_by:
        doc.marked_by = await _resolve_marker(db, payload.marked_by)
    doc.marks = marks
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Attendance update failed", status.HTTP_409_CONFLICT)
    logger.info("Updated attendance %s for %s on %s (%d students)", doc.id, doc.class_name, doc.date, len(marks))
    return _to_response(await _reload(db, doc.id))


async def delete_attendance(db: AsyncSession, document_id: str) -> bool:
    ident = clean_identifier(document_id, "attendance")
    doc = await db.get(AttendanceDocument, ident.lower())
    if not doc:
        return False
    await db.delete(doc)
    await db.commit()
    logger.info("Deleted attendance %s", ident)
    return True


async def export_attendance(
    db: AsyncSession,
    class_name: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> bytes:
    """Excel grid for one class: one row per student, one column per date, plus totals."""
    stmt = (
        select(AttendanceDocument)
        .where(AttendanceDocument.class_name == class_name.strip())
        .order_by(AttendanceDocument.date)
    )
    if date_from:
        stmt = stmt.where(AttendanceDocument.date >= date_from)
    if date_to:
        stmt = stmt.where(AttendanceDocument.date <= date_to)
    docs = (await db.execute(stmt)).scalars().all()

    dates = [d.date for d in docs]
    rows: Dict[str, Dict[str, object]] = {}
    for d in docs:
        for m in d.marks:
            row = rows.setdefault(
                m.student_id,
                {
                    "code": m.student.student_code if m.student else m.student_id,
                    "name": m.student.name if m.student else "",
                    "marks": {},
                },
            )
            row["marks"][d.date] = m.status

    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance"
    totals = [s.value for s in AttendanceStatus]
    ws.append(["Student ID", "Name"] + [d.isoformat() for d in dates] + totals)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in sorted(rows.values(), key=lambda r: str(r["code"])):
        marks = row["marks"]
        cells = [STATUS_LETTERS.get(marks.get(d), "") for d in dates]
        counts = [sum(1 for v in marks.values() if v == s) for s in totals]
        ws.append([row["code"], row["name"]] + cells + counts)
    ws.freeze_panes = "C2"

    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()
