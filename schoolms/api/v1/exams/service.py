import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.api.v1.students.service import student_lookup
from schoolms.api.v1.subjects.service import subject_lookup
from schoolms.core import time_slots
from schoolms.core.exceptions import NotFoundError, ServiceError, ValidationError
from schoolms.core.grade_section import normalize_grade
from schoolms.core.grading import grade_result
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import Exam, ExamResult, Student

from .schemas import ExamCreate, ExamResponse, ExamResultIn, ExamResultResponse, ExamUpdate

logger = logging.getLogger(__name__)

exam_lookup = EntityLookup(Exam, "exam_code", "exam")


def _to_response(e: Exam) -> ExamResponse:
    return ExamResponse.model_validate(e)


def _result_response(r: ExamResult, student: Optional[Student]) -> ExamResultResponse:
    return ExamResultResponse(
        id=r.id,
        exam_id=r.exam_id,
        student_id=r.student_id,
        student_code=student.student_code if student else None,
        student_name=student.name if student else None,
        marks_obtained=r.marks_obtained,
        total_marks=r.total_marks,
        percentage=r.percentage,
        grade=r.grade,
        status=r.status,
        remarks=r.remarks,
        graded_at=r.graded_at,
    )


async def _resolve_subject(db: AsyncSession, subject: str):
    """(display name, subject id). Unknown subjects are kept as free text."""
    text = subject.strip()
    try:
        found = await subject_lookup.get(db, text)
    except ValidationError:
        found = None
    if found is None:
        return text, None
    return found.name, found.id


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(Exam.id).where(Exam.exam_code == code)
    if exclude_id is not None:
        stmt = stmt.where(Exam.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise ServiceError(f"Exam with exam_code '{code}' already exists", status.HTTP_409_CONFLICT)


async def create_exam(db: AsyncSession, payload: ExamCreate) -> ExamResponse:
    code = payload.exam_code.strip()
    await _ensure_code_free(db, code)
    if not time_slots.is_valid_time(payload.time):
        raise ValidationError("Exam time must be HH:MM", field="time")
    subject_name, subject_id = await _resolve_subject(db, payload.subject)
    obj = Exam(
        exam_code=code,
        name=payload.name.strip(),
        subject=subject_name,
        subject_id=subject_id,
        grades=[normalize_grade(g.strip()) for g in payload.grades if g.strip()],
        date=payload.date,
        time=payload.time,
        duration=payload.duration,
        total_marks=payload.total_marks,
        passing_marks=payload.passing_marks,
        description=payload.description,
        status=payload.status.value,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Exam creation failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Created exam %s (%s)", obj.exam_code, obj.id)
    return _to_response(obj)


async def list_exams(
    db: AsyncSession,
    status_filter: Optional[str] = None,
    grade: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[ExamResponse]:
    stmt = select(Exam).order_by(Exam.date.desc(), Exam.exam_code)
    if status_filter:
        stmt = stmt.where(Exam.status == status_filter)
    result = await db.execute(stmt)
    exams = result.scalars().all()
    if grade:
        wanted = normalize_grade(grade.strip())
        exams = [e for e in exams if wanted in (e.grades or [])]
    if subject:
        exams = [e for e in exams if subject in (e.subject, e.subject_id)]
    return [_to_response(e) for e in exams]


async def get_exam(db: AsyncSession, identifier: str) -> Optional[ExamResponse]:
    obj = await exam_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def update_exam(db: AsyncSession, identifier: str, payload: ExamUpdate) -> ExamResponse:
    obj = await exam_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Exam not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("exam_code"):
        data["exam_code"] = data["exam_code"].strip()
        await _ensure_code_free(db, data["exam_code"], exclude_id=obj.id)
    if data.get("time") and not time_slots.is_valid_time(data["time"]):
        raise ValidationError("Exam time must be HH:MM", field="time")
    if data.get("subject"):
        data["subject"], data["subject_id"] = await _resolve_subject(db, data["subject"])
    if data.get("grades") is not None:
        data["grades"] = [normalize_grade(g.strip()) for g in data["grades"] if g.strip()]
    if data.get("status") is not None:
        data["status"] = data["status"].value
    total = data.get("total_marks") or obj.total_marks
    passing = data.get("passing_marks", obj.passing_marks)
    if passing is not None and passing > total:
        raise ValidationError("passing_marks cannot exceed total_marks", field="passing_marks")
    for field, value in data.items():
        if value is None and field not in ("passing_marks", "description", "subject_id"):
            continue
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Exam with this exam_code already exists", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj)


async def delete_exam(db: AsyncSession, identifier: str) -> bool:
    obj = await exam_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted exam %s (%s)", obj.exam_code, obj.id)
    return True


async def list_results(db: AsyncSession, identifier: str) -> List[ExamResultResponse]:
    exam = await exam_lookup.get(db, identifier)
    if not exam:
        raise NotFoundError("Exam not found")
    result = await db.execute(
        select(ExamResult, Student)
        .join(Student, Student.id == ExamResult.student_id)
        .where(ExamResult.exam_id == exam.id)
        .order_by(Student.student_code)
    )
    return [_result_response(r, s) for r, s in result.all()]


async def submit_results(db: AsyncSession, identifier: str, results: List[ExamResultIn]) -> List[ExamResultResponse]:
    """Upsert one result per student. Every student is resolved before anything is written."""
    exam = await exam_lookup.get(db, identifier)
    if not exam:
        raise NotFoundError("Exam not found")

    resolved: List[tuple] = []
    seen = set()
    for index, item in enumerate(results):
        student = await student_lookup.get(db, item.student_id)
        if student is None:
            raise ValidationError(f"Student {item.student_id} not found", field="student_id", index=index)
        if student.id in seen:
            raise ValidationError(f"Student {item.student_id} is listed twice", field="student_id", index=index)
        total = item.total_marks or float(exam.total_marks)
        if item.marks_obtained > total:
            raise ValidationError(
                f"Marks for {student.student_code} exceed total marks", field="marks_obtained", index=index
            )
        seen.add(student.id)
        resolved.append((student, item, total))

    existing_rows = await db.execute(select(ExamResult).where(ExamResult.exam_id == exam.id))
    existing: Dict[str, ExamResult] = {r.student_id: r for r in existing_rows.scalars().all()}

    saved = []
    for student, item, total in resolved:
        pct, letter, outcome = grade_result(item.marks_obtained, total, grade=item.grade, status=item.status)
        row = existing.get(student.id)
        if row is None:
            row = ExamResult(exam_id=exam.id, student_id=student.id)
            db.add(row)
        row.marks_obtained = item.marks_obtained
        row.total_marks = total
        row.percentage = pct
        row.grade = letter
        row.status = outcome
        row.remarks = item.remarks
        row.graded_at = datetime.utcnow()
        saved.append((row, student))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Results were changed concurrently, retry the submission", status.HTTP_409_CONFLICT)
    logger.info("Saved %d results for exam %s", len(saved), exam.exam_code)
    return [_result_response(r, s) for r, s in saved]
