import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import NotFoundError, ServiceError
from schoolms.core.grade_section import extract_grade, extract_section, sections_match, student_in_class
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import Student

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)

student_lookup = EntityLookup(Student, "student_code", "student")


def _to_response(s: Student) -> StudentResponse:
    return StudentResponse(
        id=s.id,
        student_code=s.student_code,
        name=s.name,
        email=s.email,
        phone=s.phone,
        class_name=s.class_name,
        section=s.section,
        gender=s.gender,
        date_of_birth=s.date_of_birth,
        parent_name=s.parent_name,
        parent_phone=s.parent_phone,
        status=s.status,
        created_at=s.created_at,
    )


async def _code_taken(db: AsyncSession, code: str, exclude_id: Optional[str] = None) -> bool:
    stmt = select(Student.id).where(Student.student_code == code)
    if exclude_id is not None:
        stmt = stmt.where(Student.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    code = payload.student_code.strip()
    if await _code_taken(db, code):
        raise ServiceError(f"Student with student_code '{code}' already exists", status.HTTP_409_CONFLICT)
    data = payload.model_dump()
    data["student_code"] = code
    data["status"] = payload.status.value
    obj = Student(**data)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Student creation failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Created student %s (%s)", obj.student_code, obj.id)
    return _to_response(obj)


async def load_students(
    db: AsyncSession,
    class_name: Optional[str] = None,
    section: Optional[str] = None,
    status_filter: Optional[str] = None,
) -> List[Student]:
    """Students filtered by status and, when given, by fuzzy grade/section matching."""
    stmt = select(Student).order_by(Student.student_code)
    if status_filter:
        stmt = stmt.where(Student.status == status_filter)
    result = await db.execute(stmt)
    students = list(result.scalars().all())
    if class_name:
        grade = extract_grade(class_name)
        if not section and grade:
            # "Grade 1 Section A" carries its own section
            section = extract_section(class_name, grade)
        students = [
            s for s in students
            if (s.class_name == class_name and sections_match(s.section, section))
            or student_in_class(s.class_name, s.section, class_name, section)
        ]
    return students


async def list_students(
    db: AsyncSession,
    class_name: Optional[str] = None,
    section: Optional[str] = None,
    status_filter: Optional[str] = None,
) -> List[StudentResponse]:
    students = await load_students(db, class_name=class_name, section=section, status_filter=status_filter)
    return [_to_response(s) for s in students]


async def get_student(db: AsyncSession, identifier: str) -> Optional[StudentResponse]:
    obj = await student_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def update_student(db: AsyncSession, identifier: str, payload: StudentUpdate) -> StudentResponse:
    obj = await student_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Student not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("student_code"):
        data["student_code"] = data["student_code"].strip()
        if await _code_taken(db, data["student_code"], exclude_id=obj.id):
            raise ServiceError(
                f"Student with student_code '{data['student_code']}' already exists",
                status.HTTP_409_CONFLICT,
            )
    if data.get("status") is not None:
        data["status"] = data["status"].value
    for field, value in data.items():
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Student with this student_code already exists", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj)


async def delete_student(db: AsyncSession, identifier: str) -> bool:
    obj = await student_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted student %s (%s)", obj.student_code, obj.id)
    return True
