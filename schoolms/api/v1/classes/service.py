"""
Class sections. Grade and section are derived from the free-text name on every read,
and current_students is recounted from the student collection each time.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.enums import StudentStatus
from schoolms.core.exceptions import NotFoundError, ServiceError
from schoolms.core.grade_section import extract_grade, extract_section, grade_sort_key, student_in_class
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import ClassSection, Student

from .schemas import ClassCreate, ClassResponse, ClassUpdate, GradeGroup

logger = logging.getLogger(__name__)

class_lookup = EntityLookup(ClassSection, "code", "class")


def _section_of(c: ClassSection, grade: Optional[str]) -> str:
    if c.section:
        return c.section.strip().upper()
    return extract_section(c.name, grade).upper() if grade else ""


def _count_students(students: Sequence[Student], grade: Optional[str], section: str) -> int:
    if not grade:
        return 0
    return sum(
        1 for s in students
        if s.class_name and student_in_class(s.class_name, s.section, grade, section)
    )


def _to_response(c: ClassSection, students: Sequence[Student]) -> ClassResponse:
    grade = extract_grade(c.name)
    section = _section_of(c, grade)
    return ClassResponse(
        id=c.id,
        code=c.code,
        name=c.name,
        grade=grade,
        section=section,
        capacity=c.capacity,
        current_students=_count_students(students, grade, section),
        status=c.status,
        description=c.description,
        created_at=c.created_at,
    )


async def _active_students(db: AsyncSession) -> List[Student]:
    result = await db.execute(select(Student).where(Student.status == StudentStatus.ACTIVE.value))
    return list(result.scalars().all())


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(ClassSection.id).where(ClassSection.code == code)
    if exclude_id is not None:
        stmt = stmt.where(ClassSection.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise ServiceError(f"Class with code '{code}' already exists", status.HTTP_409_CONFLICT)


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    code = payload.code.strip()
    await _ensure_code_free(db, code)
    obj = ClassSection(
        code=code,
        name=payload.name.strip(),
        section=(payload.section or "").strip().upper(),
        capacity=payload.capacity,
        status=payload.status.value,
        description=payload.description,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Class creation failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Created class %s (%s)", obj.code, obj.id)
    return _to_response(obj, await _active_students(db))


async def list_classes(db: AsyncSession, status_filter: Optional[str] = None) -> List[ClassResponse]:
    stmt = select(ClassSection).order_by(ClassSection.name)
    if status_filter:
        stmt = stmt.where(ClassSection.status == status_filter)
    result = await db.execute(stmt)
    students = await _active_students(db)
    return [_to_response(c, students) for c in result.scalars().all()]


async def list_grades(db: AsyncSession, status_filter: Optional[str] = None) -> List[GradeGroup]:
    """Sections grouped by grade in grade-number order. Classes without a grade are left out."""
    classes = await list_classes(db, status_filter=status_filter)
    groups: Dict[str, List[ClassResponse]] = OrderedDict()
    for c in sorted(classes, key=lambda c: (grade_sort_key(c.grade), c.section)):
        if not c.grade:
            continue
        groups.setdefault(c.grade, []).append(c)
    return [GradeGroup(grade=grade, sections=sections) for grade, sections in groups.items()]


async def get_class(db: AsyncSession, identifier: str) -> Optional[ClassResponse]:
    obj = await class_lookup.get(db, identifier)
    if not obj:
        return None
    return _to_response(obj, await _active_students(db))


async def update_class(db: AsyncSession, identifier: str, payload: ClassUpdate) -> ClassResponse:
    obj = await class_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Class not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("code"):
        data["code"] = data["code"].strip()
        await _ensure_code_free(db, data["code"], exclude_id=obj.id)
    if "section" in data:
        data["section"] = (data["section"] or "").strip().upper()
    if data.get("status") is not None:
        data["status"] = data["status"].value
    for field, value in data.items():
        if value is None and field in ("code", "name", "capacity", "status"):
            continue
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Class with this code already exists", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj, await _active_students(db))


async def delete_class(db: AsyncSession, identifier: str) -> bool:
    obj = await class_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted class %s (%s)", obj.code, obj.id)
    return True
