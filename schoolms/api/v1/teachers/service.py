import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import NotFoundError, ServiceError
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import Teacher

from .schemas import TeacherCreate, TeacherResponse, TeacherUpdate

logger = logging.getLogger(__name__)

teacher_lookup = EntityLookup(Teacher, "teacher_code", "teacher")


def _to_response(t: Teacher) -> TeacherResponse:
    return TeacherResponse.model_validate(t)


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(Teacher.id).where(Teacher.teacher_code == code)
    if exclude_id is not None:
        stmt = stmt.where(Teacher.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise ServiceError(f"Teacher with teacher_code '{code}' already exists", status.HTTP_409_CONFLICT)


async def create_teacher(db: AsyncSession, payload: TeacherCreate) -> TeacherResponse:
    code = payload.teacher_code.strip()
    await _ensure_code_free(db, code)
    data = payload.model_dump()
    data.update(teacher_code=code, status=payload.status.value)
    obj = Teacher(**data)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Teacher creation failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Created teacher %s (%s)", obj.teacher_code, obj.id)
    return _to_response(obj)


async def list_teachers(
    db: AsyncSession,
    status_filter: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[TeacherResponse]:
    stmt = select(Teacher).order_by(Teacher.teacher_code)
    if status_filter:
        stmt = stmt.where(Teacher.status == status_filter)
    if subject:
        stmt = stmt.where(Teacher.subject == subject)
    result = await db.execute(stmt)
    return [_to_response(t) for t in result.scalars().all()]


async def get_teacher(db: AsyncSession, identifier: str) -> Optional[TeacherResponse]:
    obj = await teacher_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def update_teacher(db: AsyncSession, identifier: str, payload: TeacherUpdate) -> TeacherResponse:
    obj = await teacher_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Teacher not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("teacher_code"):
        data["teacher_code"] = data["teacher_code"].strip()
        await _ensure_code_free(db, data["teacher_code"], exclude_id=obj.id)
    if data.get("status") is not None:
        data["status"] = data["status"].value
    for field, value in data.items():
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Teacher with this teacher_code already exists", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj)


async def delete_teacher(db: AsyncSession, identifier: str) -> bool:
    obj = await teacher_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted teacher %s (%s)", obj.teacher_code, obj.id)
    return True
