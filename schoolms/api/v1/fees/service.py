import logging
from typing import List, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import NotFoundError, ServiceError
from schoolms.core.grade_section import grade_sort_key, normalize_grade
from schoolms.core.identifiers import EntityLookup, clean_identifier
from schoolms.core.models import Fee

from .schemas import FeeCreate, FeeResponse, FeeUpdate

logger = logging.getLogger(__name__)

# The grade label is the readable key of a fee
fee_lookup = EntityLookup(Fee, "grade", "fee")


def _to_response(f: Fee) -> FeeResponse:
    return FeeResponse(
        id=f.id,
        grade=f.grade,
        tuition_fee=float(f.tuition_fee),
        admission_fee=float(f.admission_fee),
        created_at=f.created_at,
    )


async def _find(db: AsyncSession, identifier: str) -> Optional[Fee]:
    obj = await fee_lookup.get(db, identifier)
    if obj is None:
        grade = normalize_grade(clean_identifier(identifier, "fee"))
        result = await db.execute(select(Fee).where(Fee.grade == grade))
        obj = result.scalar_one_or_none()
    return obj


async def _ensure_grade_free(db: AsyncSession, grade: str, exclude_id: Optional[str] = None) -> None:
    stmt = select(Fee.id).where(Fee.grade == grade)
    if exclude_id is not None:
        stmt = stmt.where(Fee.id != exclude_id)
    if (await db.execute(stmt)).scalar_one_or_none() is not None:
        raise ServiceError(f"Fee for {grade} already exists", status.HTTP_409_CONFLICT)


async def create_fee(db: AsyncSession, payload: FeeCreate) -> FeeResponse:
    grade = normalize_grade(payload.grade.strip())
    await _ensure_grade_free(db, grade)
    obj = Fee(grade=grade, tuition_fee=payload.tuition_fee, admission_fee=payload.admission_fee)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Fee creation failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Created fee for %s (%s)", obj.grade, obj.id)
    return _to_response(obj)


async def list_fees(db: AsyncSession) -> List[FeeResponse]:
    result = await db.execute(select(Fee))
    fees = sorted(result.scalars().all(), key=lambda f: grade_sort_key(f.grade))
    return [_to_response(f) for f in fees]


async def get_fee(db: AsyncSession, identifier: str) -> Optional[FeeResponse]:
    obj = await _find(db, identifier)
    return _to_response(obj) if obj else None


async def get_fee_by_grade(db: AsyncSession, grade: str) -> Optional[FeeResponse]:
    result = await db.execute(select(Fee).where(Fee.grade == normalize_grade(grade.strip())))
    obj = result.scalar_one_or_none()
    return _to_response(obj) if obj else None


async def update_fee(db: AsyncSession, identifier: str, payload: FeeUpdate) -> FeeResponse:
    obj = await _find(db, identifier)
    if not obj:
        raise NotFoundError("Fee not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("grade"):
        data["grade"] = normalize_grade(data["grade"].strip())
        await _ensure_grade_free(db, data["grade"], exclude_id=obj.id)
    for field, value in data.items():
        if value is not None:
            setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Fee for this grade already exists", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj)


async def delete_fee(db: AsyncSession, identifier: str) -> bool:
    obj = await _find(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted fee for %s (%s)", obj.grade, obj.id)
    return True
