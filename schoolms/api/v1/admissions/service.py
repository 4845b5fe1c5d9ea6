"""
Admission applications.

Applications arrive Pending with the grade applied for and, usually later, an
assigned section. Approval places the applicant in an active class section with
room left, creates the Student and links it, all in one commit. Rejection only
records the outcome.
"""

import logging
import re
from datetime import date
from typing import List, Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.api.v1.classes import service as class_service
from schoolms.api.v1.students.service import student_lookup
from schoolms.core.enums import AdmissionStatus, RecordStatus, StudentStatus
from schoolms.core.exceptions import NotFoundError, ServiceError, ValidationError
from schoolms.core.grade_section import GradeSection
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import Admission, Student

from .schemas import AdmissionApprove, AdmissionCreate, AdmissionReject, AdmissionResponse, AdmissionUpdate

logger = logging.getLogger(__name__)

admission_lookup = EntityLookup(Admission, "admission_code", "admission")

SECTION_PREFIX = re.compile(r"^sec(tion)?\.?\s+", re.IGNORECASE)


def clean_section(value: Optional[str]) -> Optional[str]:
    """'Sec A', 'Section a', 'a' -> 'A'. Blank -> None."""
    if not value or not value.strip():
        return None
    return SECTION_PREFIX.sub("", value.strip()).strip().upper() or None


def _to_response(a: Admission) -> AdmissionResponse:
    parsed = GradeSection.parse(a.class_name, a.section)
    return AdmissionResponse(
        id=a.id,
        admission_code=a.admission_code,
        name=f"{a.first_name} {a.last_name}".strip(),
        first_name=a.first_name,
        last_name=a.last_name,
        email=a.email,
        phone=a.phone,
        class_name=a.class_name,
        grade=parsed.grade if parsed else None,
        section=a.section,
        date_of_birth=a.date_of_birth,
        gender=a.gender,
        admission_date=a.admission_date,
        address=a.address,
        previous_school=a.previous_school,
        parent_name=a.parent_name,
        parent_phone=a.parent_phone,
        parent_email=a.parent_email,
        applied_date=a.applied_date,
        status=a.status,
        remarks=a.remarks,
        student_id=a.student_id,
        created_at=a.created_at,
    )


def _applied_grade(class_name: str) -> GradeSection:
    parsed = GradeSection.parse(class_name)
    if parsed is None:
        raise ValidationError(f"Class '{class_name}' does not name a grade", field="class_name")
    return parsed


async def _next_admission_code(db: AsyncSession) -> str:
    """ADM + six digits, one past the highest code issued so far."""
    highest = (await db.execute(select(func.max(Admission.admission_code)))).scalar()
    number = int(highest[3:]) + 1 if highest else 1
    return f"ADM{number:06d}"


async def create_admission(db: AsyncSession, payload: AdmissionCreate) -> AdmissionResponse:
    class_name = payload.class_name.strip()
    _applied_grade(class_name)
    data = payload.model_dump()
    data.update(
        class_name=class_name,
        section=clean_section(payload.section),
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        gender=payload.gender.value,
        applied_date=payload.applied_date or date.today(),
        admission_code=await _next_admission_code(db),
        status=AdmissionStatus.PENDING.value,
    )
    obj = Admission(**data)
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Admission submission failed, please retry", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Received admission %s for %s", obj.admission_code, obj.class_name)
    return _to_response(obj)


async def list_admissions(db: AsyncSession, status_filter: Optional[str] = None) -> List[AdmissionResponse]:
    stmt = select(Admission).order_by(Admission.admission_code)
    if status_filter:
        stmt = stmt.where(Admission.status == status_filter)
    result = await db.execute(stmt)
    return [_to_response(a) for a in result.scalars().all()]


async def get_admission(db: AsyncSession, identifier: str) -> Optional[AdmissionResponse]:
    obj = await admission_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def update_admission(db: AsyncSession, identifier: str, payload: AdmissionUpdate) -> AdmissionResponse:
    obj = await admission_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Admission not found")
    data = payload.model_dump(exclude_unset=True)
    if ("class_name" in data or "section" in data) and obj.status == AdmissionStatus.APPROVED.value:
        raise ValidationError("Class and section of an approved admission cannot change", field="class_name")
    if data.get("class_name"):
        data["class_name"] = data["class_name"].strip()
        _applied_grade(data["class_name"])
    if "section" in data:
        data["section"] = clean_section(data["section"])
    if data.get("gender") is not None:
        data["gender"] = data["gender"].value
    for field, value in data.items():
        if value is None and field not in ("section", "address", "previous_school", "parent_email", "remarks"):
            continue
        setattr(obj, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Admission update failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    return _to_response(obj)


async def approve_admission(db: AsyncSession, identifier: str, payload: AdmissionApprove) -> AdmissionResponse:
    """Pending -> Approved. Creates the Student in the matching active class section."""
    obj = await admission_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Admission not found")
    if obj.status != AdmissionStatus.PENDING.value:
        raise ValidationError(
            f"Invalid status transition: only Pending admissions can be approved (current: {obj.status})",
            field="status",
        )
    applied = _applied_grade(obj.class_name)
    section = clean_section(payload.section) or obj.section or applied.section
    if not section:
        raise ValidationError("Assign a section before approving this admission", field="section")
    placement = GradeSection(grade_number=applied.grade_number, section=section)

    classes = await class_service.list_classes(db, status_filter=RecordStatus.ACTIVE.value)
    target = next(
        (c for c in classes if c.grade and GradeSection.parse(c.grade, c.section) == placement),
        None,
    )
    if target is None:
        raise ValidationError(f"No active class found for {placement.label}", field="section")
    if target.current_students >= target.capacity:
        raise ValidationError(
            f"Class {target.name} is at full capacity ({target.capacity}/{target.capacity})",
            field="section",
        )

    code = (payload.student_code or "").strip() or obj.admission_code
    if await student_lookup.get(db, code) is not None:
        raise ServiceError(f"Student with student_code '{code}' already exists", status.HTTP_409_CONFLICT)
    student = Student(
        student_code=code,
        name=f"{obj.first_name} {obj.last_name}".strip(),
        email=obj.email,
        phone=obj.phone,
        class_name=f"{placement.grade}{placement.section}",
        section=placement.section,
        gender=obj.gender,
        date_of_birth=obj.date_of_birth,
        parent_name=obj.parent_name,
        parent_phone=obj.parent_phone,
        status=StudentStatus.ACTIVE.value,
    )
    db.add(student)
    await db.flush()

    obj.status = AdmissionStatus.APPROVED.value
    obj.section = placement.section
    obj.student_id = student.id
    if payload.remarks is not None:
        obj.remarks = payload.remarks
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Admission approval failed", status.HTTP_409_CONFLICT)
    await db.refresh(obj)
    logger.info("Approved admission %s into %s as %s", obj.admission_code, target.code, code)
    return _to_response(obj)


async def reject_admission(db: AsyncSession, identifier: str, payload: AdmissionReject) -> AdmissionResponse:
    obj = await admission_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Admission not found")
    if obj.status != AdmissionStatus.PENDING.value:
        raise ValidationError(
            f"Invalid status transition: only Pending admissions can be rejected (current: {obj.status})",
            field="status",
        )
    obj.status = AdmissionStatus.REJECTED.value
    obj.remarks = payload.remarks
    await db.commit()
    await db.refresh(obj)
    logger.info("Rejected admission %s", obj.admission_code)
    return _to_response(obj)


async def delete_admission(db: AsyncSession, identifier: str) -> bool:
    obj = await admission_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted admission %s (%s)", obj.admission_code, obj.id)
    return True
