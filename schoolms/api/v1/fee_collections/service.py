"""
Fee collections: what a student owes for one fee and how much of it is paid.

Status is never taken from the caller. It follows from paid_amount against amount
on every write, so a collection can only move Unpaid -> Partial -> Paid by way of
recorded payments or an edited amount.
"""

import logging
import secrets
import time
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.api.v1.students.service import student_lookup
from schoolms.core.enums import FeeType, PaymentStatus
from schoolms.core.exceptions import NotFoundError, ServiceError, ValidationError
from schoolms.core.grade_section import GradeSection
from schoolms.core.identifiers import EntityLookup
from schoolms.core.models import Fee, FeeCollection, Student

from .schemas import (
    CollectionStudent,
    FeeCollectionCreate,
    FeeCollectionResponse,
    FeeCollectionSummary,
    FeeCollectionUpdate,
    PaymentCreate,
)

logger = logging.getLogger(__name__)

collection_lookup = EntityLookup(FeeCollection, "receipt_number", "fee collection")


def _to_decimal(value: Union[Decimal, float, int, None]) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def payment_status(amount: Decimal, paid: Decimal) -> PaymentStatus:
    if paid >= amount:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def new_receipt_number() -> str:
    """RCP + last 8 digits of the millisecond clock + 3 random digits."""
    stamp = str(int(time.time() * 1000))[-8:]
    return f"RCP{stamp}{secrets.randbelow(1000):03d}"


def _student_out(s: Optional[Student]) -> Optional[CollectionStudent]:
    if s is None:
        return None
    return CollectionStudent(
        id=s.id,
        student_code=s.student_code,
        name=s.name,
        class_name=s.class_name,
        section=s.section,
        parent_name=s.parent_name,
        parent_phone=s.parent_phone,
    )


def _to_response(c: FeeCollection) -> FeeCollectionResponse:
    amount = _to_decimal(c.amount)
    paid = _to_decimal(c.paid_amount)
    return FeeCollectionResponse(
        id=c.id,
        receipt_number=c.receipt_number,
        student_id=c.student_id,
        student=_student_out(c.student),
        fee_type=c.fee_type,
        amount=float(amount),
        paid_amount=float(paid),
        balance=float(max(Decimal("0"), amount - paid)),
        status=c.status,
        payment_date=c.payment_date,
        payment_method=c.payment_method,
        remarks=c.remarks,
        collected_by=c.collected_by,
        created_at=c.created_at,
    )


async def _reload(db: AsyncSession, collection_id: str) -> FeeCollection:
    result = await db.execute(
        select(FeeCollection)
        .where(FeeCollection.id == collection_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _unique_receipt_number(db: AsyncSession) -> str:
    number = new_receipt_number()
    taken = await db.execute(select(FeeCollection.id).where(FeeCollection.receipt_number == number))
    if taken.scalar_one_or_none() is not None:
        number = f"{number}{secrets.randbelow(10000):04d}"
    return number


async def _default_amount(db: AsyncSession, student: Student, fee_type: FeeType) -> Decimal:
    """The grade's fee structure supplies tuition and admission amounts."""
    if fee_type is FeeType.OTHER:
        raise ValidationError("amount is required for fee type Other", field="amount")
    parsed = GradeSection.parse(student.class_name, student.section)
    fee = None
    if parsed is not None:
        result = await db.execute(select(Fee).where(Fee.grade == parsed.grade))
        fee = result.scalar_one_or_none()
    if fee is None:
        raise ValidationError(
            f"No fee structure for {student.student_code}'s grade; amount is required", field="amount"
        )
    return _to_decimal(fee.tuition_fee if fee_type is FeeType.TUITION else fee.admission_fee)


async def create_collection(db: AsyncSession, payload: FeeCollectionCreate) -> FeeCollectionResponse:
    student = await student_lookup.get(db, payload.student_id)
    if student is None:
        raise ValidationError(f"Student {payload.student_id} not found", field="student_id")
    if payload.amount is not None:
        amount = _to_decimal(payload.amount)
    else:
        amount = await _default_amount(db, student, payload.fee_type)
    paid = _to_decimal(payload.paid_amount)
    if paid > amount:
        raise ValidationError("paid_amount cannot exceed amount", field="paid_amount")

    if payload.receipt_number and payload.receipt_number.strip():
        receipt = payload.receipt_number.strip()
        if await collection_lookup.get(db, receipt) is not None:
            raise ServiceError(f"Receipt number '{receipt}' already exists", status.HTTP_409_CONFLICT)
    else:
        receipt = await _unique_receipt_number(db)

    obj = FeeCollection(
        student_id=student.id,
        fee_type=payload.fee_type.value,
        amount=amount,
        paid_amount=paid,
        status=payment_status(amount, paid).value,
        payment_date=payload.payment_date or date.today(),
        payment_method=payload.payment_method.value,
        receipt_number=receipt,
        remarks=payload.remarks,
        collected_by=payload.collected_by,
    )
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Receipt number already exists", status.HTTP_409_CONFLICT)
    logger.info(
        "Collected %s fee %s for %s: %s of %s",
        obj.fee_type, obj.receipt_number, student.student_code, paid, amount,
    )
    return _to_response(await _reload(db, obj.id))


async def load_collections(
    db: AsyncSession,
    student_id: Optional[str] = None,
    fee_type: Optional[str] = None,
    status_filter: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[FeeCollection]:
    stmt = select(FeeCollection).order_by(FeeCollection.payment_date.desc(), FeeCollection.created_at.desc())
    if student_id:
        student = await student_lookup.get(db, student_id)
        if student is None:
            return []
        stmt = stmt.where(FeeCollection.student_id == student.id)
    if fee_type:
        stmt = stmt.where(FeeCollection.fee_type == fee_type)
    if status_filter:
        stmt = stmt.where(FeeCollection.status == status_filter)
    if start_date:
        stmt = stmt.where(FeeCollection.payment_date >= start_date)
    if end_date:
        stmt = stmt.where(FeeCollection.payment_date <= end_date)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_collections(db: AsyncSession, **filters) -> List[FeeCollectionResponse]:
    return [_to_response(c) for c in await load_collections(db, **filters)]


async def summarize(db: AsyncSession, **filters) -> FeeCollectionSummary:
    """Totals for the collections matching the list filters."""
    collections = await load_collections(db, **filters)
    total = sum((_to_decimal(c.amount) for c in collections), Decimal("0"))
    paid = sum((_to_decimal(c.paid_amount) for c in collections), Decimal("0"))
    counts = Counter(c.status for c in collections)
    return FeeCollectionSummary(
        total_amount=float(total),
        total_paid=float(paid),
        total_outstanding=float(total - paid),
        by_status={s.value: counts.get(s.value, 0) for s in PaymentStatus},
    )


async def get_collection(db: AsyncSession, identifier: str) -> Optional[FeeCollectionResponse]:
    obj = await collection_lookup.get(db, identifier)
    return _to_response(obj) if obj else None


async def update_collection(
    db: AsyncSession, identifier: str, payload: FeeCollectionUpdate
) -> FeeCollectionResponse:
    obj = await collection_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Fee collection not found")
    data = payload.model_dump(exclude_unset=True)
    amount = _to_decimal(data["amount"]) if data.get("amount") is not None else _to_decimal(obj.amount)
    paid = _to_decimal(data["paid_amount"]) if data.get("paid_amount") is not None else _to_decimal(obj.paid_amount)
    if paid > amount:
        raise ValidationError("paid_amount cannot exceed amount", field="paid_amount")
    for field in ("fee_type", "payment_method"):
        if data.get(field) is not None:
            setattr(obj, field, data[field].value)
    if data.get("payment_date") is not None:
        obj.payment_date = data["payment_date"]
    for field in ("remarks", "collected_by"):
        if field in data:
            setattr(obj, field, data[field])
    obj.amount = amount
    obj.paid_amount = paid
    obj.status = payment_status(amount, paid).value
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Fee collection update failed", status.HTTP_409_CONFLICT)
    return _to_response(await _reload(db, obj.id))


async def record_payment(db: AsyncSession, identifier: str, payload: PaymentCreate) -> FeeCollectionResponse:
    """Add an installment. It may not exceed the remaining balance."""
    obj = await collection_lookup.get(db, identifier)
    if not obj:
        raise NotFoundError("Fee collection not found")
    amount = _to_decimal(obj.amount)
    paid = _to_decimal(obj.paid_amount)
    installment = _to_decimal(payload.amount)
    if installment > amount - paid:
        raise ValidationError("Payment amount cannot exceed remaining balance", field="amount")
    old_status = obj.status
    paid += installment
    obj.paid_amount = paid
    obj.status = payment_status(amount, paid).value
    if payload.payment_method is not None:
        obj.payment_method = payload.payment_method.value
    obj.payment_date = payload.payment_date or date.today()
    if payload.remarks:
        obj.remarks = payload.remarks
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Payment could not be recorded", status.HTTP_409_CONFLICT)
    logger.info(
        "Payment of %s on %s: %s -> %s (%s of %s)",
        installment, obj.receipt_number, old_status, obj.status, paid, amount,
    )
    return _to_response(await _reload(db, obj.id))


async def delete_collection(db: AsyncSession, identifier: str) -> bool:
    obj = await collection_lookup.get(db, identifier)
    if not obj:
        return False
    await db.delete(obj)
    await db.commit()
    logger.info("Deleted fee collection %s (%s)", obj.receipt_number, obj.id)
    return True
