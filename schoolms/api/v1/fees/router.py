from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import FeeCreate, FeeData, FeeEnvelope, FeeListData, FeeListResponse, FeeUpdate
from . import service

router = APIRouter(prefix="/fees", tags=["fees"])


@router.post("", response_model=FeeEnvelope, status_code=status.HTTP_201_CREATED)
async def create_fee(
    payload: FeeCreate,
    db: AsyncSession = Depends(get_db),
) -> FeeEnvelope:
    try:
        created = await service.create_fee(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeEnvelope(message="Fee created successfully", data=FeeData(fee=created))


@router.get("", response_model=FeeListResponse)
async def list_fees(db: AsyncSession = Depends(get_db)) -> FeeListResponse:
    fees = await service.list_fees(db)
    return FeeListResponse(count=len(fees), data=FeeListData(fees=fees))


@router.get("/grade/{grade}", response_model=FeeEnvelope)
async def get_fee_by_grade(
    grade: str,
    db: AsyncSession = Depends(get_db),
) -> FeeEnvelope:
    """Fee structure of one grade; '3' and 'Grade 3' are equivalent."""
    obj = await service.get_fee_by_grade(db, grade)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee not found for this grade")
    return FeeEnvelope(data=FeeData(fee=obj))


@router.get("/{fee_id}", response_model=FeeEnvelope)
async def get_fee(
    fee_id: str,
    db: AsyncSession = Depends(get_db),
) -> FeeEnvelope:
    try:
        obj = await service.get_fee(db, fee_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee not found")
    return FeeEnvelope(data=FeeData(fee=obj))


@router.put("/{fee_id}", response_model=FeeEnvelope)
async def update_fee(
    fee_id: str,
    payload: FeeUpdate,
    db: AsyncSession = Depends(get_db),
) -> FeeEnvelope:
    try:
        obj = await service.update_fee(db, fee_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeEnvelope(message="Fee updated successfully", data=FeeData(fee=obj))


@router.delete("/{fee_id}", response_model=MessageResponse)
async def delete_fee(
    fee_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_fee(db, fee_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee not found")
    return MessageResponse(message="Fee deleted successfully")
