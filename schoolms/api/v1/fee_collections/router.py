from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    FeeCollectionCreate,
    FeeCollectionData,
    FeeCollectionEnvelope,
    FeeCollectionListData,
    FeeCollectionListResponse,
    FeeCollectionSummaryData,
    FeeCollectionSummaryEnvelope,
    FeeCollectionUpdate,
    PaymentCreate,
)
from . import service

router = APIRouter(prefix="/fee-collections", tags=["fee-collections"])


def _filters(
    student_id: Optional[str] = Query(None),
    fee_type: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
) -> dict:
    return {
        "student_id": student_id,
        "fee_type": fee_type,
        "status_filter": status_filter,
        "start_date": start_date,
        "end_date": end_date,
    }


@router.post("", response_model=FeeCollectionEnvelope, status_code=status.HTTP_201_CREATED)
async def collect_fee(
    payload: FeeCollectionCreate,
    db: AsyncSession = Depends(get_db),
) -> FeeCollectionEnvelope:
    try:
        created = await service.create_collection(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeCollectionEnvelope(
        message="Fee collected successfully", data=FeeCollectionData(collection=created)
    )


@router.get("", response_model=FeeCollectionListResponse)
async def list_collections(
    filters: dict = Depends(_filters),
    db: AsyncSession = Depends(get_db),
) -> FeeCollectionListResponse:
    try:
        collections = await service.list_collections(db, **filters)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeCollectionListResponse(
        count=len(collections), data=FeeCollectionListData(collections=collections)
    )


@router.get("/summary", response_model=FeeCollectionSummaryEnvelope)
async def collection_summary(
    filters: dict = Depends(_filters),
    db: AsyncSession = Depends(get_db),
) -> FeeCollectionSummaryEnvelope:
    """Amount billed, paid and outstanding, plus a count per payment status."""
    try:
        summary = await service.summarize(db, **filters)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeCollectionSummaryEnvelope(data=FeeCollectionSummaryData(summary=summary))


@router.get("/{collection_id}", response_model=FeeCollectionEnvelope)
async def get_collection(
    collection_id: str,
    db: AsyncSession = Depends(get_db),
) -> FeeCollectionEnvelope:
    try:
        obj = await service.get_collection(db, collection_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee collection not found")
    return FeeCollectionEnvelope(data=FeeCollectionData(collection=obj))


@router.put("/{collection_id}", response_model=FeeCollectionEnvelope)
async def update_collection(
    collection_id: str,
    payload: FeeCollectionUpdate,
    db: AsyncSession = Depends(get_db),
) -> FeeCollectionEnvelope:
    try:
        obj = await service.update_collection(db, collection_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeCollectionEnvelope(
        message="Fee collection updated successfully", data=FeeCollectionData(collection=obj)
    )


@router.post("/{collection_id}/payments", response_model=FeeCollectionEnvelope)
async def record_payment(
    collection_id: str,
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> FeeCollectionEnvelope:
    try:
        obj = await service.record_payment(db, collection_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return FeeCollectionEnvelope(
        message="Payment recorded successfully", data=FeeCollectionData(collection=obj)
    )


@router.delete("/{collection_id}", response_model=MessageResponse)
async def delete_collection(
    collection_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_collection(db, collection_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fee collection not found")
    return MessageResponse(message="Fee collection deleted successfully")
