from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.enums import AdmissionStatus
from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    AdmissionApprove,
    AdmissionCreate,
    AdmissionData,
    AdmissionEnvelope,
    AdmissionListData,
    AdmissionListResponse,
    AdmissionReject,
    AdmissionUpdate,
)
from . import service

router = APIRouter(prefix="/admissions", tags=["admissions"])


@router.post("", response_model=AdmissionEnvelope, status_code=status.HTTP_201_CREATED)
async def submit_admission(
    payload: AdmissionCreate,
    db: AsyncSession = Depends(get_db),
) -> AdmissionEnvelope:
    try:
        created = await service.create_admission(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AdmissionEnvelope(
        message="Admission application submitted successfully", data=AdmissionData(admission=created)
    )


@router.get("", response_model=AdmissionListResponse)
async def list_admissions(
    status_filter: Optional[AdmissionStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> AdmissionListResponse:
    admissions = await service.list_admissions(db, status_filter=status_filter.value if status_filter else None)
    return AdmissionListResponse(count=len(admissions), data=AdmissionListData(admissions=admissions))


@router.get("/status/{admission_status}", response_model=AdmissionListResponse)
async def list_admissions_by_status(
    admission_status: AdmissionStatus,
    db: AsyncSession = Depends(get_db),
) -> AdmissionListResponse:
    admissions = await service.list_admissions(db, status_filter=admission_status.value)
    return AdmissionListResponse(count=len(admissions), data=AdmissionListData(admissions=admissions))


@router.get("/{admission_id}", response_model=AdmissionEnvelope)
async def get_admission(
    admission_id: str,
    db: AsyncSession = Depends(get_db),
) -> AdmissionEnvelope:
    try:
        obj = await service.get_admission(db, admission_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admission not found")
    return AdmissionEnvelope(data=AdmissionData(admission=obj))


@router.put("/{admission_id}", response_model=AdmissionEnvelope)
async def update_admission(
    admission_id: str,
    payload: AdmissionUpdate,
    db: AsyncSession = Depends(get_db),
) -> AdmissionEnvelope:
    try:
        obj = await service.update_admission(db, admission_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AdmissionEnvelope(message="Admission updated successfully", data=AdmissionData(admission=obj))


@router.post("/{admission_id}/approve", response_model=AdmissionEnvelope)
async def approve_admission(
    admission_id: str,
    payload: AdmissionApprove,
    db: AsyncSession = Depends(get_db),
) -> AdmissionEnvelope:
    """Place the applicant in an active class section and enrol them as a student."""
    try:
        obj = await service.approve_admission(db, admission_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AdmissionEnvelope(message="Admission approved successfully", data=AdmissionData(admission=obj))


@router.post("/{admission_id}/reject", response_model=AdmissionEnvelope)
async def reject_admission(
    admission_id: str,
    payload: AdmissionReject,
    db: AsyncSession = Depends(get_db),
) -> AdmissionEnvelope:
    try:
        obj = await service.reject_admission(db, admission_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AdmissionEnvelope(message="Admission rejected", data=AdmissionData(admission=obj))


@router.delete("/{admission_id}", response_model=MessageResponse)
async def delete_admission(
    admission_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_admission(db, admission_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admission not found")
    return MessageResponse(message="Admission deleted successfully")
