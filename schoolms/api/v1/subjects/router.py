from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    AvailabilityData,
    AvailabilityResponse,
    ScheduleReplace,
    SubjectCreate,
    SubjectData,
    SubjectEnvelope,
    SubjectListData,
    SubjectListResponse,
    SubjectUpdate,
)
from . import service

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.post("", response_model=SubjectEnvelope, status_code=status.HTTP_201_CREATED)
async def create_subject(
    payload: SubjectCreate,
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        created = await service.create_subject(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return SubjectEnvelope(message="Subject created successfully", data=SubjectData(subject=created))


@router.get("", response_model=SubjectListResponse)
async def list_subjects(
    status_filter: Optional[str] = Query(None, alias="status"),
    grade: Optional[str] = Query(None, description="e.g. 'Grade 3' or '3'"),
    db: AsyncSession = Depends(get_db),
) -> SubjectListResponse:
    """List subjects with their full per-day schedules."""
    subjects = await service.list_subjects(db, status_filter=status_filter, grade=grade)
    return SubjectListResponse(count=len(subjects), data=SubjectListData(subjects=subjects))


@router.get("/{subject_id}", response_model=SubjectEnvelope)
async def get_subject(
    subject_id: str,
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        obj = await service.get_subject(db, subject_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return SubjectEnvelope(data=SubjectData(subject=obj))


@router.put("/{subject_id}", response_model=SubjectEnvelope)
async def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    """Update subject fields. A `schedule` in the body replaces the whole schedule."""
    try:
        obj = await service.update_subject(db, subject_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return SubjectEnvelope(message="Subject updated successfully", data=SubjectData(subject=obj))


@router.put("/{subject_id}/schedule", response_model=SubjectEnvelope)
async def replace_schedule(
    subject_id: str,
    payload: ScheduleReplace,
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        obj = await service.replace_schedule(db, subject_id, payload.schedule)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return SubjectEnvelope(message="Schedule saved successfully", data=SubjectData(subject=obj))


@router.get("/{subject_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    subject_id: str,
    room: Optional[str] = Query(None),
    slot: Optional[str] = Query(None),
    teacher_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    try:
        days = await service.availability(db, subject_id, room=room, slot=slot, teacher_id=teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return AvailabilityResponse(data=AvailabilityData(days=days))


@router.delete("/{subject_id}", response_model=MessageResponse)
async def delete_subject(
    subject_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_subject(db, subject_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    return MessageResponse(message="Subject deleted successfully")
