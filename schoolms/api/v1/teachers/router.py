from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ServiceError
from schoolms.core.schemas import MessageResponse
from schoolms.db.session import get_db

from .schemas import (
    TeacherCreate,
    TeacherData,
    TeacherEnvelope,
    TeacherListData,
    TeacherListResponse,
    TeacherUpdate,
)
from . import service

router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.post("", response_model=TeacherEnvelope, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
) -> TeacherEnvelope:
    try:
        created = await service.create_teacher(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return TeacherEnvelope(message="Teacher created successfully", data=TeacherData(teacher=created))


@router.get("", response_model=TeacherListResponse)
async def list_teachers(
    status_filter: Optional[str] = Query(None, alias="status"),
    subject: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> TeacherListResponse:
    teachers = await service.list_teachers(db, status_filter=status_filter, subject=subject)
    return TeacherListResponse(count=len(teachers), data=TeacherListData(teachers=teachers))


@router.get("/{teacher_id}", response_model=TeacherEnvelope)
async def get_teacher(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
) -> TeacherEnvelope:
    try:
        obj = await service.get_teacher(db, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return TeacherEnvelope(data=TeacherData(teacher=obj))


@router.put("/{teacher_id}", response_model=TeacherEnvelope)
async def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
) -> TeacherEnvelope:
    try:
        obj = await service.update_teacher(db, teacher_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return TeacherEnvelope(message="Teacher updated successfully", data=TeacherData(teacher=obj))


@router.delete("/{teacher_id}", response_model=MessageResponse)
async def delete_teacher(
    teacher_id: str,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        deleted = await service.delete_teacher(db, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return MessageResponse(message="Teacher deleted successfully")
